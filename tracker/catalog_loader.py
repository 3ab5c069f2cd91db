"""
Catalog loading module.
Fetches the complete film catalog in a single HTTP request and tracks the
idle -> loading -> loaded/failed lifecycle. There is no retry: a failed load stays failed.
"""

# Standard libs for the background fetch
import threading  # guards status transitions shared with the worker thread
from concurrent.futures import Future, ThreadPoolExecutor  # one-shot background fetch
from typing import Any, List, Optional, Tuple, Union  # type hints

# HTTP client for the catalog service
import requests  # make web requests to the catalog endpoint
# Pydantic validates the shape of each record before we trust it
from pydantic import BaseModel, ValidationError  # wire schema

# Console logging
from loguru import logger  # console logger

from .errors import CatalogFetchError  # failure carried to the UI
from .models import Film, LoadStatus  # domain record and lifecycle enum


class FilmRecord(BaseModel):
	"""Wire shape of one film in the catalog response; unknown fields are ignored."""
	id: Union[str, int]
	title: str
	director: str = ''
	producer: str = ''
	release_date: Union[str, int] = ''
	running_time: int = 0  # the public API serves this as a numeric string
	description: str = ''
	rt_score: Union[str, int, float] = ''
	image: Optional[str] = None
	original_title: Optional[str] = None
	original_title_romanised: Optional[str] = None
	movie_banner: Optional[str] = None

	def to_film(self) -> Film:
		return Film(
			id=str(self.id),  # ensure ID is string
			title=self.title,
			director=self.director,
			producer=self.producer,
			release_date=str(self.release_date),
			running_time=self.running_time,
			description=self.description,
			rt_score=self.rt_score,
			image=self.image,
			original_title=self.original_title,
			original_title_romanised=self.original_title_romanised,
			movie_banner=self.movie_banner,
		)


def parse_catalog(payload: Any) -> List[Film]:
	"""
	Convert the decoded JSON payload into Film objects.
	The whole payload is rejected if any record is invalid; there is no partial catalog.
	"""
	if not isinstance(payload, list):
		raise CatalogFetchError(f"Catalog response must be a JSON array, got {type(payload).__name__}")
	films: List[Film] = []
	for index, item in enumerate(payload):
		try:
			films.append(FilmRecord.model_validate(item).to_film())
		except ValidationError as e:
			raise CatalogFetchError(f"Catalog record #{index} is malformed: {e.error_count()} invalid field(s)")
	return films


class CatalogLoader:
	"""
	One-shot loader for the film catalog.
	- fetch_all(): blocking fetch, returns the films or raises CatalogFetchError
	- start(): same fetch on a background thread, returns a Future
	Once loaded or failed, the outcome is final for the session.
	"""

	def __init__(self, url: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
		self.url = url  # catalog endpoint
		self.timeout = timeout  # seconds before the request is abandoned
		self._session = session or requests.Session()  # injectable for tests
		self._lock = threading.Lock()  # protects the fields below
		self._status = LoadStatus.IDLE
		self._films: Tuple[Film, ...] = ()
		self._error: Optional[str] = None
		self._future: Optional[Future] = None

	@property
	def status(self) -> LoadStatus:
		return self._status

	@property
	def error(self) -> Optional[str]:
		return self._error

	@property
	def films(self) -> List[Film]:
		"""Films loaded so far; empty until the fetch succeeds."""
		return list(self._films)

	def start(self) -> Future:
		"""Begin the fetch in the background. Repeated calls return the same future."""
		with self._lock:
			if self._future is None:
				executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='catalog-fetch')
				self._future = executor.submit(self._run)
				executor.shutdown(wait=False)  # the submitted fetch still runs to completion
				logger.debug(f"[Catalog] Background fetch scheduled for {self.url}")
			return self._future

	def fetch_all(self) -> List[Film]:
		"""Fetch the catalog (or wait for the background fetch) and return the films."""
		future = self._future
		if future is not None:
			return future.result()  # re-raises CatalogFetchError from the worker
		return self._run()

	def _run(self) -> List[Film]:
		with self._lock:
			if self._status is LoadStatus.LOADED:
				return list(self._films)
			if self._status is LoadStatus.FAILED:
				raise CatalogFetchError(self._error or 'Catalog load failed')
			if self._status is LoadStatus.LOADING:
				raise RuntimeError('Catalog fetch already in progress')
			self._status = LoadStatus.LOADING

		logger.info(f"[Catalog] Fetching films from {self.url}")
		try:
			films = self._request()
		except Exception as e:
			# Any failure ends in the terminal failed state, never stuck in loading
			error = e if isinstance(e, CatalogFetchError) else CatalogFetchError(f"Catalog load failed unexpectedly: {e!r}")
			with self._lock:
				self._error = error.message
				self._status = LoadStatus.FAILED
			logger.error(f"[Catalog] Load failed: {error.message}")
			if error is e:
				raise
			raise error from e

		with self._lock:
			self._films = tuple(films)
			self._status = LoadStatus.LOADED
		logger.info(f"[Catalog] Loaded {len(films)} films")
		return films

	def _request(self) -> List[Film]:
		try:
			resp = self._session.get(self.url, timeout=self.timeout)  # plain GET, no params or auth
			resp.raise_for_status()  # non-2xx becomes HTTPError
		except requests.HTTPError as e:
			if e.response is None:
				raise CatalogFetchError(f"Catalog request failed: {e}")
			reason = e.response.reason or 'error'
			raise CatalogFetchError(f"Catalog service answered HTTP {e.response.status_code} ({reason})")
		except requests.RequestException as e:
			raise CatalogFetchError(f"Could not reach the catalog service: {e}")

		try:
			payload = resp.json()
		except (ValueError, RecursionError) as e:  # includes requests' JSONDecodeError and deeply nested bodies
			raise CatalogFetchError(f"Catalog response is not valid JSON: {e}")
		return parse_catalog(payload)
