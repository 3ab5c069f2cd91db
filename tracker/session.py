"""
Interaction surface for one user session.
Maps each user intent to exactly one transition of the annotation store or the
transient view state. Intents never touch the network; derived values are
recomputed on every access.
"""

# Frozen view state, updated with replace()
from dataclasses import dataclass, replace  # immutable records
from typing import List, Optional, Union  # type hints

# Console logging
from loguru import logger  # console logger

# Core components the session glues together
from .annotation_store import AnnotationStore  # persisted watched/rating state
from .catalog_loader import CatalogLoader  # one-shot catalog fetch
from .errors import CatalogFetchError  # failed fetch
from .models import CatalogStats, Film, FilterMode, LoadStatus, SortKey, ThemeMode  # records and enums
from .view_engine import catalog_stats, derive_view  # pure view derivation


@dataclass(frozen=True)
class ViewState:
	"""Transient UI state; never persisted."""
	filter_mode: FilterMode = FilterMode.ALL
	search_text: str = ''
	sort_by: SortKey = SortKey.TITLE
	expanded_film_id: Optional[str] = None
	theme: ThemeMode = ThemeMode.LIGHT


class TrackerSession:
	"""
	Glue between the user, the annotation store and the catalog loader.
	Created once per session and kept for its whole lifetime.
	"""

	def __init__(self, store: AnnotationStore, loader: CatalogLoader):
		self.store = store
		self.loader = loader
		self.view = ViewState()

	# Catalog lifecycle

	def start_loading(self) -> None:
		"""Kick off the one catalog fetch in the background."""
		self.loader.start()

	def wait_for_catalog(self) -> LoadStatus:
		"""Block until the fetch resolves. Failures are reported through load_status, not raised."""
		try:
			self.loader.fetch_all()
		except CatalogFetchError:
			pass  # recorded on the loader as the failed state
		return self.loader.status

	@property
	def load_status(self) -> LoadStatus:
		return self.loader.status

	@property
	def load_error(self) -> Optional[str]:
		return self.loader.error

	@property
	def catalog(self) -> List[Film]:
		return self.loader.films

	# Annotation intents

	def toggle_watched(self, film_id) -> None:
		self.store.toggle_watched(film_id)

	def set_rating(self, film_id, rating: Optional[float]) -> None:
		self.store.set_rating(film_id, rating)

	# View intents

	def set_filter(self, mode: Union[FilterMode, str]) -> None:
		self.view = replace(self.view, filter_mode=FilterMode(mode))
		logger.debug(f"[Session] Filter -> {self.view.filter_mode.value}")

	def set_search(self, text: str) -> None:
		self.view = replace(self.view, search_text=text or '')

	def set_sort(self, key: Union[SortKey, str]) -> None:
		self.view = replace(self.view, sort_by=SortKey(key))
		logger.debug(f"[Session] Sort -> {self.view.sort_by.value}")

	def open_detail(self, film_id) -> None:
		# Opening another film simply replaces the current one
		self.view = replace(self.view, expanded_film_id=str(film_id))

	def close_detail(self) -> None:
		self.view = replace(self.view, expanded_film_id=None)

	def toggle_theme(self) -> ThemeMode:
		theme = ThemeMode.DARK if self.view.theme is ThemeMode.LIGHT else ThemeMode.LIGHT
		self.view = replace(self.view, theme=theme)
		return theme

	# Derived values

	@property
	def visible_films(self) -> List[Film]:
		return derive_view(
			self.catalog,
			self.store.state,
			filter_mode=self.view.filter_mode,
			search_text=self.view.search_text,
			sort_by=self.view.sort_by,
		)

	@property
	def detail_film(self) -> Optional[Film]:
		"""The expanded film, or None when nothing is open or the id is not in the catalog."""
		film_id = self.view.expanded_film_id
		if film_id is None:
			return None
		for film in self.catalog:
			if film.id == film_id:
				return film
		return None

	@property
	def stats(self) -> CatalogStats:
		return catalog_stats(self.catalog, self.store.state)

	def rating_label(self, film_id) -> str:
		"""Short text shown next to the inline rating control."""
		rating = self.store.rating_for(film_id)
		if not rating:
			return '(Rate it)'
		return f"({rating:g}/5)"
