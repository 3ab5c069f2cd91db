"""
Annotation store module.
Owns the user's watched flags and ratings, loads them once at startup, and writes
the whole state back to the key-value storage after every mutation.
"""

# Standard libs for JSON encoding and numeric checks
import json  # persisted blob format
from typing import Callable, Dict, List, Optional  # type hints

# Console logging
from loguru import logger  # console logger

# Our immutable state record and rating bounds
from .models import AnnotationState, RATING_MAX, RATING_MIN, RATING_STEP  # annotation data


def validate_rating(rating: float) -> float:
	"""
	Check that a rating lies in [0, 5] on a half-star step and return it as float.
	Raises ValueError otherwise.
	"""
	if isinstance(rating, bool) or not isinstance(rating, (int, float)):
		raise ValueError(f"Rating must be a number, got {rating!r}")
	try:
		value = float(rating)
	except OverflowError:
		raise ValueError(f"Rating is out of range: {rating}")
	if not (RATING_MIN <= value <= RATING_MAX):  # also rejects NaN
		raise ValueError(f"Rating must be between {RATING_MIN} and {RATING_MAX}, got {rating}")
	steps = value / RATING_STEP
	if steps != int(steps):
		raise ValueError(f"Rating must be a multiple of {RATING_STEP}, got {rating}")
	return value


def _parse_blob(raw: str) -> AnnotationState:
	"""
	Turn the persisted JSON text into an AnnotationState.
	Malformed fields degrade to their empty value; the text itself must be JSON.
	"""
	data = json.loads(raw)  # raises ValueError for non-JSON text
	if not isinstance(data, dict):
		raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

	# Watched list: keep unique ids in their original order
	watched_raw = data.get('watchedFilms')
	if not isinstance(watched_raw, list):
		if watched_raw is not None:
			logger.warning(f"[Store] Ignoring non-list watchedFilms: {type(watched_raw).__name__}")
		watched_raw = []
	watched: List[str] = []
	seen = set()
	for film_id in watched_raw:
		if film_id is None or isinstance(film_id, (dict, list)):
			logger.warning(f"[Store] Skipping invalid watched id: {film_id!r}")
			continue
		key = str(film_id)
		if key not in seen:
			seen.add(key)
			watched.append(key)

	# Ratings map: drop anything that is not a valid half-star rating
	ratings_raw = data.get('ratings')
	if not isinstance(ratings_raw, dict):
		if ratings_raw is not None:
			logger.warning(f"[Store] Ignoring non-object ratings: {type(ratings_raw).__name__}")
		ratings_raw = {}
	ratings: Dict[str, float] = {}
	for film_id, value in ratings_raw.items():
		try:
			ratings[str(film_id)] = validate_rating(value)
		except ValueError as e:
			logger.warning(f"[Store] Dropping rating for {film_id}: {e}")

	return AnnotationState(watched_films=tuple(watched), ratings=ratings)


class AnnotationStore:
	"""
	Single owner of the annotation state for one session.
	The read/write functions are injected so tests can run against in-memory storage.
	"""

	def __init__(self, read: Callable[[], Optional[str]], write: Callable[[str], None]):
		self._read = read  # returns the raw blob or None when absent
		self._write = write  # overwrites the raw blob
		self._state = self.load()  # read once at startup
		logger.info(
			f"[Store] Loaded {len(self._state.watched_films)} watched films and {len(self._state.ratings)} ratings"
		)

	@classmethod
	def from_storage(cls, storage, key: str) -> 'AnnotationStore':
		"""Bind the store to one named record of a key-value storage."""
		return cls(read=lambda: storage.get(key), write=lambda raw: storage.set(key, raw))

	@property
	def state(self) -> AnnotationState:
		return self._state

	def is_watched(self, film_id) -> bool:
		return self._state.is_watched(str(film_id))

	def rating_for(self, film_id) -> Optional[float]:
		return self._state.rating_for(str(film_id))

	def load(self) -> AnnotationState:
		"""
		Read the persisted blob. Absent or corrupt records yield the empty state;
		the failure is logged and never raised.
		"""
		try:
			raw = self._read()
		except (OSError, ValueError, TypeError) as e:
			logger.error(f"[Store] Could not read persisted annotations: {e}")
			return AnnotationState()
		if raw is None:
			logger.debug("[Store] No persisted annotations found, starting empty")
			return AnnotationState()
		try:
			return _parse_blob(raw)
		except (ValueError, TypeError, RecursionError) as e:
			logger.warning(f"[Store] Persisted annotations are corrupt, starting empty: {e}")
			return AnnotationState()

	def persist(self, state: AnnotationState) -> None:
		"""Write the full state. Failures are logged and dropped; in-memory state is unaffected."""
		try:
			self._write(json.dumps(state.to_blob()))
		except (OSError, ValueError, TypeError) as e:
			logger.error(f"[Store] Could not persist annotations, changes will not survive a reload: {e}")

	def _commit(self, state: AnnotationState) -> AnnotationState:
		self._state = state
		self.persist(state)  # write-through on every mutation
		return state

	def toggle_watched(self, film_id) -> AnnotationState:
		"""
		Flip the watched flag of one film. Un-marking also removes its rating,
		in the same transition.
		"""
		film_id = str(film_id)
		current = self._state
		if current.is_watched(film_id):
			watched = tuple(fid for fid in current.watched_films if fid != film_id)
			ratings = {fid: r for fid, r in current.ratings.items() if fid != film_id}
			logger.debug(f"[Store] Unmarked {film_id} as watched")
		else:
			watched = current.watched_films + (film_id,)
			ratings = dict(current.ratings)
			logger.debug(f"[Store] Marked {film_id} as watched")
		return self._commit(AnnotationState(watched_films=watched, ratings=ratings))

	def set_rating(self, film_id, rating: Optional[float]) -> AnnotationState:
		"""
		Set or overwrite the rating of a film; None clears it.
		The watched precondition is not enforced here, the UI only offers ratings for watched films.
		"""
		film_id = str(film_id)
		ratings = dict(self._state.ratings)
		if rating is None:
			ratings.pop(film_id, None)
			logger.debug(f"[Store] Cleared rating for {film_id}")
		else:
			value = validate_rating(rating)
			if not self._state.is_watched(film_id):
				logger.warning(f"[Store] Rating film {film_id} which is not marked as watched")
			ratings[film_id] = value
			logger.debug(f"[Store] Rated {film_id} -> {value}")
		return self._commit(AnnotationState(watched_films=self._state.watched_films, ratings=ratings))
