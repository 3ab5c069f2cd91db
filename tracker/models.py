"""
Data models for the Studio Ghibli Tracker.
Defines the core data structures shared by the store, the loader, and the view engine.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Enum gives us closed sets of values for filter/sort/theme choices
from enum import Enum  # string-valued enums
# Import typing helpers for precise and self-documenting types
from typing import Dict, List, Optional, Tuple, Union  # containers and optional values


class FilterMode(str, Enum):
	"""Which films to keep based on watched status."""
	ALL = 'all'
	WATCHED = 'watched'
	UNWATCHED = 'unwatched'


class SortKey(str, Enum):
	"""Ordering applied to the derived view."""
	TITLE = 'title'
	RELEASE_DATE = 'release_date'
	RATING = 'rating'


class ThemeMode(str, Enum):
	LIGHT = 'light'
	DARK = 'dark'


class LoadStatus(str, Enum):
	"""Lifecycle of the one-shot catalog fetch."""
	IDLE = 'idle'
	LOADING = 'loading'
	LOADED = 'loaded'
	FAILED = 'failed'


@dataclass(frozen=True)
class Film:
	"""
	A single film record as served by the catalog service.
	Frozen because the catalog is immutable for the whole session.
	"""
	id: str  # opaque stable identifier (string for consistency)
	title: str  # display title
	director: str  # director's name
	producer: str  # producer's name
	release_date: str  # release date as served, e.g. "1986" or "1988-04-16"
	running_time: int  # running time in minutes
	description: str  # synopsis
	rt_score: Union[str, int, float]  # Rotten Tomatoes score, kept as given
	image: Optional[str] = None  # poster URL
	original_title: Optional[str] = None  # title in Japanese script
	original_title_romanised: Optional[str] = None  # romanised original title
	movie_banner: Optional[str] = None  # wide banner URL for the detail view


@dataclass(frozen=True)
class AnnotationState:
	"""
	The user's personal annotations: which films are watched and how they were rated.
	Every transition builds a new instance; never mutate the containers in place.
	"""
	watched_films: Tuple[str, ...] = ()  # watched film ids in the order they were marked
	ratings: Dict[str, float] = field(default_factory=dict)  # film id -> rating in [0, 5]

	def is_watched(self, film_id: str) -> bool:
		return film_id in self.watched_films

	def rating_for(self, film_id: str) -> Optional[float]:
		return self.ratings.get(film_id)

	def to_blob(self) -> Dict[str, object]:
		"""Return the persisted JSON shape: {watchedFilms: [...], ratings: {...}}."""
		return {
			'watchedFilms': list(self.watched_films),
			'ratings': dict(self.ratings),
		}


@dataclass(frozen=True)
class CatalogStats:
	"""Counters shown next to the filter choices and in the header."""
	total: int
	watched: int
	unwatched: int


# Ratings are offered in half-star steps from 0 to 5
RATING_MIN = 0.0
RATING_MAX = 5.0
RATING_STEP = 0.5
RATING_CHOICES: List[float] = [i * RATING_STEP for i in range(int(RATING_MAX / RATING_STEP) + 1)]
