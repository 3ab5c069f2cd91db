"""
View derivation module.
Turns (catalog, annotations, filter, search text, sort key) into the ordered list of films to show.
Everything here is a pure function: same inputs, same output, no side effects.
"""

# Standard libs for date parsing and type hints
import re  # release date pattern
from datetime import date  # calendar dates for sorting
from typing import Iterable, List, Optional, Tuple, Union  # type hints

# Accent folding for the title collation key
from unidecode import unidecode  # transliterate to ASCII

from .models import AnnotationState, CatalogStats, Film, FilterMode, SortKey  # records and enums

# YYYY, YYYY-MM or YYYY-MM-DD, optionally followed by a time part
RE_RELEASE_DATE = re.compile(r"^\s*(?P<year>\d{4})(?:-(?P<month>\d{1,2})(?:-(?P<day>\d{1,2}))?)?(?:[T ].*)?\s*$")


def parse_release_date(value) -> Optional[date]:
	"""
	Parse a release date into a calendar date. A bare year means January 1st.
	Returns None when the value cannot be read as a date.
	"""
	if value is None:
		return None
	m = RE_RELEASE_DATE.match(str(value))
	if not m:
		return None
	try:
		return date(int(m.group('year')), int(m.group('month') or 1), int(m.group('day') or 1))
	except ValueError:
		return None


def title_sort_key(title: str) -> Tuple[str, str]:
	"""
	Collation key close to a locale-aware comparison: accents folded, case ignored,
	with the raw title breaking ties so the order is total.
	"""
	return unidecode(title).casefold(), title


def matches_search(film: Film, search_text: str) -> bool:
	return search_text.casefold() in film.title.casefold()


def matches_filter(film: Film, state: AnnotationState, filter_mode: FilterMode) -> bool:
	if filter_mode is FilterMode.WATCHED:
		return state.is_watched(film.id)
	if filter_mode is FilterMode.UNWATCHED:
		return not state.is_watched(film.id)
	return True


def sort_films(films: Iterable[Film], state: AnnotationState, sort_by: SortKey) -> List[Film]:
	"""
	Stable sort of films by the given key.
	- title: ascending by collation key
	- release_date: ascending by date, unparseable dates last
	- rating: descending, unrated films count as 0 and ties keep their input order
	"""
	films = list(films)
	if sort_by is SortKey.TITLE:
		return sorted(films, key=lambda f: title_sort_key(f.title))
	if sort_by is SortKey.RELEASE_DATE:
		def date_key(f: Film):
			parsed = parse_release_date(f.release_date)
			return (0, parsed) if parsed is not None else (1, date.max)
		return sorted(films, key=date_key)
	if sort_by is SortKey.RATING:
		return sorted(films, key=lambda f: -(state.rating_for(f.id) or 0.0))
	raise ValueError(f"Unknown sort key: {sort_by}")


def derive_view(
	films: Iterable[Film],
	state: AnnotationState,
	filter_mode: Union[FilterMode, str] = FilterMode.ALL,
	search_text: str = '',
	sort_by: Union[SortKey, str] = SortKey.TITLE,
) -> List[Film]:
	"""Filter by search text and watched status, then sort. An empty result is valid."""
	filter_mode = FilterMode(filter_mode)  # raises ValueError for unknown modes
	sort_by = SortKey(sort_by)
	search_text = search_text or ''
	kept = [
		film for film in films
		if matches_search(film, search_text) and matches_filter(film, state, filter_mode)
	]
	return sort_films(kept, state, sort_by)


def catalog_stats(films: Iterable[Film], state: AnnotationState) -> CatalogStats:
	"""Counts shown next to the filter choices; 'watched' counts every watched entry."""
	total = len(list(films))
	watched = len(state.watched_films)
	return CatalogStats(total=total, watched=watched, unwatched=max(0, total - watched))
