"""
Unit tests for the view derivation: filtering, search, sorting and stats.
Run: python tests/test_view_engine.py
"""

import itertools
import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from tracker.models import AnnotationState, Film, FilterMode, SortKey
from tracker.view_engine import catalog_stats, derive_view, parse_release_date, sort_films


def film(film_id, title, release_date='2000'):
	return Film(
		id=str(film_id),
		title=title,
		director='',
		producer='',
		release_date=release_date,
		running_time=0,
		description='',
		rt_score='',
	)


TOTORO = film(1, "Totoro", "1988-04-16")
PONYO = film(2, "Ponyo", "2008-07-19")
SPIRITED = film(3, "Spirited Away", "2001")
KIKI = film(4, "Kiki's Delivery Service", "1989")
ARRIETTY = film(5, "Arrietty", "2010")
CATALOG = [TOTORO, PONYO, SPIRITED, KIKI, ARRIETTY]


def titles(films):
	return [f.title for f in films]


def test_sort_by_title_and_release_date():
	state = AnnotationState()
	catalog = [TOTORO, PONYO]
	assert titles(derive_view(catalog, state, FilterMode.ALL, '', SortKey.TITLE)) == ["Ponyo", "Totoro"]
	assert titles(derive_view(catalog, state, FilterMode.ALL, '', SortKey.RELEASE_DATE)) == ["Totoro", "Ponyo"]


def test_search_is_case_insensitive_substring():
	state = AnnotationState()
	assert titles(derive_view([TOTORO, PONYO], state, 'all', 'pon', 'title')) == ["Ponyo"]
	assert titles(derive_view(CATALOG, state, 'all', 'AWAY', 'title')) == ["Spirited Away"]
	assert derive_view(CATALOG, state, 'all', 'laputa', 'title') == []


def test_filter_and_search_compose():
	state = AnnotationState(watched_films=('1', '3', '5'), ratings={'3': 4.0})
	searches = ['', 'i', 'o', 'ri', 'zz', 'T']
	for mode, text in itertools.product(list(FilterMode), searches):
		view = derive_view(CATALOG, state, mode, text, SortKey.TITLE)
		expected = set()
		for f in CATALOG:
			if text.lower() not in f.title.lower():
				continue
			if mode is FilterMode.WATCHED and f.id not in state.watched_films:
				continue
			if mode is FilterMode.UNWATCHED and f.id in state.watched_films:
				continue
			expected.add(f.id)
		assert {f.id for f in view} == expected, f"mode={mode} text={text!r}"
		assert len(view) == len(expected)


def test_sort_by_rating_descending_unrated_last():
	state = AnnotationState(watched_films=('2', '4', '5'), ratings={'2': 3.0, '4': 5.0, '5': 0.5})
	view = derive_view(CATALOG, state, FilterMode.ALL, '', SortKey.RATING)
	assert titles(view)[:3] == ["Kiki's Delivery Service", "Ponyo", "Arrietty"]
	# Unrated films keep catalog order after the rated ones
	assert titles(view)[3:] == ["Totoro", "Spirited Away"]


def test_no_sort_loses_or_duplicates_films():
	state = AnnotationState(watched_films=('1',), ratings={'1': 2.0, '3': 2.0})
	for key in SortKey:
		view = sort_films(CATALOG, state, key)
		assert sorted(f.id for f in view) == sorted(f.id for f in CATALOG), key


def test_equal_ratings_keep_input_order():
	state = AnnotationState(watched_films=('1', '2', '3'), ratings={'1': 4.0, '2': 4.0, '3': 4.0})
	view = sort_films([PONYO, SPIRITED, TOTORO], state, SortKey.RATING)
	assert titles(view) == ["Ponyo", "Spirited Away", "Totoro"]


def test_title_sort_ignores_case_and_accents():
	films = [film(1, "zeta"), film(2, "Émile"), film(3, "alpha"), film(4, "Beta")]
	assert titles(sort_films(films, AnnotationState(), SortKey.TITLE)) == ["alpha", "Beta", "Émile", "zeta"]


def test_release_date_parsing():
	assert parse_release_date("1986") == date(1986, 1, 1)
	assert parse_release_date("1988-04-16") == date(1988, 4, 16)
	assert parse_release_date(2001) == date(2001, 1, 1)
	assert parse_release_date("2013-07") == date(2013, 7, 1)
	assert parse_release_date("unknown") is None
	assert parse_release_date("1999-13-01") is None
	assert parse_release_date(None) is None


def test_unparseable_release_dates_sort_last():
	odd = film(9, "Mystery", "TBA")
	view = sort_films([odd, PONYO, TOTORO], AnnotationState(), SortKey.RELEASE_DATE)
	assert titles(view) == ["Totoro", "Ponyo", "Mystery"]


def test_unknown_modes_raise():
	for kwargs in ({'filter_mode': 'seen'}, {'sort_by': 'score'}):
		with pytest.raises(ValueError):
			derive_view(CATALOG, AnnotationState(), **kwargs)


def test_empty_catalog_gives_empty_view():
	assert derive_view([], AnnotationState(), FilterMode.WATCHED, 'x', SortKey.RATING) == []


def test_catalog_stats():
	state = AnnotationState(watched_films=('1', '2'))
	stats = catalog_stats(CATALOG, state)
	assert (stats.total, stats.watched, stats.unwatched) == (5, 2, 3)
	stats = catalog_stats([], state)
	assert (stats.total, stats.watched, stats.unwatched) == (0, 2, 0)


def main():
	print("Running view engine tests...")
	for name, fn in sorted(globals().items()):
		if name.startswith('test_') and callable(fn):
			fn()
			print(f" - {name} ok")
	print("All view engine tests passed!")


if __name__ == '__main__':
	main()
