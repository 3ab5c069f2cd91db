"""
Unit tests for TrackerSession: user intents and the derived view they drive.
Run: python tests/test_session.py
"""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from fakes import FakeResponse, FakeSession
from tracker.annotation_store import AnnotationStore
from tracker.catalog_loader import CatalogLoader
from tracker.models import FilterMode, LoadStatus, SortKey, ThemeMode
from tracker.session import TrackerSession
from tracker.storage import InMemoryStorage

CATALOG = [
	{'id': 1, 'title': 'Totoro', 'release_date': '1988-04-16'},
	{'id': 2, 'title': 'Ponyo', 'release_date': '2008-07-19'},
	{'id': 3, 'title': 'Porco Rosso', 'release_date': '1992-07-18'},
]


def make_session(response=None):
	response = response or FakeResponse(payload=CATALOG)
	http = FakeSession(response=response)
	store = AnnotationStore.from_storage(InMemoryStorage(), 'ghibli_films_data')
	session = TrackerSession(store, CatalogLoader('https://example.test/films', session=http))
	return session, http


def titles(films):
	return [f.title for f in films]


def test_view_before_catalog_is_empty():
	session, http = make_session()
	assert session.load_status is LoadStatus.IDLE
	assert session.visible_films == []
	# View intents work while nothing is loaded and never hit the network
	session.set_search('po')
	session.set_filter('watched')
	session.toggle_theme()
	assert http.calls == []


def test_default_view_after_load():
	session, _ = make_session()
	session.start_loading()
	assert session.wait_for_catalog() is LoadStatus.LOADED
	assert titles(session.visible_films) == ['Ponyo', 'Porco Rosso', 'Totoro']
	session.set_sort(SortKey.RELEASE_DATE)
	assert titles(session.visible_films) == ['Totoro', 'Porco Rosso', 'Ponyo']


def test_watch_rate_and_filter():
	session, http = make_session()
	session.wait_for_catalog()
	session.toggle_watched('3')
	session.set_rating('3', 4.5)
	session.set_filter(FilterMode.WATCHED)
	assert titles(session.visible_films) == ['Porco Rosso']
	session.set_filter(FilterMode.UNWATCHED)
	assert titles(session.visible_films) == ['Ponyo', 'Totoro']
	session.set_filter(FilterMode.ALL)
	session.set_sort('rating')
	assert titles(session.visible_films)[0] == 'Porco Rosso'
	assert session.rating_label('3') == '(4.5/5)'
	assert session.rating_label('1') == '(Rate it)'
	stats = session.stats
	assert (stats.total, stats.watched, stats.unwatched) == (3, 1, 2)
	assert len(http.calls) == 1


def test_search_within_filter():
	session, _ = make_session()
	session.wait_for_catalog()
	session.toggle_watched('2')
	session.set_search('PO')
	assert titles(session.visible_films) == ['Ponyo', 'Porco Rosso']
	session.set_filter('unwatched')
	assert titles(session.visible_films) == ['Porco Rosso']
	session.set_search('nothing like this')
	assert session.visible_films == []


def test_detail_open_replace_close():
	session, _ = make_session()
	session.wait_for_catalog()
	assert session.detail_film is None
	session.open_detail(1)
	assert session.detail_film.title == 'Totoro'
	session.open_detail(2)
	session.open_detail(2)
	assert session.detail_film.title == 'Ponyo'
	session.close_detail()
	assert session.detail_film is None
	session.open_detail('missing')
	assert session.detail_film is None


def test_theme_toggle_leaves_annotations_alone():
	session, _ = make_session()
	session.toggle_watched('1')
	before = session.store.state
	assert session.view.theme is ThemeMode.LIGHT
	assert session.toggle_theme() is ThemeMode.DARK
	assert session.toggle_theme() is ThemeMode.LIGHT
	assert session.store.state == before


def test_failed_catalog_leaves_grid_empty():
	session, _ = make_session(FakeResponse(status_code=500, reason='Internal Server Error'))
	assert session.wait_for_catalog() is LoadStatus.FAILED
	assert session.load_error
	assert session.visible_films == []


def test_unexpected_fetch_error_leaves_grid_empty():
	http = FakeSession(error=RuntimeError("decoder blew up"))
	store = AnnotationStore.from_storage(InMemoryStorage(), 'ghibli_films_data')
	session = TrackerSession(store, CatalogLoader('https://example.test/films', session=http))
	assert session.wait_for_catalog() is LoadStatus.FAILED
	assert 'decoder blew up' in session.load_error
	assert session.wait_for_catalog() is LoadStatus.FAILED
	assert session.visible_films == []
	assert len(http.calls) == 1


def test_invalid_view_intents_raise():
	session, _ = make_session()
	for intent, value in ((session.set_filter, 'seen'), (session.set_sort, 'popularity')):
		with pytest.raises(ValueError):
			intent(value)
	assert session.view.filter_mode is FilterMode.ALL
	assert session.view.sort_by is SortKey.TITLE


def main():
	print("Running TrackerSession tests...")
	for name, fn in sorted(globals().items()):
		if name.startswith('test_') and callable(fn):
			fn()
			print(f" - {name} ok")
	print("All TrackerSession tests passed!")


if __name__ == '__main__':
	main()
