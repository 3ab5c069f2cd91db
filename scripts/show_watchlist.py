"""
Show the watchlist in the console.

This script:
1) Loads the persisted annotations from the local storage
2) Applies an optional watched toggle or rating given on the command line
3) Fetches the film catalog
4) Prints the filtered, sorted view

Usage:
    python -m scripts.show_watchlist --filter watched --sort rating
    python -m scripts.show_watchlist --toggle 2baf70d1-42bb-4437-b551-e5fed5a87abe
    python -m scripts.show_watchlist --rate 2baf70d1-42bb-4437-b551-e5fed5a87abe 4.5
"""

import argparse  # command-line flags
import sys  # exit codes

from loguru import logger  # console logging

from tracker.annotation_store import AnnotationStore  # persisted annotations
from tracker.catalog_loader import CatalogLoader  # one-shot fetch
from tracker.config import Settings  # env-driven settings
from tracker.models import FilterMode, LoadStatus, SortKey  # choices
from tracker.session import TrackerSession  # intents + derived view
from tracker.storage import JsonFileStorage  # on-disk records


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="List Studio Ghibli films with your watched flags and ratings.")
	parser.add_argument('--filter', choices=[m.value for m in FilterMode], default=FilterMode.ALL.value)
	parser.add_argument('--search', default='', help="case-insensitive title substring")
	parser.add_argument('--sort', choices=[k.value for k in SortKey], default=SortKey.TITLE.value)
	parser.add_argument('--toggle', metavar='FILM_ID', help="mark/unmark a film as watched")
	parser.add_argument('--rate', nargs=2, metavar=('FILM_ID', 'RATING'), help="rate a film (0-5, step 0.5)")
	return parser


def main(argv=None) -> int:
	args = build_parser().parse_args(argv)

	# Resolve storage and the catalog endpoint
	settings = Settings.from_env()  # env overrides
	store = AnnotationStore.from_storage(JsonFileStorage(settings.data_dir), settings.storage_key)
	session = TrackerSession(store, CatalogLoader(settings.films_api, timeout=settings.request_timeout_s))

	# Apply mutations before rendering so the output reflects them
	if args.toggle:
		session.toggle_watched(args.toggle)
		logger.info(f"[1/2] Toggled watched flag for {args.toggle}")
	if args.rate:
		film_id, raw_rating = args.rate
		try:
			session.set_rating(film_id, float(raw_rating))
		except ValueError as e:
			logger.error(f"Invalid rating: {e}")
			return 2
		logger.info(f"[1/2] Rated {film_id} -> {raw_rating}")

	session.set_filter(args.filter)
	session.set_search(args.search)
	session.set_sort(args.sort)

	# Fetch the catalog once
	if session.wait_for_catalog() is LoadStatus.FAILED:
		logger.error(f"Could not load films: {session.load_error}")
		return 1

	# Print the derived view
	films = session.visible_films
	stats = session.stats
	logger.info(f"[2/2] Showing {len(films)} films (watched {stats.watched} of {stats.total})")
	for film in films:
		mark = 'x' if store.is_watched(film.id) else ' '
		rating = store.rating_for(film.id)
		rating_text = f"{rating:g}/5" if rating is not None else '-'
		print(f"[{mark}] {film.title} ({film.release_date})  rating: {rating_text}  id: {film.id}")
	if not films:
		print("No films match.")
	return 0


if __name__ == '__main__':
	sys.exit(main())  # invoke script
