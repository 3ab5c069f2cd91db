"""
Streamlit UI for the Studio Ghibli Tracker.
Fetches the film catalog once per browser session and lets the user mark films as
watched, rate them, and filter, search and sort the grid. Annotations are kept in
the local key-value storage (see tracker/config.py for the location).

Run UI:                streamlit run streamlit_app.py
"""

# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Optional  # indicates values can be None

# Core modules: settings, storage, store, loader and the session glue
from tracker.annotation_store import AnnotationStore  # persisted watched/rating state
from tracker.catalog_loader import CatalogLoader  # one-shot catalog fetch
from tracker.config import Settings  # env-driven settings
from tracker.models import Film, FilterMode, LoadStatus, RATING_CHOICES, SortKey, ThemeMode  # enums and records
from tracker.session import TrackerSession  # user intents + derived view
from tracker.storage import JsonFileStorage  # on-disk key-value records

# Labels for the selectors (values stay the enum members)
SORT_LABELS = {
	SortKey.TITLE: "Title (A-Z)",
	SortKey.RELEASE_DATE: "Release date",
	SortKey.RATING: "Rating",
}
FILTER_LABELS = {
	FilterMode.ALL: "All",
	FilterMode.WATCHED: "Watched",
	FilterMode.UNWATCHED: "Not watched",
}

# Minimal dark palette; Streamlit's own theme is fixed at startup
DARK_CSS = """
<style>
.stApp { background: linear-gradient(to bottom, #121212, #1e1e1e); color: #e0e0e0; }
.stApp h1, .stApp h2, .stApp h3, .stApp p, .stApp label, .stApp span { color: #e0e0e0; }
</style>
"""

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Studio Ghibli Tracker", layout="wide")  # wide layout


def init_session() -> TrackerSession:
	"""Create the per-browser-session tracker and start the catalog fetch in the background."""
	settings = Settings.from_env()  # read env overrides
	storage = JsonFileStorage(settings.data_dir)  # local records folder
	store = AnnotationStore.from_storage(storage, settings.storage_key)  # loads once
	loader = CatalogLoader(settings.films_api, timeout=settings.request_timeout_s)  # fetch client
	session = TrackerSession(store, loader)
	session.start_loading()  # does not block; the UI keeps rendering
	return session


# Keep one session per browser tab across Streamlit reruns
if "tracker" not in st.session_state:
	st.session_state["tracker"] = init_session()
session: TrackerSession = st.session_state["tracker"]


def on_rate(film_id: str, widget_key: str):
	"""Widget callback: forward the selected rating (None clears it)."""
	session.set_rating(film_id, st.session_state[widget_key])


def rating_select(film: Film, key_prefix: str, label: str):
	"""Half-star rating selector bound to the store."""
	options = [None] + RATING_CHOICES  # None = not rated
	current: Optional[float] = session.store.rating_for(film.id)
	widget_key = f"{key_prefix}-{film.id}"
	st.selectbox(
		label,
		options,
		index=options.index(current) if current in options else 0,
		format_func=lambda v: "Not rated" if v is None else f"{'★' * int(v)}{'½' if v % 1 else ''} {v:g}",
		key=widget_key,
		on_change=on_rate,
		args=(film.id, widget_key),
	)


# Apply the theme chosen in the sidebar
if session.view.theme is ThemeMode.DARK:
	st.markdown(DARK_CSS, unsafe_allow_html=True)

# Sidebar: theme toggle and where data comes from
with st.sidebar:
	st.header("Settings")  # section label
	theme_label = "Switch to light mode" if session.view.theme is ThemeMode.DARK else "Switch to dark mode"
	st.button(theme_label, on_click=session.toggle_theme)  # flips light/dark
	st.markdown("---")  # separator
	st.caption(f"Catalog: {session.loader.url}")  # data source

# Header with the watched counter
stats = session.stats
st.title("Studio Ghibli Tracker")  # friendly header
st.caption(f"Watched {stats.watched} of {stats.total} films")  # progress

# Controls: search on the left, filter and sort on the right
c_search, c_filter, c_sort = st.columns([3, 1, 1])
with c_search:
	search = st.text_input("Search by title", value=session.view.search_text, placeholder="e.g., Totoro")
with c_filter:
	counts = {FilterMode.ALL: stats.total, FilterMode.WATCHED: stats.watched, FilterMode.UNWATCHED: stats.unwatched}
	filter_mode = st.selectbox(
		"Show",
		list(FilterMode),
		index=list(FilterMode).index(session.view.filter_mode),
		format_func=lambda m: f"{FILTER_LABELS[m]} ({counts[m]})",
	)
with c_sort:
	sort_by = st.selectbox(
		"Sort by",
		list(SortKey),
		index=list(SortKey).index(session.view.sort_by),
		format_func=lambda k: SORT_LABELS[k],
	)

# Each widget value maps to one view-state intent
session.set_search(search)
session.set_filter(filter_mode)
session.set_sort(sort_by)

# The grid needs data; wait for the background fetch only here
if session.load_status in (LoadStatus.IDLE, LoadStatus.LOADING):
	with st.spinner("Loading films..."):
		session.wait_for_catalog()

if session.load_status is LoadStatus.FAILED:
	st.error(f"Could not load films: {session.load_error}. Reload the page to try again.")  # terminal
	st.stop()

# Detail panel for the expanded film
detail = session.detail_film
if detail is not None:
	with st.container(border=True):
		d1, d2 = st.columns([1, 2])
		with d1:
			if detail.image:
				st.image(detail.image, width='stretch')  # poster
		with d2:
			st.header(detail.title)
			if detail.original_title:
				st.caption(f"{detail.original_title} ({detail.original_title_romanised or ''})")
			st.write(f"Director: {detail.director} | Producer: {detail.producer}")
			st.write(f"Released: {detail.release_date} | {detail.running_time} minutes | RT score: {detail.rt_score}")
			st.write(detail.description)
			if session.store.is_watched(detail.id):
				rating_select(detail, "detail-rating", "Your rating")
		st.button("Close", key="close-detail", on_click=session.close_detail)

# Card grid
films = session.visible_films
if not films:
	st.info("No films match your search.")  # empty view is a normal state
else:
	columns = st.columns(3)  # three cards per row
	for i, film in enumerate(films):
		with columns[i % 3]:
			with st.container(border=True):
				if film.image:
					st.image(film.image, width='stretch')  # poster
				st.subheader(f"{film.title} ({film.release_date})")  # title + year
				st.caption(f"{film.director} | {film.running_time} min")
				watched = session.store.is_watched(film.id)
				if watched:
					rating_select(film, "card-rating", f"Rating {session.rating_label(film.id)}")
				b1, b2 = st.columns(2)
				with b1:
					st.button(
						"Watched" if watched else "Mark as watched",
						key=f"watch-{film.id}",
						type="primary" if watched else "secondary",
						on_click=session.toggle_watched,
						args=(film.id,),
					)
				with b2:
					st.button("Details", key=f"detail-{film.id}", on_click=session.open_detail, args=(film.id,))
