"""
Runtime settings for the tracker.
Every value has a default and can be overridden through environment variables.
"""

import os  # env-based settings
from dataclasses import dataclass  # immutable settings record
from pathlib import Path  # filesystem-safe paths

# Public Studio Ghibli catalog, returns every film in one JSON array
DEFAULT_FILMS_API = 'https://ghibliapi.vercel.app/films'
# Name of the single record that holds the user's annotations
DEFAULT_STORAGE_KEY = 'ghibli_films_data'
DEFAULT_DATA_DIR = Path.home() / '.ghibli_tracker'
DEFAULT_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class Settings:
	films_api: str = DEFAULT_FILMS_API  # catalog endpoint
	data_dir: Path = DEFAULT_DATA_DIR  # where the key-value storage keeps its records
	storage_key: str = DEFAULT_STORAGE_KEY  # record name for the annotation blob
	request_timeout_s: float = DEFAULT_TIMEOUT_S  # HTTP timeout for the catalog fetch

	@classmethod
	def from_env(cls) -> 'Settings':
		"""Build settings from GHIBLI_* environment variables, falling back to defaults."""
		timeout_raw = os.environ.get('GHIBLI_TRACKER_TIMEOUT')
		try:
			timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_S
		except ValueError:
			raise ValueError(f"GHIBLI_TRACKER_TIMEOUT must be a number, got '{timeout_raw}'")
		data_dir = os.environ.get('GHIBLI_TRACKER_DATA_DIR')
		return cls(
			films_api=os.environ.get('GHIBLI_FILMS_API') or DEFAULT_FILMS_API,
			data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
			storage_key=os.environ.get('GHIBLI_TRACKER_STORAGE_KEY') or DEFAULT_STORAGE_KEY,
			request_timeout_s=timeout,
		)
