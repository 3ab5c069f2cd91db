"""
Local key-value storage.
Holds named string records, either on disk (one file per key) or in memory for tests.
"""

# Standard libs for atomic file replacement and paths
import os  # os.replace for atomic writes
import tempfile  # temp file next to the target record
from pathlib import Path  # filesystem-safe paths
from typing import Dict, Optional  # type hints

# Console logging
from loguru import logger  # console logger


class InMemoryStorage:
	"""Dictionary-backed storage; nothing survives the process."""

	def __init__(self, initial: Optional[Dict[str, str]] = None):
		self._records: Dict[str, str] = dict(initial or {})

	def get(self, key: str) -> Optional[str]:
		return self._records.get(key)

	def set(self, key: str, value: str) -> None:
		self._records[key] = value


class JsonFileStorage:
	"""
	Stores each record as '<directory>/<key>.json'.
	Records are written to a temporary file first and then swapped in, so a crash
	mid-write never leaves a truncated record behind.
	"""

	def __init__(self, directory: Path):
		self.directory = Path(directory)  # root folder for all records

	def _path_for(self, key: str) -> Path:
		# Keys are plain names; refuse anything that could escape the directory
		if not key or '/' in key or '\\' in key or key in ('.', '..'):
			raise ValueError(f"Invalid storage key: '{key}'")
		return self.directory / f"{key}.json"

	def get(self, key: str) -> Optional[str]:
		"""Return the raw record text, or None when the record does not exist."""
		path = self._path_for(key)
		if not path.exists():  # absent record is not an error
			return None
		return path.read_text(encoding='utf-8')

	def set(self, key: str, value: str) -> None:
		"""Overwrite the record with value."""
		path = self._path_for(key)
		self.directory.mkdir(parents=True, exist_ok=True)  # first write creates the folder
		fd, tmp_name = tempfile.mkstemp(dir=str(self.directory), prefix=f".{key}.", suffix='.tmp')
		try:
			with os.fdopen(fd, 'w', encoding='utf-8') as f:
				f.write(value)
			os.replace(tmp_name, path)  # atomic swap
		except BaseException:
			# Remove the orphaned temp file and let the caller see the original error
			if os.path.exists(tmp_name):
				os.unlink(tmp_name)
			raise
		logger.debug(f"[Storage] Wrote {len(value)} chars to {path}")
