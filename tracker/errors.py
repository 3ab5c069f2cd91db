"""
Error types raised by the tracker.
"""


class CatalogFetchError(Exception):
	"""The catalog could not be fetched or its payload could not be understood."""

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message  # human-readable text shown in the UI
