"""Error taxonomy for the editor core.

- AssetNotReady: images not loaded yet, renders are skipped
- MeasurementUnavailable: no font metrics, hit tests and constraints fail closed
- ExportError: export could not produce a file, reported to the caller
"""


class TextBehindError(Exception):
	"""Base class for editor errors"""


class AssetNotReady(TextBehindError):
	"""Background or cutout image is missing"""


class AssetMismatchError(TextBehindError, ValueError):
	"""Background and cutout do not share native dimensions"""


class MeasurementUnavailable(TextBehindError):
	"""Font metrics could not be obtained"""


class ExportError(TextBehindError):
	"""Export surface or encoder unavailable"""
