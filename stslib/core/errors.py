#!/usr/bin/env python3

#============================================

class ConversionError(RuntimeError):
	"""Base class for fatal timesheet conversion errors."""

#============================================

class FormatError(ConversionError):
	"""Input is not valid JSON for the declared timesheet dialect."""

#============================================

class UnsupportedFormatError(FormatError):
	"""Input file extension does not name a known dialect."""

#============================================

class LimitExceededError(ConversionError):
	def __init__(self, what: str, actual: int, maximum: int):
		self.what = what
		self.actual = actual
		self.maximum = maximum
		super().__init__(f"too many {what}: {actual}, maximum is {maximum}")

#============================================

class ValueOutOfRangeError(ConversionError):
	def __init__(self, layer_index: int, frame_index: int, value: int):
		self.layer_index = layer_index
		self.frame_index = frame_index
		self.value = value
		super().__init__(
			f"cell value out of range: {value} (layer {layer_index + 1}, frame {frame_index})"
		)

#============================================

class TimesheetIOError(ConversionError):
	"""Reading an input file or writing an output file failed."""

#============================================

class ConversionWarning(UserWarning):
	"""Non-fatal problem found while encoding a timesheet."""

#============================================

class LossyEncodingWarning(ConversionWarning):
	"""A layer name has characters with no Shift-JIS representation."""

#============================================

class TruncationWarning(ConversionWarning):
	"""A layer name was cut to fit the one byte length prefix."""
