#!/usr/bin/env python3

import struct
import warnings
from stslib.core import keyframes
from stslib.core.errors import LimitExceededError
from stslib.core.errors import LossyEncodingWarning
from stslib.core.errors import TimesheetIOError
from stslib.core.errors import TruncationWarning
from stslib.core.errors import ValueOutOfRangeError

STS_TAG = 0x11
STS_IDENTIFIER = b"ShiraheiTimeSheet"
MAX_LAYERS = 255
MAX_FRAMES = 65535
MAX_CELL = 0xFFFF
MAX_NAME_BYTES = 255
# Windows code page flavour of Shift-JIS
NAME_ENCODING = 'cp932'
# Shift-JIS maps these to the single-byte slots cp932 gives to ASCII
SHIFT_JIS_SINGLE_BYTE = {0x00A5: 0x5C, 0x203E: 0x7E}

# tag, identifier, layer count, frame count, two reserved bytes
HEADER_STRUCT = struct.Struct('<B17sBH2x')
HEADER_SIZE = HEADER_STRUCT.size

#============================================

def encode_layer_name(name: str) -> bytes:
	"""
	Encode a layer name for the STS name table.

	Characters without a Shift-JIS mapping become XML character references
	and names longer than 255 bytes are cut. Both cases emit a warning.

	Args:
		name: Layer name.

	Returns:
		bytes: At most 255 bytes of Shift-JIS text.
	"""
	text = name.translate(SHIFT_JIS_SINGLE_BYTE)
	try:
		encoded = text.encode(NAME_ENCODING)
	except UnicodeEncodeError:
		encoded = text.encode(NAME_ENCODING, errors='xmlcharrefreplace')
		warnings.warn(
			f"layer name '{name}' has characters that cannot be encoded as Shift-JIS",
			LossyEncodingWarning, stacklevel=2)
	if len(encoded) > MAX_NAME_BYTES:
		warnings.warn(
			f"layer name too long, truncated to {MAX_NAME_BYTES} bytes: '{name}'",
			TruncationWarning, stacklevel=2)
		encoded = encoded[:MAX_NAME_BYTES]
	return encoded

#============================================

def check_limits(timesheet) -> None:
	layer_count = len(timesheet.layers)
	if layer_count > MAX_LAYERS:
		raise LimitExceededError('layers', layer_count, MAX_LAYERS)
	if timesheet.frame_count > MAX_FRAMES:
		raise LimitExceededError('frames', timesheet.frame_count, MAX_FRAMES)

#============================================

def _check_cells(layer_index: int, cells: list) -> None:
	if len(cells) == 0:
		return
	if min(cells) >= 0 and max(cells) <= MAX_CELL:
		return
	for frame_index, cell in enumerate(cells):
		if cell < 0 or cell > MAX_CELL:
			raise ValueOutOfRangeError(layer_index, frame_index, cell)

#============================================

def build_sts_bytes(timesheet) -> bytes:
	"""
	Serialize a timesheet into the STS binary layout.

	Args:
		timesheet: Normalized Timesheet.

	Returns:
		bytes: 23 byte header, dense little-endian cell grid, then the
		length-prefixed layer name table.
	"""
	check_limits(timesheet)
	layer_count = len(timesheet.layers)
	frame_count = timesheet.frame_count
	buffer = bytearray(HEADER_STRUCT.pack(STS_TAG, STS_IDENTIFIER,
		layer_count, frame_count))
	grid_struct = struct.Struct(f'<{frame_count}H')
	for layer_index, layer in enumerate(timesheet.layers):
		cells = keyframes.expand_frames(layer.frames, frame_count)
		_check_cells(layer_index, cells)
		buffer.extend(grid_struct.pack(*cells))
	for layer in timesheet.layers:
		name_bytes = encode_layer_name(layer.name)
		buffer.append(len(name_bytes))
		buffer.extend(name_bytes)
	return bytes(buffer)

#============================================

class StsExporter():
	def __init__(self, timesheet, output_file: str):
		self.timesheet = timesheet
		self.output_file = output_file

	#============================
	def export(self) -> int:
		data = build_sts_bytes(self.timesheet)
		self._write_output(data)
		return len(data)

	#============================
	def _write_output(self, data: bytes) -> None:
		try:
			with open(self.output_file, 'wb') as handle:
				handle.write(data)
		except OSError as exc:
			raise TimesheetIOError(
				f"cannot create file: {self.output_file}: {exc}") from exc

#============================================

def convert(timesheet, output_path: str) -> int:
	"""Write one timesheet to an STS file and return the byte count."""
	exporter = StsExporter(timesheet, output_path)
	return exporter.export()
