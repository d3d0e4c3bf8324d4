#!/usr/bin/env python3

import json
import os
import re
from stslib.core import keyframes
from stslib.core.errors import FormatError
from stslib.core.errors import TimesheetIOError
from stslib.core.errors import UnsupportedFormatError
from stslib.core.model import Frame
from stslib.core.model import Layer
from stslib.core.model import Timesheet

MAX_INPUT_BYTES = 64 * 1024 * 1024
NULL_CELL = 'SYMBOL_NULL_CELL'
HOLD_SYMBOLS = ('SYMBOL_TICK_1', 'SYMBOL_TICK_2', 'SYMBOL_HYPHEN')
TDTS_FIELD_ID = 4
MAX_CELL = 0xFFFF

TRAILING_DIGITS_RE = re.compile(r'([0-9]+)\Z')
UNSIGNED_RE = re.compile(r'\+?[0-9]+')

#============================================

def _digits_to_cell(digits: str):
	# more than five significant digits cannot fit in 16 bits
	significant = digits.lstrip('0') or '0'
	if len(significant) > 5:
		return None
	cell = int(significant)
	if cell > MAX_CELL:
		return None
	return cell

#============================================

def parse_xdts_cell(value: str):
	"""
	Map an XDTS cell token to a cell number.

	Returns:
		int or None: None means the token holds the previous cell and no
		keyframe is emitted.
	"""
	if value == NULL_CELL:
		return 0
	if value in HOLD_SYMBOLS:
		return None
	match = TRAILING_DIGITS_RE.search(value)
	if match is None:
		return None
	return _digits_to_cell(match.group(1))

#============================================

def parse_tdts_cell(value: str) -> int:
	if value == NULL_CELL:
		return 0
	if UNSIGNED_RE.fullmatch(value) is None:
		return 0
	cell = _digits_to_cell(value.lstrip('+'))
	if cell is None:
		return 0
	return cell

#============================================

def _require(mapping, key: str, kind, where: str):
	if not isinstance(mapping, dict):
		raise FormatError(f"{where} must be an object")
	if key not in mapping:
		raise FormatError(f"missing required key: {where}.{key}")
	value = mapping[key]
	if not isinstance(value, kind) or isinstance(value, bool):
		raise FormatError(f"{where}.{key} has the wrong type")
	return value

#============================================

def _require_count(mapping, key: str, where: str) -> int:
	value = _require(mapping, key, int, where)
	if value < 0:
		raise FormatError(f"{where}.{key} must not be negative")
	return value

#============================================

class TimesheetParser():
	"""
	Shared JSON handling for the two timesheet dialects.

	Subclasses set dialect and implement _parse_root and parse_cell.
	"""
	dialect = None

	def __init__(self, path: str):
		self.path = path
		self.filename = os.path.basename(path) or 'unknown'

	#============================
	def load(self) -> list:
		data = self._load_json()
		return self._parse_root(data)

	#============================
	def _load_json(self):
		try:
			file_size = os.path.getsize(self.path)
			if file_size > MAX_INPUT_BYTES:
				raise FormatError(f"timesheet file is larger than 64MB: {self.path}")
			with open(self.path, 'rb') as data_file:
				raw = data_file.read()
		except OSError as exc:
			raise TimesheetIOError(f"cannot read file: {self.path}: {exc}") from exc
		try:
			text = raw.decode('utf-8-sig')
		except UnicodeDecodeError as exc:
			raise FormatError(f"{self.filename} is not utf-8 text") from exc
		# first line is a banner, not JSON
		parts = text.split('\n', 1)
		payload = parts[1] if len(parts) > 1 else ''
		try:
			return json.loads(payload)
		except json.JSONDecodeError as exc:
			raise FormatError(f"failed to parse {self.dialect} json in {self.filename}: {exc}") from exc

	#============================
	def _parse_root(self, data) -> list:
		raise NotImplementedError

	#============================
	def parse_cell(self, value: str):
		raise NotImplementedError

	#============================
	def _find_header_names(self, time_table: dict, field_id: int, where: str):
		headers = _require(time_table, 'timeTableHeaders', list, where)
		for index, header in enumerate(headers):
			header_where = f"{where}.timeTableHeaders[{index}]"
			if _require(header, 'fieldId', int, header_where) != field_id:
				continue
			names = _require(header, 'names', list, header_where)
			for name in names:
				if not isinstance(name, str):
					raise FormatError(f"{header_where}.names must hold strings")
			return names
		return None

	#============================
	def _build_layers(self, field: dict, names: list, where: str) -> list:
		layers = []
		tracks = _require(field, 'tracks', list, where)
		for index, track in enumerate(tracks):
			track_where = f"{where}.tracks[{index}]"
			track_no = _require_count(track, 'trackNo', track_where)
			if track_no < len(names):
				layer_name = names[track_no]
			else:
				layer_name = f"Layer {track_no}"
			candidates = self._collect_candidates(track, track_where)
			layers.append(Layer(layer_name, keyframes.compact_frames(candidates)))
		return layers

	#============================
	def _collect_candidates(self, track: dict, where: str) -> list:
		by_index = {}
		frames = _require(track, 'frames', list, where)
		for index, frame_data in enumerate(frames):
			frame_where = f"{where}.frames[{index}]"
			frame_index = _require_count(frame_data, 'frame', frame_where)
			data = _require(frame_data, 'data', list, frame_where)
			if len(data) == 0:
				continue
			values = _require(data[0], 'values', list, f"{frame_where}.data[0]")
			if len(values) == 0:
				continue
			value = values[0]
			if not isinstance(value, str):
				raise FormatError(f"{frame_where}.data[0].values must hold strings")
			cell = self.parse_cell(value)
			if cell is None:
				continue
			# a later entry for the same frame replaces the earlier one
			by_index[frame_index] = Frame(frame_index, cell)
		return [by_index[frame_index] for frame_index in sorted(by_index)]

	#============================
	def _parse_fields(self, time_table: dict, where: str) -> list:
		fields = time_table.get('fields', [])
		if not isinstance(fields, list):
			raise FormatError(f"{where}.fields has the wrong type")
		for index, field in enumerate(fields):
			_require(field, 'fieldId', int, f"{where}.fields[{index}]")
		return fields

#============================================

class XdtsParser(TimesheetParser):
	dialect = 'xdts'

	#============================
	def _parse_root(self, data) -> list:
		time_tables = _require(data, 'timeTables', list, 'root')
		timesheets = []
		for index, time_table in enumerate(time_tables):
			where = f"timeTables[{index}]"
			table_name = _require(time_table, 'name', str, where)
			frame_count = _require_count(time_table, 'duration', where)
			name = f"{self.filename}->{table_name}"
			layers = self._parse_layers(time_table, where)
			timesheets.append(Timesheet(name, frame_count, layers,
				source_file=self.path, dialect=self.dialect))
		return timesheets

	#============================
	def _parse_layers(self, time_table: dict, where: str) -> list:
		fields = self._parse_fields(time_table, where)
		if len(fields) == 0:
			return []
		field = fields[0]
		names = self._find_header_names(time_table, field['fieldId'], where)
		if names is None:
			return []
		return self._build_layers(field, names, f"{where}.fields[0]")

	#============================
	def parse_cell(self, value: str):
		return parse_xdts_cell(value)

#============================================

class TdtsParser(TimesheetParser):
	dialect = 'tdts'

	#============================
	def _parse_root(self, data) -> list:
		time_sheets = _require(data, 'timeSheets', list, 'root')
		timesheets = []
		for sheet_index, time_sheet in enumerate(time_sheets):
			sheet_where = f"timeSheets[{sheet_index}]"
			header = _require(time_sheet, 'header', dict, sheet_where)
			cut = _require(header, 'cut', str, f"{sheet_where}.header")
			time_tables = _require(time_sheet, 'timeTables', list, sheet_where)
			for index, time_table in enumerate(time_tables):
				where = f"{sheet_where}.timeTables[{index}]"
				table_name = _require(time_table, 'name', str, where)
				frame_count = _require_count(time_table, 'duration', where)
				field_index = self._find_field_index(time_table, where)
				if field_index is None:
					continue
				field = time_table['fields'][field_index]
				names = self._find_header_names(time_table, TDTS_FIELD_ID, where)
				layers = []
				if names is not None:
					layers = self._build_layers(field, names,
						f"{where}.fields[{field_index}]")
				name = f"{self.filename}->{cut}->{table_name}"
				timesheets.append(Timesheet(name, frame_count, layers,
					source_file=self.path, dialect=self.dialect))
		return timesheets

	#============================
	def _find_field_index(self, time_table: dict, where: str):
		fields = self._parse_fields(time_table, where)
		for index, field in enumerate(fields):
			if field['fieldId'] == TDTS_FIELD_ID:
				return index
		return None

	#============================
	def parse_cell(self, value: str) -> int:
		return parse_tdts_cell(value)

#============================================

DIALECT_PARSERS = {
	'.xdts': XdtsParser,
	'.tdts': TdtsParser,
}

#============================================

def is_timesheet_file(path: str) -> bool:
	extension = os.path.splitext(path)[1].lower()
	return extension in DIALECT_PARSERS

#============================================

def parser_for(path: str) -> TimesheetParser:
	extension = os.path.splitext(path)[1].lower()
	if extension == '':
		raise UnsupportedFormatError(f"cannot determine file extension: {path}")
	parser_class = DIALECT_PARSERS.get(extension)
	if parser_class is None:
		raise UnsupportedFormatError(f"unsupported file format: {extension.lstrip('.')}")
	return parser_class(path)

#============================================

def load(path: str) -> list:
	"""
	Load every timesheet stored in an XDTS or TDTS file.

	Args:
		path: Input file; the extension selects the dialect.

	Returns:
		list: Timesheet objects with compacted keyframes, possibly empty.
	"""
	parser = parser_for(path)
	return parser.load()
