#!/usr/bin/env python3

"""
Tests for XDTS and TDTS loading.
"""

# Standard Library
import os
import sys
import tempfile
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# tests helpers
TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
import timesheet_utils

# local repo modules
from stslib.core import loader
from stslib.core.errors import FormatError
from stslib.core.errors import TimesheetIOError
from stslib.core.errors import UnsupportedFormatError
from stslib.core.model import Frame

#============================================

def _pairs(layer) -> list:
	return [(frame.frame_index, frame.cell) for frame in layer.frames]

#============================================

class CellTokenTest(unittest.TestCase):
	#============================================
	def test_xdts_symbols(self) -> None:
		self.assertEqual(loader.parse_xdts_cell("SYMBOL_NULL_CELL"), 0)
		self.assertIsNone(loader.parse_xdts_cell("SYMBOL_TICK_1"))
		self.assertIsNone(loader.parse_xdts_cell("SYMBOL_TICK_2"))
		self.assertIsNone(loader.parse_xdts_cell("SYMBOL_HYPHEN"))

	#============================================
	def test_xdts_trailing_digits(self) -> None:
		self.assertEqual(loader.parse_xdts_cell("CEL_7"), 7)
		self.assertEqual(loader.parse_xdts_cell("12"), 12)
		self.assertEqual(loader.parse_xdts_cell("A2B34"), 34)
		self.assertIsNone(loader.parse_xdts_cell("CEL"))
		self.assertIsNone(loader.parse_xdts_cell("CEL_99999"))

	#============================================
	def test_tdts_values(self) -> None:
		self.assertEqual(loader.parse_tdts_cell("12"), 12)
		self.assertEqual(loader.parse_tdts_cell("SYMBOL_NULL_CELL"), 0)
		self.assertEqual(loader.parse_tdts_cell("abc"), 0)
		self.assertEqual(loader.parse_tdts_cell("-3"), 0)
		self.assertEqual(loader.parse_tdts_cell("70000"), 0)
		self.assertEqual(loader.parse_tdts_cell(" 5"), 0)
		self.assertEqual(loader.parse_tdts_cell("+7"), 7)
		self.assertEqual(loader.parse_tdts_cell("0000065535"), 65535)

	#============================================
	def test_very_long_digit_runs(self) -> None:
		"""Digit runs far beyond 16 bits overflow quietly instead of raising."""
		self.assertEqual(loader.parse_tdts_cell("1" * 5000), 0)
		self.assertIsNone(loader.parse_xdts_cell("CEL_" + "1" * 5000))
		self.assertEqual(loader.parse_xdts_cell("CEL_" + "0" * 5000 + "9"), 9)

#============================================

class XdtsLoaderTest(unittest.TestCase):
	#============================================
	def test_symbolic_cells_and_names(self) -> None:
		"""Tick and hyphen tokens hold the previous cell."""
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "scene.xdts")
			track = timesheet_utils.make_track(0, [
				(0, "CEL_1"),
				(2, "SYMBOL_TICK_1"),
				(3, "SYMBOL_HYPHEN"),
				(4, "CEL_7"),
				(6, "SYMBOL_NULL_CELL"),
			])
			table = timesheet_utils.make_time_table("action", 8, 0, [track], ["A"])
			timesheet_utils.write_xdts(path, [table])
			timesheets = loader.load(path)
			self.assertEqual(len(timesheets), 1)
			sheet = timesheets[0]
			self.assertEqual(sheet.name, "scene.xdts->action")
			self.assertEqual(sheet.frame_count, 8)
			self.assertEqual(sheet.dialect, 'xdts')
			self.assertEqual(sheet.layers[0].name, "A")
			self.assertEqual(_pairs(sheet.layers[0]), [(0, 1), (4, 7), (6, 0)])

	#============================================
	def test_missing_track_name_is_synthesized(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "scene.xdts")
			tracks = [
				timesheet_utils.make_track(0, [(0, "1")]),
				timesheet_utils.make_track(5, [(0, "2")]),
			]
			table = timesheet_utils.make_time_table("t", 2, 0, tracks, ["bg"])
			timesheet_utils.write_xdts(path, [table])
			sheet = loader.load(path)[0]
			names = [layer.name for layer in sheet.layers]
			self.assertEqual(names, ["bg", "Layer 5"])

	#============================================
	def test_only_first_field_is_used(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "scene.xdts")
			table = timesheet_utils.make_time_table("t", 2, 0,
				[timesheet_utils.make_track(0, [(0, "1")])], ["cel"])
			table['fields'].append({'fieldId': 3,
				'tracks': [timesheet_utils.make_track(0, [(0, "9")])]})
			table['timeTableHeaders'].append({'fieldId': 3, 'names': ["camera"]})
			timesheet_utils.write_xdts(path, [table])
			sheet = loader.load(path)[0]
			self.assertEqual(len(sheet.layers), 1)
			self.assertEqual(sheet.layers[0].name, "cel")

	#============================================
	def test_no_fields_gives_zero_layers(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "empty.xdts")
			table = {'name': "t", 'duration': 12, 'timeTableHeaders': []}
			timesheet_utils.write_xdts(path, [table])
			timesheets = loader.load(path)
			self.assertEqual(len(timesheets), 1)
			self.assertEqual(timesheets[0].frame_count, 12)
			self.assertEqual(timesheets[0].layers, [])

	#============================================
	def test_duplicate_frame_entries_keep_the_last(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "scene.xdts")
			track = timesheet_utils.make_track(0, [(4, "3"), (0, "1"), (4, "5")])
			table = timesheet_utils.make_time_table("t", 6, 0, [track], ["A"])
			timesheet_utils.write_xdts(path, [table])
			sheet = loader.load(path)[0]
			self.assertEqual(sheet.layers[0].frames, [Frame(0, 1), Frame(4, 5)])

	#============================================
	def test_uppercase_extension(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "SCENE.XDTS")
			table = timesheet_utils.make_time_table("t", 1, 0, [], [])
			timesheet_utils.write_xdts(path, [table])
			self.assertEqual(len(loader.load(path)), 1)

#============================================

class TdtsLoaderTest(unittest.TestCase):
	#============================================
	def test_end_to_end_values(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "cut.tdts")
			track = timesheet_utils.make_track(0, [(0, "0"), (2, "3"), (4, "3")])
			table = timesheet_utils.make_time_table("main", 5, 4, [track], ["A"])
			timesheet_utils.write_tdts(path, [("C001", [table])])
			timesheets = loader.load(path)
			self.assertEqual(len(timesheets), 1)
			sheet = timesheets[0]
			self.assertEqual(sheet.name, "cut.tdts->C001->main")
			self.assertEqual(_pairs(sheet.layers[0]), [(0, 0), (2, 3)])

	#============================================
	def test_tables_without_field_four_are_skipped(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "cut.tdts")
			kept = timesheet_utils.make_time_table("kept", 3, 4,
				[timesheet_utils.make_track(0, [(0, "abc"), (1, "SYMBOL_NULL_CELL"), (2, "2")])],
				["A"])
			other = timesheet_utils.make_time_table("other", 3, 0,
				[timesheet_utils.make_track(0, [(0, "1")])], ["B"])
			empty = {'name': "empty", 'duration': 3, 'fields': [],
				'timeTableHeaders': []}
			timesheet_utils.write_tdts(path, [("C002", [other, kept, empty])])
			timesheets = loader.load(path)
			self.assertEqual([sheet.name for sheet in timesheets],
				["cut.tdts->C002->kept"])
			self.assertEqual(_pairs(timesheets[0].layers[0]), [(0, 0), (2, 2)])

	#============================================
	def test_skipped_table_is_not_validated(self) -> None:
		"""Only the selected field of a kept table has to be well formed."""
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "cut.tdts")
			skipped = {'name': "other", 'duration': 3,
				'fields': [{'fieldId': 0, 'tracks': "broken"}],
				'timeTableHeaders': "broken"}
			kept = timesheet_utils.make_time_table("kept", 3, 4, [], [])
			timesheet_utils.write_tdts(path, [("C1", [skipped, kept])])
			names = [sheet.name for sheet in loader.load(path)]
			self.assertEqual(names, ["cut.tdts->C1->kept"])

	#============================================
	def test_multiple_sheets(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "ep.tdts")
			first = timesheet_utils.make_time_table("a", 2, 4, [], [])
			second = timesheet_utils.make_time_table("b", 2, 4, [], [])
			timesheet_utils.write_tdts(path, [("C1", [first]), ("C2", [second])])
			names = [sheet.name for sheet in loader.load(path)]
			self.assertEqual(names, ["ep.tdts->C1->a", "ep.tdts->C2->b"])

#============================================

class LoaderErrorTest(unittest.TestCase):
	#============================================
	def test_unsupported_extension(self) -> None:
		with self.assertRaises(UnsupportedFormatError):
			loader.load("scene.json")

	#============================================
	def test_missing_file(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			with self.assertRaises(TimesheetIOError):
				loader.load(os.path.join(temp_dir, "missing.xdts"))

	#============================================
	def test_invalid_json(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "bad.xdts")
			with open(path, 'w', encoding='utf-8') as handle:
				handle.write("banner\n{not json")
			with self.assertRaises(FormatError):
				loader.load(path)

	#============================================
	def test_banner_only_file(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "bad.tdts")
			with open(path, 'w', encoding='utf-8') as handle:
				handle.write('{"timeSheets": []}')
			with self.assertRaises(FormatError):
				loader.load(path)

	#============================================
	def test_missing_required_key(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "bad.xdts")
			timesheet_utils.write_xdts(path, [{'name': "t", 'timeTableHeaders': []}])
			with self.assertRaises(FormatError) as context:
				loader.load(path)
			self.assertIn("duration", str(context.exception))

	#============================================
	def test_wrong_root_dialect(self) -> None:
		"""A TDTS payload saved with an .xdts extension is rejected."""
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "bad.xdts")
			timesheet_utils.write_timesheet(path, "banner", {'timeSheets': []})
			with self.assertRaises(FormatError):
				loader.load(path)

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
