#!/usr/bin/env python3

import os
import sys
import warnings
from tqdm import tqdm
from stslib.core import loader
from stslib.core import utils
from stslib.core.config import ConverterConfig
from stslib.core.errors import ConversionError
from stslib.core.errors import TimesheetIOError
from stslib.core.keyframes import expand_frames
from stslib.exporters.sts import StsExporter

#============================================

def find_timesheet_files(folder: str) -> list:
	"""List .xdts and .tdts files directly inside a folder, sorted."""
	files = []
	for entry in os.listdir(folder):
		path = os.path.join(folder, entry)
		if os.path.isfile(path) and loader.is_timesheet_file(path):
			files.append(path)
	files.sort()
	return files

#============================================

def output_name_for(input_path: str, index: int, timesheet, total: int,
	safe_name_length: int = 100) -> str:
	stem = os.path.splitext(os.path.basename(input_path))[0]
	if total == 1:
		return f"{stem}.sts"
	safe_name = utils.make_safe_name(timesheet.name, safe_name_length)
	return f"{stem}_{index:03d}_{safe_name}.sts"

#============================================

def summarize_timesheet(timesheet) -> dict:
	layers = []
	for layer in timesheet.layers:
		cells = expand_frames(layer.frames, timesheet.frame_count)
		layers.append({
			'name': layer.name,
			'keyframes': len(layer.frames),
			'unique_cells': len(set(cells)),
		})
	return {
		'name': timesheet.name,
		'source': timesheet.source_file,
		'dialect': timesheet.dialect,
		'frame_count': timesheet.frame_count,
		'layer_count': len(timesheet.layers),
		'layers': layers,
	}

#============================================

class FileResult():
	def __init__(self, input_path: str):
		self.input_path = input_path
		self.timesheet_count = 0
		self.outputs = []
		self.failures = []
		self.warnings = []

	#============================
	@property
	def ok(self) -> bool:
		return len(self.failures) == 0

#============================================

class BatchReport():
	def __init__(self):
		self.results = []
		self.failed_files = []
		self.skipped = []

	#============================
	@property
	def files_processed(self) -> int:
		return len(self.results)

	#============================
	@property
	def output_paths(self) -> list:
		paths = []
		for result in self.results:
			paths.extend(result.outputs)
		return paths

#============================================

class BatchConverter():
	def __init__(self, config: ConverterConfig = None):
		self.config = config if config is not None else ConverterConfig()

	#============================
	def _log(self, message: str) -> None:
		if self.config.quiet or utils.is_quiet_mode():
			return
		tqdm.write(message)

	#============================
	def _log_error(self, message: str) -> None:
		tqdm.write(message, file=sys.stderr)

	#============================
	def collect_inputs(self, paths: list, report: BatchReport = None) -> tuple:
		"""
		Split command-line paths into timesheet files and folders.

		Missing paths and files with other extensions are skipped.
		"""
		files = []
		folders = []
		for path in paths:
			if os.path.isfile(path):
				if loader.is_timesheet_file(path):
					files.append(path)
				else:
					self._log_error(f"skipping non-timesheet file: {path}")
					if report is not None:
						report.skipped.append(path)
			elif os.path.isdir(path):
				folders.append(path)
			else:
				self._log_error(f"warning: path does not exist, skipping: {path}")
				if report is not None:
					report.skipped.append(path)
		return (files, folders)

	#============================
	def _folder_output_dir(self, folder: str) -> str:
		if self.config.output_dir is not None:
			return self.config.output_dir
		return os.path.join(folder, self.config.folder_output_name)

	#============================
	def run(self, paths: list) -> BatchReport:
		report = BatchReport()
		(files, folders) = self.collect_inputs(paths, report)
		work = []
		for path in files:
			work.append((path, self.config.output_dir))
		for folder in folders:
			timesheet_files = find_timesheet_files(folder)
			if len(timesheet_files) == 0:
				self._log(f"no .xdts or .tdts files found in {folder}")
				continue
			self._log(f"found {len(timesheet_files)} files in {folder}")
			output_dir = self._folder_output_dir(folder)
			for path in timesheet_files:
				work.append((path, output_dir))
		quiet = self.config.quiet or utils.is_quiet_mode()
		for (path, output_dir) in tqdm(work, unit='file', disable=quiet or len(work) < 2):
			try:
				result = self.process_file(path, output_dir)
			except ConversionError as exc:
				self._log_error(f"failed: {path}: {exc}")
				report.failed_files.append((path, str(exc)))
				continue
			report.results.append(result)
		return report

	#============================
	def process_file(self, input_path: str, output_dir: str = None) -> FileResult:
		"""
		Convert every timesheet in one input file.

		Load errors propagate. Errors while encoding one timesheet are
		recorded on the result and the remaining timesheets still convert.
		"""
		if not self.config.verbose:
			self._log(f"loading: {input_path}")
		timesheets = loader.load(input_path)
		if not self.config.verbose:
			self._log(f"found {len(timesheets)} timesheets")
		if output_dir is None:
			output_dir = os.path.dirname(os.path.abspath(input_path))
		try:
			os.makedirs(output_dir, exist_ok=True)
		except OSError as exc:
			raise TimesheetIOError(f"cannot create output directory: {output_dir}: {exc}") from exc
		result = FileResult(input_path)
		result.timesheet_count = len(timesheets)
		for index, timesheet in enumerate(timesheets):
			output_name = output_name_for(input_path, index, timesheet,
				len(timesheets), self.config.safe_name_length)
			output_path = os.path.join(output_dir, output_name)
			self._convert_one(timesheet, output_path, result)
		return result

	#============================
	def _convert_one(self, timesheet, output_path: str, result: FileResult) -> None:
		if self.config.verbose:
			self._log_summary(timesheet)
		with warnings.catch_warnings(record=True) as caught:
			warnings.simplefilter('always')
			try:
				size = StsExporter(timesheet, output_path).export()
			except ConversionError as exc:
				self._log_error(f"conversion failed: {timesheet.name}")
				self._log_error(f"  error: {exc}")
				result.failures.append((timesheet.name, str(exc)))
				size = None
		for warning in caught:
			message = str(warning.message)
			result.warnings.append(message)
			self._log_error(f"  warning: {message}")
		if size is None:
			return
		result.outputs.append(output_path)
		if self.config.verbose:
			self._log(f"file written: {output_path}")
			self._log(f"  size: {utils.format_number(size)} bytes")
		else:
			self._log(f"converted: {os.path.basename(output_path)}")

	#============================
	def _log_summary(self, timesheet) -> None:
		summary = summarize_timesheet(timesheet)
		self._log(f"converting: {summary['name']}")
		self._log(f"  layers: {summary['layer_count']}")
		self._log(f"  frames: {summary['frame_count']}")
		for index, layer in enumerate(summary['layers']):
			self._log(f"  layer {index + 1} '{layer['name']}': "
				f"{layer['keyframes']} keyframes, {layer['unique_cells']} unique cells")

	#============================
	def plan(self, paths: list) -> list:
		"""Load inputs without writing anything and describe the outputs."""
		(files, folders) = self.collect_inputs(paths)
		inputs = [(path, self.config.output_dir) for path in files]
		for folder in folders:
			output_dir = self._folder_output_dir(folder)
			for path in find_timesheet_files(folder):
				inputs.append((path, output_dir))
		plan = []
		for (path, output_dir) in inputs:
			timesheets = loader.load(path)
			if output_dir is None:
				output_dir = os.path.dirname(os.path.abspath(path))
			for index, timesheet in enumerate(timesheets):
				entry = summarize_timesheet(timesheet)
				output_name = output_name_for(path, index, timesheet,
					len(timesheets), self.config.safe_name_length)
				entry['output'] = os.path.join(output_dir, output_name)
				plan.append(entry)
		return plan
