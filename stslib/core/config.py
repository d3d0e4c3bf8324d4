#!/usr/bin/env python3

import os
import yaml
from stslib.core.errors import ConversionError

DEFAULTS = {
	'output_dir': None,
	'folder_output_name': 'converted_sts',
	'safe_name_length': 100,
	'verbose': False,
	'quiet': False,
}

#============================================

class ConfigError(ConversionError):
	"""Converter configuration file is invalid."""

#============================================

class ConverterConfig():
	def __init__(self, output_dir: str = None, folder_output_name: str = 'converted_sts',
		safe_name_length: int = 100, verbose: bool = False, quiet: bool = False):
		self.output_dir = output_dir
		self.folder_output_name = folder_output_name
		self.safe_name_length = safe_name_length
		self.verbose = verbose
		self.quiet = quiet

	#============================
	@classmethod
	def from_dict(cls, data: dict):
		unknown = sorted(set(data.keys()) - set(DEFAULTS.keys()))
		if len(unknown) > 0:
			raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
		values = dict(DEFAULTS)
		values.update(data)
		output_dir = values['output_dir']
		if output_dir is not None and not isinstance(output_dir, str):
			raise ConfigError("output_dir must be a string or null")
		folder_output_name = values['folder_output_name']
		if not isinstance(folder_output_name, str) or folder_output_name == '':
			raise ConfigError("folder_output_name must be a non-empty string")
		safe_name_length = values['safe_name_length']
		if isinstance(safe_name_length, bool) or not isinstance(safe_name_length, int):
			raise ConfigError("safe_name_length must be an integer")
		if safe_name_length <= 0:
			raise ConfigError("safe_name_length must be positive")
		for key in ('verbose', 'quiet'):
			if not isinstance(values[key], bool):
				raise ConfigError(f"{key} must be true or false")
		return cls(output_dir=output_dir, folder_output_name=folder_output_name,
			safe_name_length=safe_name_length, verbose=values['verbose'],
			quiet=values['quiet'])

	#============================
	def to_dict(self) -> dict:
		return {
			'output_dir': self.output_dir,
			'folder_output_name': self.folder_output_name,
			'safe_name_length': self.safe_name_length,
			'verbose': self.verbose,
			'quiet': self.quiet,
		}

#============================================

def load_config(yaml_file: str) -> ConverterConfig:
	if not os.path.isfile(yaml_file):
		raise ConfigError(f"config file not found: {yaml_file}")
	file_size = os.path.getsize(yaml_file)
	if file_size > 10 ** 6:
		raise ConfigError("config file is larger than 1MB")
	with open(yaml_file, 'r', encoding='utf-8') as data_file:
		try:
			data = yaml.safe_load(data_file)
		except yaml.YAMLError as exc:
			raise ConfigError(f"config file is not valid yaml: {exc}") from exc
	if data is None:
		data = {}
	if not isinstance(data, dict):
		raise ConfigError("config must be a mapping at the top level")
	return ConverterConfig.from_dict(data)
