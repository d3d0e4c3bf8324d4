#!/usr/bin/env python3

import argparse
import os
import sys
import yaml
from stslib.core import utils
from stslib.core.batch import BatchConverter
from stslib.core.config import ConverterConfig
from stslib.core.config import load_config
from stslib.core.errors import ConversionError

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Convert XDTS/TDTS timesheets to STS files")
	parser.add_argument('inputs', nargs='+',
		help='.xdts/.tdts files or folders that contain them')
	parser.add_argument('-o', '--output-dir', dest='output_dir',
		help='write all STS files to this directory')
	parser.add_argument('-c', '--config', dest='config_file',
		help='yaml file with converter settings')
	parser.add_argument('-v', '--verbose', dest='verbose', action='store_true',
		help='print per-layer statistics')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='print only errors and warnings')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='load inputs and print the planned outputs without converting')
	args = parser.parse_args(argv)
	return args

#============================================

def build_config(args) -> ConverterConfig:
	if args.config_file is not None:
		config = load_config(args.config_file)
	else:
		config = ConverterConfig()
	if args.output_dir is not None:
		config.output_dir = args.output_dir
	if args.verbose:
		config.verbose = True
	if args.quiet:
		config.quiet = True
	return config

#============================================

def print_summary(report) -> None:
	output_paths = report.output_paths
	print("")
	print("=" * 60)
	print("conversion complete")
	print("=" * 60)
	print(f"processed {report.files_processed} source files")
	print(f"generated {len(output_paths)} STS files")
	if len(report.failed_files) > 0:
		print(f"failed to load {len(report.failed_files)} files")
	if len(output_paths) == 0:
		return
	print("")
	print("generated files:")
	for path in output_paths[:10]:
		size = os.path.getsize(path)
		print(f"  - {os.path.basename(path)} ({utils.format_number(size)} bytes)")
	if len(output_paths) > 10:
		print(f"  ... and {len(output_paths) - 10} more")

#============================================

def main(argv: list = None) -> int:
	args = parse_args(argv)
	try:
		config = build_config(args)
	except ConversionError as exc:
		print(f"error: {exc}", file=sys.stderr)
		return 1
	utils.set_quiet_mode(config.quiet)
	converter = BatchConverter(config)
	if args.dump_plan:
		try:
			plan = converter.plan(args.inputs)
		except ConversionError as exc:
			print(f"error: {exc}", file=sys.stderr)
			return 1
		print(yaml.safe_dump(plan, sort_keys=False, allow_unicode=True))
		return 0
	report = converter.run(args.inputs)
	if not config.quiet:
		print_summary(report)
	if len(report.output_paths) == 0:
		return 1
	return 0


if __name__ == '__main__':
	sys.exit(main())
