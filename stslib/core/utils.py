#!/usr/bin/env python3

_QUIET_MODE = False

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def format_number(value: int) -> str:
	return f"{value:,}"

#============================================

def make_safe_name(name: str, max_length: int = 100) -> str:
	"""
	Make a timesheet name usable inside a file name.

	Args:
		name: Timesheet name such as "cut.tdts->C001->action".
		max_length: Maximum number of characters to keep.

	Returns:
		str: Name with path separators and colons replaced by underscores.
	"""
	safe_name = name
	for char in ('/', '\\', ':'):
		safe_name = safe_name.replace(char, '_')
	return safe_name[:max_length]
