#!/usr/bin/env python3

#============================================

class Frame():
	"""One keyframe: the cell shown from frame_index until the next keyframe."""
	__slots__ = ('frame_index', 'cell')

	def __init__(self, frame_index: int, cell: int):
		self.frame_index = frame_index
		self.cell = cell

	#============================
	def __eq__(self, other) -> bool:
		if not isinstance(other, Frame):
			return NotImplemented
		return (self.frame_index, self.cell) == (other.frame_index, other.cell)

	#============================
	def __repr__(self) -> str:
		return f"Frame({self.frame_index}, {self.cell})"

#============================================

class Layer():
	def __init__(self, name: str, frames: list = None):
		self.name = name
		self.frames = frames if frames is not None else []

	#============================
	def __eq__(self, other) -> bool:
		if not isinstance(other, Layer):
			return NotImplemented
		return self.name == other.name and self.frames == other.frames

	#============================
	def __repr__(self) -> str:
		return f"Layer({self.name!r}, {self.frames!r})"

#============================================

class Timesheet():
	"""
	One exposure sheet: a frame count and an ordered list of layers.

	name is built from the source filename and the dialect path components.
	It is used for diagnostics and output naming, never written to the
	binary file.
	"""
	def __init__(self, name: str, frame_count: int, layers: list = None,
		source_file: str = None, dialect: str = None):
		self.name = name
		self.frame_count = frame_count
		self.layers = layers if layers is not None else []
		self.source_file = source_file
		self.dialect = dialect

	#============================
	def __eq__(self, other) -> bool:
		if not isinstance(other, Timesheet):
			return NotImplemented
		return (self.name == other.name
			and self.frame_count == other.frame_count
			and self.layers == other.layers)

	#============================
	def __repr__(self) -> str:
		return (f"Timesheet({self.name!r}, frame_count={self.frame_count}, "
			f"layers={len(self.layers)})")
