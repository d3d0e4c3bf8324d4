#!/usr/bin/env python3

from stslib.core.model import Frame

#============================================

def compact_frames(frames: list) -> list:
	"""
	Drop keyframes that do not change the visible cell.

	Args:
		frames: Candidate keyframes sorted by frame_index.

	Returns:
		list: New keyframe list starting at frame 0 with no two adjacent
		entries sharing a cell. An empty input stays empty.
	"""
	if len(frames) == 0:
		return []
	candidates = list(frames)
	if candidates[0].frame_index != 0:
		candidates.insert(0, Frame(0, 0))
	kept = [candidates[0]]
	for frame in candidates[1:]:
		if frame.cell != kept[-1].cell:
			kept.append(frame)
	return kept

#============================================

def expand_frames(frames: list, frame_count: int) -> list:
	"""
	Broadcast each keyframe's cell up to the next keyframe.

	Args:
		frames: Compacted keyframes.
		frame_count: Length of the dense array.

	Returns:
		list: frame_count cell values, 0 where no keyframe covers a frame.
	"""
	cells = [0] * frame_count
	for i, frame in enumerate(frames):
		start = frame.frame_index
		if i + 1 < len(frames):
			end = frames[i + 1].frame_index
		else:
			end = frame_count
		end = min(end, frame_count)
		if start >= end:
			continue
		cells[start:end] = [frame.cell] * (end - start)
	return cells

#============================================

def keyframes_from_cells(cells: list) -> list:
	frames = []
	previous = None
	for frame_index, cell in enumerate(cells):
		if frame_index == 0 or cell != previous:
			frames.append(Frame(frame_index, cell))
		previous = cell
	return frames
