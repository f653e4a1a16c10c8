"""Drag session dataclass for the drag controller.

Exists only between pointer-down on a layer and pointer-up; never persisted.
"""

from dataclasses import dataclass


@dataclass
class DragSession:
	"""Ephemeral drag state.
	
	pointer_start_* is where the drag began, last_* is the previous pointer
	sample. Movement is applied incrementally from last_*.
	"""
	layer_id: str
	pointer_start_x: float
	pointer_start_y: float
	last_x: float = None
	last_y: float = None
	moved: bool = False
	
	def __post_init__(self):
		if self.last_x is None:
			self.last_x = self.pointer_start_x
		if self.last_y is None:
			self.last_y = self.pointer_start_y
