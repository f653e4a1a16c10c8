"""TextLayer model - one positionable text element in the composition."""
import uuid
from dataclasses import dataclass, field, replace, asdict

from textbehind.constants import (
	DEFAULT_TEXT, DEFAULT_FONT_FAMILY, DEFAULT_TEXT_COLOR, DEFAULT_FONT_SIZE,
	DEFAULT_BOLD, DEFAULT_POSITION_X, DEFAULT_POSITION_Y, DEFAULT_ROTATION,
	MIN_FONT_SIZE, MAX_FONT_SIZE,
)


def clamp_font_size(value):
	"""Clamp an abstract font size into [MIN_FONT_SIZE, MAX_FONT_SIZE]"""
	return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, value))


def new_layer_id():
	return uuid.uuid4().hex


_NUMBER_FIELDS = ('position_x', 'position_y', 'font_size', 'rotation')
_TEXT_FIELDS = ('text', 'font_family', 'color', 'id')


@dataclass
class TextLayer:
	"""Text layer state.
	
	Positions are percentages (0-100) of the image draw rectangle, not canvas
	pixels, so a layer keeps its place when the canvas is resized or exported
	at another resolution. font_size is the abstract [10, 300] unit, see
	utils.layout.rendered_font_size for the pixel mapping.
	"""
	text: str = DEFAULT_TEXT
	font_family: str = DEFAULT_FONT_FAMILY
	bold: bool = DEFAULT_BOLD
	color: str = DEFAULT_TEXT_COLOR
	position_x: float = DEFAULT_POSITION_X
	position_y: float = DEFAULT_POSITION_Y
	font_size: float = DEFAULT_FONT_SIZE
	rotation: float = DEFAULT_ROTATION
	id: str = field(default_factory=new_layer_id)
	
	def __post_init__(self):
		self.font_size = clamp_font_size(self.font_size)
	
	def copy(self, **changes):
		"""Return an independent copy, optionally with fields replaced"""
		return replace(self, **changes)
	
	def to_dict(self):
		return asdict(self)
	
	@classmethod
	def from_dict(cls, data):
		"""Build a layer from to_dict() output or a hand-written dict.

		Unknown keys are ignored. Numbers are taken as ints or floats only.

		Raises:
			ValueError: If data is not a dict or a field has the wrong type
		"""
		if not isinstance(data, dict):
			raise ValueError(f"Layer must be an object, got {type(data).__name__}")
		known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
		for name, value in known.items():
			if name in _NUMBER_FIELDS:
				# bool is an int subclass
				if isinstance(value, bool) or not isinstance(value, (int, float)):
					raise ValueError(f"Layer field {name!r} must be a number, got {value!r}")
				known[name] = float(value)
			elif name in _TEXT_FIELDS and not isinstance(value, str):
				raise ValueError(f"Layer field {name!r} must be a string, got {value!r}")
			elif name == 'bold' and not isinstance(value, bool):
				raise ValueError(f"Layer field 'bold' must be true or false, got {value!r}")
		return cls(**known)
