"""Editor configuration stored as JSON in the user's config directory"""

import json
import logging
import os
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path

from textbehind.constants import (
	DEFAULT_CANVAS_WIDTH, DEFAULT_CANVAS_HEIGHT, DEFAULT_FONT_FAMILY,
	EXPORT_SCALE, EXPORT_FORMAT, EXPORT_FORMATS, EXPORT_QUALITY,
)

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = 'TEXT_BEHIND_CONFIG_DIR'
CONFIG_FILENAME = 'config.json'


def get_config_dir() -> Path:
	"""Config directory; TEXT_BEHIND_CONFIG_DIR overrides the per-user default"""
	override = os.environ.get(CONFIG_DIR_ENV)
	if override:
		return Path(override)
	return Path.home() / '.text_behind_editor'


@dataclass
class EditorConfig:
	"""User settings (not editing state: scenes are never persisted)"""
	canvas_width: int = DEFAULT_CANVAS_WIDTH
	canvas_height: int = DEFAULT_CANVAS_HEIGHT
	export_scale: float = EXPORT_SCALE
	export_format: str = EXPORT_FORMAT
	export_quality: int = EXPORT_QUALITY
	default_font: str = DEFAULT_FONT_FAMILY
	last_export_dir: str = ''
	font_files: list = field(default_factory=list)
	
	def validate(self):
		"""Replace out-of-range values with defaults (logged)"""
		defaults = EditorConfig()
		if not (isinstance(self.export_scale, (int, float)) and 0 < self.export_scale <= 4):
			logger.warning("Invalid export_scale %r, using %s", self.export_scale, defaults.export_scale)
			self.export_scale = defaults.export_scale
		if str(self.export_format).upper() not in EXPORT_FORMATS:
			logger.warning("Invalid export_format %r, using %s", self.export_format, defaults.export_format)
			self.export_format = defaults.export_format
		self.export_format = str(self.export_format).upper()
		if not (isinstance(self.export_quality, int) and 1 <= self.export_quality <= 100):
			logger.warning("Invalid export_quality %r, using %s", self.export_quality, defaults.export_quality)
			self.export_quality = defaults.export_quality
		if not (isinstance(self.font_files, list) and all(isinstance(p, str) for p in self.font_files)):
			logger.warning("Invalid font_files %r, ignoring", self.font_files)
			self.font_files = []
		for name in ('canvas_width', 'canvas_height'):
			value = getattr(self, name)
			if not (isinstance(value, int) and value > 0):
				logger.warning("Invalid %s %r, using %s", name, value, getattr(defaults, name))
				setattr(self, name, getattr(defaults, name))
		return self
	
	@classmethod
	def load(cls, path=None):
		"""Load settings, falling back to defaults on a missing or broken file"""
		path = Path(path) if path else get_config_dir() / CONFIG_FILENAME
		if not path.exists():
			return cls()
		try:
			with open(path, 'r', encoding='utf-8') as f:
				data = json.load(f)
		except (OSError, ValueError) as e:
			logger.warning("Error loading config %s: %s", path, e)
			return cls()
		if not isinstance(data, dict):
			logger.warning("Ignoring config %s: not a JSON object", path)
			return cls()
		known = {f.name for f in fields(cls)}
		unknown = set(data) - known
		if unknown:
			logger.debug("Ignoring unknown config keys: %s", sorted(unknown))
		return cls(**{k: v for k, v in data.items() if k in known}).validate()
	
	def save(self, path=None):
		"""Write settings as JSON, creating the config directory if needed"""
		path = Path(path) if path else get_config_dir() / CONFIG_FILENAME
		try:
			os.makedirs(path.parent, exist_ok=True)
			with open(path, 'w', encoding='utf-8') as f:
				json.dump(asdict(self), f, indent=2)
		except OSError as e:
			logger.warning("Error saving config %s: %s", path, e)
			return False
		return True
