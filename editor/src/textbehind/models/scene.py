"""Scene model - layered composition state.

The Scene is data only: two raster assets, a whole-composition rotation, an
ordered list of text layers and the current selection. It is written by the
SceneController (external controls) and by the DragController on commit.
"""
import logging

from textbehind.errors import AssetMismatchError, AssetNotReady
from textbehind.models.text_layer import TextLayer

logger = logging.getLogger(__name__)


def _image_is_usable(image):
	if image is None:
		return False
	if hasattr(image, 'isNull') and image.isNull():
		return False
	return image.width() > 0 and image.height() > 0


class Scene:
	"""Background + text layers + foreground cutout.
	
	Layer order does not affect compositing (all layers share one z-band
	between background and cutout) but drives hit-test priority and the
	"most recently added" selection default.
	"""
	
	def __init__(self, background_image=None, cutout_image=None, image_rotation=0.0, layers=None, selected_layer_id=None):
		self.background_image = background_image
		self.cutout_image = cutout_image
		self.image_rotation = image_rotation
		self.layers = list(layers) if layers else []
		self.selected_layer_id = selected_layer_id
	
	def __repr__(self):
		return (f"Scene(ready={self.is_ready()}, rotation={self.image_rotation}, "
			f"layers={len(self.layers)}, selected={self.selected_layer_id!r})")
	
	# ========================================
	# Assets
	# ========================================
	
	def is_ready(self):
		"""True when both images are loaded with a non-zero size"""
		return _image_is_usable(self.background_image) and _image_is_usable(self.cutout_image)
	
	def require_ready(self):
		"""Raise AssetNotReady unless both images are loaded"""
		if not _image_is_usable(self.background_image):
			raise AssetNotReady("Background image is not loaded")
		if not _image_is_usable(self.cutout_image):
			raise AssetNotReady("Cutout image is not loaded")
	
	def image_size(self):
		"""Native (width, height) of the background, (0, 0) when missing"""
		if not _image_is_usable(self.background_image):
			return (0, 0)
		return (self.background_image.width(), self.background_image.height())
	
	def set_images(self, background_image, cutout_image):
		"""Install the background/cutout pair.
		
		Creates the default centered layer when the scene has none yet.
		
		Raises:
			AssetMismatchError: If the two images differ in native size
		"""
		if _image_is_usable(background_image) and _image_is_usable(cutout_image):
			bg_size = (background_image.width(), background_image.height())
			cut_size = (cutout_image.width(), cutout_image.height())
			if bg_size != cut_size:
				raise AssetMismatchError(
					f"Cutout size {cut_size[0]}x{cut_size[1]} does not match "
					f"background size {bg_size[0]}x{bg_size[1]}")
		
		self.background_image = background_image
		self.cutout_image = cutout_image
		
		if self.is_ready() and not self.layers:
			layer = TextLayer()
			self.layers.append(layer)
			self.selected_layer_id = layer.id
			logger.debug("Created default layer %s", layer.id)
	
	# ========================================
	# Layers
	# ========================================
	
	def get_layer(self, layer_id):
		"""Return the layer with this id, or None"""
		for layer in self.layers:
			if layer.id == layer_id:
				return layer
		return None
	
	def index_of(self, layer_id):
		for index, layer in enumerate(self.layers):
			if layer.id == layer_id:
				return index
		return -1
	
	@property
	def selected_layer(self):
		if self.selected_layer_id is None:
			return None
		return self.get_layer(self.selected_layer_id)
	
	def add_layer(self, layer, select=True):
		"""Append a layer (topmost for hit testing), optionally selecting it"""
		if self.get_layer(layer.id) is not None:
			raise ValueError(f"Duplicate layer id: {layer.id}")
		self.layers.append(layer)
		if select:
			self.selected_layer_id = layer.id
		return layer
	
	def remove_layer(self, layer_id):
		"""Remove a layer; clears the selection if it pointed at it.
		
		Returns:
			The removed layer, or None if no such layer
		"""
		index = self.index_of(layer_id)
		if index < 0:
			return None
		layer = self.layers.pop(index)
		if self.selected_layer_id == layer_id:
			self.selected_layer_id = None
		return layer
	
	def replace_layer(self, layer):
		"""Swap in a new layer object with the same id"""
		index = self.index_of(layer.id)
		if index < 0:
			raise KeyError(layer.id)
		self.layers[index] = layer
	
	# ========================================
	# Copies and snapshots
	# ========================================
	
	def copy(self):
		"""Fast-path copy: independent layers, shared (immutable) images"""
		return Scene(
			background_image=self.background_image,
			cutout_image=self.cutout_image,
			image_rotation=self.image_rotation,
			layers=[layer.copy() for layer in self.layers],
			selected_layer_id=self.selected_layer_id,
		)
	
	def snapshot(self):
		"""Layer/rotation/selection state for undo history (images excluded)"""
		return {
			'image_rotation': self.image_rotation,
			'layers': [layer.to_dict() for layer in self.layers],
			'selected_layer_id': self.selected_layer_id,
		}
	
	def restore(self, state):
		"""Apply a snapshot produced by snapshot()"""
		self.image_rotation = state.get('image_rotation', 0.0)
		self.layers = [TextLayer.from_dict(data) for data in state.get('layers', [])]
		selected = state.get('selected_layer_id')
		self.selected_layer_id = selected if self.get_layer(selected) is not None else None
