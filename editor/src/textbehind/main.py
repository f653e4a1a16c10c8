import sys
import logging
from pathlib import Path

# PyQt5 import/s
from PyQt5.QtWidgets import QMainWindow, QApplication, QFileDialog, QStatusBar, QToolBar, QAction, QComboBox
from PyQt5.QtGui import QImage, QKeySequence

# Component imports
from textbehind.components.canvas_widget import EditorCanvas

# Service imports
from textbehind.services.scene_controller import SceneController
from textbehind.services.text_metrics import FontLoader

# Utility imports
from textbehind.config import EditorConfig
from textbehind.constants import AVAILABLE_FONTS, CANVAS_MAX_SCREEN_FRACTION, EXPORT_FILENAME, EXPORT_FORMATS
from textbehind.errors import AssetMismatchError
from textbehind.utils.logger import configure_logging, report_error, set_main_window
from textbehind.version import get_version

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.webp *.bmp)"


def load_image(path):
	"""Decode an image file to QImage.
	
	Raises:
		ValueError: If Qt cannot read the file
	"""
	image = QImage(str(path))
	if image.isNull():
		raise ValueError(f"Could not read image: {path}")
	return image


class MainWindow(QMainWindow):
	"""Editor window: canvas plus a toolbar driving the scene controller"""
	
	def __init__(self, config=None):
		super().__init__()
		self.config = config or EditorConfig.load()
		self.setWindowTitle(f"Text Behind Image Editor {get_version()}")
		
		self.controller = SceneController(parent=self)
		self._exporting = False
		self.canvas = EditorCanvas(self.controller, self, config=self.config)
		self.setCentralWidget(self.canvas)
		self.setStatusBar(QStatusBar(self))
		
		self._create_toolbar()
		self.controller.history.add_listener(self._on_history_changed)
		self.controller.scene_changed.connect(self._update_actions)
		self.controller.gesture_changed.connect(lambda active: self._update_actions())
		self._update_actions()
		
		# Extra font files register on the next event loop turn
		self.font_loader = FontLoader(self)
		self.font_loader.fonts_ready.connect(self._on_fonts_ready)
		if self.config.font_files:
			self.font_loader.load(self.config.font_files)
	
	def _create_toolbar(self):
		toolbar = QToolBar("Main", self)
		self.addToolBar(toolbar)
		
		def add(text, slot, shortcut=None):
			action = QAction(text, self)
			action.triggered.connect(slot)
			if shortcut:
				action.setShortcut(shortcut)
			toolbar.addAction(action)
			return action
		
		self.open_action = add("Open Images...", self.open_images, QKeySequence.Open)
		toolbar.addSeparator()
		self.add_text_action = add("Add Text", lambda: self.controller.add_layer(font_family=self.config.default_font))
		self.duplicate_action = add("Duplicate Text", self.controller.duplicate_selected_layer)
		self.delete_action = add("Delete Text", self.controller.delete_selected_layer)
		self.rotate_text_action = add("Rotate Text", lambda: self.controller.rotate_layer_step(1))
		
		self.font_combo = QComboBox(self)
		self.font_combo.addItems(AVAILABLE_FONTS)
		self.font_combo.currentTextChanged.connect(self._on_font_chosen)
		toolbar.addWidget(self.font_combo)
		toolbar.addSeparator()
		self.rotate_left_action = add("Rotate Left", lambda: self.controller.rotate_image_step(-1))
		self.rotate_right_action = add("Rotate Right", lambda: self.controller.rotate_image_step(1))
		toolbar.addSeparator()
		self.undo_action = add("Undo", self.controller.undo, QKeySequence.Undo)
		self.redo_action = add("Redo", self.controller.redo, QKeySequence.Redo)
		toolbar.addSeparator()
		self.download_action = add("Download", self.download, QKeySequence.Save)
	
	# ========================================
	# Actions
	# ========================================
	
	def open_images(self):
		"""Pick the original photo and its background-removed cutout"""
		background_path, _ = QFileDialog.getOpenFileName(self, "Open Background Image", "", IMAGE_FILTER)
		if not background_path:
			return
		cutout_path, _ = QFileDialog.getOpenFileName(
			self, "Open Cutout Image", str(Path(background_path).parent), IMAGE_FILTER)
		if not cutout_path:
			return
		self.load_images(background_path, cutout_path)
	
	def load_images(self, background_path, cutout_path):
		"""Load the image pair into the scene; failures are reported, not raised"""
		try:
			background = load_image(background_path)
			cutout = load_image(cutout_path)
			self.controller.set_images(background, cutout)
		except (ValueError, AssetMismatchError) as e:
			report_error(str(e), "Error Loading Images", e)
			return False
		self.statusBar().showMessage(f"Loaded {Path(background_path).name}", 3000)
		return True
	
	def download(self):
		"""Export the composition; the action stays disabled until the save resolves"""
		start_dir = self.config.last_export_dir or str(Path.home())
		filters = ";;".join(f"{name} (*{ext})" for name, ext in EXPORT_FORMATS.items())
		path, _ = QFileDialog.getSaveFileName(self, "Save Image", str(Path(start_dir) / EXPORT_FILENAME), filters)
		if not path:
			return
		self.config.last_export_dir = str(Path(path).parent)
		self.config.save()
		
		self._exporting = True
		self.download_action.setEnabled(False)
		self.statusBar().showMessage("Exporting...")
		self.canvas.download_image(self._on_download_complete, path)
	
	def _on_download_complete(self, success, message):
		self._exporting = False
		self._update_actions()
		if success:
			self.statusBar().showMessage(f"Saved {message}", 5000)
		else:
			self.statusBar().clearMessage()
			report_error(message, "Export Failed")
	
	# ========================================
	# State sync
	# ========================================
	
	def _on_font_chosen(self, family):
		if self.controller.scene.selected_layer is not None:
			self.controller.set_font_family(family)
	
	def _sync_font_combo(self):
		"""Show the selected layer's font without writing it back"""
		layer = self.controller.scene.selected_layer
		if layer is None:
			return
		if self.font_combo.findText(layer.font_family) < 0:
			self.font_combo.addItem(layer.font_family)
		self.font_combo.blockSignals(True)
		self.font_combo.setCurrentText(layer.font_family)
		self.font_combo.blockSignals(False)
		if FontLoader.is_available(layer.font_family):
			self.font_combo.setToolTip("")
		else:
			self.font_combo.setToolTip(f"{layer.font_family} is not installed, a similar font is used")
	
	def _on_fonts_ready(self, families):
		"""Offer the newly registered fonts and re-measure with them"""
		for family in families:
			if self.font_combo.findText(family) < 0:
				self.font_combo.addItem(family)
		if families:
			self.controller.refresh_layout()
	
	def _on_history_changed(self, can_undo, can_redo):
		# A drag owns the scene until release
		idle = not self.controller.gesture_active
		history = self.controller.history
		self.undo_action.setEnabled(can_undo and idle)
		self.redo_action.setEnabled(can_redo and idle)
		self.undo_action.setToolTip(f"Undo {history.undo_label()}".strip())
		self.redo_action.setToolTip(f"Redo {history.redo_label()}".strip())
	
	def _update_actions(self):
		idle = not self.controller.gesture_active
		ready = self.controller.scene.is_ready() and idle
		has_selection = self.controller.scene.selected_layer is not None and idle
		self.add_text_action.setEnabled(ready)
		self.duplicate_action.setEnabled(has_selection)
		self.delete_action.setEnabled(has_selection)
		self.rotate_text_action.setEnabled(has_selection)
		self.font_combo.setEnabled(has_selection)
		self.rotate_left_action.setEnabled(ready)
		self.rotate_right_action.setEnabled(ready)
		self.download_action.setEnabled(ready and not self._exporting)
		self._on_history_changed(self.controller.history.can_undo(), self.controller.history.can_redo())
		self._sync_font_combo()


def main():
	"""Application entry point: optional background and cutout paths on the command line"""
	configure_logging()
	
	app = QApplication(sys.argv)
	app.setApplicationName("Text Behind Image Editor")
	
	window = MainWindow()
	set_main_window(window)
	
	args = app.arguments()[1:]
	if len(args) >= 2:
		window.load_images(args[0], args[1])
	
	# Fit the preferred canvas size on screen
	size = window.canvas.sizeHint()
	screen = app.primaryScreen()
	if screen is not None:
		available = screen.availableGeometry()
		size = size.boundedTo(available.size() * CANVAS_MAX_SCREEN_FRACTION)
	window.resize(size)
	window.show()
	
	sys.exit(app.exec_())


if __name__ == "__main__":
	main()
