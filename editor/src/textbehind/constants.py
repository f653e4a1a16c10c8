"""
Text Behind Image Editor - Constants and Configuration

This module contains all constant values used throughout the application:
- Text layer defaults and limits
- Font size scaling
- Canvas and export rendering settings
- Interaction tuning (hit boxes, rotation steps)
"""

# ======================================================================
# COORDINATE SYSTEM
# ======================================================================

# Layer positions are percentages [0, 100] of the image draw rectangle
# X-axis: 0 = left edge, 100 = right edge
# Y-axis: 0 = TOP edge, 100 = BOTTOM edge

PERCENT_MAX = 100.0
PERCENT_CENTER = 50.0

# ======================================================================
# FONT SIZE
# ======================================================================

# Abstract font size range exposed to controls
MIN_FONT_SIZE = 10
MAX_FONT_SIZE = 300

# rendered_px = font_size / FONT_SIZE_REFERENCE * draw_height * FONT_SIZE_SCALE
# FONT_SIZE_SCALE is an empirical tuning value, keep as is
FONT_SIZE_REFERENCE = 100.0
FONT_SIZE_SCALE = 0.2

# ======================================================================
# TEXT LAYER DEFAULTS
# ======================================================================

DEFAULT_TEXT = 'Edit'
NEW_LAYER_TEXT = 'New Text'
DEFAULT_FONT_FAMILY = 'Impact'
DEFAULT_TEXT_COLOR = '#FFFFFF'
DEFAULT_FONT_SIZE = 120
DEFAULT_BOLD = True
DEFAULT_POSITION_X = PERCENT_CENTER
DEFAULT_POSITION_Y = PERCENT_CENTER
DEFAULT_ROTATION = 0.0

# Fonts offered by the editor
AVAILABLE_FONTS = [
	'Arial',
	'Verdana',
	'Helvetica',
	'Times New Roman',
	'Courier New',
	'Georgia',
	'Palatino',
	'Garamond',
	'Impact',
	'Comic Sans MS',
	'Trebuchet MS',
	'Arial Black',
	'Lucida Sans Unicode',
	'Lucida Console',
	'Courier',
	'Monaco',
]

# ======================================================================
# ROTATION
# ======================================================================

# Toolbar rotation steps in degrees
LAYER_ROTATION_STEP = 45
IMAGE_ROTATION_STEP = 90

# ======================================================================
# SELECTION / HIT TESTING
# ======================================================================

# Selection rectangle drawn around the selected layer
HIGHLIGHT_COLOR = '#3b82f6'
HIGHLIGHT_WIDTH = 2

# Minimum hit box edge in pixels (keeps empty text layers draggable)
MIN_HIT_BOX_PX = 12.0

# ======================================================================
# CANVAS
# ======================================================================

DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600

# Max share of the screen height the canvas may take
CANVAS_MAX_SCREEN_FRACTION = 0.8

# ======================================================================
# EXPORT
# ======================================================================

# Scale applied to the background's native size (< 1 bounds file size)
EXPORT_SCALE = 0.5

# Quality for lossy formats (PNG ignores it)
EXPORT_QUALITY = 80

EXPORT_FORMAT = 'PNG'
EXPORT_FILENAME = 'text-behind-image.png'

# Formats Pillow can write that we offer
EXPORT_FORMATS = {
	'PNG': '.png',
	'JPEG': '.jpg',
	'WEBP': '.webp',
}

# ======================================================================
# HISTORY MANAGEMENT
# ======================================================================

# Maximum undo/redo history
MAX_HISTORY_ENTRIES = 100

# ======================================================================
# LAYER MOVEMENT CONSTANTS
# ======================================================================
# Amount to move the selected layer with arrow keys, in percent
ARROW_KEY_MOVE_NORMAL = 1.0  # Normal arrow key movement
ARROW_KEY_MOVE_FINE = 0.2    # Fine movement with Shift modifier
