"""Global logging and error reporting utilities"""
import logging
import sys

from PyQt5.QtWidgets import QMessageBox

logger = logging.getLogger(__name__)

_main_window = None

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level=logging.WARNING):
	"""Console logging for the application entry points"""
	logging.basicConfig(
		level=level,
		format=LOG_FORMAT,
		handlers=[
			logging.StreamHandler(sys.stdout)  # Output to console
		]
	)


def set_main_window(window):
	"""Set the main window reference for showing popups"""
	global _main_window
	_main_window = window


def report_error(message: str, title: str = "Error", exc: Exception = None):
	"""Log a failure and tell the user, without raising.
	
	Used for deliberate user actions (loading images, export) whose failure
	must be visible but must not take the editor down. Without a main window
	the message is only logged.
	"""
	if exc is not None:
		logger.error("%s: %s", message, exc)
	else:
		logger.error("%s", message)
	
	if _main_window is not None:
		QMessageBox.critical(_main_window, title, message)
