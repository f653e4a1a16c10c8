"""Coalescing redraw scheduler.

Any number of request() calls between two event loop turns produce exactly
one callback, which then reads the latest state. At most one redraw is ever
pending.
"""
import logging

from PyQt5.QtCore import QTimer

logger = logging.getLogger(__name__)


class RedrawScheduler:
	"""Single pending-redraw slot driven by a zero-delay single-shot QTimer"""
	
	def __init__(self, callback, parent=None):
		self._callback = callback
		self._timer = QTimer(parent)
		self._timer.setSingleShot(True)
		self._timer.setInterval(0)
		self._timer.timeout.connect(self._fire)
		self.redraw_count = 0
	
	@property
	def pending(self):
		return self._timer.isActive()
	
	def request(self):
		"""Ask for a redraw on the next event loop turn"""
		if not self._timer.isActive():
			self._timer.start()
	
	def flush(self):
		"""Run a pending redraw now instead of waiting for the event loop"""
		if self._timer.isActive():
			self._timer.stop()
			self._fire()
	
	def cancel(self):
		self._timer.stop()
	
	def _fire(self):
		self.redraw_count += 1
		self._callback()
