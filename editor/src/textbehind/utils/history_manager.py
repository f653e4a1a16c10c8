"""
Undo/redo history for scene edits.

Each entry pairs a Scene.snapshot() with a short label ("Drag text",
"Change color"). Snapshots are plain dicts built fresh on every call and
Scene.restore() rebuilds its layers from them, so entries are stored and
handed back as they are. A drag gesture lands here once, on release.
"""

import logging
from dataclasses import dataclass

from textbehind.constants import MAX_HISTORY_ENTRIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
	snapshot: dict
	label: str = ""


class HistoryManager:
	"""Linear undo/redo over scene snapshots, capped at max_entries.
	
	current_index points at the entry matching the live scene; the first
	entry is the state after loading images and is never undone past.
	"""
	
	def __init__(self, max_entries=MAX_HISTORY_ENTRIES):
		self.max_entries = max_entries
		self.entries = []
		self.current_index = -1
		self._listeners = []
	
	def record(self, snapshot, label=""):
		"""Push the scene state after an edit, dropping the redo branch"""
		del self.entries[self.current_index + 1:]
		self.entries.append(HistoryEntry(snapshot, label))
		if len(self.entries) > self.max_entries:
			del self.entries[0]
		self.current_index = len(self.entries) - 1
		self._changed()
		logger.debug("Recorded %r (%d of %d)", label, self.current_index + 1, len(self.entries))
	
	def undo(self):
		"""Step back one edit.
	
		Returns:
			The snapshot to restore, or None at the first entry
		"""
		if not self.can_undo():
			return None
		self.current_index -= 1
		return self._arrive("Undo")
	
	def redo(self):
		"""Step forward one edit; None when nothing was undone"""
		if not self.can_redo():
			return None
		self.current_index += 1
		return self._arrive("Redo")
	
	def _arrive(self, verb):
		entry = self.entries[self.current_index]
		self._changed()
		logger.debug("%s to %r (index %d)", verb, entry.label, self.current_index)
		return entry.snapshot
	
	def can_undo(self):
		return self.current_index > 0
	
	def can_redo(self):
		return self.current_index < len(self.entries) - 1
	
	def undo_label(self):
		"""Label of the edit undo would revert, '' if none"""
		return self.entries[self.current_index].label if self.can_undo() else ""
	
	def redo_label(self):
		"""Label of the edit redo would reapply, '' if none"""
		return self.entries[self.current_index + 1].label if self.can_redo() else ""
	
	def clear(self):
		self.entries = []
		self.current_index = -1
		self._changed()
	
	def add_listener(self, callback):
		"""Call callback(can_undo, can_redo) whenever the position changes"""
		self._listeners.append(callback)
	
	def _changed(self):
		for callback in self._listeners:
			callback(self.can_undo(), self.can_redo())
