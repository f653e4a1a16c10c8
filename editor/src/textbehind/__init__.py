"""Text Behind Image editor: layered text-behind-subject compositing."""

from textbehind.version import __version__
