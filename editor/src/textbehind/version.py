"""Application version module.

Installed builds report the distribution version from package metadata.
Source checkouts that were never installed fall back to __version__.
"""

__version__ = "1.0.0"


def get_version() -> str:
    """Get the application version string (e.g. '1.0.0')."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("text-behind-editor")
    except PackageNotFoundError:
        return __version__
