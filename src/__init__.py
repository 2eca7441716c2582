"""storegate: request coordination for remote document stores."""

from storegate.version import __version__

__all__ = ["__version__"]
