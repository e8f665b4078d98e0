"""Infrastructure layer package."""

from .api import LCDClient

__all__ = ["LCDClient"]
