"""API route modules."""

from . import timeline

__all__ = ["timeline"]
