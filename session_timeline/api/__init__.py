"""HTTP surface for session timelines."""

from .server import create_app, serve

__all__ = ["create_app", "serve"]
