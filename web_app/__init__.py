"""FastAPI web app for the link monitor."""

from .app_factory import create_app

__all__ = ["create_app"]
