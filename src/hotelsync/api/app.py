"""ASGI entry point (``uvicorn hotelsync.api.app:app``)."""

from .factory import create_app

app = create_app()
