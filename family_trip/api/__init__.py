"""API routes for the trip server."""
from .routes import router

__all__ = ["router"]
