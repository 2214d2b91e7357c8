"""API v1 package."""

from . import auth, boards

__all__ = ["auth", "boards"]
