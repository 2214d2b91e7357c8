"""Top-level API router mounting the versioned routes."""

from __future__ import annotations

from fastapi import APIRouter

from .v1 import auth, boards

api_router = APIRouter(prefix="/api/v1")


@api_router.get("/ping", tags=["health"])
def ping() -> dict[str, str]:
    return {"message": "pong"}


api_router.include_router(auth.router)
api_router.include_router(boards.router)
