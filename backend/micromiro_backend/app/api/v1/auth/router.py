"""Auth API router: registration, login and the caller's profile."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from micromiro_backend.app.api.deps import get_auth, get_current_identity
from micromiro_backend.app.services.auth import AuthService, Identity

router = APIRouter(tags=["auth"])


class RegisterRequest(BaseModel):
    """Request to register a user."""
    username: str
    email: str
    password: str


class RegisterResponse(BaseModel):
    message: str
    user_id: int


class LoginRequest(BaseModel):
    """Request to log in by email."""
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class ProfileResponse(BaseModel):
    user_id: int
    email: str
    role_id: Optional[int]


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth),
) -> RegisterResponse:
    """Register a new user."""
    user_id = auth.register(payload.username, payload.email, payload.password)
    return RegisterResponse(message="User registered successfully", user_id=user_id)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth),
) -> TokenResponse:
    """Exchange credentials for a bearer token."""
    return TokenResponse(token=auth.login(payload.email, payload.password))


@router.get("/protected/profile", response_model=ProfileResponse)
def profile(identity: Identity = Depends(get_current_identity)) -> ProfileResponse:
    """Return the identity carried by the caller's token."""
    return ProfileResponse(
        user_id=identity.user_id,
        email=identity.email,
        role_id=identity.role_id,
    )
