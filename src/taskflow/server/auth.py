"""Password hashing, bearer tokens and the current-user dependency."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import Settings
from ..domain.models import User
from ..storage import UserRepository

bearer = HTTPBearer(auto_error=False)


class AuthConfig:
    """Authentication configuration."""

    def __init__(self, settings: Settings):
        self.secret_key = settings.secret_key
        self.algorithm = settings.algorithm
        self.access_token_expire_minutes = settings.token_expire_minutes
        self.bcrypt_rounds = settings.bcrypt_rounds


def _prehash(password: str) -> bytes:
    # bcrypt only reads 72 bytes; hash first so long passwords still count
    return hashlib.sha256(password.encode("utf-8")).digest()


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check *password* against a stored hash.  Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(config: AuthConfig, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token.

    Args:
        config: Auth configuration holding the secret and algorithm.
        user_id: Subject of the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.access_token_expire_minutes)
    payload = {"sub": user_id, "exp": datetime.now(timezone.utc) + expires_delta}
    return jwt.encode(payload, config.secret_key, algorithm=config.algorithm)


def decode_access_token(config: AuthConfig, token: str) -> Optional[str]:
    """Decode and verify JWT access token.

    Returns:
        User id from token, or None if invalid or expired.
    """
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
    except jwt.InvalidTokenError:
        return None
    subject = payload.get("sub")
    return str(subject) if subject else None


def create_user_dependency(config: AuthConfig, users: UserRepository) -> Callable[..., User]:
    """Build the FastAPI dependency resolving the authenticated user.

    Missing token → 401, invalid or expired token → 403, token for a user
    that no longer exists → 401.
    """

    def current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> User:
        if credentials is None or not credentials.credentials:
            raise HTTPException(status_code=401, detail="No token provided")
        user_id = decode_access_token(config, credentials.credentials)
        if user_id is None:
            raise HTTPException(status_code=403, detail="Invalid token")
        user = users.get(user_id)
        if user is None:
            raise HTTPException(status_code=401, detail="User not found")
        return user

    return current_user
