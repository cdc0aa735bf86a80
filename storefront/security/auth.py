"""
Caller identity dependency

Decodes the bearer token on incoming requests into a user id and role.
Tokens are issued by the identity service; this module only checks the
signature and expiry and trusts the claims from then on.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import jwt
from fastapi import Header, HTTPException

from ..core.config import settings

logger = logging.getLogger(__name__)


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Caller:
    """Authenticated caller of an operation"""
    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_access(self, owner_id: str) -> bool:
        return self.is_admin or self.user_id == owner_id


def decode_token(token: str, secret: Optional[str] = None, algorithm: Optional[str] = None) -> Caller:
    """
    Decode a bearer token into a Caller.

    Raises:
        ValueError: if the token is invalid, expired or missing claims
    """
    try:
        claims = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[algorithm or settings.jwt_algorithm],
        )
    except jwt.PyJWTError as e:
        raise ValueError(f"Invalid token: {e}")

    user_id = claims.get("sub") or claims.get("id")
    if not user_id:
        raise ValueError("Token has no subject")

    try:
        role = Role(claims.get("role", Role.USER.value))
    except ValueError:
        raise ValueError(f"Unknown role: {claims.get('role')}")

    return Caller(user_id=str(user_id), role=role)


def issue_token(user_id: str, role: Role = Role.USER, secret: Optional[str] = None, **extra) -> str:
    """Mint a token for local development and tests"""
    payload = {"sub": user_id, "role": role.value, **extra}
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


class AuthDependency:
    """
    FastAPI dependency resolving the caller from the Authorization header.
    """

    def __init__(self, require_admin: bool = False):
        """
        Args:
            require_admin: If True, reject callers without the admin role
        """
        self.require_admin = require_admin

    async def __call__(self, authorization: Optional[str] = Header(None)) -> Caller:
        if not authorization or not authorization.lower().startswith("bearer "):
            raise HTTPException(status_code=401, detail="No token provided")

        token = authorization.split(" ", 1)[1].strip()
        try:
            caller = decode_token(token)
        except ValueError as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise HTTPException(status_code=401, detail="Invalid token")

        if self.require_admin and not caller.is_admin:
            raise HTTPException(status_code=403, detail="Not authorized - Admin only")

        return caller


# Dependency instances
require_user = AuthDependency()
require_admin = AuthDependency(require_admin=True)
