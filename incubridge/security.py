"""
Password hashing, bearer tokens and caller resolution.

Every protected route resolves the ``Authorization: Bearer <jwt>`` header to
a :class:`Caller` (account id + role); route guards only look at the role.
"""

from __future__ import annotations

import datetime as dt
import enum
import logging
from dataclasses import dataclass
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from incubridge import config
from incubridge.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    STARTUP = "startup"
    ADMIN = "admin"
    INCUBATOR = "incubator"


@dataclass(frozen=True)
class Caller:
    id: str
    role: Role
    email: str = ""


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def create_access_token(
    subject: str,
    role: Role,
    email: str = "",
    expires_minutes: Optional[int] = None,
) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else config.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": subject,
        "role": Role(role).value,
        "email": email,
        "iat": now,
        "exp": now + dt.timedelta(minutes=minutes),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Caller:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")

    subject = payload.get("sub")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthorized("Invalid token", {"reason": "unknown role"})
    if not subject:
        raise Unauthorized("Invalid token", {"reason": "missing subject"})
    return Caller(id=subject, role=role, email=payload.get("email", ""))


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

_bearer = HTTPBearer(auto_error=False)


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Caller:
    if credentials is None:
        raise Unauthorized("No token provided")
    return decode_access_token(credentials.credentials)


def require_role(*roles: Role):
    """Dependency factory: resolve the caller and check its role."""
    allowed = {Role(r) for r in roles}

    async def _guard(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in allowed:
            raise Forbidden(
                "Not allowed for this account type",
                {"role": caller.role.value, "allowed": sorted(r.value for r in allowed)},
            )
        return caller

    return _guard


require_startup = require_role(Role.STARTUP)
require_incubator = require_role(Role.INCUBATOR)
require_staff = require_role(Role.ADMIN, Role.INCUBATOR)
