"""
Caller identity resolution.

Sign-in is handled by an external identity provider; requests carry its JWT
as a bearer token and the ``sub`` claim is the owner id for every record.
"""

from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from shared.errors import UnauthenticatedError
from shared.models import Identity
from shared.utils import config, setup_logging

logger = setup_logging("auth")

bearer_scheme = HTTPBearer(auto_error=False)


def _verification_key() -> str:
    key = config.get("auth_jwt_public_key") or config.get("auth_jwt_secret")
    if not key:
        raise UnauthenticatedError("Identity verification is not configured")
    return key


def decode_identity_token(token: str) -> Identity:
    """Verify a provider-issued JWT and return the caller identity."""
    options: dict[str, Any] = {"verify_aud": bool(config.get("auth_jwt_audience"))}
    try:
        payload = jwt.decode(
            token,
            _verification_key(),
            algorithms=config.get("auth_jwt_algorithms", ["RS256"]),
            audience=config.get("auth_jwt_audience"),
            issuer=config.get("auth_jwt_issuer"),
            options=options,
        )
    except JWTError as e:
        logger.info("Rejected identity token: %s", e)
        raise UnauthenticatedError("Invalid token") from e

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise UnauthenticatedError("Invalid token")
    return Identity(subject=subject, claims=payload)


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity | None:
    """Resolve the caller identity, or None when no bearer token was sent."""
    if credentials is None:
        return None
    return decode_identity_token(credentials.credentials)


async def get_current_identity(
    identity: Identity | None = Depends(get_optional_identity),
) -> Identity:
    """Resolve the caller identity, rejecting anonymous requests."""
    if identity is None:
        raise UnauthenticatedError()
    return identity
