"""Per-user Google OAuth credential storage."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.database import GoogleToken
from shared.errors import ExternalAuthRequiredError, UnauthenticatedError
from shared.models import Identity
from shared.utils import config, now_ms, setup_logging

logger = setup_logging("google-token-store")


class TokenStore:
    """Holds at most one Google credential per owner.

    The store never checks expiry on read. Callers compare through
    ``is_expired`` or go through ``resolve_credential``.
    """

    def __init__(self, session: Session):
        self.session = session

    def store_token(
        self,
        owner: str,
        access_token: str,
        expires_at: int,
        refresh_token: str | None = None,
    ) -> str:
        """Insert or overwrite the owner's credential and return its id."""
        existing = self.get_token(owner)
        if existing is not None:
            existing.access_token = access_token
            existing.refresh_token = refresh_token
            existing.expires_at = expires_at
            existing.updated_at = datetime.now(timezone.utc)
            self.session.commit()
            logger.info("Replaced Google credential for %s", owner)
            return existing.id

        token = GoogleToken(
            user_id=owner,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
        self.session.add(token)
        self.session.commit()
        logger.info("Stored Google credential for %s", owner)
        return token.id

    def get_token(self, owner: str) -> GoogleToken | None:
        return self.session.execute(
            select(GoogleToken).where(GoogleToken.user_id == owner)
        ).scalar_one_or_none()

    @staticmethod
    def is_expired(credential: GoogleToken, now: int | None = None) -> bool:
        """True when ``credential.expires_at`` (epoch ms) is before ``now``."""
        current = now_ms() if now is None else now
        return credential.expires_at < current


async def resolve_credential(
    store: TokenStore,
    identity: Identity | None,
    oauth_client=None,
    now: int | None = None,
) -> GoogleToken:
    """Return a usable credential, refreshing it first when that is enabled.

    Refresh only happens with ``google_token_refresh_enabled`` set, an
    ``oauth_client`` supplied and a stored refresh token. Otherwise an expired
    credential raises ExternalAuthRequiredError and the user re-consents.
    """
    if identity is None:
        raise UnauthenticatedError()
    credential = store.get_token(identity.subject)
    if credential is None:
        raise ExternalAuthRequiredError()
    if not store.is_expired(credential, now):
        return credential

    if not (config.get("google_token_refresh_enabled") and oauth_client and credential.refresh_token):
        raise ExternalAuthRequiredError()

    refreshed = await oauth_client.refresh_access_token(credential.refresh_token)
    access_token = refreshed.get("access_token")
    if not access_token:
        logger.warning("Google refresh response for %s carried no access token", identity.subject)
        raise ExternalAuthRequiredError()
    current = now_ms() if now is None else now
    store.store_token(
        identity.subject,
        access_token=access_token,
        expires_at=current + int(refreshed.get("expires_in", 3600)) * 1000,
        refresh_token=refreshed.get("refresh_token") or credential.refresh_token,
    )
    logger.info("Refreshed Google credential for %s", identity.subject)
    return store.get_token(identity.subject)
