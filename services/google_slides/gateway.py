"""
Thin async wrapper over the Google Slides REST API.

Each operation is a single authenticated request; failures surface as
GoogleSlidesAPIError (or its access-denied / not-found subclasses on the
link path). Connection errors and timeouts carry no upstream status.
No retries and no pagination.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote, urlencode

import aiohttp

from shared.errors import (
    ExternalAuthRequiredError,
    GoogleSlidesAPIError,
    PresentationAccessDeniedError,
    PresentationNotFoundError,
)
from shared.http_client import AsyncHTTPClient, HTTPStatusError
from shared.models import Presentation
from shared.utils import config, setup_logging

logger = setup_logging("google-slides-gateway")

BLANK_LAYOUT = "BLANK"


class GoogleSlidesGateway:
    """Issue authenticated calls against the Slides v1 API."""

    def __init__(self, base_url: str | None = None, timeout: int | None = None) -> None:
        self.base_url = (base_url or config.get("google_slides_api_base")).rstrip("/")
        self.timeout = timeout or config.get("http_timeout_seconds", 30)

    def _presentation_url(self, presentation_id: str, suffix: str = "") -> str:
        return f"{self.base_url}/presentations/{quote(presentation_id, safe='')}{suffix}"

    @staticmethod
    def _headers(access_token: str, with_body: bool = False) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {access_token}"}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _get(self, url: str, access_token: str, action: str) -> dict[str, Any]:
        try:
            async with AsyncHTTPClient(timeout=self.timeout) as client:
                return await client.get(url, headers=self._headers(access_token))
        except HTTPStatusError as e:
            logger.warning("Google Slides %s failed with HTTP %s", action, e.status)
            raise GoogleSlidesAPIError(f"Failed to {action}: {e.body}", status=e.status, body=e.body) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Google Slides %s failed: %r", action, e)
            raise GoogleSlidesAPIError(f"Failed to {action}: {e!r}", status=None) from e

    async def _post(
        self, url: str, access_token: str, payload: dict[str, Any], action: str
    ) -> dict[str, Any]:
        try:
            async with AsyncHTTPClient(timeout=self.timeout) as client:
                return await client.post(
                    url, data=payload, headers=self._headers(access_token, with_body=True)
                )
        except HTTPStatusError as e:
            logger.warning("Google Slides %s failed with HTTP %s", action, e.status)
            raise GoogleSlidesAPIError(f"Failed to {action}: {e.body}", status=e.status, body=e.body) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Google Slides %s failed: %r", action, e)
            raise GoogleSlidesAPIError(f"Failed to {action}: {e!r}", status=None) from e

    async def create_presentation(self, access_token: str, title: str) -> Presentation:
        data = await self._post(
            f"{self.base_url}/presentations", access_token, {"title": title}, "create presentation"
        )
        logger.info("Created Google presentation %s", data.get("presentationId"))
        return Presentation.model_validate(data)

    async def get_presentation(self, access_token: str, presentation_id: str) -> Presentation:
        data = await self._get(
            self._presentation_url(presentation_id), access_token, "get presentation"
        )
        return Presentation.model_validate(data)

    async def batch_update(
        self, access_token: str, presentation_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Forward ``requests`` verbatim to ``presentations.batchUpdate``."""
        return await self._post(
            self._presentation_url(presentation_id, ":batchUpdate"),
            access_token,
            {"requests": requests},
            "update slide",
        )

    async def add_slide(
        self, access_token: str, presentation_id: str, insertion_index: int | None = None
    ) -> dict[str, Any]:
        create_slide: dict[str, Any] = {"slideLayoutReference": {"predefinedLayout": BLANK_LAYOUT}}
        if insertion_index is not None:
            create_slide["insertionIndex"] = insertion_index
        return await self._post(
            self._presentation_url(presentation_id, ":batchUpdate"),
            access_token,
            {"requests": [{"createSlide": create_slide}]},
            "add slide",
        )

    async def link_existing(self, access_token: str, presentation_id: str) -> Presentation:
        """Fetch a presentation to confirm the caller can open it."""
        try:
            return await self.get_presentation(access_token, presentation_id)
        except GoogleSlidesAPIError as e:
            if e.status == 403:
                raise PresentationAccessDeniedError(status=e.status, body=e.body) from e
            if e.status == 404:
                raise PresentationNotFoundError(status=e.status, body=e.body) from e
            raise GoogleSlidesAPIError(
                f"Failed to access presentation: {e.body or e.message}", status=e.status, body=e.body
            ) from e


class GoogleOAuthClient:
    """Authorization URL building and refresh-token exchange for Google OAuth."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_url: str | None = None,
        timeout: int | None = None,
    ) -> None:
        self.client_id = client_id or config.get("google_client_id")
        self.client_secret = client_secret or config.get("google_client_secret")
        self.token_url = token_url or config.get("google_oauth_token_url")
        self.timeout = timeout or config.get("http_timeout_seconds", 30)

    def authorization_url(self, redirect_uri: str | None, state: str = "google_slides_auth") -> str:
        """Build the implicit-grant consent URL for Slides access."""
        if not self.client_id:
            raise ExternalAuthRequiredError(
                "Google Client ID not configured. Please set GOOGLE_CLIENT_ID."
            )
        if not redirect_uri:
            raise ExternalAuthRequiredError(
                "Google OAuth redirect URI not configured. Please set GOOGLE_OAUTH_REDIRECT_URI."
            )
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "token",
            "scope": " ".join(config.get("google_oauth_scopes", [])),
            "include_granted_scopes": "true",
            "state": state,
        }
        return f"{config.get('google_oauth_authorize_url')}?{urlencode(params)}"

    async def refresh_access_token(self, refresh_token: str) -> dict[str, Any]:
        """Exchange a refresh token; returns Google's token response body."""
        if not (self.client_id and self.client_secret):
            raise ExternalAuthRequiredError("Google token refresh is not configured")
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            async with AsyncHTTPClient(timeout=self.timeout) as client:
                return await client.post_form(self.token_url, data=payload)
        except HTTPStatusError as e:
            logger.warning("Google token refresh failed with HTTP %s", e.status)
            raise ExternalAuthRequiredError() from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Google token refresh failed: %r", e)
            raise ExternalAuthRequiredError() from e


def get_gateway() -> GoogleSlidesGateway:
    """FastAPI dependency providing the Slides gateway."""
    return GoogleSlidesGateway()


def get_oauth_client() -> GoogleOAuthClient:
    """FastAPI dependency providing the Google OAuth client."""
    return GoogleOAuthClient()
