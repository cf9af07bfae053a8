from __future__ import annotations

import logging
from typing import Optional

from authlib.integrations.base_client.errors import OAuthError
from authlib.integrations.flask_client import OAuth
from flask import Flask
import requests

from ..core.exceptions import AuthenticationError
from ..users.model import OAuthProfile

logger = logging.getLogger(__name__)

GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"


class GoogleLogin:
    """Google OpenID Connect client; disabled when no credentials are configured."""

    name = "google"

    def __init__(self, *, client_id: Optional[str], client_secret: Optional[str]):
        self._client_id = client_id
        self._client_secret = client_secret
        self._oauth: Optional[OAuth] = None

    @property
    def enabled(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def init_app(self, app: Flask) -> None:
        if not self.enabled:
            logger.info("Google OAuth not configured (missing GOOGLE_CLIENT_ID or GOOGLE_CLIENT_SECRET)")
            return
        self._oauth = OAuth(app)
        self._oauth.register(
            name=self.name,
            client_id=self._client_id,
            client_secret=self._client_secret,
            server_metadata_url=GOOGLE_METADATA_URL,
            client_kwargs={"scope": "openid email profile"},
        )
        logger.info("Google OAuth configured")

    def _client(self):
        if self._oauth is None:
            raise AuthenticationError("Google login is not available")
        return self._oauth.create_client(self.name)

    def authorize_redirect(self, redirect_uri: str):
        return self._client().authorize_redirect(redirect_uri)

    def fetch_profile(self) -> OAuthProfile:
        """Finish the callback leg and return the verified profile claims."""

        client = self._client()
        try:
            token = client.authorize_access_token()
        except OAuthError as e:
            raise AuthenticationError(f"Google authentication failed: {e.description or e.error}")

        info = token.get("userinfo") or {}
        if not info:
            try:
                resp = client.get("userinfo")
                resp.raise_for_status()
                info = resp.json()
            except (OAuthError, requests.RequestException, ValueError) as e:
                raise AuthenticationError(f"Google authentication failed: {e}")

        email = info.get("email")
        subject = info.get("sub")
        if not email or not subject:
            raise AuthenticationError("Google did not supply an email address")
        if info.get("email_verified") is False:
            raise AuthenticationError("Google email address is not verified")

        return OAuthProfile(provider_id=str(subject), email=email, name=info.get("name") or "")
