from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from djemini import config
from djemini.auth.base import AuthHealthResult, AuthHealthStatus
from djemini.env.paths import auth_client_secrets_file, auth_token_file
from djemini.errors import QuotaExceeded, Unauthenticated, UpstreamError
from djemini.logger import get_logger
from djemini.providers.youtube.api_manager import YouTubeApiManager
from djemini.providers.youtube.catalog import YouTubeCatalog


class YouTubeOAuthProvider:
    name = "youtube"

    def __init__(
        self,
        token_path: Optional[Path] = None,
        secrets_path: Optional[Path] = None,
    ) -> None:
        self._logger = get_logger("djemini.auth.youtube")
        self.token_path = token_path or auth_token_file()
        self.secrets_path = secrets_path or auth_client_secrets_file()
        self._creds: Optional[Credentials] = None

    # -----------------------------------------------------------------
    # Credential lifecycle
    # -----------------------------------------------------------------

    def load_credential(self) -> bool:
        """
        Load the stored token, refreshing it when expired.

        Never starts an interactive flow. False means `djemini auth` is needed.
        """
        if self._creds is not None and self._creds.valid:
            return True

        if not self.token_path.exists():
            self._logger.debug("No OAuth token at %s", self.token_path)
            return False

        try:
            creds = Credentials.from_authorized_user_file(
                str(self.token_path),
                config.YOUTUBE_OAUTH_SCOPES,
            )
            self._logger.debug("Loaded existing OAuth credentials")
        except (ValueError, OSError) as e:
            self._logger.warning(f"Failed to load existing credentials: {e}")
            return False

        if creds.valid:
            self._creds = creds
            return True

        if creds.expired and creds.refresh_token:
            try:
                self._logger.debug("Refreshing expired OAuth token...")
                creds.refresh(Request())
            except GoogleAuthError as e:
                self._logger.error(f"Failed to refresh token: {e}")
                return False
            self._persist_token(creds)
            self._creds = creds
            return True

        return False

    def login(self) -> None:
        """Run the installed-app consent flow and persist the token."""
        if not self.secrets_path.exists():
            raise Unauthenticated(
                f"Missing OAuth client secrets file: {self.secrets_path}"
            )

        try:
            self._logger.debug("Starting OAuth authentication flow...")
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self.secrets_path),
                config.YOUTUBE_OAUTH_SCOPES,
            )
            creds = flow.run_local_server(port=0)
        except (GoogleAuthError, ValueError, OSError) as e:
            self._logger.error(f"OAuth authentication failed: {e}")
            raise Unauthenticated(str(e)) from e

        self._persist_token(creds)
        self._creds = creds
        self._logger.info("OAuth token saved to %s", self.token_path)

    def logout(self) -> bool:
        self._creds = None
        if self.token_path.exists():
            self.token_path.unlink()
            return True
        return False

    def build_client(self) -> Any:
        if not self.load_credential():
            raise Unauthenticated('Not authenticated. Run "djemini auth" first.')
        return build("youtube", "v3", credentials=self._creds, cache_discovery=False)

    # -----------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------

    def health_check(self) -> AuthHealthResult:
        """
        Validates OAuth by making a cheap authenticated request.
        Treats API quota exhaustion as OAuth OK.
        """
        self._logger.info("oauth.check.start")

        try:
            catalog = YouTubeCatalog(self.build_client(), YouTubeApiManager(sleep_sec=0))
            account = catalog.current_account_name()
        except QuotaExceeded:
            self._logger.warning("oauth.check.ok_quota_exhausted")
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.OK_API_QUOTA,
                message="OAuth OK (API quota exhausted)",
            )
        except Unauthenticated as e:
            self._logger.error("oauth.check.auth_invalid: %s", e)
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.AUTH_INVALID,
                message="OAuth INVALID - run `djemini auth` to sign in again",
            )
        except UpstreamError as e:
            self._logger.error("oauth.check.failed: %s", e)
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.FAILED,
                message=f"OAuth check failed: {e}",
            )

        self._logger.info("oauth.check.ok")
        return AuthHealthResult(
            provider=self.name,
            status=AuthHealthStatus.OK,
            message=f"OAuth OK ({account})" if account else "OAuth OK",
        )

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _persist_token(self, creds: Credentials) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(creds.to_json(), encoding="utf-8")
        self._logger.debug("Saved OAuth token")

        try:
            os.chmod(self.token_path, 0o600)
        except OSError as e:
            self._logger.debug(f"Could not restrict token permissions: {e}")
