"""
Google OAuth (web server flow)

DESIGN DECISION: Exports go into the signed-in user's own Drive, so we use
user OAuth rather than a service account. The app is a web application
client; Google redirects back to the app URL with ?code=... which is
exchanged for a token here.

The token lives only in the user's session. Signing out forgets it.
"""

import os
from datetime import datetime
from typing import Optional

from google.auth.transport.requests import AuthorizedSession
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from statement_parser.config import GoogleOAuthSettings, get_settings
from statement_parser.models.transaction import GoogleUser


# Google may grant a superset of the requested scopes (include_granted_scopes)
os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class GoogleAuthError(Exception):
    """Signing in with Google failed."""
    pass


class GoogleOAuthService:
    """
    Thin wrapper over google-auth-oauthlib's Flow.

    A new Flow is built per call; Streamlit reruns the script on every
    interaction so nothing can be held between the redirect and the exchange.
    """

    def __init__(self, settings: Optional[GoogleOAuthSettings] = None):
        self._settings = settings or get_settings().google_oauth

    @property
    def scopes(self) -> list[str]:
        return self._settings.scopes_list

    def _client_config(self) -> dict:
        return {
            "web": {
                "client_id": self._settings.client_id,
                "client_secret": self._settings.client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [self._settings.redirect_uri],
            }
        }

    def _build_flow(self, state: Optional[str] = None) -> Flow:
        return Flow.from_client_config(
            self._client_config(),
            scopes=self.scopes,
            redirect_uri=self._settings.redirect_uri,
            state=state,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self) -> tuple[str, str]:
        """
        Build the Google consent screen URL.

        Returns:
            (url, state)
        """
        flow = self._build_flow()
        url, state = flow.authorization_url(
            access_type="offline",
            include_granted_scopes="true",
            prompt="consent",
        )
        return url, state

    def exchange_code(self, code: str, state: Optional[str] = None) -> Credentials:
        """
        Exchange the authorization code from the redirect for credentials.

        Raises:
            GoogleAuthError: If the code is missing, expired or rejected
        """
        if not code:
            raise GoogleAuthError("No authorization code received from Google")

        flow = self._build_flow(state=state)
        try:
            flow.fetch_token(code=code)
        except Exception as e:
            raise GoogleAuthError(f"Google sign-in failed: {e}") from e
        return flow.credentials

    def fetch_user_info(self, credentials: Credentials) -> GoogleUser:
        """
        Look up the signed-in user's profile.

        Raises:
            GoogleAuthError: If the userinfo request fails
        """
        session = AuthorizedSession(credentials)
        try:
            response = session.get(USERINFO_URL, timeout=10)
            response.raise_for_status()
            return GoogleUser(**response.json())
        except Exception as e:
            raise GoogleAuthError(f"Could not load Google profile: {e}") from e
        finally:
            session.close()

    def credentials_to_dict(self, credentials: Credentials) -> dict:
        """Serialize credentials for the session (client secret excluded)."""
        return {
            "token": credentials.token,
            "refresh_token": credentials.refresh_token,
            "token_uri": credentials.token_uri or TOKEN_URI,
            "scopes": list(credentials.scopes or self.scopes),
            "expiry": credentials.expiry.isoformat() if credentials.expiry else None,
        }

    def credentials_from_dict(self, data: dict) -> Credentials:
        """Rebuild credentials stored with credentials_to_dict."""
        if not data or not data.get("token"):
            raise GoogleAuthError("Not signed in with Google")

        expiry = data.get("expiry")
        return Credentials(
            token=data["token"],
            refresh_token=data.get("refresh_token"),
            token_uri=data.get("token_uri") or TOKEN_URI,
            client_id=self._settings.client_id,
            client_secret=self._settings.client_secret,
            scopes=data.get("scopes") or self.scopes,
            # google-auth compares expiry against naive UTC datetimes
            expiry=datetime.fromisoformat(expiry) if expiry else None,
        )
