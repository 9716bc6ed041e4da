"""Tests for the Google OAuth wrapper. No request reaches Google."""

from datetime import datetime
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from google.oauth2.credentials import Credentials

from statement_parser.config import GoogleOAuthSettings
from statement_parser.services.google import GoogleAuthError, GoogleOAuthService
from statement_parser.services.google.auth import TOKEN_URI


@pytest.fixture
def service():
    return GoogleOAuthService(GoogleOAuthSettings())


class TestAuthorizationUrl:

    def test_url_targets_google_consent(self, service):
        url, state = service.authorization_url()
        parsed = urlparse(url)
        query = parse_qs(parsed.query)

        assert parsed.netloc == "accounts.google.com"
        assert query["client_id"] == ["test-client-id.apps.googleusercontent.com"]
        assert query["redirect_uri"] == ["http://localhost:8501"]
        assert query["access_type"] == ["offline"]
        assert query["prompt"] == ["consent"]
        assert "https://www.googleapis.com/auth/spreadsheets" in query["scope"][0].split()
        assert query["state"] == [state]

    def test_scopes_from_settings(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_OAUTH_SCOPES", "openid, https://www.googleapis.com/auth/drive.file")
        service = GoogleOAuthService(GoogleOAuthSettings())
        assert service.scopes == ["openid", "https://www.googleapis.com/auth/drive.file"]


class TestExchangeCode:

    def test_missing_code(self, service):
        with pytest.raises(GoogleAuthError, match="No authorization code"):
            service.exchange_code("")

    def test_rejected_code(self, service):
        with patch("statement_parser.services.google.auth.Flow.fetch_token",
                   side_effect=RuntimeError("invalid_grant")):
            with pytest.raises(GoogleAuthError, match="Google sign-in failed: invalid_grant"):
                service.exchange_code("bad-code")


class TestFetchUserInfo:

    def test_profile_is_loaded(self, service):
        session = MagicMock()
        session.get.return_value.json.return_value = {
            "id": "1",
            "email": "someone@example.com",
            "name": "Someone",
        }
        with patch("statement_parser.services.google.auth.AuthorizedSession", return_value=session):
            user = service.fetch_user_info(MagicMock())

        assert user.email == "someone@example.com"
        assert user.name == "Someone"
        session.close.assert_called_once()

    def test_profile_failure(self, service):
        session = MagicMock()
        session.get.side_effect = RuntimeError("offline")
        with patch("statement_parser.services.google.auth.AuthorizedSession", return_value=session):
            with pytest.raises(GoogleAuthError, match="Could not load Google profile"):
                service.fetch_user_info(MagicMock())
        session.close.assert_called_once()


class TestCredentialsStorage:

    def test_round_trip(self, service):
        credentials = Credentials(
            token="access-token",
            refresh_token="refresh-token",
            token_uri=TOKEN_URI,
            scopes=["openid"],
            expiry=datetime(2030, 1, 1, 12, 0, 0),
        )

        data = service.credentials_to_dict(credentials)
        assert "client_secret" not in data
        assert data["expiry"] == "2030-01-01T12:00:00"

        restored = service.credentials_from_dict(data)
        assert restored.token == "access-token"
        assert restored.refresh_token == "refresh-token"
        assert restored.client_id == "test-client-id.apps.googleusercontent.com"
        assert restored.client_secret == "test-client-secret"
        assert restored.expiry == datetime(2030, 1, 1, 12, 0, 0)

    @pytest.mark.parametrize("data", [None, {}, {"token": ""}])
    def test_not_signed_in(self, service, data):
        with pytest.raises(GoogleAuthError, match="Not signed in"):
            service.credentials_from_dict(data)
