"""Tests for Gmail OAuth token handling."""

from unittest.mock import MagicMock, patch

import pytest
from google.auth.exceptions import RefreshError

from email_agent.exceptions import GmailAuthError
from email_agent.gmail.auth import SCOPES, GmailAuth


@pytest.fixture
def auth(tmp_path):
    return GmailAuth("client-id", "client-secret", tmp_path / "data" / "token.json")


def _creds(valid=True, expired=False, refresh_token="refresh"):
    creds = MagicMock()
    creds.valid = valid
    creds.expired = expired
    creds.refresh_token = refresh_token
    creds.to_json.return_value = '{"token": "abc"}'
    return creds


def test_missing_token_raises(auth):
    assert not auth.has_token()
    with pytest.raises(GmailAuthError, match="setup-oauth"):
        auth.get_credentials()


def test_malformed_token_raises(auth):
    auth.token_path.parent.mkdir(parents=True)
    auth.token_path.write_text("not json")
    with pytest.raises(GmailAuthError, match="malformed"):
        auth.get_credentials()


def test_valid_token_is_returned(auth):
    auth.token_path.parent.mkdir(parents=True)
    auth.token_path.write_text("{}")
    creds = _creds()
    with patch("email_agent.gmail.auth.Credentials.from_authorized_user_file",
               return_value=creds) as loader:
        assert auth.get_credentials() is creds
    loader.assert_called_once_with(str(auth.token_path), SCOPES)
    creds.refresh.assert_not_called()


def test_expired_token_is_refreshed_and_saved(auth):
    auth.token_path.parent.mkdir(parents=True)
    auth.token_path.write_text("{}")
    creds = _creds(expired=True)

    def refresh(_request):
        creds.valid = True

    creds.valid = False
    creds.refresh.side_effect = refresh
    with patch("email_agent.gmail.auth.Credentials.from_authorized_user_file",
               return_value=creds):
        assert auth.get_credentials() is creds
    assert auth.token_path.read_text() == '{"token": "abc"}'


def test_refresh_failure_raises(auth):
    auth.token_path.parent.mkdir(parents=True)
    auth.token_path.write_text("{}")
    creds = _creds(valid=False, expired=True)
    creds.refresh.side_effect = RefreshError("invalid_grant")
    with patch("email_agent.gmail.auth.Credentials.from_authorized_user_file",
               return_value=creds):
        with pytest.raises(GmailAuthError, match="refresh"):
            auth.get_credentials()


def test_invalid_token_without_refresh_token(auth):
    auth.token_path.parent.mkdir(parents=True)
    auth.token_path.write_text("{}")
    creds = _creds(valid=False, expired=True, refresh_token=None)
    with patch("email_agent.gmail.auth.Credentials.from_authorized_user_file",
               return_value=creds):
        with pytest.raises(GmailAuthError, match="invalid"):
            auth.get_credentials()


def test_authorize_uses_redirect_port_and_saves(auth):
    creds = _creds()
    flow = MagicMock()
    flow.run_local_server.return_value = creds
    with patch("email_agent.gmail.auth.InstalledAppFlow.from_client_config",
               return_value=flow) as from_config:
        assert auth.authorize() is creds

    config, scopes = from_config.call_args.args
    assert config["installed"]["client_id"] == "client-id"
    assert config["installed"]["redirect_uris"] == ["http://localhost:3000/callback"]
    assert scopes == SCOPES
    flow.run_local_server.assert_called_once_with(
        port=3000, access_type="offline", prompt="consent",
    )
    assert auth.has_token()


def test_authorize_requires_client_registration(tmp_path):
    auth = GmailAuth("", "", tmp_path / "token.json")
    with pytest.raises(GmailAuthError, match="GOOGLE_CLIENT_ID"):
        auth.authorize()

