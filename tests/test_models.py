"""Tests for account records and token exchange values."""

import pytest

from credrefresh.models import (
    AccountRecord,
    TokenExchangeRequest,
    TransportError,
    parse_identity_url,
)


class TestAccountRecord:
    """Tests for AccountRecord serialization."""

    def test_to_dict_uses_account_keys(self, record):
        """to_dict writes the stored key names."""
        data = record.to_dict()

        assert data["loginUrl"] == "https://login.example.com"
        assert data["instanceUrl"] == "https://na1.example.com"
        assert data["clientId"] == "test_client_id"
        assert data["password"] == record.encrypted_refresh_secret
        assert data["authtoken"] is None
        assert "authAccount" not in data

    def test_from_dict_restores_record(self, record):
        restored = AccountRecord.from_dict(record.account_name, record.to_dict())

        assert restored == record

    def test_from_dict_uses_default_account_type(self, record):
        data = record.to_dict()
        del data["accountType"]

        restored = AccountRecord.from_dict("jane", data, default_account_type="com.example")

        assert restored.account_type == "com.example"

    def test_from_dict_missing_field(self, record):
        data = record.to_dict()
        del data["loginUrl"]

        with pytest.raises(KeyError):
            AccountRecord.from_dict("jane", data)

    def test_repr_hides_secrets(self, record):
        """Secrets never show up in repr (and so never in logs)."""
        record.access_token = "encrypted_access_token"

        text = repr(record)

        assert record.encrypted_refresh_secret not in text
        assert "encrypted_access_token" not in text
        assert "jane@example.com" in text


class TestTokenExchangeValues:
    """Tests for ephemeral exchange values."""

    def test_request_repr_hides_secret(self):
        request = TokenExchangeRequest("https://login.example.com", "cid", "plain_secret")

        assert "plain_secret" not in repr(request)

    def test_transport_error_reason(self):
        error = TransportError(ConnectionError("connection refused"))

        assert error.reason == "ConnectionError: connection refused"


class TestParseIdentityUrl:
    """Tests for parse_identity_url."""

    def test_parses_org_and_user(self):
        org_id, user_id = parse_identity_url(
            "https://login.example.com/id/00Dxx0000001gEF/005xx0000012345"
        )

        assert org_id == "00Dxx0000001gEF"
        assert user_id == "005xx0000012345"

    @pytest.mark.parametrize(
        "url", [None, "", "https://login.example.com/", "https://login.example.com/me/a/b"]
    )
    def test_unrecognized_urls(self, url):
        assert parse_identity_url(url) == (None, None)
