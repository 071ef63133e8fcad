"""Shared fixtures for credential refresh tests."""

import pytest
from cryptography.fernet import Fernet

from credrefresh.models import AccountRecord
from credrefresh.secret_codec import SecretCodec


@pytest.fixture
def key() -> bytes:
    """Passcode-derived key used to encrypt the stored secrets."""
    return Fernet.generate_key()


@pytest.fixture
def codec() -> SecretCodec:
    return SecretCodec()


@pytest.fixture
def record(codec, key) -> AccountRecord:
    """Account record whose refresh secret is encrypted with `key`."""
    return AccountRecord(
        account_name="jane@example.com",
        account_type="com.salesforce",
        username="jane@example.com",
        user_id="005xx0000012345",
        org_id="00Dxx0000001gEF",
        client_id="test_client_id",
        login_server_uri="https://login.example.com",
        instance_server_uri="https://na1.example.com",
        encrypted_refresh_secret=codec.encrypt("stored_refresh_token", key),
    )

