"""
Results returned by RefreshCoordinator.refresh_token().

Every path through the coordinator ends in exactly one of these values.
to_bundle() translates an outcome into the flat key/value form the host
integration layer hands back to its own callers.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .login_flow import LoginRequest
from .models import (
    KEY_ACCOUNT_NAME,
    KEY_ACCOUNT_TYPE,
    KEY_AUTH_TOKEN,
    KEY_CLIENT_ID,
    KEY_INSTANCE_URL,
    KEY_LOGIN_URL,
    KEY_ORG_ID,
    KEY_USER_ID,
    KEY_USERNAME,
)

KEY_ERROR_CODE = "errorCode"
KEY_ERROR_MESSAGE = "errorMessage"
KEY_INTENT = "intent"

# Error codes for failures detected locally rather than by the provider
ERROR_DECRYPTION_FAILED = "decryption_failed"
ERROR_ENCRYPTION_FAILED = "encryption_failed"
ERROR_MALFORMED_ENDPOINT = "malformed_endpoint"
ERROR_LOGIN_FLOW_UNAVAILABLE = "login_flow_unavailable"
ERROR_NETWORK = "network_error"
ERROR_STORE = "store_failure"


@dataclass(frozen=True)
class Refreshed:
    """A new access token was obtained and stored."""

    account_name: str
    account_type: str
    access_token: str = field(repr=False)
    login_server_uri: str = ""
    instance_server_uri: str = ""
    client_id: str = ""
    username: str = ""
    user_id: str = ""
    org_id: str = ""

    def to_bundle(self) -> dict:
        return {
            KEY_ACCOUNT_NAME: self.account_name,
            KEY_ACCOUNT_TYPE: self.account_type,
            KEY_AUTH_TOKEN: self.access_token,
            KEY_LOGIN_URL: self.login_server_uri,
            KEY_INSTANCE_URL: self.instance_server_uri,
            KEY_CLIENT_ID: self.client_id,
            KEY_USERNAME: self.username,
            KEY_USER_ID: self.user_id,
            KEY_ORG_ID: self.org_id,
        }


@dataclass(frozen=True)
class InteractiveLoginRequired:
    """
    The refresh secret was rejected; the caller must complete a new login.

    Attributes:
        login_request: What was handed to the login-flow trigger
        handle: Whatever the trigger returned (URL, intent, ticket)
    """

    login_request: LoginRequest
    handle: Any = None

    def to_bundle(self) -> dict:
        return {KEY_INTENT: self.handle}


@dataclass(frozen=True)
class Failed:
    """The provider (or a local check) rejected the refresh for a non-retryable reason."""

    error_code: str
    error_description: str

    def to_bundle(self) -> dict:
        return {
            KEY_ERROR_CODE: self.error_code,
            KEY_ERROR_MESSAGE: self.error_description,
        }


@dataclass(frozen=True)
class Unavailable:
    """Transport or network failure; the caller should retry later."""

    reason: Optional[str] = None

    def to_bundle(self) -> dict:
        return {
            KEY_ERROR_CODE: ERROR_NETWORK,
            KEY_ERROR_MESSAGE: self.reason or "Token endpoint unavailable",
        }


@dataclass(frozen=True)
class StoreFailure:
    """The account metadata store could not be read or written."""

    reason: str

    def to_bundle(self) -> dict:
        return {KEY_ERROR_CODE: ERROR_STORE, KEY_ERROR_MESSAGE: self.reason}


RefreshOutcome = Union[Refreshed, InteractiveLoginRequired, Failed, Unavailable, StoreFailure]
