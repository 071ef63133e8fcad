"""
Data structures for account records and token exchanges.

AccountRecord is the persisted state of one authenticated identity. The
token exchange types are ephemeral: they exist only for the duration of
one refresh call and are never persisted.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union
from urllib.parse import urlparse

# Record keys, shared with the JSON account store and the host bundle
KEY_ACCOUNT_NAME = "authAccount"
KEY_ACCOUNT_TYPE = "accountType"
KEY_AUTH_TOKEN = "authtoken"
KEY_PASSWORD = "password"
KEY_LOGIN_URL = "loginUrl"
KEY_INSTANCE_URL = "instanceUrl"
KEY_USER_ID = "userId"
KEY_CLIENT_ID = "clientId"
KEY_ORG_ID = "orgId"
KEY_USERNAME = "username"


@dataclass
class AccountRecord:
    """
    One authenticated identity as held by the account metadata store.

    Attributes:
        account_name: Account identifier in the store
        account_type: Account type reported back to the host
        username: Login username
        user_id: Provider user id
        org_id: Provider organization id
        client_id: OAuth client (consumer) id
        login_server_uri: Authorization server the refresh grant is sent to
        instance_server_uri: Service endpoint assigned to the account
        encrypted_refresh_secret: Refresh token, encrypted with the passcode key
        access_token: Current access token, encrypted the same way (None until
            the first refresh)
    """

    account_name: str
    account_type: str
    username: str
    user_id: str
    org_id: str
    client_id: str
    login_server_uri: str
    instance_server_uri: str
    encrypted_refresh_secret: str = field(repr=False)
    access_token: Optional[str] = field(default=None, repr=False)

    def to_dict(self) -> dict:
        """
        Convert to the stored dictionary form.

        Returns:
            Dictionary keyed by the record keys (account name excluded, it is
            the key the record is stored under)
        """
        return {
            KEY_ACCOUNT_TYPE: self.account_type,
            KEY_USERNAME: self.username,
            KEY_USER_ID: self.user_id,
            KEY_ORG_ID: self.org_id,
            KEY_CLIENT_ID: self.client_id,
            KEY_LOGIN_URL: self.login_server_uri,
            KEY_INSTANCE_URL: self.instance_server_uri,
            KEY_PASSWORD: self.encrypted_refresh_secret,
            KEY_AUTH_TOKEN: self.access_token,
        }

    @classmethod
    def from_dict(
        cls, account_name: str, data: dict, default_account_type: str = ""
    ) -> "AccountRecord":
        """
        Create AccountRecord from its stored dictionary form.

        Args:
            account_name: Key the record is stored under
            data: Dictionary with record keys
            default_account_type: Used when the record has no account type

        Returns:
            AccountRecord instance

        Raises:
            KeyError: If a required key is missing
        """
        return cls(
            account_name=account_name,
            account_type=data.get(KEY_ACCOUNT_TYPE) or default_account_type,
            username=data[KEY_USERNAME],
            user_id=data[KEY_USER_ID],
            org_id=data[KEY_ORG_ID],
            client_id=data[KEY_CLIENT_ID],
            login_server_uri=data[KEY_LOGIN_URL],
            instance_server_uri=data[KEY_INSTANCE_URL],
            encrypted_refresh_secret=data[KEY_PASSWORD],
            access_token=data.get(KEY_AUTH_TOKEN),
        )


@dataclass(frozen=True)
class TokenExchangeRequest:
    """Inputs of one refresh-token grant. Never persisted."""

    endpoint_uri: str
    client_id: str
    refresh_secret_plaintext: str = field(repr=False)


@dataclass(frozen=True)
class TokenExchangeSuccess:
    """
    Parsed success response from the token endpoint.

    Attributes:
        access_token: New short-lived access token
        instance_server_uri: Service endpoint the server assigned to the account
        identity_url: Identity service URL (``.../id/<orgId>/<userId>``)
        org_id: Organization id parsed from identity_url
        user_id: User id parsed from identity_url
        issued_at: Issue timestamp as reported by the server
        signature: Server signature over identity_url and issued_at
        scope: Granted scopes
        refresh_token: Rotated refresh token, when the server issued one
    """

    access_token: str = field(repr=False)
    instance_server_uri: str
    identity_url: Optional[str] = None
    org_id: Optional[str] = None
    user_id: Optional[str] = None
    issued_at: Optional[str] = None
    signature: Optional[str] = field(default=None, repr=False)
    scope: Optional[str] = None
    refresh_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class ProviderError:
    """
    Error response from the token endpoint.

    Attributes:
        error_code: Provider ``error`` field
        error_description: Provider ``error_description`` field
        refresh_secret_invalid: True when error_code is the reserved code for
            an invalid, revoked or expired refresh token
        status_code: HTTP status of the response
    """

    error_code: str
    error_description: str
    refresh_secret_invalid: bool
    status_code: Optional[int] = None


@dataclass(frozen=True)
class TransportError:
    """
    Network, URI or parse failure. Always treated as retryable.

    Attributes:
        cause: Underlying exception, kept for logging
    """

    cause: BaseException

    @property
    def reason(self) -> str:
        """Short description of the cause for logs and outcomes."""
        return f"{type(self.cause).__name__}: {self.cause}"


TokenExchangeResult = Union[TokenExchangeSuccess, ProviderError, TransportError]


def parse_identity_url(identity_url: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract org id and user id from an identity URL.

    Args:
        identity_url: URL of the form ``https://host/id/<orgId>/<userId>``

    Returns:
        (org_id, user_id), or (None, None) if the URL does not have that shape
    """
    if not identity_url:
        return None, None

    segments = [s for s in urlparse(identity_url).path.split("/") if s]
    if len(segments) < 3 or segments[-3] != "id":
        return None, None

    return segments[-2], segments[-1]
