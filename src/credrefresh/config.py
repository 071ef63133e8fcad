"""
Configuration for the credential refresh coordinator.

Configuration can be loaded from environment variables or provided
programmatically. Endpoint paths are appended to the per-account login
server URI, so one configuration serves every account.
"""

import os
from dataclasses import dataclass

from .exceptions import ConfigurationError


@dataclass
class RefreshConfig:
    """
    Settings shared by the token endpoint client, stores and login triggers.

    Attributes:
        token_path: Path of the OAuth2 token endpoint on the login server
        authorize_path: Path of the OAuth2 authorization endpoint
        redirect_uri: Redirect URI registered for the interactive login flow
        request_timeout: Seconds before a token request is abandoned
        invalid_refresh_error_code: Provider error code meaning the refresh
            token is invalid, revoked or expired
        account_store_file: Path of the JSON account metadata file
        default_account_type: Account type used when a record has none
    """

    token_path: str = "/services/oauth2/token"
    authorize_path: str = "/services/oauth2/authorize"
    redirect_uri: str = "https://login.salesforce.com/services/oauth2/success"

    request_timeout: float = 30

    # Reserved by the provider for a rejected refresh token
    invalid_refresh_error_code: str = "invalid_grant"

    account_store_file: str = "~/.credrefresh/accounts.json"
    default_account_type: str = "com.salesforce"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in ("token_path", "authorize_path"):
            path = getattr(self, name)
            if path and not path.startswith("/"):
                raise ConfigurationError(f"{name} must start with '/', got {path!r}")

        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )

        if not self.invalid_refresh_error_code:
            raise ConfigurationError("invalid_refresh_error_code cannot be empty")

        if not self.account_store_file:
            raise ConfigurationError("account_store_file cannot be empty")

    @property
    def account_store_path(self) -> str:
        """Account store file path with ``~`` expanded."""
        return os.path.expanduser(self.account_store_file)

    def token_url(self, login_server_uri: str) -> str:
        """
        Token endpoint URL for a login server.

        Args:
            login_server_uri: Login server URI stored on the account

        Returns:
            Login server URI without trailing slash, followed by token_path
        """
        return login_server_uri.rstrip("/") + self.token_path

    def authorize_url(self, login_server_uri: str) -> str:
        """Authorization endpoint URL for a login server."""
        return login_server_uri.rstrip("/") + self.authorize_path

    @classmethod
    def from_env(cls) -> "RefreshConfig":
        """
        Load configuration from environment variables.

        Optional environment variables:
            CREDREFRESH_TOKEN_PATH: Token endpoint path
            CREDREFRESH_AUTHORIZE_PATH: Authorization endpoint path
            CREDREFRESH_REDIRECT_URI: Interactive login redirect URI
            CREDREFRESH_REQUEST_TIMEOUT: Token request timeout in seconds
            CREDREFRESH_INVALID_REFRESH_ERROR: Provider code for a rejected refresh token
            CREDREFRESH_ACCOUNT_STORE: Account metadata file path
            CREDREFRESH_ACCOUNT_TYPE: Default account type

        Returns:
            RefreshConfig instance

        Raises:
            ConfigurationError: If a value cannot be parsed or is invalid
        """
        defaults = cls()
        raw_timeout = os.environ.get("CREDREFRESH_REQUEST_TIMEOUT")

        try:
            timeout = float(raw_timeout) if raw_timeout else defaults.request_timeout
        except ValueError as e:
            raise ConfigurationError(
                f"CREDREFRESH_REQUEST_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from e

        return cls(
            token_path=os.environ.get("CREDREFRESH_TOKEN_PATH", defaults.token_path),
            authorize_path=os.environ.get(
                "CREDREFRESH_AUTHORIZE_PATH", defaults.authorize_path
            ),
            redirect_uri=os.environ.get("CREDREFRESH_REDIRECT_URI", defaults.redirect_uri),
            request_timeout=timeout,
            invalid_refresh_error_code=os.environ.get(
                "CREDREFRESH_INVALID_REFRESH_ERROR", defaults.invalid_refresh_error_code
            ),
            account_store_file=os.environ.get(
                "CREDREFRESH_ACCOUNT_STORE", defaults.account_store_file
            ),
            default_account_type=os.environ.get(
                "CREDREFRESH_ACCOUNT_TYPE", defaults.default_account_type
            ),
        )
