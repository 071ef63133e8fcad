"""
OAuth2 refresh-token grant client.

This module performs the token exchange against a login server and
classifies the response:
- TokenExchangeSuccess: new access token and instance URL
- ProviderError: the provider answered with an error body; flags whether
  the error means the refresh token itself is no longer valid
- TransportError: malformed URI, network fault, timeout or unparseable
  response (infrastructure, not a credential-validity signal)

No retries are made here; retry policy belongs to the caller.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from .config import RefreshConfig
from .exceptions import MalformedEndpointError
from .models import (
    ProviderError,
    TokenExchangeRequest,
    TokenExchangeResult,
    TokenExchangeSuccess,
    TransportError,
    parse_identity_url,
)

logger = logging.getLogger(__name__)


def _optional_str(value) -> Optional[str]:
    """Optional response field; anything but a non-empty string counts as absent."""
    return value if isinstance(value, str) and value else None


def validate_endpoint_uri(endpoint_uri: Optional[str]) -> str:
    """
    Check that a login server URI is an absolute http(s) URI.

    Args:
        endpoint_uri: URI as stored on the account

    Returns:
        The URI unchanged

    Raises:
        MalformedEndpointError: If the URI is missing, relative or not http(s)
    """
    if not endpoint_uri:
        raise MalformedEndpointError("Login server URI is empty")

    try:
        parsed = urlparse(endpoint_uri)
    except ValueError as e:
        raise MalformedEndpointError(f"Login server URI cannot be parsed: {e}") from e

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise MalformedEndpointError(
            f"Login server URI must be an absolute http(s) URI, got {endpoint_uri!r}"
        )

    return endpoint_uri


class TokenEndpointClient:
    """
    Client for the provider's OAuth2 token endpoint.

    Example:
        client = TokenEndpointClient()
        result = client.refresh("https://login.example.com", "client-id", secret)
        if isinstance(result, TokenExchangeSuccess):
            use(result.access_token)
    """

    def __init__(
        self,
        config: Optional[RefreshConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize token endpoint client.

        Args:
            config: Endpoint path, timeout and error-code settings
            session: HTTP session (creates one if not provided)
        """
        self.config = config or RefreshConfig()
        self.session = session or requests.Session()

    def refresh(
        self, endpoint_uri: str, client_id: str, refresh_secret: str
    ) -> TokenExchangeResult:
        """
        Exchange a refresh token for a new access token.

        Args:
            endpoint_uri: Login server URI of the account
            client_id: OAuth client id
            refresh_secret: Plaintext refresh token (never logged)

        Returns:
            TokenExchangeSuccess, ProviderError or TransportError
        """
        return self.exchange(TokenExchangeRequest(endpoint_uri, client_id, refresh_secret))

    def exchange(self, exchange_request: TokenExchangeRequest) -> TokenExchangeResult:
        """Perform the refresh grant described by `exchange_request`."""
        try:
            validate_endpoint_uri(exchange_request.endpoint_uri)
        except MalformedEndpointError as e:
            logger.warning(f"Refusing token request: {e}")
            return TransportError(e)

        token_url = self.config.token_url(exchange_request.endpoint_uri)
        logger.info(f"Requesting access token from {token_url}")

        try:
            response = self.session.post(
                token_url,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={
                    "grant_type": "refresh_token",
                    "client_id": exchange_request.client_id,
                    "refresh_token": exchange_request.refresh_secret_plaintext,
                    "format": "json",
                },
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Network error during token refresh: {e}")
            return TransportError(e)

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(
                f"Unparseable response from token endpoint: {response.status_code}"
            )
            return TransportError(e)

        if not isinstance(data, dict):
            return TransportError(
                ValueError(f"Expected a JSON object, got {type(data).__name__}")
            )

        if not 200 <= response.status_code < 300 or data.get("error"):
            return self._parse_error(response.status_code, data)

        return self._parse_success(data)

    def _parse_error(self, status_code: int, data: dict) -> TokenExchangeResult:
        """
        Build a ProviderError from an error-shaped body.

        A non-2xx response without an ``error`` field is not a provider
        verdict on the credential, so it is reported as a TransportError.
        """
        error_code = data.get("error")
        if not error_code:
            logger.warning(f"Token endpoint returned {status_code} without an error code")
            return TransportError(
                ValueError(f"Token endpoint returned {status_code} without an error code")
            )

        error_description = data.get("error_description") or ""
        invalid = error_code == self.config.invalid_refresh_error_code

        logger.warning(
            f"Token refresh rejected: {status_code} - {error_code}: {error_description}"
        )
        return ProviderError(
            error_code=str(error_code),
            error_description=str(error_description),
            refresh_secret_invalid=invalid,
            status_code=status_code,
        )

    def _parse_success(self, data: dict) -> TokenExchangeResult:
        """Build a TokenExchangeSuccess, or a TransportError if required fields are missing."""
        try:
            access_token = data["access_token"]
            instance_url = data["instance_url"]
        except KeyError as e:
            logger.error(f"Invalid response from token endpoint: missing {e}")
            return TransportError(e)

        if not isinstance(access_token, str) or not isinstance(instance_url, str):
            logger.error(
                "Invalid response from token endpoint: token or instance URL is not a string"
            )
            return TransportError(ValueError("access_token and instance_url must be strings"))

        if not access_token or not instance_url:
            logger.error("Invalid response from token endpoint: empty token or instance URL")
            return TransportError(ValueError("Empty access_token or instance_url"))

        identity_url = _optional_str(data.get("id"))
        org_id, user_id = parse_identity_url(identity_url)

        return TokenExchangeSuccess(
            access_token=access_token,
            instance_server_uri=instance_url,
            identity_url=identity_url,
            org_id=org_id,
            user_id=user_id,
            issued_at=_optional_str(data.get("issued_at")),
            signature=_optional_str(data.get("signature")),
            scope=_optional_str(data.get("scope")),
            refresh_token=_optional_str(data.get("refresh_token")),
        )
