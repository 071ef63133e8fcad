"""
Triggers for the interactive login flow.

RefreshCoordinator calls a trigger only when the provider rejects the
stored refresh secret. The trigger starts a flow that will eventually
produce a brand-new refresh credential; the flow itself (UI, callback
handling, enrollment) lives outside this package.
"""

import logging
import webbrowser
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from .config import RefreshConfig
from .exceptions import LoginFlowError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginRequest:
    """
    Signal that account `account_name` needs an interactive login.

    Attributes:
        account_name: Account whose refresh secret was rejected
        account_type: Account type of that account
        login_server_uri: Login server the account authenticates against
        client_id: OAuth client id of the account
        options: Caller-supplied payload, carried through unchanged so the
            new credential can be correlated with the original request
    """

    account_name: str
    account_type: str
    login_server_uri: str
    client_id: str
    options: Dict[str, Any] = field(default_factory=dict)


class LoginFlowTrigger(ABC):
    """Starts an interactive login flow for one account."""

    @abstractmethod
    def trigger(self, request: LoginRequest) -> Any:
        """
        Start the interactive login flow.

        Args:
            request: Account and options payload for the flow

        Returns:
            Opaque handle identifying the started flow

        Raises:
            LoginFlowError: If the flow could not be started
        """


class RecordingLoginFlowTrigger(LoginFlowTrigger):
    """
    Records login requests instead of launching anything.

    Hosts that render their own login UI poll `pending` and clear it once
    the user has signed in again.
    """

    def __init__(self) -> None:
        self.pending: List[LoginRequest] = []

    def trigger(self, request: LoginRequest) -> LoginRequest:
        self.pending.append(request)
        logger.info(f"Interactive login queued for {request.account_name}")
        return request


class BrowserLoginFlowTrigger(LoginFlowTrigger):
    """
    Opens the provider's authorization page in the user's browser.

    Uses the user-agent flow (``response_type=token``); the page at
    `config.redirect_uri` receives the new tokens.
    """

    def __init__(self, config: Optional[RefreshConfig] = None, open_browser: bool = True):
        """
        Initialize browser trigger.

        Args:
            config: Endpoint and redirect settings (defaults if not provided)
            open_browser: Whether to open the browser or only log the URL
        """
        self.config = config or RefreshConfig()
        self.open_browser = open_browser

    def generate_authorization_url(self, request: LoginRequest) -> str:
        """
        Generate the authorization URL for an account.

        Returns:
            Complete authorization URL with query parameters
        """
        params = {
            "response_type": "token",
            "client_id": request.client_id,
            "redirect_uri": self.config.redirect_uri,
            "display": "touch",
        }
        url = f"{self.config.authorize_url(request.login_server_uri)}?{urlencode(params)}"
        logger.debug(f"Generated authorization URL: {url}")
        return url

    def trigger(self, request: LoginRequest) -> str:
        """
        Open the authorization URL for the account.

        Returns:
            The authorization URL, so the host can display it if no browser opened

        Raises:
            LoginFlowError: If the browser could not be launched
        """
        url = self.generate_authorization_url(request)

        if not self.open_browser:
            logger.info(f"Interactive login required for {request.account_name}: {url}")
            return url

        try:
            opened = webbrowser.open(url)
        except webbrowser.Error as e:
            logger.error(f"Could not open browser for {request.account_name}: {e}")
            raise LoginFlowError(f"Could not open browser: {e}") from e

        if not opened:
            logger.warning(
                f"No browser available; visit {url} to sign in {request.account_name}"
            )
        else:
            logger.info(f"Opened browser login for {request.account_name}")

        return url
