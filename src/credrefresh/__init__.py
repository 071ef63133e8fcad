"""
Credential refresh coordinator.

Exchanges a stored, encrypted refresh credential for a new access token,
reconciles server-reported account metadata, and reports a usable token
or a well-defined failure the caller must resolve.

Public API:
    RefreshConfig: Configuration
    SecretCodec: Encryption of stored secrets
    TokenEndpointClient: OAuth2 refresh-token grant client
    AccountMetadataStore: Store interface (InMemoryAccountStore, JsonFileAccountStore)
    LoginFlowTrigger: Interactive login trigger interface
        (RecordingLoginFlowTrigger, BrowserLoginFlowTrigger)
    RefreshCoordinator: Entry point, refresh_token(account, key)

Outcomes:
    Refreshed, InteractiveLoginRequired, Failed, Unavailable, StoreFailure

Exceptions:
    CredentialRefreshError: Base exception
    ConfigurationError: Invalid configuration
    SecretCodecError, EncryptionError, DecryptionError: Codec failures
    MalformedEndpointError: Bad stored login server URI
    AccountStoreError, AccountNotFoundError: Store failures
    LoginFlowError: Login flow could not start
"""

from .account_store import AccountMetadataStore, InMemoryAccountStore, JsonFileAccountStore
from .config import RefreshConfig
from .coordinator import RefreshCoordinator
from .exceptions import (
    AccountNotFoundError,
    AccountStoreError,
    ConfigurationError,
    CredentialRefreshError,
    DecryptionError,
    EncryptionError,
    LoginFlowError,
    MalformedEndpointError,
    SecretCodecError,
)
from .login_flow import (
    BrowserLoginFlowTrigger,
    LoginFlowTrigger,
    LoginRequest,
    RecordingLoginFlowTrigger,
)
from .models import (
    AccountRecord,
    ProviderError,
    TokenExchangeRequest,
    TokenExchangeResult,
    TokenExchangeSuccess,
    TransportError,
)
from .outcomes import (
    Failed,
    InteractiveLoginRequired,
    RefreshOutcome,
    Refreshed,
    StoreFailure,
    Unavailable,
)
from .secret_codec import SecretCodec
from .token_endpoint import TokenEndpointClient

__all__ = [
    # Configuration
    "RefreshConfig",
    # Components
    "SecretCodec",
    "TokenEndpointClient",
    "AccountMetadataStore",
    "InMemoryAccountStore",
    "JsonFileAccountStore",
    "LoginFlowTrigger",
    "LoginRequest",
    "RecordingLoginFlowTrigger",
    "BrowserLoginFlowTrigger",
    "RefreshCoordinator",
    # Data
    "AccountRecord",
    "TokenExchangeRequest",
    "TokenExchangeResult",
    "TokenExchangeSuccess",
    "ProviderError",
    "TransportError",
    # Outcomes
    "RefreshOutcome",
    "Refreshed",
    "InteractiveLoginRequired",
    "Failed",
    "Unavailable",
    "StoreFailure",
    # Exceptions
    "CredentialRefreshError",
    "ConfigurationError",
    "SecretCodecError",
    "EncryptionError",
    "DecryptionError",
    "MalformedEndpointError",
    "AccountStoreError",
    "AccountNotFoundError",
    "LoginFlowError",
]
