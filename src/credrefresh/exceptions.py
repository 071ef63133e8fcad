"""
Exception classes for the credential refresh coordinator.

Leaf components (codec, account store, login-flow trigger) raise these;
RefreshCoordinator converts every one of them into a RefreshOutcome so
no exception crosses into caller-visible results.
"""


class CredentialRefreshError(Exception):
    """Base exception for all credential refresh errors."""

    pass


class ConfigurationError(CredentialRefreshError):
    """Invalid configuration value or missing environment setting."""

    pass


class SecretCodecError(CredentialRefreshError):
    """Base exception for secret encryption/decryption failures."""

    pass


class EncryptionError(SecretCodecError):
    """Plaintext could not be encrypted (unusable key material)."""

    pass


class DecryptionError(SecretCodecError):
    """
    Ciphertext could not be decrypted.

    Raised for malformed ciphertext, a wrong key (wrong passcode) or
    unusable key material. Callers treat this the same as an invalid
    stored credential.
    """

    pass


class MalformedEndpointError(CredentialRefreshError):
    """Stored login server URI is not an absolute http(s) URI."""

    pass


class AccountStoreError(CredentialRefreshError):
    """Account metadata store is unreachable, corrupt or rejected a write."""

    pass


class AccountNotFoundError(AccountStoreError):
    """No record exists for the requested account."""

    pass


class LoginFlowError(CredentialRefreshError):
    """The interactive login flow could not be started."""

    pass
