"""
Refresh coordinator: the single entry point hosts call for a new token.

RefreshCoordinator decrypts the stored refresh secret, exchanges it at the
account's login server, reconciles the server-reported instance URL into
the account record and stores the new access token (encrypted). Every
failure is converted into a RefreshOutcome; nothing raises to the caller.

The coordinator holds no mutable state. Refreshes of different accounts
may run in parallel; refreshes of the same account should be serialized
by the caller.
"""

import logging
from typing import Any, Dict, Optional

from .account_store import AccountMetadataStore
from .exceptions import (
    AccountNotFoundError,
    AccountStoreError,
    DecryptionError,
    EncryptionError,
    LoginFlowError,
    MalformedEndpointError,
)
from .login_flow import LoginFlowTrigger, LoginRequest
from .models import AccountRecord, ProviderError, TokenExchangeSuccess, TransportError
from .outcomes import (
    ERROR_DECRYPTION_FAILED,
    ERROR_ENCRYPTION_FAILED,
    ERROR_LOGIN_FLOW_UNAVAILABLE,
    ERROR_MALFORMED_ENDPOINT,
    Failed,
    InteractiveLoginRequired,
    RefreshOutcome,
    Refreshed,
    StoreFailure,
    Unavailable,
)
from .secret_codec import KeyMaterial, SecretCodec
from .token_endpoint import TokenEndpointClient, validate_endpoint_uri

logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """
    Orchestrates one token refresh per call.

    Example:
        coordinator = RefreshCoordinator(
            store=JsonFileAccountStore("~/.credrefresh/accounts.json"),
            endpoint_client=TokenEndpointClient(),
            login_trigger=BrowserLoginFlowTrigger(),
        )
        outcome = coordinator.refresh_token("jane@example.com", key)
        if isinstance(outcome, Refreshed):
            headers = {"Authorization": f"Bearer {outcome.access_token}"}
    """

    def __init__(
        self,
        store: AccountMetadataStore,
        endpoint_client: TokenEndpointClient,
        login_trigger: LoginFlowTrigger,
        codec: Optional[SecretCodec] = None,
    ):
        """
        Initialize coordinator.

        Args:
            store: Account metadata store
            endpoint_client: Token endpoint client
            login_trigger: Called when the refresh secret is rejected
            codec: Secret codec (creates default if not provided)
        """
        self.store = store
        self.endpoint_client = endpoint_client
        self.login_trigger = login_trigger
        self.codec = codec or SecretCodec()

    def refresh_token(
        self,
        account: str,
        key: KeyMaterial,
        options: Optional[Dict[str, Any]] = None,
    ) -> RefreshOutcome:
        """
        Obtain a new access token for an account.

        Blocks on the network exchange; call it off latency-sensitive paths.

        Args:
            account: Account name in the metadata store
            key: Passcode-derived key the account secrets are encrypted with
            options: Payload carried through to the login flow if one is needed

        Returns:
            Refreshed, InteractiveLoginRequired, Failed, Unavailable or StoreFailure
        """
        logger.info(f"Refreshing access token for {account}")

        try:
            record = self.store.get(account)
        except AccountNotFoundError as e:
            logger.error(f"Cannot refresh {account}: {e}")
            return StoreFailure(str(e))
        except AccountStoreError as e:
            logger.error(f"Account store unavailable while refreshing {account}: {e}")
            return StoreFailure(str(e))

        try:
            refresh_secret = self.codec.decrypt(record.encrypted_refresh_secret, key)
        except DecryptionError as e:
            logger.error(f"Could not decrypt refresh secret for {account}: {e}")
            return Failed(ERROR_DECRYPTION_FAILED, str(e))

        try:
            validate_endpoint_uri(record.login_server_uri)
        except MalformedEndpointError as e:
            logger.error(f"Bad login server configured for {account}: {e}")
            return Failed(ERROR_MALFORMED_ENDPOINT, str(e))

        result = self.endpoint_client.refresh(
            record.login_server_uri, record.client_id, refresh_secret
        )

        if isinstance(result, TransportError):
            logger.warning(f"Token endpoint unavailable for {account}: {result.reason}")
            return Unavailable(result.reason)

        if isinstance(result, ProviderError):
            if result.refresh_secret_invalid:
                return self._require_interactive_login(record, options)

            logger.warning(
                f"Refresh rejected for {account}: "
                f"{result.error_code} - {result.error_description}"
            )
            return Failed(result.error_code, result.error_description)

        return self._store_refreshed(record, result, key)

    def _require_interactive_login(
        self, record: AccountRecord, options: Optional[Dict[str, Any]]
    ) -> RefreshOutcome:
        """Hand the account to the login flow; the stale secret stays in place."""
        request = LoginRequest(
            account_name=record.account_name,
            account_type=record.account_type,
            login_server_uri=record.login_server_uri,
            client_id=record.client_id,
            options=dict(options or {}),
        )

        logger.info(f"Refresh token for {record.account_name} is invalid, starting login flow")
        try:
            handle = self.login_trigger.trigger(request)
        except LoginFlowError as e:
            logger.error(f"Could not start login flow for {record.account_name}: {e}")
            return Failed(ERROR_LOGIN_FLOW_UNAVAILABLE, str(e))

        return InteractiveLoginRequired(login_request=request, handle=handle)

    def _store_refreshed(
        self, record: AccountRecord, result: TokenExchangeSuccess, key: KeyMaterial
    ) -> RefreshOutcome:
        """Persist the instance URL (if changed) and the encrypted access token."""
        account = record.account_name

        try:
            encrypted_token = self.codec.encrypt(result.access_token, key)
        except EncryptionError as e:
            logger.error(f"Could not encrypt new access token for {account}: {e}")
            return Failed(ERROR_ENCRYPTION_FAILED, str(e))

        instance_uri = record.instance_server_uri
        try:
            # Org migrated to a new instance, or a custom domain was turned on
            if (instance_uri or "").lower() != result.instance_server_uri.lower():
                logger.info(
                    f"Instance URL for {account} changed from {instance_uri} "
                    f"to {result.instance_server_uri}"
                )
                self.store.set_instance_server_uri(account, result.instance_server_uri)
                instance_uri = result.instance_server_uri

            self.store.set_access_token(account, encrypted_token)
        except AccountStoreError as e:
            logger.error(f"Could not store refreshed token for {account}: {e}")
            return StoreFailure(str(e))

        logger.info(f"Refreshed access token for {account}")
        return Refreshed(
            account_name=account,
            account_type=record.account_type,
            access_token=result.access_token,
            login_server_uri=record.login_server_uri,
            instance_server_uri=instance_uri,
            client_id=record.client_id,
            username=record.username,
            user_id=record.user_id,
            org_id=record.org_id,
        )
