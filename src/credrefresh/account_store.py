"""
Account metadata stores.

AccountMetadataStore is the interface RefreshCoordinator reads account
records through and writes refreshed state back to. Two writes exist:
the instance server URI and the encrypted access token. They are
independent, idempotent and last-writer-wins; no transaction spans both.

Implementations:
- InMemoryAccountStore: dict-backed, for embedding and tests
- JsonFileAccountStore: single JSON file with secure permissions
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import AccountNotFoundError, AccountStoreError
from .models import KEY_AUTH_TOKEN, KEY_INSTANCE_URL, AccountRecord

logger = logging.getLogger(__name__)


class AccountMetadataStore(ABC):
    """Key/value access to persisted account records, keyed by account name."""

    @abstractmethod
    def get(self, account: str) -> AccountRecord:
        """
        Load an account record.

        Args:
            account: Account name

        Returns:
            The stored record, including the encrypted refresh secret

        Raises:
            AccountNotFoundError: If no record exists for the account
            AccountStoreError: If the store cannot be read
        """

    @abstractmethod
    def set_instance_server_uri(self, account: str, uri: str) -> None:
        """Replace the stored instance server URI of an account."""

    @abstractmethod
    def set_access_token(self, account: str, encrypted_token: str) -> None:
        """Replace the stored (encrypted) access token of an account."""

    @abstractmethod
    def add(self, record: AccountRecord) -> None:
        """Insert or replace a whole record (enrollment and full re-login)."""

    @abstractmethod
    def remove(self, account: str) -> bool:
        """
        Delete an account record.

        Returns:
            True if the record was deleted, False if it did not exist
        """

    @abstractmethod
    def list_accounts(self) -> List[str]:
        """Names of all stored accounts."""


class InMemoryAccountStore(AccountMetadataStore):
    """
    Dict-backed store.

    Records are copied on the way in and out, so callers never hold a
    reference to stored state. `write_count` counts the two refresh writes.
    """

    def __init__(self, records: Optional[List[AccountRecord]] = None):
        self._records: Dict[str, AccountRecord] = {}
        self._lock = threading.Lock()
        self.write_count = 0
        for record in records or []:
            self.add(record)

    def get(self, account: str) -> AccountRecord:
        with self._lock:
            record = self._records.get(account)
            if record is None:
                raise AccountNotFoundError(f"No account named {account!r}")
            return replace(record)

    def set_instance_server_uri(self, account: str, uri: str) -> None:
        self._update(account, instance_server_uri=uri)

    def set_access_token(self, account: str, encrypted_token: str) -> None:
        self._update(account, access_token=encrypted_token)

    def _update(self, account: str, **changes: str) -> None:
        with self._lock:
            record = self._records.get(account)
            if record is None:
                raise AccountNotFoundError(f"No account named {account!r}")
            self._records[account] = replace(record, **changes)
            self.write_count += 1

    def add(self, record: AccountRecord) -> None:
        with self._lock:
            self._records[record.account_name] = replace(record)

    def remove(self, account: str) -> bool:
        with self._lock:
            return self._records.pop(account, None) is not None

    def list_accounts(self) -> List[str]:
        with self._lock:
            return sorted(self._records)


class JsonFileAccountStore(AccountMetadataStore):
    """
    File-based store: one JSON document holding every account.

    Layout: ``{"accounts": {"<name>": {"loginUrl": ..., "password": ...}}}``.
    Secrets in the file are already encrypted by SecretCodec; the file is
    still written with user-only permissions (600).

    Writes are read-modify-write under a process-local lock and replace the
    file atomically, so concurrent refreshes of different accounts do not
    lose each other's updates.
    """

    def __init__(self, store_file: str, default_account_type: str = ""):
        """
        Initialize file store.

        Args:
            store_file: Path of the JSON file (created on first write)
            default_account_type: Account type for records stored without one
        """
        self.store_file = Path(store_file).expanduser()
        self.default_account_type = default_account_type
        self._lock = threading.Lock()
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Create parent directory if needed."""
        try:
            self.store_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AccountStoreError(
                f"Cannot create account store directory {self.store_file.parent}: {e}"
            ) from e

    def _read_document(self) -> dict:
        """
        Read the whole store document.

        Returns:
            Parsed document (an empty one if the file does not exist yet)

        Raises:
            AccountStoreError: If the file is unreadable or corrupt
        """
        if not self.store_file.exists():
            logger.debug(f"No account store file at {self.store_file}")
            return {"accounts": {}}

        try:
            with open(self.store_file, "r") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt account store at {self.store_file}: {e}")
            raise AccountStoreError(f"Corrupt account store {self.store_file}: {e}") from e
        except OSError as e:
            logger.error(f"Could not read account store: {e}")
            raise AccountStoreError(f"Could not read account store: {e}") from e

        if not isinstance(document, dict) or not isinstance(document.get("accounts"), dict):
            raise AccountStoreError(
                f"Corrupt account store {self.store_file}: missing 'accounts' mapping"
            )

        return document

    def _write_document(self, document: dict) -> None:
        """Write the document to a temp file with permissions 600, then swap it in."""
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                dir=self.store_file.parent,
                prefix=f".{self.store_file.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                json.dump(document, f, indent=2)

            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.store_file)
            logger.debug(f"Account store written to {self.store_file}")
        except OSError as e:
            logger.error(f"Failed to write account store: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise AccountStoreError(f"Failed to write account store: {e}") from e

    def get(self, account: str) -> AccountRecord:
        with self._lock:
            document = self._read_document()

        data = document["accounts"].get(account)
        if data is None:
            raise AccountNotFoundError(f"No account named {account!r}")

        try:
            return AccountRecord.from_dict(account, data, self.default_account_type)
        except (KeyError, TypeError, AttributeError) as e:
            logger.error(f"Incomplete record for {account} in {self.store_file}: {e}")
            raise AccountStoreError(f"Incomplete record for {account!r}: {e}") from e

    def set_instance_server_uri(self, account: str, uri: str) -> None:
        self._update(account, KEY_INSTANCE_URL, uri)

    def set_access_token(self, account: str, encrypted_token: str) -> None:
        self._update(account, KEY_AUTH_TOKEN, encrypted_token)

    def _update(self, account: str, key: str, value: str) -> None:
        with self._lock:
            document = self._read_document()
            data = document["accounts"].get(account)
            if data is None:
                raise AccountNotFoundError(f"No account named {account!r}")
            data[key] = value
            self._write_document(document)

    def add(self, record: AccountRecord) -> None:
        with self._lock:
            document = self._read_document()
            document["accounts"][record.account_name] = record.to_dict()
            self._write_document(document)
        logger.info(f"Account {record.account_name} saved to {self.store_file}")

    def remove(self, account: str) -> bool:
        with self._lock:
            document = self._read_document()
            if document["accounts"].pop(account, None) is None:
                logger.debug(f"No account {account} to remove")
                return False
            self._write_document(document)
        logger.info(f"Account {account} removed from {self.store_file}")
        return True

    def list_accounts(self) -> List[str]:
        with self._lock:
            document = self._read_document()
        return sorted(document["accounts"])
