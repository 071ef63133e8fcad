"""Tests for account metadata stores."""

import json
import os
import stat
import threading

import pytest

from credrefresh.account_store import InMemoryAccountStore, JsonFileAccountStore
from credrefresh.exceptions import AccountNotFoundError, AccountStoreError


class TestInMemoryAccountStore:
    """Tests for InMemoryAccountStore class."""

    def test_get_returns_copy(self, record):
        """Mutating a returned record does not change the store."""
        store = InMemoryAccountStore([record])

        loaded = store.get(record.account_name)
        loaded.instance_server_uri = "https://elsewhere.example.com"

        assert store.get(record.account_name).instance_server_uri == "https://na1.example.com"

    def test_get_unknown_account(self):
        store = InMemoryAccountStore()

        with pytest.raises(AccountNotFoundError, match="No account named"):
            store.get("nobody")

    def test_writes_update_fields_and_count(self, record):
        store = InMemoryAccountStore([record])

        store.set_instance_server_uri(record.account_name, "https://na2.example.com")
        store.set_access_token(record.account_name, "encrypted_token")

        loaded = store.get(record.account_name)
        assert loaded.instance_server_uri == "https://na2.example.com"
        assert loaded.access_token == "encrypted_token"
        assert store.write_count == 2

    def test_write_unknown_account(self):
        store = InMemoryAccountStore()

        with pytest.raises(AccountNotFoundError):
            store.set_access_token("nobody", "token")

    def test_add_remove_list(self, record):
        store = InMemoryAccountStore()
        store.add(record)

        assert store.list_accounts() == [record.account_name]
        assert store.remove(record.account_name) is True
        assert store.remove(record.account_name) is False
        assert store.list_accounts() == []


class TestJsonFileAccountStore:
    """Tests for JsonFileAccountStore class."""

    @pytest.fixture
    def store_file(self, tmp_path):
        return str(tmp_path / "nested" / "accounts.json")

    @pytest.fixture
    def store(self, store_file):
        return JsonFileAccountStore(store_file, default_account_type="com.salesforce")

    def test_creates_parent_directory(self, store, store_file):
        assert os.path.isdir(os.path.dirname(store_file))

    def test_empty_store(self, store):
        """A missing file is an empty store."""
        assert store.list_accounts() == []
        with pytest.raises(AccountNotFoundError):
            store.get("jane@example.com")

    def test_add_and_get(self, store, record):
        store.add(record)

        assert store.get(record.account_name) == record

    def test_file_layout(self, store, store_file, record):
        """Records are stored under 'accounts' with the account key names."""
        store.add(record)

        with open(store_file) as f:
            document = json.load(f)

        data = document["accounts"][record.account_name]
        assert data["loginUrl"] == record.login_server_uri
        assert data["password"] == record.encrypted_refresh_secret

    def test_secure_permissions(self, store, store_file, record):
        """Store file is user read/write only."""
        store.add(record)

        mode = stat.S_IMODE(os.stat(store_file).st_mode)
        assert mode == 0o600

    def test_writes_update_only_their_field(self, store, record):
        store.add(record)

        store.set_instance_server_uri(record.account_name, "https://na2.example.com")
        store.set_access_token(record.account_name, "encrypted_token")

        loaded = store.get(record.account_name)
        assert loaded.instance_server_uri == "https://na2.example.com"
        assert loaded.access_token == "encrypted_token"
        assert loaded.encrypted_refresh_secret == record.encrypted_refresh_secret

    def test_write_unknown_account(self, store):
        with pytest.raises(AccountNotFoundError):
            store.set_instance_server_uri("nobody", "https://na2.example.com")

    def test_remove(self, store, record):
        store.add(record)

        assert store.remove(record.account_name) is True
        assert store.remove(record.account_name) is False
        assert store.list_accounts() == []

    def test_corrupt_file_raises_store_error(self, store, store_file):
        """A corrupt file is a fatal store error, not an empty store."""
        with open(store_file, "w") as f:
            f.write("{not json")

        with pytest.raises(AccountStoreError, match="Corrupt account store"):
            store.get("jane@example.com")

    def test_missing_accounts_mapping(self, store, store_file):
        with open(store_file, "w") as f:
            json.dump({"version": 1}, f)

        with pytest.raises(AccountStoreError, match="missing 'accounts'"):
            store.list_accounts()

    def test_incomplete_record(self, store, store_file):
        with open(store_file, "w") as f:
            json.dump({"accounts": {"jane": {"username": "jane"}}}, f)

        with pytest.raises(AccountStoreError, match="Incomplete record"):
            store.get("jane")

    def test_default_account_type_applied(self, store, store_file, record):
        data = record.to_dict()
        del data["accountType"]
        with open(store_file, "w") as f:
            json.dump({"accounts": {"jane": data}}, f)

        assert store.get("jane").account_type == "com.salesforce"

    def test_parallel_writes_to_different_accounts(self, store, record):
        """Concurrent updates of different accounts are all kept."""
        names = [f"user{i}@example.com" for i in range(8)]
        for name in names:
            record.account_name = name
            store.add(record)

        threads = [
            threading.Thread(
                target=store.set_access_token, args=(name, f"token-{name}")
            )
            for name in names
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for name in names:
            assert store.get(name).access_token == f"token-{name}"

    def test_no_temp_files_left_behind(self, store, store_file, record):
        store.add(record)
        store.set_access_token(record.account_name, "token")

        assert os.listdir(os.path.dirname(store_file)) == ["accounts.json"]
