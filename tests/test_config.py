"""Tests for refresh configuration."""

import os
from unittest import mock

import pytest

from credrefresh.config import RefreshConfig
from credrefresh.exceptions import ConfigurationError


class TestRefreshConfig:
    """Tests for RefreshConfig class."""

    def test_defaults(self):
        """Default configuration targets the standard OAuth2 paths."""
        config = RefreshConfig()

        assert config.token_path == "/services/oauth2/token"
        assert config.authorize_path == "/services/oauth2/authorize"
        assert config.request_timeout == 30
        assert config.invalid_refresh_error_code == "invalid_grant"

    def test_token_url_strips_trailing_slash(self):
        """token_url joins login server and path with a single slash."""
        config = RefreshConfig()

        assert (
            config.token_url("https://login.example.com/")
            == "https://login.example.com/services/oauth2/token"
        )
        assert (
            config.authorize_url("https://login.example.com")
            == "https://login.example.com/services/oauth2/authorize"
        )

    def test_empty_token_path_posts_to_login_server(self):
        """An empty token_path sends the grant to the login server URI itself."""
        config = RefreshConfig(token_path="")

        assert config.token_url("https://idp.example.com/token") == "https://idp.example.com/token"

    def test_relative_path_rejected(self):
        """Paths must start with a slash."""
        with pytest.raises(ConfigurationError, match="token_path must start with"):
            RefreshConfig(token_path="services/oauth2/token")

    def test_non_positive_timeout_rejected(self):
        """request_timeout must be positive."""
        with pytest.raises(ConfigurationError, match="request_timeout must be positive"):
            RefreshConfig(request_timeout=0)

    def test_empty_invalid_refresh_error_code_rejected(self):
        with pytest.raises(ConfigurationError, match="cannot be empty"):
            RefreshConfig(invalid_refresh_error_code="")

    def test_account_store_path_expands_home(self):
        """account_store_path expands ~."""
        config = RefreshConfig(account_store_file="~/accounts.json")

        assert config.account_store_path == os.path.expanduser("~/accounts.json")

    @mock.patch.dict(
        "os.environ",
        {
            "CREDREFRESH_TOKEN_PATH": "/oauth/token",
            "CREDREFRESH_REQUEST_TIMEOUT": "5",
            "CREDREFRESH_INVALID_REFRESH_ERROR": "invalid_token",
            "CREDREFRESH_ACCOUNT_STORE": "/tmp/accounts.json",
        },
    )
    def test_from_env(self):
        """from_env reads overrides from the environment."""
        config = RefreshConfig.from_env()

        assert config.token_path == "/oauth/token"
        assert config.request_timeout == 5.0
        assert config.invalid_refresh_error_code == "invalid_token"
        assert config.account_store_file == "/tmp/accounts.json"
        assert config.authorize_path == "/services/oauth2/authorize"

    @mock.patch.dict("os.environ", {"CREDREFRESH_REQUEST_TIMEOUT": "soon"})
    def test_from_env_bad_timeout(self):
        """from_env rejects a non-numeric timeout."""
        with pytest.raises(ConfigurationError, match="must be a number"):
            RefreshConfig.from_env()
