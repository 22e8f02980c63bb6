"""Tests for client configuration."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from iamds_client.config import BASE_URLS, IDENTITY_URLS, Configuration, Environment


class TestConfiguration:
    """Tests for the Configuration model."""

    def test_defaults_to_sandbox(self):
        """Test the default environment preset."""
        config = Configuration()
        assert config.environment == Environment.sandbox
        assert config.base_url == "https://api.sbx.avalara.com"
        assert config.identity_url == IDENTITY_URLS[Environment.sandbox]
        assert config.timeout == 30.0

    @pytest.mark.parametrize("environment", [Environment.production, Environment.qa])
    def test_environment_presets(self, environment):
        """Test that each environment resolves its URLs."""
        config = Configuration(environment=environment)
        assert config.base_url == BASE_URLS[environment]
        assert config.identity_url == IDENTITY_URLS[environment]

    def test_environment_from_string(self):
        """Test string environment values."""
        assert Configuration(environment="production").base_url == "https://api.avalara.com"

    def test_other_requires_base_url(self):
        """Test that a custom environment needs an explicit URL."""
        with pytest.raises(PydanticValidationError):
            Configuration(environment="other")

    def test_base_url_override(self):
        """Test that trailing slashes are stripped from base_url."""
        config = Configuration(environment="other", base_url="https://iamds.internal/")
        assert config.base_url == "https://iamds.internal"
        assert config.identity_url is None

    def test_timeout_must_be_positive(self):
        """Test timeout validation."""
        with pytest.raises(PydanticValidationError):
            Configuration(timeout=0)

    def test_unknown_fields_rejected(self):
        """Test that typos in settings are caught."""
        with pytest.raises(PydanticValidationError):
            Configuration(base_uri="https://example.com")

    def test_client_header(self):
        """Test the identification header value."""
        config = Configuration(app_name="billing", app_version="2.1", machine_name="host-7")
        assert config.client_header("1.0.0") == "billing; 2.1; PythonRestClient; 1.0.0; host-7"

    def test_from_env(self, monkeypatch):
        """Test reading settings from environment variables."""
        monkeypatch.setenv("IAMDS_ENVIRONMENT", "production")
        monkeypatch.setenv("IAMDS_CLIENT_ID", "client-1")
        monkeypatch.setenv("IAMDS_CLIENT_SECRET", "secret-1")
        monkeypatch.setenv("IAMDS_TIMEOUT", "12.5")

        config = Configuration.from_env()

        assert config.environment == Environment.production
        assert config.client_id == "client-1"
        assert config.client_secret == "secret-1"
        assert config.timeout == 12.5

    def test_from_env_overrides_win(self, monkeypatch):
        """Test that keyword overrides beat the environment."""
        monkeypatch.setenv("ACME_ACCESS_TOKEN", "from-env")

        config = Configuration.from_env(prefix="ACME_", access_token="explicit")

        assert config.access_token == "explicit"
