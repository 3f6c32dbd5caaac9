"""
Unit tests for nspass.client.config - Runtime-reconfigurable API configuration.
"""

import pytest

from nspass.client.config import SERVICE_TIMEOUTS, ApiConfig
from nspass.exceptions import ConfigurationError
from nspass.settings import NspassSettings


class TestApiConfig:
    def test_trailing_slash_stripped(self):
        assert ApiConfig(base_url="http://panel.test/").base_url == "http://panel.test"

    def test_empty_base_url_rejected(self):
        with pytest.raises(ConfigurationError):
            ApiConfig(base_url="")

    @pytest.mark.parametrize("timeout", [0, -1.0])
    def test_non_positive_timeout_rejected(self, timeout):
        with pytest.raises(ConfigurationError):
            ApiConfig(base_url="http://panel.test", timeout_seconds=timeout)

    def test_from_settings(self):
        settings = NspassSettings(_env_file=None, api_base_url="https://a.example", request_timeout_seconds=4)
        config = ApiConfig.from_settings(settings)
        assert config.base_url == "https://a.example"
        assert config.timeout_seconds == 4
        assert config.auth_endpoints == tuple(settings.auth_endpoints)

    def test_from_default_settings(self):
        assert ApiConfig.from_settings().base_url == "http://localhost:8080"


class TestUpdateBaseUrl:
    def test_last_write_wins(self):
        config = ApiConfig(base_url="http://one.test")
        config.update_base_url("http://two.test/")
        config.update_base_url("http://three.test")
        assert config.base_url == "http://three.test"

    @pytest.mark.parametrize("value", ["", "   ", "/"])
    def test_rejects_empty(self, value):
        config = ApiConfig(base_url="http://one.test")
        with pytest.raises(ConfigurationError):
            config.update_base_url(value)
        assert config.base_url == "http://one.test"


class TestServiceTimeouts:
    def test_known_service(self):
        config = ApiConfig(base_url="http://panel.test")
        assert config.timeout_for("auth") == SERVICE_TIMEOUTS["auth"]

    def test_unknown_service_uses_default(self):
        config = ApiConfig(base_url="http://panel.test", timeout_seconds=2.0)
        assert config.timeout_for("routes") == 2.0
        assert config.timeout_for(None) == 2.0


class TestAuthEndpoints:
    def test_prefix_match(self):
        config = ApiConfig(base_url="http://panel.test", auth_endpoints=("/v1/auth/login",))
        assert config.is_auth_endpoint("/v1/auth/login")
        assert config.is_auth_endpoint("v1/auth/login")
        assert not config.is_auth_endpoint("/v1/routes")
