import dataclasses
import logging

import pytest

from corsproxy.policy import PolicyConfig


class TestPolicyConfigFromEnv:
    def test_defaults_when_environment_is_empty(self):
        config = PolicyConfig.from_env({})

        assert config.origin_whitelist == frozenset()
        assert config.origin_blacklist == frozenset()
        assert config.max_redirects == 5
        assert config.cors_max_age == 3600
        assert config.allow_unsafe_cert is True
        assert config.proxy_timeout == 30.0
        assert config.lenient_urls is False

    def test_origin_lists_are_split_and_trimmed(self):
        config = PolicyConfig.from_env(
            {
                "CORS_WHITELIST": "https://a.example.com, https://b.example.com,,",
                "CORS_BLACKLIST": "https://evil.example.com",
            }
        )

        assert config.origin_whitelist == frozenset(
            {"https://a.example.com", "https://b.example.com"}
        )
        assert config.origin_blacklist == frozenset({"https://evil.example.com"})

    def test_integer_settings(self):
        config = PolicyConfig.from_env({"MAX_REDIRECTS": "2", "CORS_MAX_AGE": "60"})

        assert config.max_redirects == 2
        assert config.cors_max_age == 60

    def test_zero_redirects_is_allowed(self):
        assert PolicyConfig.from_env({"MAX_REDIRECTS": "0"}).max_redirects == 0

    @pytest.mark.parametrize("raw", ["five", "-1", "1.5"])
    def test_malformed_max_redirects_falls_back_to_default(self, raw, caplog):
        with caplog.at_level(logging.WARNING, logger="uvicorn.error"):
            config = PolicyConfig.from_env({"MAX_REDIRECTS": raw})

        assert config.max_redirects == 5
        assert "MAX_REDIRECTS" in caplog.text

    def test_unsafe_cert_can_be_disabled(self):
        config = PolicyConfig.from_env({"PROXY_ALLOW_UNSAFE_CERT": "false"})

        assert config.allow_unsafe_cert is False

    def test_lenient_urls_and_timeout(self):
        config = PolicyConfig.from_env(
            {"PROXY_LENIENT_URLS": "TRUE", "PROXY_TIMEOUT": "2.5"}
        )

        assert config.lenient_urls is True
        assert config.proxy_timeout == 2.5

    def test_non_positive_timeout_falls_back(self):
        assert PolicyConfig.from_env({"PROXY_TIMEOUT": "0"}).proxy_timeout == 30.0

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("MAX_REDIRECTS", "3")

        assert PolicyConfig.from_env().max_redirects == 3

    def test_config_is_immutable(self):
        config = PolicyConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_redirects = 10
