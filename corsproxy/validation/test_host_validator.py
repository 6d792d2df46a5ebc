import pytest

from corsproxy.validation import (
    has_valid_tld,
    is_valid_host,
    is_valid_ipv4,
    is_valid_ipv6,
)


class TestIsValidHost:
    @pytest.mark.parametrize(
        "hostname",
        [
            "192.168.1.1",
            "8.8.8.8",
            "::1",
            "[::1]",
            "2001:db8::ff00:42:8329",
            "example.com",
            "api.example.org",
            "sub.domain.co.uk",
            "example.de",
            "EXAMPLE.COM",
            "example.com.",
            "my-service.gov",
        ],
    )
    def test_valid_hosts(self, hostname):
        assert is_valid_host(hostname) is True

    @pytest.mark.parametrize(
        "hostname",
        [
            "",
            None,
            "not_a_host!!",
            "localhost",
            "example.internal",
            "example.museum",
            "256.1.1.1",
            "bad..example.com",
            "-leading.example.com",
            "trailing-.example.com",
            "exa mple.com",
            "example.c0",
        ],
    )
    def test_invalid_hosts(self, hostname):
        assert is_valid_host(hostname) is False


class TestAddressLiterals:
    def test_ipv4_is_not_ipv6(self):
        assert is_valid_ipv4("10.0.0.1")
        assert not is_valid_ipv6("10.0.0.1")

    def test_ipv6_is_not_ipv4(self):
        assert is_valid_ipv6("fe80::1")
        assert not is_valid_ipv4("fe80::1")

    def test_empty_is_neither(self):
        assert not is_valid_ipv4("")
        assert not is_valid_ipv6("")


class TestTld:
    def test_two_letter_country_code_is_accepted(self):
        """Any two-letter label passes, registered or not."""
        assert has_valid_tld("example.zz")

    def test_single_label_is_rejected(self):
        assert not has_valid_tld("com")

    def test_generic_labels(self):
        for tld in ("com", "net", "org", "edu", "gov", "mil"):
            assert has_valid_tld(f"example.{tld}")
