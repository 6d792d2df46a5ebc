import pytest

from corsproxy.errors import BadTarget
from corsproxy.policy import PolicyConfig
from corsproxy.proxy.target_resolver import TargetResolver, normalize_partial_url


@pytest.fixture
def strict(policy):
    return TargetResolver(policy)


@pytest.fixture
def lenient():
    return TargetResolver(PolicyConfig(lenient_urls=True))


class TestStrictResolution:
    def test_absolute_https_url(self, strict):
        target = strict.resolve("https://api.example.com/v1/items?limit=10")

        assert target.scheme == "https"
        assert target.host == "api.example.com"
        assert target.port is None
        assert target.path_and_query == "/v1/items?limit=10"
        assert target.url == "https://api.example.com/v1/items?limit=10"

    def test_explicit_port(self, strict):
        target = strict.resolve("http://10.0.0.5:8080/health")

        assert target.host == "10.0.0.5"
        assert target.port == 8080
        assert target.path_and_query == "/health"

    def test_ipv6_literal(self, strict):
        target = strict.resolve("http://[::1]:3000/")

        assert target.host == "::1"
        assert target.port == 3000

    def test_empty_path_defaults_to_root(self, strict):
        assert strict.resolve("https://example.com").path_and_query == "/"

    def test_surrounding_whitespace_is_ignored(self, strict):
        assert strict.resolve("  https://example.com/x  ").url == "https://example.com/x"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_parameter(self, strict, raw):
        with pytest.raises(BadTarget) as exc_info:
            strict.resolve(raw)

        assert exc_info.value.status_code == 400
        assert "'url'" in exc_info.value.message

    @pytest.mark.parametrize(
        "raw",
        ["example.com/path", "/relative/path", "http:/example.com", "http://", "https://example.com:99999/"],
    )
    def test_unparsable_or_relative(self, strict, raw):
        with pytest.raises(BadTarget) as exc_info:
            strict.resolve(raw)

        assert exc_info.value.message == "Invalid URL format."

    def test_unsupported_scheme(self, strict):
        with pytest.raises(BadTarget) as exc_info:
            strict.resolve("ftp://files.example.com/file.txt")

        assert exc_info.value.message == "Unsupported URL scheme: ftp"

    @pytest.mark.parametrize("host", ["localhost", "intranet.local", "999.1.1.1"])
    def test_invalid_host(self, strict, host):
        with pytest.raises(BadTarget) as exc_info:
            strict.resolve(f"http://{host}/")

        assert exc_info.value.message == f"Invalid host: {host}"

    def test_schemeless_input_is_not_guessed_in_strict_mode(self, strict):
        with pytest.raises(BadTarget):
            strict.resolve("example.com:443/secure")


class TestLenientResolution:
    def test_port_443_implies_https(self, lenient):
        target = lenient.resolve("example.com:443/secure")

        assert target.scheme == "https"
        assert target.url == "https://example.com:443/secure"

    def test_other_ports_imply_http(self, lenient):
        target = lenient.resolve("example.com:8080/plain")

        assert target.scheme == "http"
        assert target.port == 8080

    def test_no_port_implies_http(self, lenient):
        assert lenient.resolve("example.com/path").url == "http://example.com/path"

    def test_protocol_relative(self, lenient):
        assert lenient.resolve("//example.com/a").url == "http://example.com/a"

    def test_absolute_urls_are_untouched(self, lenient):
        assert lenient.resolve("https://example.com/a").url == "https://example.com/a"

    def test_scheme_without_authority_is_rejected(self, lenient):
        with pytest.raises(BadTarget):
            lenient.resolve("http:/example.com")

    def test_host_is_still_validated(self, lenient):
        with pytest.raises(BadTarget) as exc_info:
            lenient.resolve("localhost:8080/")

        assert exc_info.value.message == "Invalid host: localhost"


class TestNormalizePartialUrl:
    def test_keeps_explicit_protocol(self):
        assert normalize_partial_url("https://example.com") == "https://example.com"

    def test_rejects_scheme_missing_slashes(self):
        assert normalize_partial_url("https:example.com") is None

    def test_adds_protocol(self):
        assert normalize_partial_url("example.com:443") == "https://example.com:443"
