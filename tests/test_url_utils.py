"""Tests for URL parsing and serialisation helpers."""

from __future__ import annotations

import pytest

from clearurls.exceptions import InvalidPercentEncodingError, UrlSyntaxError
from clearurls.utils.url_utils import build_url, canonical_path, parse_absolute_url, percent_decode


class TestParseAbsoluteUrl:
    """Tests for absolute URL validation."""

    @pytest.mark.parametrize(
        ("url", "reason"),
        [
            ("//example.com", "relative URL without a base"),
            ("example.com", "relative URL without a base"),
            ("/path?q=1", "relative URL without a base"),
            ("", "relative URL without a base"),
            ("https://", "empty host"),
            ("ftp://example.%com", "invalid domain character"),
            ("http://exa mple.com/", "invalid domain character"),
            ("http://example.com:99999/", "invalid port number"),
            ("http://example.com:abc/", "invalid port number"),
            ("http://[::1/", "invalid IPv6 address"),
            ("http://b\u00fccher..de/", "invalid international domain name"),
        ],
    )
    def test_rejected(self, url: str, reason: str) -> None:
        with pytest.raises(UrlSyntaxError) as exc_info:
            parse_absolute_url(url)
        assert exc_info.value.reason == reason
        assert exc_info.value.url == url

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com",
            "http://[::1]:8080/",
            "mailto:someone@example.com",
            "javascript:void(0)",
            "ftp://user:pw@example.com/file",
        ],
    )
    def test_accepted(self, url: str) -> None:
        assert parse_absolute_url(url).scheme


class TestBuildUrl:
    """Tests for canonical reassembly."""

    def _rebuild(self, url: str, query: str | None = None, fragment: str | None = None) -> str:
        return build_url(parse_absolute_url(url), query, fragment)

    def test_empty_path_becomes_slash(self) -> None:
        assert self._rebuild("https://example.com") == "https://example.com/"

    def test_host_lowercased_default_port_dropped(self) -> None:
        assert self._rebuild("http://Example.COM:80/Path") == "http://example.com/Path"

    def test_other_port_and_userinfo_kept(self) -> None:
        assert self._rebuild("http://user:pw@Example.com:8080/x") == "http://user:pw@example.com:8080/x"

    def test_ipv6_host(self) -> None:
        assert self._rebuild("http://[::1]:8080") == "http://[::1]:8080/"

    def test_query_and_fragment(self) -> None:
        assert self._rebuild("https://example.com/a?x=1#y", "b=2", "top") == "https://example.com/a?b=2#top"

    def test_none_omits_components(self) -> None:
        assert self._rebuild("https://example.com/a?x=1#y") == "https://example.com/a"

    def test_non_special_scheme_untouched(self) -> None:
        assert self._rebuild("mailto:Someone@Example.com") == "mailto:Someone@Example.com"

    def test_international_host(self) -> None:
        assert self._rebuild("https://B\u00dcCHER.de/x") == "https://xn--bcher-kva.de/x"

    def test_path_normalised(self) -> None:
        assert self._rebuild("https://example.com/a b/../c", "q=1") == "https://example.com/c?q=1"


class TestCanonicalPath:
    """Tests for path escaping and dot-segment removal."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("", "/"),
            ("/", "/"),
            ("/a/b/", "/a/b/"),
            ("/a/./b", "/a/b"),
            ("/a/b/..", "/a/"),
            ("/a/b/.", "/a/b/"),
            ("/../a", "/a"),
            ("/a/%2E%2e/b", "/b"),
            ("/a b", "/a%20b"),
            ("/caf\u00e9", "/caf%C3%A9"),
            ("/{x}/\"q\"/<y>/`", "/%7Bx%7D/%22q%22/%3Cy%3E/%60"),
            ("/already%20encoded/100%", "/already%20encoded/100%"),
            ("/keep/[]|^;=@!$&'()*+,~", "/keep/[]|^;=@!$&'()*+,~"),
        ],
    )
    def test_normalised(self, path: str, expected: str) -> None:
        assert canonical_path(path) == expected


class TestPercentDecode:
    """Tests for UTF-8 percent-decoding."""

    def test_decodes(self) -> None:
        assert percent_decode("a%20b%2Fc") == "a b/c"

    def test_plus_is_not_space(self) -> None:
        assert percent_decode("a+b") == "a+b"

    def test_multibyte(self) -> None:
        assert percent_decode("caf%C3%A9") == "café"

    def test_malformed_escapes_kept(self) -> None:
        assert percent_decode("100%") == "100%"
        assert percent_decode("%G1") == "%G1"

    def test_invalid_utf8(self) -> None:
        with pytest.raises(InvalidPercentEncodingError) as exc_info:
            percent_decode("ok%FFrest")
        assert exc_info.value.index == 2
