"""Absolute URL parsing, canonical serialisation and percent-decoding helpers."""

from __future__ import annotations

import re
from urllib.parse import SplitResult, quote, unquote, unquote_to_bytes, urlsplit, urlunsplit

from clearurls.exceptions import InvalidPercentEncodingError, UrlSyntaxError

# Schemes that must carry a host and get a canonical "/" path.
DEFAULT_PORTS: dict[str, int] = {
    "http": 80,
    "https": 443,
    "ftp": 21,
    "ws": 80,
    "wss": 443,
}
SPECIAL_SCHEMES: frozenset[str] = frozenset(DEFAULT_PORTS)

_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_FORBIDDEN_HOST_CHARS: frozenset[str] = frozenset(" #%/:<>?@[\\]^|")

# Printable ASCII left alone in a path: everything but space, ", #, <, >, ?,
# backtick, { and }.  Controls and non-ASCII are always escaped.
_PATH_SAFE = "!$%&'()*+,-./:;=@[\\]^_|~"
_SINGLE_DOT: frozenset[str] = frozenset({".", "%2e"})
_DOUBLE_DOT: frozenset[str] = frozenset({"..", ".%2e", "%2e.", "%2e%2e"})


def _ascii_host(host: str) -> str:
    """Return *host* in its ASCII (punycode) form."""
    if host.isascii():
        return host
    return host.encode("idna").decode("ascii")


def parse_absolute_url(url: str) -> SplitResult:
    """Split *url*, rejecting anything that is not a usable absolute URL.

    Args:
        url: Candidate URL text.

    Returns:
        The :class:`SplitResult` of *url* (scheme already lowercased).

    Raises:
        UrlSyntaxError: If *url* has no scheme, or a special scheme
            (``http``, ``https``, ``ftp``, ``ws``, ``wss``) is used with a
            missing or malformed host or port.
    """
    if not _SCHEME_RE.match(url):
        raise UrlSyntaxError("relative URL without a base", url)
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise UrlSyntaxError("invalid IPv6 address", url) from exc

    if parts.scheme not in SPECIAL_SCHEMES:
        return parts

    host = parts.hostname
    if not host:
        raise UrlSyntaxError("empty host", url)
    if "[" not in parts.netloc:
        if _FORBIDDEN_HOST_CHARS.intersection(unquote(host)):
            raise UrlSyntaxError("invalid domain character", url)
        try:
            _ascii_host(host)
        except UnicodeError as exc:
            raise UrlSyntaxError("invalid international domain name", url) from exc
    try:
        parts.port
    except ValueError as exc:
        raise UrlSyntaxError("invalid port number", url) from exc
    return parts


def _canonical_netloc(parts: SplitResult) -> str:
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    else:
        host = _ascii_host(host)
    netloc = host
    port = parts.port
    if port is not None and port != DEFAULT_PORTS.get(parts.scheme):
        netloc = f"{netloc}:{port}"
    userinfo, sep, _ = parts.netloc.rpartition("@")
    if sep:
        netloc = f"{userinfo}@{netloc}"
    return netloc


def canonical_path(path: str) -> str:
    """Percent-encode *path* and resolve its ``.`` and ``..`` segments.

    Existing escapes are kept; ``%2e`` counts as a dot.  The result always
    starts with ``/``.
    """
    segments = quote(path, safe=_PATH_SAFE).split("/")
    if segments[0] == "":
        segments = segments[1:]
    output: list[str] = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        lowered = segment.lower()
        if lowered in _DOUBLE_DOT:
            if output:
                output.pop()
            if last:
                output.append("")
        elif lowered in _SINGLE_DOT:
            if last:
                output.append("")
        else:
            output.append(segment)
    return "/" + "/".join(output)


def build_url(parts: SplitResult, query: str | None, fragment: str | None) -> str:
    """Reassemble *parts* with a new *query* and *fragment*.

    ``None`` (or an empty string) omits the component entirely.  URLs with a
    special scheme get an ASCII lowercased host, no default port and a
    normalised path that is at least ``/``.
    """
    netloc = parts.netloc
    path = parts.path
    if parts.scheme in SPECIAL_SCHEMES:
        netloc = _canonical_netloc(parts)
        path = canonical_path(path)
    return urlunsplit((parts.scheme, netloc, path, query or "", fragment or ""))


def percent_decode(text: str) -> str:
    """Decode every ``%XX`` escape in *text* and interpret the result as UTF-8.

    Malformed escapes (``%G1``, a trailing ``%``) are left as they are.

    Raises:
        InvalidPercentEncodingError: If the decoded bytes are not UTF-8.
    """
    raw = unquote_to_bytes(text)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidPercentEncodingError(exc.start, exc.reason) from exc
