"""Download the upstream ClearURLs rule list over HTTP."""

from __future__ import annotations

import hashlib
from pathlib import Path

import httpx
import structlog

from clearurls.exceptions import ConfigReadError
from clearurls.rules import RuleStore, load_rules_bytes

logger = structlog.get_logger(__name__)

DEFAULT_RULES_URL = "https://rules2.clearurls.xyz/data.minify.json"
# Hex SHA-256 of the rules file, published next to it.
DEFAULT_HASH_URL = "https://rules2.clearurls.xyz/rules.minify.hash"

_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=5.0, pool=5.0)


def _get(client: httpx.Client, url: str) -> bytes:
    try:
        resp = client.get(url)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise ConfigReadError(f"{url}: {exc}") from exc
    return resp.content


def fetch_rules_bytes(
    rules_url: str = DEFAULT_RULES_URL,
    hash_url: str | None = DEFAULT_HASH_URL,
    *,
    client: httpx.Client | None = None,
) -> bytes:
    """Download the raw rules document, checking it against its published hash.

    Args:
        rules_url: Location of the JSON rules document.
        hash_url:  Location of its hex SHA-256 digest; ``None`` skips the check.
        client:    Optional pre-configured client (tests, proxies).

    Raises:
        ConfigReadError: On network or HTTP errors, or a checksum mismatch.
    """
    http = client or httpx.Client(timeout=_TIMEOUT, follow_redirects=True)
    try:
        data = _get(http, rules_url)
        if hash_url is not None:
            expected = _get(http, hash_url).decode("ascii", errors="replace").strip().lower()
            actual = hashlib.sha256(data).hexdigest()
            if actual != expected:
                raise ConfigReadError(f"checksum mismatch for {rules_url}: expected {expected}, got {actual}")
    finally:
        if client is None:
            http.close()

    logger.info("rules.fetched", url=rules_url, size=len(data), verified=hash_url is not None)
    return data


def fetch_rules(
    rules_url: str = DEFAULT_RULES_URL,
    hash_url: str | None = DEFAULT_HASH_URL,
    *,
    client: httpx.Client | None = None,
) -> RuleStore:
    """Download and parse the rules; nothing is written to disk."""
    return load_rules_bytes(fetch_rules_bytes(rules_url, hash_url, client=client))


def download_rules(
    path: str | Path,
    rules_url: str = DEFAULT_RULES_URL,
    hash_url: str | None = DEFAULT_HASH_URL,
    *,
    client: httpx.Client | None = None,
) -> RuleStore:
    """Download the rules and save them to *path*.

    The file is only replaced once the new document has parsed, so a bad
    download never clobbers a working rules file.

    Raises:
        ConfigReadError: If the download or the write fails.
        ConfigSyntaxError: If the downloaded document is not valid rules.
    """
    data = fetch_rules_bytes(rules_url, hash_url, client=client)
    store = load_rules_bytes(data)

    target = Path(path)
    partial = target.with_name(target.name + ".part")
    try:
        partial.write_bytes(data)
        partial.replace(target)
    except OSError as exc:
        raise ConfigReadError(str(exc)) from exc

    logger.info("rules.saved", path=str(target), providers=len(store.providers))
    return store
