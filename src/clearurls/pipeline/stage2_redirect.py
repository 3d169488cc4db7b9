"""Stage 2 — Resolve redirect targets embedded in the URL itself.

Nothing is fetched: the target is taken from capture group 1 of the first
matching redirection pattern and percent-decoded until it stops changing.
"""

from __future__ import annotations

from clearurls.exceptions import RedirectionMissingCaptureError
from clearurls.models import Provider
from clearurls.utils.url_utils import percent_decode


def find_redirection(provider: Provider, url: str) -> str | None:
    """Return the raw (still encoded) redirect target in *url*, if any.

    Only the first redirection pattern that matches is consulted.

    Raises:
        RedirectionMissingCaptureError: If that pattern has no group 1, or
            group 1 did not capture anything.
    """
    for pattern in provider.redirections:
        match = pattern.search(url)
        if match is None:
            continue
        target = match.group(1) if pattern.groups >= 1 else None
        if not target:
            raise RedirectionMissingCaptureError(pattern)
        return target
    return None


def repeatedly_urldecode(target: str) -> str:
    """Percent-decode *target* until a pass leaves it unchanged.

    Handles double and triple encoded targets.  A result that does not start
    with ``http`` is assumed to be scheme-less and gets ``http://`` prepended.

    Raises:
        InvalidPercentEncodingError: If a pass yields bytes that are not UTF-8.
    """
    current = target
    while True:
        decoded = percent_decode(current)
        if decoded == current:
            break
        current = decoded
    if current.startswith("http"):
        return current
    return "http://" + current


def resolve(provider: Provider, url: str) -> str | None:
    """Return the decoded redirect target for *url*, or None if no rule applies."""
    target = find_redirection(provider, url)
    if target is None:
        return None
    return repeatedly_urldecode(target)
