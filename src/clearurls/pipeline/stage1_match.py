"""Stage 1 — Decide whether a provider governs a URL."""

from __future__ import annotations

from clearurls.models import Provider

_JAVASCRIPT_VOID = "javascript:void(0)"


def matches(provider: Provider, url: str) -> bool:
    """Return True if *provider* should be applied to *url*.

    The provider's ``url_pattern`` must match somewhere in *url* and none of
    its exceptions may match.  ``javascript:void(0)`` is never touched.
    """
    if not provider.url_pattern.search(url) or url == _JAVASCRIPT_VOID:
        return False
    return not provider.is_excepted(url)
