"""Stage 3 — Raw rules: whole-string deletions applied before parsing."""

from __future__ import annotations

from urllib.parse import SplitResult

from clearurls.models import Provider
from clearurls.utils.url_utils import parse_absolute_url


def apply_raw_rules(provider: Provider, url: str) -> str:
    """Delete every match of each raw rule from *url*, in rule order.

    Returns *url* itself (not a copy) when no rule matched.
    """
    result = url
    for pattern in provider.raw_rules:
        rewritten = pattern.sub("", result)
        if rewritten != result:
            result = rewritten
    return result


def rewrite(provider: Provider, url: str) -> SplitResult:
    """Apply the raw rules and parse the outcome as an absolute URL.

    Raises:
        UrlSyntaxError: If the rewritten text is not an absolute URL.  A raw
            rule that breaks the URL aborts the cleaning call.
    """
    return parse_absolute_url(apply_raw_rules(provider, url))
