"""Cleaning driver — one left-to-right pass over the rule store."""

from __future__ import annotations

from clearurls.models import Provider
from clearurls.pipeline import stage1_match, stage2_redirect, stage3_raw, stage4_params
from clearurls.rules import RuleStore


def apply_provider(provider: Provider, url: str, strip_referral_marketing: bool) -> str:
    """Run one matching *provider* over *url*.

    A redirection, when one applies, replaces the whole URL and skips the
    raw rules and parameter filtering.

    Raises:
        RedirectionMissingCaptureError: Redirection pattern without group 1.
        InvalidPercentEncodingError: Redirect target decodes to non-UTF-8.
        UrlSyntaxError: The (rewritten) URL is not an absolute URL.
    """
    redirected = stage2_redirect.resolve(provider, url)
    if redirected is not None:
        return redirected
    parts = stage3_raw.rewrite(provider, url)
    return stage4_params.clean_params(provider, parts, strip_referral_marketing)


def clean(rules: RuleStore, url: str, strip_referral_marketing: bool = False) -> str:
    """Clean *url* with every matching provider of *rules*, in order.

    This is a single bounded pass: a provider is consulted once, against the
    URL as left by the providers before it, and never revisited.  ``data:``
    URLs are returned as they are.

    Args:
        rules:                    Loaded :class:`RuleStore`.
        url:                      URL to clean.
        strip_referral_marketing: Also drop referral-marketing parameters.

    Returns:
        The cleaned URL.  When nothing changed this is *url* itself.

    Raises:
        ClearUrlsError: The first error hit by any provider; no partially
            cleaned URL is returned.
    """
    if url.startswith("data:"):
        return url

    current = url
    for provider in rules.providers:
        if not stage1_match.matches(provider, current):
            continue
        cleaned = apply_provider(provider, current, strip_referral_marketing)
        if cleaned != current:
            current = cleaned
    return current
