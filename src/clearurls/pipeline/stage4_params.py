"""Stage 4 — Drop tracked query/fragment parameters and re-serialise the URL."""

from __future__ import annotations

import re
from collections.abc import Iterable
from itertools import chain
from urllib.parse import SplitResult, parse_qsl, quote, urlencode

from clearurls.models import Provider
from clearurls.utils.url_utils import SPECIAL_SCHEMES, build_url

Pair = tuple[str, str]

# Printable ASCII left as-is when a lone key is written back without "=".
# Controls, space and non-ASCII are always escaped.
FRAGMENT_SAFE = "!#$%&'()*+,-./:;=?@[\\]^_{|}~"
QUERY_SAFE = "!$%&'()*+,-./:;=?@[\\]^_`{|}~"
SPECIAL_QUERY_SAFE = QUERY_SAFE.replace("'", "")


def parse_pairs(text: str) -> list[Pair]:
    """Split ``a=1&b=2`` style text into ordered, decoded (key, value) pairs.

    Duplicates are kept, empty segments are skipped and a segment without
    ``=`` yields an empty value.
    """
    return parse_qsl(text, keep_blank_values=True, errors="replace")


def is_full_match(pattern: re.Pattern[str], key: str) -> bool:
    """Return True if the leftmost match of *pattern* spans all of *key*."""
    match = pattern.search(key)
    return match is not None and match.start() == 0 and match.end() == len(key)


def active_rules(provider: Provider, strip_referral_marketing: bool) -> Iterable[re.Pattern[str]]:
    """Removal rules, plus the referral-marketing rules when requested."""
    if strip_referral_marketing:
        return chain(provider.rules, provider.referral_marketing)
    return provider.rules


def filter_pairs(pairs: list[Pair], rules: Iterable[re.Pattern[str]]) -> list[Pair]:
    """Drop every pair whose key is fully matched by one of *rules*."""
    for pattern in rules:
        pairs = [(key, value) for key, value in pairs if not is_full_match(pattern, key)]
    return pairs


def serialize_pairs(pairs: list[Pair], bare_safe: str = FRAGMENT_SAFE) -> str | None:
    """Serialise *pairs*, or return None when the component should be omitted.

    A single pair with an empty value is written as the bare key, escaping
    only what *bare_safe* does not allow, so that plain anchors such as
    ``#Key-bindings`` or ``#section[1]`` survive untouched.
    """
    if not pairs:
        return None
    if len(pairs) == 1 and pairs[0][1] == "":
        return quote(pairs[0][0], safe=bare_safe) or None
    return urlencode(pairs)


def clean_params(provider: Provider, parts: SplitResult, strip_referral_marketing: bool) -> str:
    """Remove tracked parameters from the query and fragment of *parts*.

    Returns:
        The canonical absolute URL with the surviving parameters.
    """
    rules = tuple(active_rules(provider, strip_referral_marketing))
    query = filter_pairs(parse_pairs(parts.query), rules)
    fragment = filter_pairs(parse_pairs(parts.fragment), rules)
    query_safe = SPECIAL_QUERY_SAFE if parts.scheme in SPECIAL_SCHEMES else QUERY_SAFE
    return build_url(parts, serialize_pairs(query, query_safe), serialize_pairs(fragment))
