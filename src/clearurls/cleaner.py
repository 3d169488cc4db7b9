"""Public entry point: :class:`UrlCleaner`."""

from __future__ import annotations

from pathlib import Path
from typing import IO

from bs4 import BeautifulSoup, Tag

from clearurls.config import Settings
from clearurls.pipeline import orchestrator
from clearurls.rules import (
    RuleStore,
    load_embedded_rules,
    load_rules_file,
    load_rules_path,
    load_rules_str,
)
from clearurls.scanners import html, text
from clearurls.services.rules_fetcher import DEFAULT_HASH_URL, DEFAULT_RULES_URL, fetch_rules


class UrlCleaner:
    """Removes tracking parameters from URLs using ClearURLs rules.

    Loading rules is comparatively expensive; build one cleaner per
    application and share it.  A cleaner never changes after construction,
    so it is safe to use from any number of threads::

        cleaner = UrlCleaner.from_embedded_rules()
        cleaner.clear_url("https://example.com/test?utm_source=abc")
        # 'https://example.com/test'

    Args:
        rules:                    Loaded :class:`RuleStore`.
        strip_referral_marketing: Also drop referral-marketing parameters.
    """

    __slots__ = ("_rules", "_strip_referral_marketing")

    def __init__(self, rules: RuleStore, strip_referral_marketing: bool = False) -> None:
        self._rules = rules
        self._strip_referral_marketing = strip_referral_marketing

    # ------------------------------------------------------------------ #
    # Construction                                                         #
    # ------------------------------------------------------------------ #

    @classmethod
    def from_rules_str(cls, rules: str | bytes) -> "UrlCleaner":
        """Build a cleaner from a JSON rules document held in memory."""
        return cls(load_rules_str(rules))

    @classmethod
    def from_rules_file(cls, stream: IO[bytes] | IO[str]) -> "UrlCleaner":
        """Build a cleaner from an open stream, most often a file."""
        return cls(load_rules_file(stream))

    @classmethod
    def from_rules_path(cls, path: str | Path) -> "UrlCleaner":
        """Build a cleaner from the rules file at *path*."""
        return cls(load_rules_path(path))

    @classmethod
    def from_rules_url(
        cls,
        rules_url: str = DEFAULT_RULES_URL,
        hash_url: str | None = DEFAULT_HASH_URL,
    ) -> "UrlCleaner":
        """Build a cleaner from rules downloaded over HTTP.

        With the defaults this is the current upstream ClearURLs list,
        checked against its published SHA-256.
        """
        return cls(fetch_rules(rules_url, hash_url))

    @classmethod
    def from_embedded_rules(cls) -> "UrlCleaner":
        """Build a cleaner from the rule corpus bundled with the package."""
        return cls(load_embedded_rules())

    @classmethod
    def from_settings(cls, settings: Settings) -> "UrlCleaner":
        """Build a cleaner as described by *settings*.

        A local ``rules_path`` wins over ``rules_url``; with neither set the
        bundled rules are used.
        """
        if settings.rules_path is not None:
            rules = load_rules_path(settings.rules_path)
        elif settings.rules_url is not None:
            rules = fetch_rules(settings.rules_url, settings.rules_hash_url)
        else:
            rules = load_embedded_rules()
        return cls(rules, settings.strip_referral_marketing)

    def strip_referral_marketing(self, value: bool) -> "UrlCleaner":
        """Return a cleaner that does (or does not) strip referral codes.

        Referral parameters are a form of tracking but are sometimes useful,
        so they are kept by default.  The rules are shared, not copied.
        """
        return UrlCleaner(self._rules, value)

    @property
    def rules(self) -> RuleStore:
        return self._rules

    @property
    def strips_referral_marketing(self) -> bool:
        return self._strip_referral_marketing

    # ------------------------------------------------------------------ #
    # Cleaning                                                             #
    # ------------------------------------------------------------------ #

    def clear_url(self, url: str) -> str:
        """Clean a single URL.

        Tracking parameters are removed and redirect wrappers (the target
        being carried in a query parameter or path) are unwrapped.

        Returns:
            The cleaned URL; *url* itself when nothing changed.

        Raises:
            ClearUrlsError: See :mod:`clearurls.exceptions`.
        """
        return orchestrator.clean(self._rules, url, self._strip_referral_marketing)

    def clear_text(self, content: str) -> str:
        """Clean every URL found in free text (plain prose or Markdown).

        Raises:
            BatchCleaningError: Carries the per-URL errors, if any.
        """
        return text.clean_text(content, self.clear_url)

    def clear_html(self, markup: str) -> str:
        """Clean link and image targets of an HTML document.

        Raises:
            BatchCleaningError: Carries the per-target errors, if any.
        """
        return html.clean_html(markup, self.clear_url)

    def clear_soup(self, soup: BeautifulSoup | Tag) -> None:
        """Clean link and image targets of an already parsed document in place.

        Raises:
            BatchCleaningError: Carries the per-target errors, if any.
        """
        html.clean_soup(soup, self.clear_url)

    def __repr__(self) -> str:
        return (
            f"UrlCleaner(providers={len(self._rules.providers)}, "
            f"strip_referral_marketing={self._strip_referral_marketing})"
        )
