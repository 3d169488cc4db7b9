"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import pytest

from clearurls.cleaner import UrlCleaner
from clearurls.models import Provider
from clearurls.rules import RuleStore

_GOOGLE_PATTERN = r"^https?://(?:[a-z0-9-]+\.)*?google(?:\.[a-z]{2,}){1,}"


# ---------------------------------------------------------------------------
# Rule fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def cleaner() -> UrlCleaner:
    """Cleaner over the bundled rule corpus."""
    return UrlCleaner.from_embedded_rules()


@pytest.fixture
def google_pattern() -> str:
    """URL pattern of the google provider in the bundled rules."""
    return _GOOGLE_PATTERN


@pytest.fixture
def google_provider() -> Provider:
    """A google-like provider whose redirection captures the target."""
    return Provider(
        url_pattern=_GOOGLE_PATTERN,
        referral_marketing=["ref"],
        redirections=[_GOOGLE_PATTERN + r"/url\?.*?(?:url|q)=(https?[^&]+)"],
    )


@pytest.fixture
def catch_all_store() -> RuleStore:
    """A store with a single provider that matches everything and removes nothing."""
    return RuleStore(providers=(Provider(url_pattern=".*"),))
