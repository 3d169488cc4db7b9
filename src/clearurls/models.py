"""Pydantic v2 data models: the rule corpus and the HTTP API."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def compile_pattern(pattern: Any) -> re.Pattern[str]:  # noqa: ANN401
    """Compile *pattern* case-insensitively.

    Already compiled patterns are returned untouched so hand-built providers
    keep whatever flags they were given.

    Raises:
        ValueError: If *pattern* is not a string or is not a valid regex.
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    if not isinstance(pattern, str):
        raise ValueError(f"expected a pattern string, got {type(pattern).__name__}")
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ValueError(f"invalid pattern {pattern!r}: {exc}") from exc


def _compile_list(value: Any) -> tuple[re.Pattern[str], ...]:  # noqa: ANN401
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise ValueError("expected a sequence of pattern strings")
    return tuple(compile_pattern(p) for p in value)


# ---------------------------------------------------------------------------
# Rule corpus
# ---------------------------------------------------------------------------


class Provider(BaseModel):
    """Compiled rules for one site family.

    Field names follow the ClearURLs JSON keys (``urlPattern``, ``rawRules``,
    ``referralMarketing``, ...); the snake_case names are accepted as well.
    Exception patterns are compiled one by one; any of them matching
    disables the provider.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    url_pattern: re.Pattern[str]
    rules: tuple[re.Pattern[str], ...] = ()
    raw_rules: tuple[re.Pattern[str], ...] = ()
    referral_marketing: tuple[re.Pattern[str], ...] = ()
    exceptions: tuple[re.Pattern[str], ...] = ()
    redirections: tuple[re.Pattern[str], ...] = ()

    @field_validator("url_pattern", mode="before")
    @classmethod
    def _compile_url_pattern(cls, value: Any) -> re.Pattern[str]:  # noqa: ANN401
        return compile_pattern(value)

    @field_validator("rules", "raw_rules", "referral_marketing", "exceptions", "redirections", mode="before")
    @classmethod
    def _compile_rule_lists(cls, value: Any) -> tuple[re.Pattern[str], ...]:  # noqa: ANN401
        return _compile_list(value)

    def is_excepted(self, url: str) -> bool:
        """Return True if any exception pattern matches somewhere in *url*."""
        return any(pattern.search(url) for pattern in self.exceptions)


class JsonObject(dict):
    """A decoded JSON object that also keeps every member in source order.

    Used as ``object_pairs_hook``: lookups behave like a plain dict (last
    duplicate wins) while :attr:`entries` still holds duplicated names.
    """

    def __init__(self, entries: list[tuple[str, Any]]) -> None:
        super().__init__(entries)
        self.entries = entries


class RulesDocument(BaseModel):
    """Top-level shape of a rules file: ``{"providers": {name: provider}}``.

    Providers are kept as ``(name, provider)`` pairs in document order, so
    a name used twice yields two providers.
    """

    model_config = ConfigDict(frozen=True)

    providers: tuple[tuple[str, Provider], ...]

    @field_validator("providers", mode="before")
    @classmethod
    def _provider_entries(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, JsonObject):
            return value.entries
        if isinstance(value, dict):
            return list(value.items())
        raise ValueError("expected an object mapping provider names to providers")


# ---------------------------------------------------------------------------
# API request / response models
# ---------------------------------------------------------------------------


class CleanRequest(BaseModel):
    """Body of POST /clean."""

    url: str = Field(..., min_length=1, max_length=8192)


class CleanResponse(BaseModel):
    """Response from POST /clean."""

    url: str
    cleaned: str
    changed: bool


class TextCleanRequest(BaseModel):
    """Body of POST /clean/text."""

    text: str


class TextCleanResponse(BaseModel):
    """Response from POST /clean/text."""

    text: str


class HtmlCleanRequest(BaseModel):
    """Body of POST /clean/html."""

    html: str


class HtmlCleanResponse(BaseModel):
    """Response from POST /clean/html."""

    html: str


class HealthResponse(BaseModel):
    """Response from GET /health."""

    status: str
    providers: int
    strip_referral_marketing: bool
    uptime_seconds: float
