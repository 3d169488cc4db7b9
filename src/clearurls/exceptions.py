"""Error taxonomy for rule loading and URL cleaning."""

from __future__ import annotations

import re


class ClearUrlsError(Exception):
    """Base class for every error raised by this package."""


class ConfigReadError(ClearUrlsError):
    """An I/O failure occurred while opening or reading the rules."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"error reading rules: {reason}")


class ConfigSyntaxError(ClearUrlsError):
    """The rules are not valid JSON or do not have the expected shape."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"error parsing rules: {reason}")


class UrlSyntaxError(ClearUrlsError):
    """A string could not be parsed as an absolute URL."""

    def __init__(self, reason: str, url: str = "") -> None:
        super().__init__(f"error parsing url: {reason}")
        self.reason = reason
        self.url = url


class RedirectionMissingCaptureError(ClearUrlsError):
    """A redirection pattern matched but did not capture the target in group 1."""

    def __init__(self, pattern: re.Pattern[str]) -> None:
        super().__init__(f"redirection regex {pattern.pattern} has no capture group")
        self.pattern = pattern


class InvalidPercentEncodingError(ClearUrlsError):
    """Percent-decoding produced bytes that are not valid UTF-8."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"percent decoding resulted in non-UTF-8 bytes: {reason} from index {index}")
        self.index = index


class BatchCleaningError(ClearUrlsError):
    """One or more items of a text or document batch failed to clean.

    The remaining items were still processed; ``errors`` holds the failures
    in document order.
    """

    def __init__(self, errors: list[ClearUrlsError]) -> None:
        super().__init__(f"{len(errors)} url(s) could not be cleaned: " + "; ".join(map(str, errors)))
        self.errors = errors
