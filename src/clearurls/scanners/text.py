"""Free-text batch cleaning: find URLs in prose or Markdown and clean each one."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator

import structlog

from clearurls.exceptions import BatchCleaningError, ClearUrlsError

logger = structlog.get_logger(__name__)

_URL_RE = re.compile(r"(?:https?|ftp)://[^\s<>\"'`]+", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,:;!?*~"
_CLOSING_BRACKETS: dict[str, str] = {")": "(", "]": "[", "}": "{"}


def _trim(candidate: str) -> str:
    """Strip sentence punctuation and unbalanced closing brackets from the end."""
    while candidate:
        last = candidate[-1]
        if last in _TRAILING_PUNCTUATION:
            candidate = candidate[:-1]
        elif last in _CLOSING_BRACKETS and candidate.count(last) > candidate.count(_CLOSING_BRACKETS[last]):
            candidate = candidate[:-1]
        else:
            break
    return candidate


def find_urls(text: str) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` offsets of every URL in *text*, in order.

    ``[label](https://example.com/)`` yields only the URL inside the
    parentheses.
    """
    for match in _URL_RE.finditer(text):
        url = _trim(match.group(0))
        if "://" in url and not url.endswith("://"):
            yield match.start(), match.start() + len(url)


def clean_text(text: str, clean_url: Callable[[str], str]) -> str:
    """Replace every URL in *text* with ``clean_url(url)``.

    A URL that fails to clean is left as it is and processing continues with
    the next one.

    Args:
        text:      Arbitrary text, e.g. a chat message or Markdown source.
        clean_url: Single-URL cleaning callable.

    Returns:
        The text with all URLs cleaned.

    Raises:
        BatchCleaningError: If at least one URL failed; carries every failure.
    """
    pieces: list[str] = []
    errors: list[ClearUrlsError] = []
    last = 0
    for start, end in find_urls(text):
        url = text[start:end]
        try:
            cleaned = clean_url(url)
        except ClearUrlsError as exc:
            logger.warning("text.span_failed", url=url, error=str(exc))
            errors.append(exc)
            cleaned = url
        pieces.append(text[last:start])
        pieces.append(cleaned)
        last = end

    if errors:
        raise BatchCleaningError(errors)
    if not pieces:
        return text
    pieces.append(text[last:])
    return "".join(pieces)
