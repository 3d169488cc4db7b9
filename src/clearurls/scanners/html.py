"""HTML document cleaning: rewrite link and image targets in place."""

from __future__ import annotations

from collections.abc import Callable

import structlog
from bs4 import BeautifulSoup, Tag

from clearurls.exceptions import BatchCleaningError, ClearUrlsError

logger = structlog.get_logger(__name__)

# Tag name -> attribute holding a URL.
URL_ATTRIBUTES: dict[str, str] = {
    "a": "href",
    "area": "href",
    "link": "href",
    "img": "src",
    "source": "src",
}


def _has_url(tag: Tag) -> bool:
    attribute = URL_ATTRIBUTES.get(tag.name)
    return attribute is not None and tag.has_attr(attribute)


def clean_soup(soup: BeautifulSoup | Tag, clean_url: Callable[[str], str]) -> None:
    """Clean every link/image target under *soup*, modifying it in place.

    An ``<a>`` whose text is its own URL (an autolink) has its text
    rewritten too.  Targets that fail to clean are left unchanged and the
    walk continues.

    Raises:
        BatchCleaningError: If at least one target failed; carries every
            failure in document order.
    """
    errors: list[ClearUrlsError] = []
    for tag in soup.find_all(_has_url):
        attribute = URL_ATTRIBUTES[tag.name]
        original = tag[attribute]
        try:
            cleaned = clean_url(original)
        except ClearUrlsError as exc:
            logger.warning("html.target_failed", tag=tag.name, url=original, error=str(exc))
            errors.append(exc)
            continue
        if cleaned == original:
            continue
        tag[attribute] = cleaned
        if tag.name == "a" and tag.string == original:
            tag.string = cleaned

    if errors:
        raise BatchCleaningError(errors)


def clean_html(markup: str, clean_url: Callable[[str], str]) -> str:
    """Parse *markup*, clean it with :func:`clean_soup` and render it back."""
    soup = BeautifulSoup(markup, "html.parser")
    clean_soup(soup, clean_url)
    return str(soup)
