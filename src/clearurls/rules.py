"""Rule store and rule-corpus loading.

A :class:`RuleStore` is built once from a ClearURLs-style JSON document and
then shared, read-only, by every cleaning call.  Provider names in the
document are discarded; their order is kept as application order.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import IO

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from clearurls.exceptions import ConfigReadError, ConfigSyntaxError
from clearurls.models import JsonObject, Provider, RulesDocument

logger = structlog.get_logger(__name__)

EMBEDDED_RULES_PATH = Path(__file__).resolve().parent / "data" / "rules.json"


class RuleStore(BaseModel):
    """Ordered, immutable sequence of providers."""

    model_config = ConfigDict(frozen=True)

    providers: tuple[Provider, ...] = ()


def _describe(exc: ValidationError) -> str:
    """Condense a pydantic error into a single line."""
    first = exc.errors(include_url=False)[0]
    location = ".".join(str(part) for part in first["loc"])
    message = first["msg"]
    if exc.error_count() > 1:
        message += f" (and {exc.error_count() - 1} more)"
    return f"{location}: {message}" if location else message


def load_rules_str(text: str | bytes) -> RuleStore:
    """Parse a rules document held in memory.

    Args:
        text: JSON text (or UTF-8 bytes) of the form ``{"providers": {...}}``.

    Returns:
        The compiled :class:`RuleStore`.

    Raises:
        ConfigSyntaxError: If the JSON is malformed, mis-shaped, or contains
            an invalid pattern.
    """
    try:
        raw = json.loads(text, object_pairs_hook=JsonObject)
    except ValueError as exc:
        raise ConfigSyntaxError(str(exc)) from exc
    try:
        document = RulesDocument.model_validate(raw)
    except ValidationError as exc:
        raise ConfigSyntaxError(_describe(exc)) from exc

    store = RuleStore(providers=tuple(provider for _, provider in document.providers))
    logger.debug("rules.parsed", providers=len(store.providers))
    return store


def load_rules_bytes(data: bytes) -> RuleStore:
    """Parse a rules document from raw UTF-8 bytes."""
    return load_rules_str(data)


def load_rules_file(stream: IO[bytes] | IO[str]) -> RuleStore:
    """Read a rules document from an open binary or text stream.

    Raises:
        ConfigReadError: If reading the stream fails.
        ConfigSyntaxError: If the content is not a valid rules document.
    """
    try:
        data = stream.read()
    except OSError as exc:
        raise ConfigReadError(str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise ConfigSyntaxError(str(exc)) from exc
    return load_rules_str(data)


def load_rules_path(path: str | Path) -> RuleStore:
    """Open and read the rules document at *path*.

    Raises:
        ConfigReadError: If the file cannot be opened or read.
        ConfigSyntaxError: If the content is not a valid rules document.
    """
    try:
        with Path(path).open("rb") as fh:
            store = load_rules_file(fh)
    except OSError as exc:
        raise ConfigReadError(str(exc)) from exc
    logger.info("rules.loaded", path=str(path), providers=len(store.providers))
    return store


@lru_cache(maxsize=1)
def load_embedded_rules() -> RuleStore:
    """Load the rule corpus bundled with the package.

    It may lag behind the upstream ClearURLs list but is a sound baseline.
    The store is immutable, so a single instance is shared by all callers.
    """
    return load_rules_path(EMBEDDED_RULES_PATH)
