"""Turn scanned or typed text into a registry lookup key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
from urllib.parse import parse_qs, urlparse

from .errors import MalformedInput, MissingIdentifier

# Checked in order; the first non-empty one wins.
IDENTIFIER_PARAMS: Tuple[str, ...] = ("asset", "assetQR")


@dataclass(frozen=True)
class IdentifierCandidate:
    code: str
    source_param: str


def is_absolute_url(text: str) -> bool:
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def extract_identifier(raw_text: str) -> IdentifierCandidate:
    """Extract the asset code from a tag URL.

    Raises:
        MalformedInput: the text is not an absolute URL.
        MissingIdentifier: none of the identifier parameters is present.
    """
    text = (raw_text or "").strip()
    if not text or not is_absolute_url(text):
        raise MalformedInput(raw_text)

    params = parse_qs(urlparse(text).query)
    for name in IDENTIFIER_PARAMS:
        values = [value.strip() for value in params.get(name, []) if value.strip()]
        if values:
            return IdentifierCandidate(code=values[0], source_param=name)
    raise MissingIdentifier(raw_text)


__all__ = ["IDENTIFIER_PARAMS", "IdentifierCandidate", "extract_identifier", "is_absolute_url"]
