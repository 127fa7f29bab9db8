"""
Identifier classification.

Patterns are checked in declaration order and the first full match wins,
so structured tokens (hashes, URLs, UUIDs) are never mistaken for names.
"""

import re
from enum import Enum
from typing import Optional

from .profile import TEXTURE_HASH_PATTERN, TEXTURE_URL_PATTERN

__all__ = ["TextureInputType", "classify"]


class TextureInputType(Enum):
    """
    Closed set of identifier formats, in priority order.

    TEXTURE_HASH
        Lowercase alphanumeric, 55-70 chars.
        e.g. e5461a215b325fbdf892db67b7bfb60ad2bf1580dc968a15dfb304ccd5e74db
    TEXTURE_URL
        The textures base URL followed by a texture hash.
    BASE64
        Not general base64: at least 100 chars with up to 3 pad chars,
        roughly the smallest encoded textures payload.
    UUID
        Canonical 8-4-4-4-12 hex form, any case.
    USERNAME
        1-16 letters, digits or underscores. Current accounts need 3+,
        but older ones are still around.
    """

    TEXTURE_HASH = TEXTURE_HASH_PATTERN
    TEXTURE_URL = TEXTURE_URL_PATTERN
    BASE64 = re.compile(r"[-A-Za-z0-9+/]{100,}={0,3}")
    UUID = re.compile(
        r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
        re.IGNORECASE,
    )
    USERNAME = re.compile(r"[A-Za-z0-9_]{1,16}")

    @property
    def pattern(self) -> "re.Pattern[str]":
        return self.value

    def matches(self, identifier: str) -> bool:
        return self.value.fullmatch(identifier) is not None

    @classmethod
    def get(cls, identifier: str) -> Optional["TextureInputType"]:
        """
        Return the first format whose pattern fully matches ``identifier``.

        Raises:
            TypeError: If identifier is None
        """
        if identifier is None:
            raise TypeError("Identifier cannot be None")
        for input_type in cls:
            if input_type.matches(identifier):
                return input_type
        return None


def classify(identifier: str) -> Optional[TextureInputType]:
    """Classify a raw identifier string; None if no format matches."""
    return TextureInputType.get(identifier)


def extract_texture_hash(text: str) -> Optional[str]:
    """
    Find the first texture-hash-shaped run in ``text``.

    Works on URLs and decoded textures JSON alike.
    """
    match = TEXTURE_HASH_PATTERN.search(text)
    return match.group() if match else None
