"""
Game profile value objects and the textures property wire format.

A textures property value is the base64 encoding of
    {"textures":{"SKIN":{"url":"http://textures.minecraft.net/texture/<hash>"}}}
and the hash at the end of that URL identifies the skin.
"""

import base64
import binascii
import hashlib
import json
import re
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

TEXTURES_PROPERTY = "textures"
TEXTURES_BASE_URL = "http://textures.minecraft.net/texture/"
TEXTURES_NBT_PREFIX = '{"textures":{"SKIN":{"url":"'
TEXTURES_NBT_SUFFIX = '"}}}'

# Mojang hashes vary in length and never contain uppercase characters.
TEXTURE_HASH_PATTERN = re.compile(r"[0-9a-z]{55,70}")
TEXTURE_URL_PATTERN = re.compile(
    re.escape(TEXTURES_BASE_URL) + r"(?P<hash>" + TEXTURE_HASH_PATTERN.pattern + r")"
)

NIL_UUID = uuid.UUID(int=0)
DEFAULT_PROFILE_NAME = "SkinProfiles"
STEVE_TEXTURE_HASH = "1a4af718455d4aab528e7a61f86fa25e6a369d1768dcb13f7df319a713eb810b"


@dataclass(frozen=True)
class Property:
    """A signed or unsigned profile property (only "textures" is used)."""

    name: str
    value: str
    signature: Optional[str] = None


@dataclass(frozen=True)
class GameProfile:
    """
    Immutable player identity with an optional skin.

    ``id`` may be NIL_UUID for placeholder profiles. At most one
    "textures" property is kept.
    """

    id: uuid.UUID
    name: Optional[str] = None
    properties: Tuple[Property, ...] = field(default=())

    def __post_init__(self):
        if not isinstance(self.properties, tuple):
            object.__setattr__(self, "properties", tuple(self.properties))
        names = [p.name for p in self.properties]
        if names.count(TEXTURES_PROPERTY) > 1:
            raise ValueError("A game profile can hold at most one textures property")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameProfile":
        """
        Build a profile from an identity service JSON object.

        Raises:
            KeyError: If "id" is missing
            ValueError: If "id" is not a UUID or a property is malformed
        """
        profile_id = uuid.UUID(str(data["id"]))
        name = data.get("name")
        if name is not None and not isinstance(name, str):
            raise ValueError(f"Profile name must be a string: {name!r}")

        raw_properties = data.get("properties") or []
        if not isinstance(raw_properties, list):
            raise ValueError(f"Profile properties must be a list: {raw_properties!r}")

        properties = []
        for prop in raw_properties:
            if (
                not isinstance(prop, dict)
                or not isinstance(prop.get("name"), str)
                or not isinstance(prop.get("value"), str)
                or not isinstance(prop.get("signature"), (str, type(None)))
            ):
                raise ValueError(f"Malformed profile property: {prop!r}")
            properties.append(
                Property(prop["name"], prop["value"], prop.get("signature"))
            )
        return cls(profile_id, name, tuple(properties))

    def get_property(self, name: str) -> Optional[Property]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    @property
    def texture_value(self) -> Optional[str]:
        """The raw base64 textures property value, if any."""
        prop = self.get_property(TEXTURES_PROPERTY)
        return prop.value if prop else None

    @property
    def texture_url(self) -> Optional[str]:
        """The skin URL embedded in the textures property, if any."""
        value = self.texture_value
        if value is None:
            return None
        decoded = decode_base64(value)
        if decoded is None:
            return None
        try:
            payload = json.loads(decoded)
        except ValueError:
            return None
        try:
            url = payload["textures"]["SKIN"]["url"]
        except (KeyError, TypeError):
            return None
        return url if isinstance(url, str) else None

    @property
    def texture_hash(self) -> Optional[str]:
        """The skin's content hash, if the URL has the known shape."""
        url = self.texture_url
        if url is None:
            return None
        match = TEXTURE_URL_PATTERN.fullmatch(url)
        return match.group("hash") if match else None

    def with_textures(self, value: str, signature: Optional[str] = None) -> "GameProfile":
        """Return a copy whose textures property is replaced by ``value``."""
        others = tuple(p for p in self.properties if p.name != TEXTURES_PROPERTY)
        return replace(
            self, properties=others + (Property(TEXTURES_PROPERTY, value, signature),)
        )


def encode_base64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_base64(value: str) -> Optional[str]:
    """Decode a base64 string to text, or None if it is not valid base64/UTF-8."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    # Tolerate missing padding; Minecraft tooling often strips it.
    value += "=" * (-len(value) % 4)
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def textures_payload(texture_hash: str) -> str:
    """The JSON textures payload (before base64) for a skin hash."""
    return TEXTURES_NBT_PREFIX + TEXTURES_BASE_URL + texture_hash + TEXTURES_NBT_SUFFIX


def uuid_from_hash(texture_hash: str) -> uuid.UUID:
    """Deterministic name-based (MD5, version 3) UUID for a texture hash."""
    digest = hashlib.md5(texture_hash.encode("utf-8")).hexdigest()
    return uuid.UUID(digest, version=3)


def profile_from_hash_and_base64(texture_hash: str, value: str) -> GameProfile:
    """
    Build a placeholder-identity profile carrying a textures property.

    Equal hashes produce equal profiles.
    """
    return GameProfile(
        uuid_from_hash(texture_hash),
        DEFAULT_PROFILE_NAME,
        (Property(TEXTURES_PROPERTY, value),),
    )


def profile_from_hash(texture_hash: str) -> GameProfile:
    return profile_from_hash_and_base64(
        texture_hash, encode_base64(textures_payload(texture_hash))
    )


_DEFAULT_PROFILE = GameProfile(
    NIL_UUID,
    DEFAULT_PROFILE_NAME,
    (Property(TEXTURES_PROPERTY, encode_base64(textures_payload(STEVE_TEXTURE_HASH))),),
)


def get_default_profile() -> GameProfile:
    """The stock "Steve" profile used by lenient mode and base64 degradation."""
    return _DEFAULT_PROFILE
