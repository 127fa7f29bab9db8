"""
Profile sources.

A Profileable produces a GameProfile on demand. There is one variant
per identifier format, plus Detect (classify, then dispatch) and a few
composable helpers. Variants are stateless value objects.
"""

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .exceptions import APIRetryError, InvalidProfileError
from .input_type import TextureInputType, classify, extract_texture_hash
from .profile import (
    GameProfile,
    decode_base64,
    get_default_profile,
    profile_from_hash,
    profile_from_hash_and_base64,
)
from .resolver import ProfileResolver, get_resolver
from .retry import exponential_backoff

__all__ = [
    "Profileable",
    "ByHash",
    "ByUrl",
    "ByBase64",
    "ByUuid",
    "ByUsername",
    "Detect",
    "StaticProfile",
    "DefaultProfile",
    "Retrying",
    "for_input_type",
]


class Profileable(ABC):
    """Anything that can produce a GameProfile."""

    @abstractmethod
    def get_profile(self) -> GameProfile:
        """
        Produce the profile.

        Raises:
            InvalidProfileError: On malformed input (UnknownPlayerError for unknown accounts)
            APIRetryError: On transient identity service failures
            MojangAPIError: On unexpected identity service responses
        """

    @staticmethod
    def detect(identifier: str, resolver: Optional[ProfileResolver] = None) -> "Profileable":
        return Detect(identifier, resolver)

    @staticmethod
    def of_uuid(profile_id: Union[str, uuid.UUID], resolver: Optional[ProfileResolver] = None) -> "Profileable":
        return ByUuid(profile_id, resolver)

    @staticmethod
    def username(name: str, resolver: Optional[ProfileResolver] = None) -> "Profileable":
        return ByUsername(name, resolver)

    @staticmethod
    def of_profile(profile: GameProfile) -> "Profileable":
        return StaticProfile(profile)


@dataclass(frozen=True)
class ByHash(Profileable):
    """Builds the textures property locally; never fails and never validates."""

    texture_hash: str

    def get_profile(self) -> GameProfile:
        return profile_from_hash(self.texture_hash)


@dataclass(frozen=True)
class ByUrl(Profileable):
    url: str

    def get_profile(self) -> GameProfile:
        texture_hash = extract_texture_hash(self.url)
        if texture_hash is None:
            raise InvalidProfileError(self.url, f"No texture hash in URL: {self.url!r}")
        return ByHash(texture_hash).get_profile()


@dataclass(frozen=True)
class ByBase64(Profileable):
    """
    Uses an encoded textures payload as-is.

    Undecodable payloads, or ones without a texture hash, yield the
    default profile instead of failing: such values usually come
    straight from storage.
    """

    value: str

    def get_profile(self) -> GameProfile:
        decoded = decode_base64(self.value)
        texture_hash = extract_texture_hash(decoded) if decoded is not None else None
        if texture_hash is None:
            return get_default_profile()
        return profile_from_hash_and_base64(texture_hash, self.value)


@dataclass(frozen=True)
class ByUuid(Profileable):
    profile_id: Union[str, uuid.UUID]
    resolver: Optional[ProfileResolver] = field(default=None, compare=False, repr=False)

    def get_profile(self) -> GameProfile:
        return (self.resolver or get_resolver()).resolve_by_uuid(self.profile_id)


@dataclass(frozen=True)
class ByUsername(Profileable):
    username: str
    resolver: Optional[ProfileResolver] = field(default=None, compare=False, repr=False)

    def get_profile(self) -> GameProfile:
        return (self.resolver or get_resolver()).resolve_by_username(self.username)


_VARIANTS = {
    TextureInputType.TEXTURE_HASH: lambda value, resolver: ByHash(value),
    TextureInputType.TEXTURE_URL: lambda value, resolver: ByUrl(value),
    TextureInputType.BASE64: lambda value, resolver: ByBase64(value),
    TextureInputType.UUID: ByUuid,
    TextureInputType.USERNAME: ByUsername,
}


def for_input_type(
    input_type: TextureInputType,
    identifier: str,
    resolver: Optional[ProfileResolver] = None,
) -> Profileable:
    """The source variant that resolves ``identifier`` as ``input_type``."""
    return _VARIANTS[input_type](identifier, resolver)


@dataclass(frozen=True)
class Detect(Profileable):
    """Classifies an arbitrary string and resolves it with the matching variant."""

    identifier: str
    resolver: Optional[ProfileResolver] = field(default=None, compare=False, repr=False)

    @property
    def input_type(self) -> Optional[TextureInputType]:
        return classify(self.identifier)

    def get_profile(self) -> GameProfile:
        input_type = self.input_type
        if input_type is None:
            raise InvalidProfileError(
                self.identifier, f"Unrecognised profile identifier: {self.identifier!r}"
            )
        return for_input_type(input_type, self.identifier, self.resolver).get_profile()


@dataclass(frozen=True)
class StaticProfile(Profileable):
    profile: GameProfile

    def get_profile(self) -> GameProfile:
        return self.profile


@dataclass(frozen=True)
class DefaultProfile(Profileable):
    """The stock placeholder profile, from a replaceable provider."""

    provider: Callable[[], GameProfile] = get_default_profile

    def get_profile(self) -> GameProfile:
        return self.provider()


@dataclass(frozen=True)
class Retrying(Profileable):
    """
    Re-invokes ``source`` on APIRetryError with exponential backoff.

    Once retries are exhausted a RetryError (itself an APIRetryError)
    is raised. Other errors propagate immediately.
    """

    source: Profileable
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)

    def get_profile(self) -> GameProfile:
        fetch = exponential_backoff(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            exceptions=(APIRetryError,),
            sleep=self.sleep,
        )(self.source.get_profile)
        return fetch()
