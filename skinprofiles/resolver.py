"""
Remote profile resolution with caching.

ProfileResolver owns a MojangAPI transport and a ProfileCache. Callers
may compose their own instance and pass it to profile sources; otherwise
the process default from get_resolver() is used.
"""

import threading
import uuid
from typing import Optional, Union

from .cache import ProfileCache
from .env import get_settings
from .exceptions import InvalidProfileError, MojangAPIError, UnknownPlayerError
from .input_type import TextureInputType
from .logger import get_logger
from .mojang import MojangAPI
from .profile import GameProfile


def parse_uuid(value: Union[str, uuid.UUID]) -> uuid.UUID:
    """
    Accept UUID objects, dashed or dashless hex strings.

    Raises:
        InvalidProfileError: If value is not a UUID
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value.strip())
    except (AttributeError, ValueError):
        raise InvalidProfileError(value, f"Not a valid UUID: {value!r}")


class ProfileResolver:
    """Resolves textured profiles by UUID or username, cache first."""

    def __init__(self, api: Optional[MojangAPI] = None, cache: Optional[ProfileCache] = None):
        self.api = api or MojangAPI()
        self.cache = cache if cache is not None else ProfileCache()

    @classmethod
    def from_settings(cls, settings=None) -> "ProfileResolver":
        settings = settings or get_settings()
        return cls(MojangAPI.from_settings(settings), ProfileCache(settings.cache_size))

    def resolve_by_uuid(self, profile_id: Union[str, uuid.UUID]) -> GameProfile:
        """
        Return the textured profile of an account.

        Raises:
            InvalidProfileError: If profile_id is not a UUID
            UnknownPlayerError: If no account has this UUID
            APIRetryError: On transient failures or rate limiting
            MojangAPIError: On unexpected responses
        """
        profile_id = parse_uuid(profile_id)
        cached = self.cache.get_profile(profile_id)
        if cached is not None:
            get_logger().record_cache_hit()
            return cached

        get_logger().record_cache_miss()
        profile = self._lookup(self.api.profile_by_uuid, profile_id)
        if profile is None:
            get_logger().record_lookup_failure(UnknownPlayerError.__name__)
            raise UnknownPlayerError(str(profile_id), f"No player with UUID {profile_id}")

        if profile.texture_url is not None and profile.texture_hash is None:
            get_logger().record_lookup_failure(MojangAPIError.__name__)
            get_logger().error("Profile has an unrecognised texture URL", uuid=profile_id, url=profile.texture_url)
            raise MojangAPIError(f"Unrecognised texture URL for {profile_id}: {profile.texture_url}")

        get_logger().record_lookup_success()
        self.cache.put_profile(profile)
        return profile

    def resolve_by_username(self, username: str) -> GameProfile:
        """
        Return the textured profile of the account that owns ``username``.

        Performs up to two hops (username -> UUID, UUID -> profile); each
        hop is cached separately.

        Raises:
            InvalidProfileError: If username is not a valid name
            UnknownPlayerError: If no account has this name
            APIRetryError: On transient failures or rate limiting
            MojangAPIError: On unexpected responses
        """
        if username is None or not TextureInputType.USERNAME.matches(username):
            raise InvalidProfileError(username, f"Not a valid username: {username!r}")

        profile_id = self.cache.get_uuid(username)
        if profile_id is None:
            get_logger().record_cache_miss()
            profile_id = self._lookup(self.api.username_to_uuid, username)
            if profile_id is None:
                get_logger().record_lookup_failure(UnknownPlayerError.__name__)
                raise UnknownPlayerError(username, f"No player named {username!r}")
            get_logger().record_lookup_success()
            self.cache.put_uuid(username, profile_id)
        else:
            get_logger().record_cache_hit()

        return self.resolve_by_uuid(profile_id)

    def _lookup(self, fetch, key):
        get_logger().record_lookup_attempt()
        try:
            return fetch(key)
        except MojangAPIError as e:
            get_logger().record_lookup_failure(type(e).__name__)
            raise

    def close(self):
        """Release the HTTP session; cached entries are kept."""
        self.api.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


_default_resolver: Optional[ProfileResolver] = None
_default_lock = threading.Lock()


def get_resolver() -> ProfileResolver:
    """Get or create the process default resolver."""
    global _default_resolver

    with _default_lock:
        if _default_resolver is None:
            _default_resolver = ProfileResolver.from_settings()
        return _default_resolver


def set_resolver(resolver: Optional[ProfileResolver]):
    """Replace the process default resolver (None to forget it)."""
    global _default_resolver

    with _default_lock:
        _default_resolver = resolver


def reset_resolver():
    """Close and forget the process default resolver."""
    global _default_resolver

    with _default_lock:
        resolver, _default_resolver = _default_resolver, None
    if resolver is not None:
        resolver.close()
