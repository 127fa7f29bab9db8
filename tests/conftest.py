"""
Pytest configuration and shared fixtures.
"""

import uuid
from types import SimpleNamespace
from typing import Dict, Optional

import pytest

from skinprofiles.cache import ProfileCache, normalize_username
from skinprofiles.container import AttributeContainer
from skinprofiles.executor import shutdown_executor
from skinprofiles.profile import GameProfile, Property, encode_base64, textures_payload
from skinprofiles.resolver import ProfileResolver, set_resolver

TEXTURE_HASH = "e5461a215b325fbdf892db67b7bfb60ad2bf1580dc968a15dfb304ccd5e74db"
NOTCH_UUID = uuid.UUID("069a79f4-44e9-4726-a5be-fca90e38aaf5")


class FakeMojangAPI:
    """Stand-in for MojangAPI that records every call."""

    def __init__(self):
        self.names: Dict[str, uuid.UUID] = {}
        self.profiles: Dict[uuid.UUID, GameProfile] = {}
        self.name_errors: Dict[str, Exception] = {}
        self.profile_errors: Dict[uuid.UUID, Exception] = {}
        self.name_calls = []
        self.profile_calls = []
        self.closed = False

    def add_player(self, name: str, profile: GameProfile):
        self.names[normalize_username(name)] = profile.id
        self.profiles[profile.id] = profile

    def username_to_uuid(self, username: str) -> Optional[uuid.UUID]:
        self.name_calls.append(username)
        key = normalize_username(username)
        if key in self.name_errors:
            raise self.name_errors[key]
        return self.names.get(key)

    def profile_by_uuid(self, profile_id: uuid.UUID) -> Optional[GameProfile]:
        self.profile_calls.append(profile_id)
        if profile_id in self.profile_errors:
            raise self.profile_errors[profile_id]
        return self.profiles.get(profile_id)

    def close(self):
        self.closed = True


@pytest.fixture
def texture_hash() -> str:
    return TEXTURE_HASH


@pytest.fixture
def notch_profile() -> GameProfile:
    """A textured profile as the identity service would return it."""
    value = encode_base64(textures_payload(TEXTURE_HASH))
    return GameProfile(NOTCH_UUID, "Notch", (Property("textures", value, "sig"),))


@pytest.fixture
def fake_api(notch_profile) -> FakeMojangAPI:
    api = FakeMojangAPI()
    api.add_player("Notch", notch_profile)
    return api


@pytest.fixture
def resolver(fake_api) -> ProfileResolver:
    return ProfileResolver(api=fake_api, cache=ProfileCache())


@pytest.fixture
def target() -> SimpleNamespace:
    """A plain object standing in for an item or block."""
    return SimpleNamespace(profile=None)


@pytest.fixture
def container(target) -> AttributeContainer:
    return AttributeContainer(target)


@pytest.fixture(autouse=True)
def no_default_resolver():
    """Keep tests from ever reaching the real identity service."""
    set_resolver(None)
    yield
    set_resolver(None)


@pytest.fixture(scope="session", autouse=True)
def fetcher_pool():
    yield
    shutdown_executor()
