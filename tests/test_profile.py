"""
Tests for game profiles and the textures wire format.
"""

import base64
import json
import uuid

import pytest

from skinprofiles.profile import (
    NIL_UUID,
    STEVE_TEXTURE_HASH,
    TEXTURES_BASE_URL,
    GameProfile,
    Property,
    decode_base64,
    encode_base64,
    get_default_profile,
    profile_from_hash,
    textures_payload,
    uuid_from_hash,
)

TEXTURE_HASH = "e5461a215b325fbdf892db67b7bfb60ad2bf1580dc968a15dfb304ccd5e74db"
ENCODED = (
    "eyJ0ZXh0dXJlcyI6eyJTS0lOIjp7InVybCI6Imh0dHA6Ly90ZXh0dXJlcy5taW5lY3JhZnQu"
    "bmV0L3RleHR1cmUvZTU0NjFhMjE1YjMyNWZiZGY4OTJkYjY3YjdiZmI2MGFkMmJmMTU4MGRj"
    "OTY4YTE1ZGZiMzA0Y2NkNWU3NGRiIn19fQ=="
)


class TestTexturesPayload:
    """The payload built from a hash must keep its exact shape."""

    def test_payload_shape(self):
        """Key names and nesting match what clients parse."""
        payload = textures_payload(TEXTURE_HASH)
        assert payload == (
            '{"textures":{"SKIN":{"url":"http://textures.minecraft.net/texture/'
            + TEXTURE_HASH + '"}}}'
        )
        assert json.loads(payload)["textures"]["SKIN"]["url"] == TEXTURES_BASE_URL + TEXTURE_HASH

    def test_encoded_bytes(self):
        """The stored property value is plain base64 of the payload."""
        assert encode_base64(textures_payload(TEXTURE_HASH)) == ENCODED

    def test_decode_tolerates_missing_padding(self):
        assert decode_base64(ENCODED.rstrip("=")) == textures_payload(TEXTURE_HASH)

    def test_decode_invalid(self):
        """Invalid base64 or non-UTF-8 bytes decode to None."""
        assert decode_base64(123) is None
        assert decode_base64(None) is None
        assert decode_base64("not base64!") is None
        assert decode_base64(base64.b64encode(b"\xff\xfe\xfd").decode()) is None


class TestProfileFromHash:
    """Test locally constructed profiles."""

    def test_round_trip(self):
        """The hash comes back out of the generated profile unchanged."""
        profile = profile_from_hash(TEXTURE_HASH)
        assert profile.texture_hash == TEXTURE_HASH
        assert profile.texture_url == TEXTURES_BASE_URL + TEXTURE_HASH
        assert profile.texture_value == ENCODED

    @pytest.mark.parametrize("texture_hash", [
        "0a4050e7aacc4539202658fdc339dd182d7e322f9fbcc4d5f99b5718a",
        "z" * 70,
        STEVE_TEXTURE_HASH,
    ])
    def test_round_trip_lengths(self, texture_hash):
        assert profile_from_hash(texture_hash).texture_hash == texture_hash

    def test_deterministic_identity(self):
        """Equal hashes produce equal profiles with a version 3 UUID."""
        first = profile_from_hash(TEXTURE_HASH)
        assert first == profile_from_hash(TEXTURE_HASH)
        assert first.id == uuid_from_hash(TEXTURE_HASH)
        assert first.id.version == 3


class TestGameProfile:
    """Test the immutable profile value."""

    def test_immutable(self):
        profile = profile_from_hash(TEXTURE_HASH)
        with pytest.raises(AttributeError):
            profile.name = "other"

    def test_single_textures_property(self):
        """At most one textures property is allowed."""
        with pytest.raises(ValueError):
            GameProfile(NIL_UUID, None, (Property("textures", "a"), Property("textures", "b")))

    def test_properties_coerced_to_tuple(self):
        profile = GameProfile(NIL_UUID, None, [Property("textures", ENCODED)])
        assert isinstance(profile.properties, tuple)

    def test_without_textures(self):
        profile = GameProfile(NIL_UUID, "nobody")
        assert profile.texture_value is None
        assert profile.texture_url is None
        assert profile.texture_hash is None

    def test_unknown_url_shape_has_no_hash(self):
        """A URL outside the known base has no canonical hash."""
        payload = '{"textures":{"SKIN":{"url":"https://example.com/' + TEXTURE_HASH + '"}}}'
        profile = GameProfile(NIL_UUID, None, (Property("textures", encode_base64(payload)),))
        assert profile.texture_url == "https://example.com/" + TEXTURE_HASH
        assert profile.texture_hash is None

    def test_with_textures_replaces(self):
        profile = GameProfile(NIL_UUID, None, (Property("textures", "old"), Property("other", "x")))
        updated = profile.with_textures(ENCODED)
        assert updated.texture_value == ENCODED
        assert updated.get_property("other").value == "x"
        assert profile.texture_value == "old"

    def test_from_dict(self):
        """Identity service JSON uses dashless ids."""
        profile = GameProfile.from_dict({
            "id": "069a79f444e94726a5befca90e38aaf5",
            "name": "Notch",
            "properties": [{"name": "textures", "value": ENCODED, "signature": "sig"}],
        })
        assert profile.id == uuid.UUID("069a79f4-44e9-4726-a5be-fca90e38aaf5")
        assert profile.name == "Notch"
        assert profile.get_property("textures").signature == "sig"
        assert profile.texture_hash == TEXTURE_HASH

    def test_from_dict_wrong_types(self):
        """Non-conforming service JSON is rejected with ValueError."""
        profile_id = "069a79f444e94726a5befca90e38aaf5"
        with pytest.raises(ValueError):
            GameProfile.from_dict({"id": profile_id, "properties": 5})
        with pytest.raises(ValueError):
            GameProfile.from_dict({"id": profile_id, "properties": [{"name": "textures", "value": 123}]})
        with pytest.raises(ValueError):
            GameProfile.from_dict({"id": profile_id, "properties": [{"name": "textures", "value": "a", "signature": 1}]})
        with pytest.raises(ValueError):
            GameProfile.from_dict({"id": profile_id, "name": 42})

    def test_from_dict_malformed(self):
        with pytest.raises(KeyError):
            GameProfile.from_dict({"name": "Notch"})
        with pytest.raises(ValueError):
            GameProfile.from_dict({"id": "nope"})
        with pytest.raises(ValueError):
            GameProfile.from_dict({"id": "069a79f444e94726a5befca90e38aaf5", "properties": [{"name": "x"}]})


class TestDefaultProfile:
    """Test the stock placeholder profile."""

    def test_default_is_steve(self):
        profile = get_default_profile()
        assert profile.id == NIL_UUID
        assert profile.texture_hash == STEVE_TEXTURE_HASH

    def test_default_is_shared(self):
        assert get_default_profile() is get_default_profile()
