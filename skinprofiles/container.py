"""
Targets that a resolved profile is written into.

Concrete targets (items, blocks, ...) live outside this package; they
only need to implement ProfileContainer.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from .profile import GameProfile

T = TypeVar("T")


class ProfileContainer(ABC, Generic[T]):
    """Read/write access to the profile held by some object of type T."""

    @abstractmethod
    def get_profile(self) -> Optional[GameProfile]:
        """The object's current profile, or None."""

    @abstractmethod
    def set_profile(self, profile: Optional[GameProfile]) -> None:
        """Replace the object's profile; None removes profile and texture."""

    @abstractmethod
    def get_object(self) -> T:
        """The object this container writes into."""

    def get_profile_value(self) -> Optional[str]:
        """A storage-friendly string for the current profile (its textures value)."""
        profile = self.get_profile()
        return profile.texture_value if profile is not None else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_object()!r})"


class AttributeContainer(ProfileContainer[Any]):
    """Stores the profile on an attribute of a plain object."""

    def __init__(self, obj: Any, attribute: str = "profile"):
        self.obj = obj
        self.attribute = attribute

    def get_profile(self) -> Optional[GameProfile]:
        return getattr(self.obj, self.attribute, None)

    def set_profile(self, profile: Optional[GameProfile]) -> None:
        setattr(self.obj, self.attribute, profile)

    def get_object(self) -> Any:
        return self.obj
