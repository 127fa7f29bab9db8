"""
Resolve player and texture identifiers into game profiles and apply them
to skull-like targets.
"""

__version__ = "0.1.0"

from .exceptions import (
    APIRetryError,
    InvalidProfileError,
    MojangAPIError,
    ProfileChangeError,
    ProfileError,
    UnknownPlayerError,
)
from .profile import GameProfile, Property, get_default_profile
from .input_type import TextureInputType, classify
from .profileable import Profileable
from .container import AttributeContainer, ProfileContainer
from .instruction import ApplyResult, AttemptFailure, ProfileFallback, ProfileInstruction
from .resolver import ProfileResolver, get_resolver, reset_resolver, set_resolver

__all__ = [
    "__version__",
    "APIRetryError",
    "InvalidProfileError",
    "MojangAPIError",
    "ProfileChangeError",
    "ProfileError",
    "UnknownPlayerError",
    "GameProfile",
    "Property",
    "get_default_profile",
    "TextureInputType",
    "classify",
    "Profileable",
    "AttributeContainer",
    "ProfileContainer",
    "ApplyResult",
    "AttemptFailure",
    "ProfileFallback",
    "ProfileInstruction",
    "ProfileResolver",
    "get_resolver",
    "reset_resolver",
    "set_resolver",
]
