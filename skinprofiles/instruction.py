"""
Profile instructions: apply a main profile source, with ordered
fallbacks, to a target container.

Sources are tried strictly in order and the first success wins. Each
resolution failure is recorded; if nothing succeeds the failures are
raised together as a ProfileChangeError (unless the instruction is
lenient).
"""

from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from .container import ProfileContainer
from .exceptions import InvalidProfileError, MojangAPIError, ProfileChangeError, ProfileError
from .executor import submit
from .logger import get_logger
from .profile import GameProfile
from .profileable import DefaultProfile, Profileable

T = TypeVar("T")

# APIRetryError and UnknownPlayerError are covered by their base classes.
RESOLUTION_ERRORS = (MojangAPIError, InvalidProfileError)


@dataclass(frozen=True)
class AttemptFailure:
    """One source that failed, and why."""

    source: Profileable
    error: ProfileError

    def __str__(self) -> str:
        return f"{self.source!r} -> {type(self.error).__name__}: {self.error}"


@dataclass(frozen=True)
class ApplyResult:
    """
    Outcome of one pass over an instruction's sources.

    ``profile`` and ``source`` are None when every source failed.
    """

    profile: Optional[GameProfile]
    source: Optional[Profileable]
    failures: Tuple[AttemptFailure, ...] = ()

    @property
    def success(self) -> bool:
        return self.profile is not None

    @property
    def fallback_used(self) -> bool:
        return self.success and bool(self.failures)


class ProfileFallback(Generic[T]):
    """
    Passed to an instruction's fallback callback.

    Assigning ``object`` replaces what apply() returns.
    """

    def __init__(self, instruction: "ProfileInstruction[T]", obj: T, error: ProfileChangeError):
        self.instruction = instruction
        self.object = obj
        self.error = error

    def __repr__(self) -> str:
        return f"ProfileFallback(object={self.object!r}, failures={len(self.error.failures)})"


class ProfileInstruction(Profileable, Generic[T]):
    """
    Builder that sets a resolved profile on a target.

    Example:
        ProfileInstruction(AttributeContainer(item)) \\
            .profile(Profileable.detect("Notch")) \\
            .fallback(Profileable.detect(texture_hash)) \\
            .lenient() \\
            .apply()

    The instruction is itself a Profileable: get_profile() returns the
    target's current profile.
    """

    def __init__(
        self,
        container: ProfileContainer[T],
        default_profile: Optional[Profileable] = None,
    ):
        """
        Args:
            container: Target the resolved profile is written into
            default_profile: Source appended as the last attempt in lenient mode
        """
        self._container = container
        self._default_profile = default_profile or DefaultProfile()
        self._profileable: Optional[Profileable] = None
        self._fallbacks: List[Profileable] = []
        self._on_fallback: Optional[Callable[[ProfileFallback[T]], None]] = None
        self._lenient = False

    @property
    def container(self) -> ProfileContainer[T]:
        return self._container

    def remove_profile(self) -> T:
        """Remove the profile and skin texture from the target."""
        self._container.set_profile(None)
        return self._container.get_object()

    def lenient(self) -> "ProfileInstruction[T]":
        """
        Fail silently: the default profile becomes the last attempt and
        an all-failed pass leaves the target untouched instead of raising.
        """
        self._lenient = True
        return self

    @property
    def is_lenient(self) -> bool:
        return self._lenient

    def get_profile(self) -> Optional[GameProfile]:
        """The target's current profile (not the one set with profile())."""
        return self._container.get_profile()

    def get_profile_string(self) -> Optional[str]:
        """A storage-friendly string of the target's current profile."""
        return self._container.get_profile_value()

    def profile(self, profileable: Profileable) -> "ProfileInstruction[T]":
        """Set the main profile source."""
        self._profileable = profileable
        return self

    def fallback(self, *fallbacks: Profileable) -> "ProfileInstruction[T]":
        """Append sources to try, in order, if the main one fails."""
        self._fallbacks.extend(fallbacks)
        return self

    def on_fallback(self, callback: Callable[[ProfileFallback[T]], None]) -> "ProfileInstruction[T]":
        """
        Called when a profile was applied but only after at least one
        source failed (including the main source failing with no
        explicit fallbacks in lenient mode).
        """
        self._on_fallback = callback
        return self

    def attempts(self) -> List[Profileable]:
        """The sources apply() will try, in order."""
        if self._profileable is None:
            raise ValueError("No profile was set")
        tries = [self._profileable, *self._fallbacks]
        if self._lenient:
            tries.append(self._default_profile)
        return tries

    def resolve(self) -> ApplyResult:
        """
        Try each source in order without touching the target.

        Resolution errors are collected; any other exception propagates.
        A source that produces no profile (e.g. an instruction whose target
        is empty) counts as an InvalidProfileError.
        """
        failures: List[AttemptFailure] = []
        for source in self.attempts():
            try:
                profile = source.get_profile()
            except RESOLUTION_ERRORS as e:
                failures.append(AttemptFailure(source, e))
                continue
            if profile is None:
                failures.append(AttemptFailure(
                    source, InvalidProfileError(None, f"{source!r} produced no profile")
                ))
                continue
            return ApplyResult(profile, source, tuple(failures))
        return ApplyResult(None, None, tuple(failures))

    def apply(self) -> T:
        """
        Resolve and set the profile on the target, blocking the caller.

        Only the identity service lookups (UUID or username sources)
        block; hash, URL and base64 sources resolve locally.

        Returns:
            The target object, or the object set by the fallback callback

        Raises:
            ProfileChangeError: If every source failed and the instruction
                is not lenient. The target is left unchanged.
        """
        result = self.resolve()
        error = None
        if result.failures:
            error = ProfileChangeError(
                f"Could not set the profile for {self._container!r}", list(result.failures)
            )

        if not result.success:
            if not self._lenient:
                raise error
            get_logger().warning(
                "No profile source succeeded, leaving target unchanged",
                target=repr(self._container),
                errors=[str(f) for f in result.failures],
            )
            return self._container.get_object()

        self._container.set_profile(result.profile)
        obj = self._container.get_object()

        if error is not None:
            get_logger().record_fallback()
            get_logger().debug(
                "apply() used a fallback profile",
                target=repr(self._container),
                source=repr(result.source),
                errors=[str(f) for f in result.failures],
            )
            if self._on_fallback is not None:
                fallback = ProfileFallback(self, obj, error)
                self._on_fallback(fallback)
                obj = fallback.object

        return obj

    def apply_async(self, executor: Optional[Executor] = None) -> "Future[T]":
        """
        Run apply() on the profile fetcher pool and return its future.

        Always runs off the calling thread, even when every source would
        be served from cache. The future carries the same result or
        ProfileChangeError as apply().

        Note that some targets copy objects when they are stored elsewhere;
        store the future's result again once it completes.
        """
        return submit(self.apply, executor)
