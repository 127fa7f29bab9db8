"""
Error kinds raised while resolving and applying profiles.

Resolution failures (invalid input, unknown player, API errors) are
collected by ProfileInstruction into a single ProfileChangeError.
"""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .instruction import AttemptFailure


class ProfileError(Exception):
    """Root exception for all skinprofiles errors."""


# ── Local validation ─────────────────────────────────────────────────────────

class InvalidProfileError(ProfileError):
    """Raised when an identifier is malformed or cannot be turned into a profile."""

    def __init__(self, value: Optional[str], message: str):
        super().__init__(message)
        self.value = value


class UnknownPlayerError(InvalidProfileError):
    """Raised when a UUID or username does not belong to any account."""


# ── Identity service ─────────────────────────────────────────────────────────

class MojangAPIError(ProfileError):
    """Raised on an unexpected or non-conforming identity service response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class APIRetryError(MojangAPIError):
    """Raised on transient failures and rate limiting; the request may succeed later."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, status_code)
        self.retry_after = retry_after


# ── Aggregate ────────────────────────────────────────────────────────────────

class ProfileChangeError(ProfileError):
    """Raised when no profile source of an instruction could be applied."""

    def __init__(self, message: str, failures: List["AttemptFailure"]):
        super().__init__(message)
        self.failures = list(failures)
        if self.failures:
            self.__cause__ = self.failures[0].error

    @property
    def errors(self) -> List[ProfileError]:
        """The individual failures, in attempt order."""
        return [failure.error for failure in self.failures]

    def __str__(self) -> str:
        base = super().__str__()
        if not self.failures:
            return base
        details = "; ".join(str(failure) for failure in self.failures)
        return f"{base} ({len(self.failures)} failed: {details})"
