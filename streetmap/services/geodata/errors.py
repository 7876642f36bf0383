"""Error taxonomy for geodata acquisition and normalization."""
from __future__ import annotations

from typing import List, Optional


class GeodataError(Exception):
    """Base class for geodata pipeline errors."""


class TransportFailure(GeodataError):
    """A single endpoint was unreachable or answered with an unusable response."""

    def __init__(
        self, endpoint: str, reason: str, *, status_code: Optional[int] = None
    ) -> None:
        self.endpoint = endpoint
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{endpoint}: {reason}")


class ServiceUnavailable(GeodataError):
    """Every endpoint failed, on every attempt that was made."""

    def __init__(self, failures: List[TransportFailure], *, attempts: int = 1) -> None:
        self.failures = list(failures)
        self.attempts = attempts
        detail = "; ".join(str(failure) for failure in self.failures) or "no endpoints"
        super().__init__(
            f"All geodata endpoints failed after {attempts} attempt(s): {detail}"
        )


class MalformedGeometry(GeodataError):
    """A record without usable geometry. Logged and dropped, never raised to callers."""

    def __init__(self, element_id: object, reason: str) -> None:
        self.element_id = element_id
        self.reason = reason
        super().__init__(f"element {element_id}: {reason}")


class UnknownCategory(GeodataError, KeyError):
    """Category key outside the fixed catalogue."""

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(category)

    def __str__(self) -> str:
        return f"Unknown category: {self.category}"
