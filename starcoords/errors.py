"""
Error types for the starcoords engine.

Every error derives from CoordinateError so the calling subsystem can catch
one type and report it as a recoverable game-state warning. Each subclass
also derives from the closest builtin (ValueError, KeyError, RuntimeError)
so existing handlers for those keep working.
"""

from __future__ import annotations

from typing import Optional, Sequence


class CoordinateError(Exception):
    """Base class for all engine errors."""


class ValidationError(CoordinateError, ValueError):
    """Invalid input: negative radius/period, non-finite numbers, bad frame tags."""


class FrameMismatchError(CoordinateError, ValueError):
    """Arithmetic attempted between values tagged with different frames."""

    def __init__(self, expected: str, actual: str, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"Frame mismatch: expected '{expected}', got '{actual}'"
        )


class OrbitChainCycleError(CoordinateError, RuntimeError):
    """A parent chain loops back on itself instead of reaching the origin."""

    def __init__(self, chain: Sequence[str]):
        self.chain = tuple(chain)
        super().__init__(
            "Orbit chain cycle detected: " + " -> ".join(self.chain)
        )


class LocationNotFoundError(CoordinateError, KeyError):
    """Location name is not in the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Location '{name}' not found in catalog")

    def __str__(self) -> str:
        return str(self.args[0])


class BodyNotFoundError(CoordinateError, KeyError):
    """A body id (usually a parent id) is not in the body registry."""

    def __init__(self, body_id: str, referenced_by: Optional[str] = None):
        self.body_id = body_id
        self.referenced_by = referenced_by
        if referenced_by:
            message = f"Body '{body_id}' (parent of '{referenced_by}') not found"
        else:
            message = f"Body '{body_id}' not found"
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])
