"""Outcome types returned by model and service mutations.

Mutations report their outcome instead of raising into UI code. ``Ok`` is
truthy and ``Err`` is falsy, so callers that only care about success can
keep treating the result as a boolean.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Ok:
    """Successful outcome carrying the produced value."""

    value: Any = None

    @property
    def is_ok(self) -> bool:
        return True

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Rejected outcome carrying a human-readable reason."""

    reason: str

    @property
    def is_ok(self) -> bool:
        return False

    def __bool__(self) -> bool:
        return False


Result = Ok | Err
