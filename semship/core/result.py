"""Result type for release stages.

Every stage of the release pipeline returns either ``Ok(value)`` or
``Err(error)``. Callers branch with ``isinstance`` or ``match`` instead of
catching exceptions, so a failure travels up to the CLI unchanged.

Usage:
    match read_manifest(path):
        case Ok(manifest):
            print(manifest.version)
        case Err(error):
            print(f"error: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
