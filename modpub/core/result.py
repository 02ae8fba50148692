"""Explicit success/failure values.

Services in modpub never raise for expected failures (bad archive, HTTP
error, missing config). They return ``Ok(value)`` or ``Err(error)`` and the
caller decides what to do:

    match client.list_releases(app_id):
        case Ok(releases):
            ...
        case Err(error):
            console.error(error.message)

Callers narrow with ``isinstance(result, Err)`` or a ``match`` statement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

__all__ = ["Ok", "Err", "Result"]

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


Result = Ok[T] | Err[E]
