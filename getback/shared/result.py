"""Two-variant result value threaded through store and coordinator calls.

Every operation that can fail for a business reason returns either
``Left(error)`` or ``Right(value)``. Callers dispatch with ``case_of`` and
must supply both handlers; there is no accessor that assumes success.
Coroutine functions work as handlers too: ``case_of`` returns whatever the
chosen handler returns, so ``await result.case_of(left=..., right=...)``
dispatches to async handlers the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

E = TypeVar("E")
T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Left(Generic[E]):
    error: E

    def is_left(self) -> bool:
        return True

    def is_right(self) -> bool:
        return False

    def case_of(self, *, left: Callable[[E], U], right: Callable[[Any], U]) -> U:
        return left(self.error)

    def map(self, fn: Callable[[Any], Any]) -> "Left[E]":
        return self


@dataclass(frozen=True)
class Right(Generic[T]):
    value: T

    def is_left(self) -> bool:
        return False

    def is_right(self) -> bool:
        return True

    def case_of(self, *, left: Callable[[Any], U], right: Callable[[T], U]) -> U:
        return right(self.value)

    def map(self, fn: Callable[[T], U]) -> "Right[U]":
        return Right(fn(self.value))


Result = Union[Left[E], Right[T]]


__all__ = ["Left", "Result", "Right"]
