"""
Explicit success/failure result type for the CAP builders.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .errors import CapError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: CapError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
