"""Discriminated results returned across client component boundaries.

Client-side components (lifecycle controller, token registrar, inbox) never
raise for expected failures. They hand back either an ``Ok`` carrying the
value or an ``Err`` carrying a typed error, so callers can tell success from
failure without inspecting logs.
"""

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying a typed error."""

    error: E

    ok: ClassVar[bool] = False


Result = Union[Ok[T], Err[E]]
