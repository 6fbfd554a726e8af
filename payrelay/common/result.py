"""Tagged success/failure values passed from services to route handlers."""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from payrelay.common.errors import RelayError

T = TypeVar("T")
E = TypeVar("E", bound=RelayError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]
