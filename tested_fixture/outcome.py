"""Tagged success/failure values returned by fixture bodies.

A fixture body may return a plain value, or wrap it into ``Ok``/``Err`` layers
(``Result[T, E]``). The runtime descends through at most ``MAX_UNWRAP_DEPTH``
of those layers.
"""
from dataclasses import dataclass
import types
import typing
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")

MAX_UNWRAP_DEPTH = 4

# substituted for the payload of an exception raised by a fixture body
PANIC_SENTINEL = "panicked"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]

# `Ok[int] | Err[str]` spelling
_UNION_TYPE = getattr(types, "UnionType", Union)


@dataclass(frozen=True)
class FailureReason:
    kind: str  # "error" or "panic"
    representation: str

    ERROR = "error"
    PANIC = "panic"

    @classmethod
    def from_error(cls, error: Any) -> "FailureReason":
        if isinstance(error, FailureReason):
            return error
        return cls(cls.ERROR, repr(error))

    @classmethod
    def panicked(cls) -> "FailureReason":
        return cls(cls.PANIC, repr(PANIC_SENTINEL))

    def __str__(self) -> str:
        return self.representation


def is_wrapped(value: Any) -> bool:
    return isinstance(value, (Ok, Err))


def normalize_plain(value: Any) -> Union[Ok, Err]:
    """treat a plain value as an always-succeeding outcome"""
    return value if is_wrapped(value) else Ok(value)


def leaf_failure(outcome: Any) -> Optional[FailureReason]:
    """return the first failure found in the Ok layers of outcome, if any"""
    layer = outcome
    for _ in range(MAX_UNWRAP_DEPTH + 1):
        if isinstance(layer, Err):
            return FailureReason.from_error(layer.error)
        if not isinstance(layer, Ok):
            return None
        layer = layer.value
    return None


def wrapper_depth(annotation: Any) -> int:
    """count the Ok/Err layers declared by a return annotation such as Result[Result[int, str], str]"""
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is Ok:
        return 1 + wrapper_depth(args[0])
    if origin is Err:
        return 1
    if origin is Union or origin is _UNION_TYPE:
        ok_args = [a for a in args if typing.get_origin(a) is Ok]
        if ok_args or any(typing.get_origin(a) is Err for a in args):
            return 1 + max([wrapper_depth(typing.get_args(a)[0]) for a in ok_args] or [0])
    return 0
