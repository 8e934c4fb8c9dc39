"""Memoization runtime.

Each generated fixture owns one ``FixtureEntry``. The entry runs the original
body at most once, under exception capture, and stores the normalized outcome
in a ``OnceCell``. Interpretation of the stored outcome (``unwrap``) is kept
apart from the capture, so that the same outcome is replayed to every reader:
the producing test and all dependent tests fail with the same message.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, List, NoReturn, Optional, Union

import pytest

from .errors import FixtureTypeMismatch, UnwrapDepthExceeded
from .once_cell import OnceCell
from .outcome import MAX_UNWRAP_DEPTH, PANIC_SENTINEL, Err, FailureReason, Ok, is_wrapped, leaf_failure, normalize_plain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitializationEvent:
    name: str
    context: str
    module: str
    status: str  # "ok", "error" or "panicked"
    message: Optional[str]
    duration: float
    thread_name: str


Listener = Callable[[InitializationEvent], None]

_listeners: List[Listener] = []


def add_listener(listener: Listener) -> None:
    _listeners.append(listener)


def remove_listener(listener: Listener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def capture(body: Callable[[], Any], context: str) -> Union[Ok, Err]:
    """run body and convert a raised exception into the fixed panic failure"""
    try:
        value = body()
    except (Exception, pytest.fail.Exception):
        # the exception itself is not kept, only this log record shows it
        logger.exception("%s terminated abnormally, stored as %r", context, PANIC_SENTINEL)
        return Err(FailureReason.panicked())
    return normalize_plain(value)


def fail_fixture(context: str, reason: FailureReason) -> NoReturn:
    pytest.fail("%s failed: %s" % (context, reason), pytrace=False)


def unwrap(outcome: Any, context: str, target: Optional[type] = None, depth: int = 1) -> Any:
    """descend through the Ok layers of outcome.

    Returns the leaf value, or the first value which is an instance of target.
    An Err at any layer fails the calling test with "<context> failed: <reason>".
    """
    if not is_wrapped(outcome):
        if target is not None and not isinstance(outcome, target):
            raise FixtureTypeMismatch("%s: expected %s, got %s" % (
                context, target.__qualname__, type(outcome).__qualname__))
        return outcome
    if depth > MAX_UNWRAP_DEPTH:
        raise UnwrapDepthExceeded("%s: more than %d nested Ok/Err layers" % (
            context, MAX_UNWRAP_DEPTH))
    if isinstance(outcome, Err):
        fail_fixture(context, FailureReason.from_error(outcome.error))
    value = outcome.value
    if target is not None and isinstance(value, target):
        return value
    return unwrap(value, context, target, depth + 1)


class FixtureEntry:
    def __init__(self, name: str, body: Callable[[], Any], context: str, module: str,
                 resolve_target: Optional[Callable[[], Optional[type]]] = None):
        self.name = name
        self.body = body
        self.context = context
        self.module = module
        self.resolve_target = resolve_target
        self.cell: OnceCell[Union[Ok, Err]] = OnceCell()

    @property
    def initialized(self) -> bool:
        return self.cell.filled

    def get_or_init(self) -> Union[Ok, Err]:
        return self.cell.get_or_init(self._initialize)

    def resolve(self) -> Any:
        target = self.resolve_target() if self.resolve_target is not None else None
        return unwrap(self.get_or_init(), self.context, target)

    def run(self) -> None:
        """body of the generated test"""
        self.resolve()

    def _initialize(self) -> Union[Ok, Err]:
        logger.debug("initializing fixture %s from %s", self.name, self.context)
        started = time.perf_counter()
        outcome = capture(self.body, self.context)
        duration = time.perf_counter() - started

        failure = leaf_failure(outcome)
        if failure is None:
            status = "ok"
            logger.info("fixture %s initialized in %.3fs", self.name, duration)
        else:
            status = "panicked" if failure.kind == FailureReason.PANIC else "error"
            logger.info("fixture %s failed in %.3fs: %s", self.name, duration, failure)
        event = InitializationEvent(self.name, self.context, self.module, status,
                                    None if failure is None else str(failure),
                                    duration, threading.current_thread().name)
        for listener in list(_listeners):
            listener(event)
        return outcome

    def __repr__(self) -> str:
        return "<FixtureEntry %s (%s)>" % (self.name, "initialized" if self.initialized else "uninitialized")
