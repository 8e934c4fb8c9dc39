# one-time initialization cell, and the memorizer built on top of it.
# the initializer runs at most once per cell, even when several threads race on the first access.

import threading
from typing import Callable, Generic, Optional, TypeVar

from .errors import ReentrantInitialization

T = TypeVar("T")


class OnceCell(Generic[T]):
    def __init__(self):
        self._lock = threading.Lock()
        self._filled = False
        self._value: Optional[T] = None
        # thread ident of the running initializer
        self._owner: Optional[int] = None

    @property
    def filled(self) -> bool:
        return self._filled

    def get(self) -> Optional[T]:
        """return the stored value, or None if the cell is still empty"""
        return self._value if self._filled else None

    def get_or_init(self, init: Callable[[], T]) -> T:
        if self._filled:  # fast path, the cell never changes once filled
            return self._value  # type: ignore
        if self._owner == threading.get_ident():
            raise ReentrantInitialization(
                "cell initializer %r accessed its own cell" % (init, ))
        with self._lock:
            if not self._filled:
                self._owner = threading.get_ident()
                try:
                    value = init()
                finally:
                    self._owner = None
                self._value = value
                self._filled = True
        return self._value  # type: ignore


def memorizer(f):
    """cache the result of the first call of f. note that arguments of later calls are ignored."""
    cell: OnceCell = OnceCell()

    def w(*args):
        return cell.get_or_init(lambda: f(*args))
    return w
