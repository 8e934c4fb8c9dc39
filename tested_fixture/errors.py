class TestedFixtureError(Exception):
    """base class of the errors raised by tested_fixture"""

    # not a test class
    __test__ = False


class ExpansionError(TestedFixtureError, ValueError):
    """the decorator payload or the decorated function can not be expanded"""

    def __init__(self, message: str, payload: str = None, column: int = None):
        self.payload = payload
        self.column = column
        if payload is not None and column is not None:
            message = "%s\n  %s\n  %s^" % (message, payload, " " * column)
        super().__init__(message)


class UnwrapDepthExceeded(TestedFixtureError, TypeError):
    """Ok/Err nesting is deeper than MAX_UNWRAP_DEPTH"""


class FixtureTypeMismatch(TestedFixtureError, TypeError):
    """the unwrapped value is not an instance of the declared fixture type"""


class ReentrantInitialization(TestedFixtureError, RuntimeError):
    """a cell initializer touched its own cell"""
