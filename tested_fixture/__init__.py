from .errors import (ExpansionError, FixtureTypeMismatch, ReentrantInitialization, TestedFixtureError,
                     UnwrapDepthExceeded)
from .once_cell import OnceCell, memorizer
from .outcome import MAX_UNWRAP_DEPTH, PANIC_SENTINEL, Err, FailureReason, Ok, Result, normalize_plain
from .runtime import FixtureEntry, InitializationEvent, add_listener, remove_listener, unwrap
from .transform import FixtureBinding, FixtureDeclaration, SourceFunction, define_fixture, tested_fixture

__all__ = [
    "ExpansionError", "FixtureTypeMismatch", "ReentrantInitialization", "TestedFixtureError",
    "UnwrapDepthExceeded", "OnceCell", "memorizer", "MAX_UNWRAP_DEPTH", "PANIC_SENTINEL", "Err",
    "FailureReason", "Ok", "Result", "normalize_plain", "FixtureEntry", "InitializationEvent",
    "add_listener", "remove_listener", "unwrap", "FixtureBinding", "FixtureDeclaration",
    "SourceFunction", "define_fixture", "tested_fixture",
]
