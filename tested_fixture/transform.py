# turn a decorated function into a lazily-initialized module global (the fixture binding)
# plus a pytest test which computes the fixture on first access.
#
# payload grammar:
#   payload    := annotation* visibility? identifier (':' type)?
#   annotation := string literal | '@' dotted name
#   visibility := 'public' | 'private'
#   type       := dotted name ('[' ... ']')?

import ast
import builtins
import functools
import inspect
import keyword
import logging
import re
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, NamedTuple, Optional, Tuple, TypeVar, Union

from .errors import ExpansionError, UnwrapDepthExceeded
from .once_cell import memorizer
from .outcome import MAX_UNWRAP_DEPTH, wrapper_depth
from .runtime import FixtureEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

PUBLIC = "public"
PRIVATE = "private"


@memorizer
def token_re():
    return re.compile(r"""
        (?P<space>\s+)
      | (?P<string>[rRuU]?(?:\"\"\"[\s\S]*?\"\"\"|'''[\s\S]*?'''|"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*'))
      | (?P<tag>@[^\W\d]\w*(?:\.[^\W\d]\w*)*)
      | (?P<name>[^\W\d]\w*)
      | (?P<colon>:)
      | (?P<other>.)
    """, re.VERBOSE)


@memorizer
def type_re():
    return re.compile(r"^[^\W\d]\w*(?:\.[^\W\d]\w*)*(?:\[.*\])?$", re.DOTALL)


class Token(NamedTuple):
    kind: str
    text: str
    column: int


def tokenize(payload: str) -> List[Token]:
    return [Token(m.lastgroup, m.group(), m.start())
            for m in token_re().finditer(payload) if m.lastgroup != "space"]


@dataclass(frozen=True)
class FixtureDeclaration:
    annotations: Tuple[str, ...]
    visibility: str
    identifier: str
    fixture_type: Optional[str]

    @property
    def doc(self) -> Optional[str]:
        docs = [ast.literal_eval(a) for a in self.annotations if not a.startswith("@")]
        return "\n".join(docs) if docs else None

    @classmethod
    def parse(cls, payload: str) -> "FixtureDeclaration":
        if not isinstance(payload, str):
            raise ExpansionError(
                "tested_fixture expects a payload string such as \"NAME\" or \"NAME: Type\", got %r" % (payload, ))
        tokens = tokenize(payload)
        pos = 0

        annotations: List[str] = []
        while pos < len(tokens) and tokens[pos].kind in ("string", "tag"):
            annotations.append(tokens[pos].text)
            pos += 1

        visibility = PRIVATE
        # 'public' alone is the identifier, not a visibility
        if pos + 1 < len(tokens) and tokens[pos].text in (PUBLIC, PRIVATE) and tokens[pos + 1].kind == "name":
            visibility = tokens[pos].text
            pos += 1

        if pos >= len(tokens):
            raise ExpansionError("expected identifier", payload, len(payload))
        token = tokens[pos]
        if token.kind != "name" or not token.text.isidentifier() or keyword.iskeyword(token.text):
            raise ExpansionError("expected identifier, found %r" % token.text, payload, token.column)
        identifier = token.text
        pos += 1

        fixture_type = None
        if pos < len(tokens):
            token = tokens[pos]
            if token.kind != "colon":
                raise ExpansionError("expected ':' or end of payload, found %r" % token.text,
                                     payload, token.column)
            fixture_type = payload[token.column + 1:].strip()
            if not fixture_type:
                raise ExpansionError("expected type after ':'", payload, len(payload))
            if not type_re().match(fixture_type):
                raise ExpansionError("expected type, found %r" % fixture_type,
                                     payload, payload.index(fixture_type, token.column))
        return cls(tuple(annotations), visibility, identifier, fixture_type)


@dataclass(frozen=True)
class SourceFunction:
    function: Callable
    identifier: str
    qualname: str
    module: str
    return_annotation: Any

    @property
    def context(self) -> str:
        return "%s.%s" % (self.module, self.qualname)

    @property
    def namespace(self) -> Dict[str, Any]:
        return self.function.__globals__

    @classmethod
    def from_function(cls, func: Any) -> "SourceFunction":
        if not inspect.isfunction(func):
            raise ExpansionError("tested_fixture must be applied to a function, got %r" % (func, ))
        if inspect.iscoroutinefunction(func) or inspect.isasyncgenfunction(func):
            raise ExpansionError("%s: async fixture bodies are not supported" % func.__qualname__)
        if inspect.signature(func).parameters:
            raise ExpansionError("%s: a tested fixture must not take parameters" % func.__qualname__)
        return cls(func, func.__name__, func.__qualname__, func.__module__,
                   return_annotation_of(func))


def return_annotation_of(func: Callable) -> Any:
    try:
        return typing.get_type_hints(func).get("return")
    except (NameError, TypeError):
        # forward reference to a name defined later in the module, the nesting depth is checked on unwrap instead
        logger.debug("return annotation of %s is not resolvable yet", func.__qualname__)
        return func.__annotations__.get("return")


def resolve_type(expression: str, namespace: Dict[str, Any]) -> type:
    """resolve 'Foo', 'mod.Foo' or 'list[int]' in the namespace of the decorated function"""
    base = expression.split("[", 1)[0].strip()
    head, *rest = base.split(".")
    if head in namespace:
        obj = namespace[head]
    elif hasattr(builtins, head):
        obj = getattr(builtins, head)
    else:
        raise ExpansionError("fixture type %r: name %r is not defined" % (expression, head))
    for attr in rest:
        if not hasattr(obj, attr):
            raise ExpansionError("fixture type %r: %r has no attribute %r" % (expression, obj, attr))
        obj = getattr(obj, attr)
    obj = typing.get_origin(obj) or obj
    if not isinstance(obj, type):
        raise ExpansionError("fixture type %r does not name a class" % expression)
    return obj


class FixtureBinding(Generic[T]):
    """Module global standing for a fixture.

    The fixture is computed on first access. ``BINDING()`` returns the value
    itself; public attribute reads, indexing, iteration, truth value, ``len``
    and ``in`` are forwarded to it. The binding is read only.
    """

    def __init__(self, declaration: FixtureDeclaration, source: SourceFunction, entry: FixtureEntry):
        self._declaration = declaration
        self._source = source
        self._entry = entry
        self.__doc__ = declaration.doc

    def __call__(self) -> T:
        return self._entry.resolve()

    @property
    def annotations(self) -> Tuple[str, ...]:
        """payload annotations, verbatim and in order"""
        return self._declaration.annotations

    def __getattr__(self, name: str) -> Any:
        # private and dunder names are probed by pytest and copy/pickle, never initialize for them
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_"):
            raise AttributeError("fixture %s is read only" % self._declaration.identifier)
        object.__setattr__(self, name, value)

    def __getitem__(self, key):
        return self()[key]

    def __iter__(self):
        return iter(self())

    def __bool__(self) -> bool:
        return bool(self())

    def __len__(self) -> int:
        return len(self())

    def __contains__(self, item) -> bool:
        return item in self()

    def __repr__(self) -> str:
        return "<FixtureBinding %s from %s (%s)>" % (
            self._declaration.identifier, self._source.context,
            "initialized" if self._entry.initialized else "uninitialized")


def define_fixture(payload: Union[str, FixtureDeclaration], func: Callable) -> Callable[[], None]:
    """expand func into a fixture binding, installed in func's module, and return the test entry"""
    declaration = payload if isinstance(payload, FixtureDeclaration) else FixtureDeclaration.parse(payload)
    source = SourceFunction.from_function(func)

    depth = wrapper_depth(source.return_annotation)
    if depth > MAX_UNWRAP_DEPTH:
        raise UnwrapDepthExceeded("%s: return annotation nests %d Ok/Err layers, at most %d are supported" % (
            source.context, depth, MAX_UNWRAP_DEPTH))

    namespace = source.namespace
    identifier = declaration.identifier
    if identifier == source.identifier:
        raise ExpansionError("%s: fixture binding must not have the same name as the test" % source.context)
    existing = namespace.get(identifier)
    # re-executing the same module body replaces its own binding
    if identifier in namespace and not (isinstance(existing, FixtureBinding)
                                        and existing._source.context == source.context):
        raise ExpansionError("%s: %r is already defined in module %s" % (
            source.context, identifier, source.module))

    resolve_target = None
    if declaration.fixture_type is not None:
        fixture_type = declaration.fixture_type
        resolve_target = memorizer(lambda: resolve_type(fixture_type, namespace))

    entry = FixtureEntry(identifier, func, source.context, source.module, resolve_target)
    namespace[identifier] = FixtureBinding(declaration, source, entry)
    if declaration.visibility == PUBLIC:
        exported = namespace.get("__all__")
        if isinstance(exported, list) and identifier not in exported:
            exported.append(identifier)

    @functools.wraps(func)
    def test_entry() -> None:
        entry.run()

    # collected by pytest whatever the function name is
    test_entry.__test__ = True  # type: ignore
    test_entry.__tested_fixture__ = namespace[identifier]  # type: ignore
    return test_entry


def tested_fixture(payload: str) -> Callable[[Callable], Callable[[], None]]:
    """Turn a test into a fixture that other tests can read.

    ``payload`` follows ``annotation* visibility? identifier (':' type)?``::

        @tested_fixture("STEP_1")
        def step_1() -> Foo:
            ...

        @tested_fixture('"Doc of the binding" public STEP_2: State')
        def step_2() -> Result[State, str]:
            ...

    The test still runs as a normal pytest test. ``STEP_1`` is installed in the
    module and computes ``step_1`` on first access, whichever test comes first.
    """
    declaration = FixtureDeclaration.parse(payload)

    def decorator(func: Callable) -> Callable[[], None]:
        return define_fixture(declaration, func)
    return decorator


# the name matches pytest's default "test*" pattern
tested_fixture.__test__ = False  # type: ignore
