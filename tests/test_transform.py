import collections
import textwrap

import pytest
from tested_fixture import (ExpansionError, FixtureBinding, FixtureDeclaration, FixtureTypeMismatch,
                            UnwrapDepthExceeded, define_fixture, tested_fixture)
from tested_fixture.transform import PRIVATE, PUBLIC, resolve_type


def test_parse_identifier_only():
    d = FixtureDeclaration.parse("STEP_1")
    assert d == FixtureDeclaration((), PRIVATE, "STEP_1", None)
    assert d.doc is None


def test_parse_full_payload():
    d = FixtureDeclaration.parse('"""Doc comment on the binding""" @slow public STEP_1: models.Foo')
    assert d.annotations == ('"""Doc comment on the binding"""', "@slow")
    assert d.visibility == PUBLIC
    assert d.identifier == "STEP_1"
    assert d.fixture_type == "models.Foo"
    assert d.doc == "Doc comment on the binding"


def test_parse_multiple_doc_annotations():
    d = FixtureDeclaration.parse("'first line' 'second line' private SETUP")
    assert d.doc == "first line\nsecond line"
    assert d.visibility == PRIVATE


def test_parse_visibility_word_as_identifier():
    assert FixtureDeclaration.parse("public").identifier == "public"
    assert FixtureDeclaration.parse("public: int") == FixtureDeclaration((), PRIVATE, "public", "int")


def test_parse_generic_type():
    assert FixtureDeclaration.parse("ITEMS: list[int]").fixture_type == "list[int]"


def test_parse_non_ascii_identifier():
    d = FixtureDeclaration.parse("'étape' ÉTAPE_1: État")
    assert d.identifier == "ÉTAPE_1"
    assert d.fixture_type == "État"
    assert d.doc == "étape"


@pytest.mark.parametrize("payload,message", [
    ("", "expected identifier"),
    ("'doc only'", "expected identifier"),
    ("class", "expected identifier, found 'class'"),
    ("1ST", "expected identifier, found '1'"),
    ("²X", "expected identifier, found '²X'"),
    ("STEP STEP_2", "expected ':' or end of payload, found 'STEP_2'"),
    ("STEP:", "expected type after ':'"),
    ("STEP: 3x", "expected type, found '3x'"),
])
def test_parse_errors(payload, message):
    with pytest.raises(ExpansionError, match=message):
        FixtureDeclaration.parse(payload)


def test_parse_error_points_at_column():
    with pytest.raises(ExpansionError) as e:
        FixtureDeclaration.parse("STEP STEP_2")
    assert e.value.column == 5
    assert str(e.value).endswith("STEP STEP_2\n       ^")


def test_decorator_is_not_collected():
    assert tested_fixture.__test__ is False


def test_decorator_requires_payload():
    with pytest.raises(ExpansionError, match="payload string"):
        @tested_fixture  # type: ignore
        def setup():
            return 1


def test_define_fixture_installs_binding(make_module):
    module = make_module("""
        from tested_fixture import tested_fixture

        __all__ = ["step_1"]
        calls = []

        @tested_fixture('"Doc of STEP_1" public STEP_1')
        def step_1():
            calls.append(1)
            return {"answer": 42}
    """)
    binding = module.STEP_1
    assert isinstance(binding, FixtureBinding)
    assert binding.__doc__ == "Doc of STEP_1"
    assert module.__all__ == ["step_1", "STEP_1"]
    assert "uninitialized" in repr(binding)
    assert module.calls == []

    assert binding["answer"] == 42
    assert binding.get("answer") == 42, "attribute reads are forwarded"
    assert "answer" in binding
    assert len(binding) == 1
    assert binding() is binding(), "the same object is shared"
    assert module.calls == [1]
    assert "(initialized)" in repr(binding)


def test_test_entry_keeps_function_identity(make_module):
    module = make_module("""
        import pytest
        from tested_fixture import tested_fixture

        @tested_fixture("SETUP")
        @pytest.mark.usefixtures("tmp_path")
        def setup():
            '''set things up'''
            return 1
    """)
    entry = module.setup
    assert entry.__name__ == "setup"
    assert entry.__doc__ == "set things up"
    assert entry.__test__ is True
    assert entry.__tested_fixture__ is module.SETUP
    assert [m.name for m in entry.pytestmark] == ["usefixtures"]
    assert entry() is None
    assert module.SETUP() == 1


def test_binding_does_not_initialize_on_private_probe(make_module):
    module = make_module("""
        from tested_fixture import tested_fixture

        @tested_fixture("SETUP")
        def setup():
            raise AssertionError("must not run")
    """)
    assert getattr(module.SETUP, "__test__", False) is False
    assert getattr(module.SETUP, "_pytestfixturefunction", None) is None
    assert not module.SETUP._entry.initialized


def test_binding_is_read_only(make_module):
    module = make_module("""
        from tested_fixture import tested_fixture

        @tested_fixture("SETUP")
        def setup():
            return 1
    """)
    with pytest.raises(AttributeError, match="read only"):
        module.SETUP.value = 2


def test_binding_annotations_do_not_initialize(make_module):
    module = make_module("""
        from tested_fixture import tested_fixture

        calls = []

        @tested_fixture('"doc" @slow @db.heavy SETUP')
        def setup():
            calls.append(1)
            return 7
    """)
    assert module.SETUP.annotations == ('"doc"', "@slow", "@db.heavy")
    assert module.calls == []
    assert not module.SETUP._entry.initialized


def test_binding_truth_value(make_module):
    module = make_module("""
        from tested_fixture import tested_fixture

        @tested_fixture("SEVEN")
        def seven():
            return 7

        @tested_fixture("ZERO")
        def zero():
            return 0
    """)
    assert module.SEVEN
    assert not module.ZERO


def test_explicit_type_is_resolved_lazily(make_module):
    module = make_module("""
        from tested_fixture import Ok, Result, tested_fixture

        @tested_fixture("SETUP: HeavySetup")
        def setup() -> "Result[HeavySetup, str]":
            return Ok(HeavySetup(2))

        class HeavySetup:
            def __init__(self, value):
                self.value = value
    """)
    assert module.SETUP.value == 2
    assert isinstance(module.SETUP(), module.HeavySetup)


def test_explicit_type_mismatch(make_module):
    module = make_module("""
        from tested_fixture import tested_fixture

        @tested_fixture("SETUP: str")
        def setup():
            return 1
    """)
    with pytest.raises(FixtureTypeMismatch):
        module.SETUP()


@pytest.mark.parametrize("source,message", [
    ("""
        @tested_fixture("SETUP")
        def setup(tmp_path):
            return 1
    """, "must not take parameters"),
    ("""
        @tested_fixture("SETUP")
        async def setup():
            return 1
    """, "async fixture bodies are not supported"),
    ("""
        @tested_fixture("setup")
        def setup():
            return 1
    """, "same name as the test"),
    ("""
        SETUP = 1

        @tested_fixture("SETUP")
        def setup():
            return 1
    """, "'SETUP' is already defined"),
])
def test_define_fixture_errors(make_module, source, message):
    with pytest.raises(ExpansionError, match=message):
        make_module("from tested_fixture import tested_fixture\n" + textwrap.dedent(source))


def test_declared_nesting_too_deep(make_module):
    with pytest.raises(UnwrapDepthExceeded):
        make_module("""
            from tested_fixture import Ok, tested_fixture

            @tested_fixture("SETUP")
            def setup() -> Ok[Ok[Ok[Ok[Ok[int]]]]]:
                return Ok(Ok(Ok(Ok(Ok(1)))))
        """)


def test_define_fixture_without_decorator(make_module):
    module = make_module("""
        def build():
            return [1, 2, 3]
    """)
    entry = define_fixture("NUMBERS", module.build)
    assert list(module.NUMBERS) == [1, 2, 3]
    assert entry.__tested_fixture__ is module.NUMBERS


def test_resolve_type(make_module):
    module = make_module("""
        import collections
        from typing import List
    """)
    namespace = module.__dict__
    assert resolve_type("int", namespace) is int
    assert resolve_type("collections.OrderedDict", namespace) is collections.OrderedDict
    assert resolve_type("List[int]", namespace) is list
    with pytest.raises(ExpansionError, match="is not defined"):
        resolve_type("Missing", namespace)
    with pytest.raises(ExpansionError, match="has no attribute"):
        resolve_type("collections.Missing", namespace)
