import textwrap
import types

import pytest


@pytest.fixture
def make_module():
    """execute source as the body of a throwaway module and return the module"""
    def make(source: str, name: str = "sample_fixtures") -> types.ModuleType:
        module = types.ModuleType(name)
        exec(textwrap.dedent(source), module.__dict__)
        return module
    return make
