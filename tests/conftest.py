# tests/conftest.py
"""
Shared fixtures and sample sources for the validation_shims test-suite.
"""

import json

import pytest

from validation_shims import config as config_module
from validation_shims.metadata import StaticMetadataModule, TypeRecord, TypeUniverse
from validation_shims.symbol_index import SymbolIndex, SymbolIndexCache


# ─────────────────────────────────────────────────────────────────────
#  Sample sources
# ─────────────────────────────────────────────────────────────────────

SCENARIO_A_SRC = """\
import Alpha.Beta;

class Holder
{
    Gamma x;
}
"""

SCENARIO_B_SRC = """\
import Alpha.Beta;

class Holder
{
    int x;
}
"""

SCENARIO_C_SRC = """\
import Alpha.Beta; // Gamma

class Holder
{
    int x;
}
"""

CSHARP_HEADER_SRC = """\
// Copyright header
/* multi-line
   licence block */
#if UNITY_EDITOR
using System;
using System.Collections.Generic;
using static System.Math;
using Dict = System.Collections.Generic.Dictionary<string, int>;
using global::Game.Combat;
#endif

namespace Game.Tools
{
    using Game.Inner;

    public class Tool { }
}
"""


# ─────────────────────────────────────────────────────────────────────
#  Type metadata
# ─────────────────────────────────────────────────────────────────────

def make_records():
    return [
        TypeRecord("Alpha.Beta", "Gamma"),
        TypeRecord("Alpha.Beta", "Delta`1"),
        TypeRecord("Game.Combat", "Weapon"),
        TypeRecord("Game.Tags", "DamageAttribute", is_tag=True),
        TypeRecord("Game.Linq", "EnumerableExt", is_sealed=True, is_abstract=True,
                   extension_methods=2),
        TypeRecord("System", "String"),
        TypeRecord("System", "Console"),
        TypeRecord("", "GlobalThing"),
    ]


@pytest.fixture
def records():
    return make_records()


@pytest.fixture
def universe(records):
    return TypeUniverse([StaticMetadataModule("Game.Runtime", records)])


@pytest.fixture
def index(records):
    return SymbolIndex.from_records(records)


@pytest.fixture
def index_cache(universe):
    return SymbolIndexCache(universe)


@pytest.fixture
def catalog_file(tmp_path):
    """Write a JSON catalog and return its path."""
    def _write(types, module="Game.Runtime", name="types.json"):
        path = tmp_path / name
        path.write_text(json.dumps({"module": module, "types": types}), encoding="utf-8")
        return path
    return _write


@pytest.fixture(autouse=True)
def _reset_config():
    config_module.reset()
    yield
    config_module.reset()
