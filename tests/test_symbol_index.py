# tests/test_symbol_index.py
"""
Tests for type metadata loading and the namespace symbol index.
"""

import pytest

from validation_shims.errors import MetadataLoadError, PartialMetadataLoadError
from validation_shims.metadata import (
    JsonMetadataModule,
    LoadResult,
    StaticMetadataModule,
    TypeRecord,
    TypeUniverse,
    load_module,
)
from validation_shims.symbol_index import (
    SymbolIndex,
    SymbolIndexCache,
    build_symbol_index,
    strip_arity,
    tag_short_name,
)


class _BrokenModule:
    name = "Broken"

    def load_types(self):
        raise RuntimeError("assembly could not be loaded")


class _PartialModule:
    name = "Partial"

    def load_types(self):
        raise PartialMetadataLoadError(
            self.name,
            loaded=[TypeRecord("Part.Ok", "Survivor")],
            errors=["Part.Bad.Missing: dependency not found"],
        )


class TestNameHelpers:

    def test_strip_arity(self):
        assert strip_arity("List`1") == "List"
        assert strip_arity("Dictionary`2") == "Dictionary"
        assert strip_arity("Plain") == "Plain"

    def test_tag_short_name(self):
        assert tag_short_name("ObsoleteAttribute") == "Obsolete"
        assert tag_short_name("Marker") is None
        assert tag_short_name("Attribute") is None


class TestTypeRecord:

    def test_extension_container(self):
        record = TypeRecord("A", "Ext", is_sealed=True, is_abstract=True, extension_methods=1)
        assert record.is_static_container
        assert record.is_extension_container

    def test_static_class_without_extensions(self):
        record = TypeRecord("A", "Util", is_sealed=True, is_abstract=True)
        assert record.is_static_container
        assert not record.is_extension_container

    def test_sealed_only_is_not_container(self):
        record = TypeRecord("A", "Final", is_sealed=True, extension_methods=3)
        assert not record.is_extension_container

    def test_from_mapping(self):
        record = TypeRecord.from_mapping({
            "namespace": "Game.Tags", "name": "HitAttribute", "kind": "attribute",
        })
        assert record.is_tag
        assert record.is_class

    def test_from_mapping_struct(self):
        record = TypeRecord.from_mapping({"namespace": "M", "name": "Vec", "kind": "struct"})
        assert not record.is_class

    def test_from_mapping_rejects_missing_name(self):
        with pytest.raises(KeyError):
            TypeRecord.from_mapping({"namespace": "A"})


class TestSymbolIndex:

    def test_groups_by_namespace(self, index):
        assert index.type_names("Alpha.Beta") == {"Gamma", "Delta"}
        assert "Game.Combat" in index

    def test_types_without_namespace_ignored(self, index):
        assert "" not in index
        assert all("GlobalThing" not in names for names in index.namespace_types.values())

    def test_tag_short_names(self, index):
        assert index.type_names("Game.Tags") == {"DamageAttribute"}
        assert index.tag_names("Game.Tags") == {"Damage"}

    def test_non_tag_attribute_suffix_not_shortened(self):
        index = SymbolIndex.from_records([TypeRecord("N", "FooAttribute")])
        assert index.tag_names("N") == frozenset()

    def test_extension_namespaces(self, index):
        assert index.is_extension_namespace("Game.Linq")
        assert not index.is_extension_namespace("Game.Combat")

    def test_global_prefix_stripped_from_keys(self):
        index = SymbolIndex.from_records([TypeRecord("global::Root.Ns", "T")])
        assert "Root.Ns" in index
        assert "global::Root.Ns" not in index

    def test_unknown_namespace(self, index):
        assert "Nope" not in index
        assert index.type_names("Nope") == frozenset()

    def test_index_is_immutable(self, index):
        with pytest.raises(AttributeError):
            index.extension_namespaces = frozenset()


class TestJsonMetadataModule:

    def test_loads_all(self, catalog_file):
        path = catalog_file([
            {"namespace": "A", "name": "One"},
            {"namespace": "A", "name": "Two`1"},
        ])
        module = JsonMetadataModule(path)
        records = module.load_types()
        assert [r.name for r in records] == ["One", "Two`1"]
        assert module.name == "Game.Runtime"

    def test_partial_decode(self, catalog_file):
        path = catalog_file([
            {"namespace": "A", "name": "Good"},
            {"namespace": "A"},
            "not-an-object",
            {"namespace": "A", "name": "AlsoGood"},
        ])
        with pytest.raises(PartialMetadataLoadError) as info:
            JsonMetadataModule(path).load_types()
        assert [r.name for r in info.value.loaded] == ["Good", "AlsoGood"]
        assert len(info.value.errors) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(MetadataLoadError):
            JsonMetadataModule(tmp_path / "absent.json").load_types()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(MetadataLoadError):
            JsonMetadataModule(path).load_types()


class TestTypeUniverse:

    def test_load_module_success(self):
        result = load_module(StaticMetadataModule("M", [TypeRecord("A", "B")]))
        assert result.ok
        assert len(result.types) == 1

    def test_partial_failure_keeps_loaded_types(self):
        result = load_module(_PartialModule())
        assert [r.name for r in result.types] == ["Survivor"]
        assert result.errors == ["Part.Bad.Missing: dependency not found"]

    def test_total_failure_contributes_error_only(self):
        result = load_module(_BrokenModule())
        assert result.types == []
        assert len(result.errors) == 1

    def test_load_all_never_aborts(self, records):
        universe = TypeUniverse([
            _BrokenModule(),
            StaticMetadataModule("Good", records),
            _PartialModule(),
        ])
        result = universe.load_all()
        assert isinstance(result, LoadResult)
        assert len(result.types) == len(records) + 1
        assert len(result.errors) == 2

    def test_build_index_absorbs_partial_failures(self, records):
        universe = TypeUniverse([StaticMetadataModule("Good", records), _PartialModule(), _BrokenModule()])
        index = build_symbol_index(universe)
        assert "Part.Ok" in index
        assert "Alpha.Beta" in index
        assert len(index.errors) == 2

    def test_register_and_unregister(self):
        universe = TypeUniverse()
        universe.register(StaticMetadataModule("M"))
        assert len(universe) == 1
        universe.unregister("M")
        assert len(universe) == 0


class TestSymbolIndexCache:

    def test_lazy_build(self, index_cache):
        assert not index_cache.is_built
        index = index_cache.get()
        assert index_cache.is_built
        assert "Alpha.Beta" in index

    def test_built_once(self, index_cache):
        first = index_cache.get()
        second = index_cache.get()
        assert first is second
        assert index_cache.build_count == 1

    def test_stale_until_discarded(self, index_cache):
        index_cache.get()
        index_cache.universe.register(StaticMetadataModule("Late", [TypeRecord("Late.Ns", "T")]))
        assert "Late.Ns" not in index_cache.get()
        index_cache.discard()
        assert "Late.Ns" in index_cache.get()
        assert index_cache.build_count == 2
