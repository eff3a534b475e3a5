# tests/test_registry.py
"""
Tests for validator discovery, signature checks and invocation.
"""

import logging
import types

import pytest

from validation_shims.registry import (
    ReturnKind,
    ValidatorRegistry,
    describe,
    is_tagged,
    validation_method,
    walk_modules,
)
from validation_shims.results import Fail, Pass, ValidatorResult


# ─────────────────────────────────────────────────────────────────────
#  Sample validators
# ─────────────────────────────────────────────────────────────────────

@validation_method
def returns_true() -> bool:
    return True


@validation_method
def returns_false() -> bool:
    return False


@validation_method
def returns_truthy_int() -> bool:
    return 1


@validation_method
def returns_fail_with_message() -> ValidatorResult:
    return Fail("x")


@validation_method
def returns_pass() -> ValidatorResult:
    return Pass("all good")


@validation_method
def returns_wrong_type() -> ValidatorResult:
    return "not a result"


@validation_method
def takes_argument(path) -> bool:
    return True


@validation_method
def unannotated():
    return True


@validation_method
def returns_int() -> int:
    return 0


@validation_method
def raises() -> bool:
    raise ValueError("boom")


class Checks:

    @validation_method
    @staticmethod
    def static_outer() -> bool:
        return True

    @staticmethod
    @validation_method
    def static_inner() -> bool:
        return True

    @validation_method
    def instance_method(self) -> bool:
        return True

    @validation_method
    @classmethod
    def class_method(cls) -> bool:
        return True

    def untagged(self) -> bool:
        return True


def _registry(*objs):
    return ValidatorRegistry(table=list(objs))


# ─────────────────────────────────────────────────────────────────────
#  Descriptors
# ─────────────────────────────────────────────────────────────────────

class TestDescribe:

    def test_module_function(self):
        d = describe(returns_true)
        assert d.qualified_name == "tests.test_registry.returns_true"
        assert d.declaring_context == "tests.test_registry"
        assert d.name == "returns_true"
        assert d.label == "test_registry.returns_true"
        assert d.return_kind is ReturnKind.BOOLEAN
        assert d.eligible

    def test_structured_return(self):
        assert describe(returns_pass).return_kind is ReturnKind.STRUCTURED

    def test_static_method_tagged_outside(self):
        d = describe(Checks.__dict__["static_outer"])
        assert d.is_static
        assert d.declaring_context == "tests.test_registry.Checks"
        assert d.label == "Checks.static_outer"
        assert d.eligible

    def test_static_method_tagged_inside(self):
        d = describe(Checks.static_inner)
        assert d.is_static
        assert d.eligible

    def test_instance_method_not_eligible(self):
        d = describe(Checks.instance_method)
        assert not d.is_static
        assert not d.eligible

    def test_class_method_not_eligible(self):
        assert not describe(Checks.__dict__["class_method"]).eligible
        assert not describe(Checks.class_method).eligible

    def test_parameters_not_eligible(self):
        d = describe(takes_argument)
        assert d.parameter_count == 1
        assert not d.eligible

    @pytest.mark.parametrize("func", [unannotated, returns_int])
    def test_bad_return_annotation(self, func):
        d = describe(func)
        assert d.return_kind is ReturnKind.INVALID
        assert not d.eligible

    def test_string_annotation(self):
        def forward() -> "ValidatorResult":
            return Pass()
        assert describe(forward).return_kind is ReturnKind.STRUCTURED

    def test_static_method_tagged_inside_local_class(self):
        class Local:
            @staticmethod
            @validation_method
            def check() -> bool:
                return True

            @validation_method
            def bound(self) -> bool:
                return True

        d = describe(Local.check)
        assert d.is_static
        assert d.eligible
        assert _registry().try_run(d) == (True, Pass())
        assert not describe(Local.bound).is_static

    def test_is_tagged(self):
        assert is_tagged(returns_true)
        assert is_tagged(Checks.__dict__["static_outer"])
        assert not is_tagged(Checks.untagged)


# ─────────────────────────────────────────────────────────────────────
#  Discovery
# ─────────────────────────────────────────────────────────────────────

class TestDiscovery:

    def test_indexed_lookup(self):
        registry = _registry(returns_true, returns_pass)
        assert registry.names == [
            "tests.test_registry.returns_true",
            "tests.test_registry.returns_pass",
        ]

    def test_ineligible_validators_are_listed(self):
        registry = _registry(returns_true, takes_argument, Checks.instance_method)
        assert len(registry.get_validators()) == 3

    def test_duplicates_collapse(self):
        registry = _registry(returns_true, returns_true)
        assert len(registry.get_validators()) == 1

    def test_default_table_holds_tagged_functions(self):
        names = ValidatorRegistry().names
        assert "tests.test_registry.returns_true" in names
        assert "tests.test_registry.Checks.static_inner" in names

    def test_cached_until_refresh(self):
        table = [returns_true]
        registry = ValidatorRegistry(table=table)
        assert len(registry.get_validators()) == 1
        assert registry.is_cached
        table.append(returns_pass)
        assert len(registry.get_validators()) == 1
        assert len(registry.refresh()) == 2

    def test_clear(self):
        registry = _registry(returns_true)
        registry.get_validators()
        registry.clear()
        assert not registry.is_cached

    def test_find(self):
        registry = _registry(returns_true, Checks.static_inner)
        assert registry.find("tests.test_registry.returns_true").name == "returns_true"
        assert registry.find("Checks.static_inner").name == "static_inner"
        assert registry.find("returns_true") is not None
        assert registry.find("missing") is None


def _fake_module():
    module = types.ModuleType("fake_validators")

    def loose() -> bool:
        return True

    def nested() -> bool:
        return False

    def untagged() -> bool:
        return True

    for func in (loose, nested, untagged):
        func.__module__ = module.__name__
    validation_method(loose)
    holder = type("Holder", (), {"nested": validation_method(staticmethod(nested))})
    holder.__module__ = module.__name__

    module.loose = loose
    module.untagged = untagged
    module.Holder = holder
    # Imported from elsewhere; must not be picked up as belonging here.
    module.returns_true = returns_true
    return module


class TestFallbackWalk:

    def test_walk_finds_module_and_class_members(self):
        found = walk_modules([_fake_module()])
        names = sorted(describe(obj).name for obj in found)
        assert names == ["loose", "nested"]

    def test_walk_skips_modules_that_fail(self):
        found = walk_modules([object(), None, _fake_module()])
        assert len(found) == 2

    def test_broken_index_falls_back_to_walk(self, caplog):
        registry = ValidatorRegistry(table="not-a-table", modules=[_fake_module()])
        with caplog.at_level(logging.WARNING, logger="validation_shims"):
            validators = registry.get_validators()
        assert sorted(d.name for d in validators) == ["loose", "nested"]
        assert "walking modules" in caplog.text

    def test_walk_without_index(self):
        registry = ValidatorRegistry(modules=[_fake_module()], use_index=False)
        assert len(registry.get_validators()) == 2


# ─────────────────────────────────────────────────────────────────────
#  Invocation
# ─────────────────────────────────────────────────────────────────────

class TestTryRun:

    def test_bool_true_passes_without_message(self):
        assert _registry().try_run(describe(returns_true)) == (True, Pass())

    def test_bool_false_fails_without_message(self):
        ok, result = _registry().try_run(describe(returns_false))
        assert ok
        assert not result.passed
        assert result.message is None

    def test_truthy_non_bool_fails(self):
        ok, result = _registry().try_run(describe(returns_truthy_int))
        assert ok
        assert not result.passed

    def test_structured_passes_through(self):
        assert _registry().try_run(describe(returns_fail_with_message)) == (True, Fail("x"))
        assert _registry().try_run(describe(returns_pass)) == (True, Pass("all good"))

    def test_invalid_signature_not_invoked(self):
        calls = []

        @validation_method
        def counting(arg) -> bool:
            calls.append(arg)
            return True

        ok, result = _registry().try_run(describe(counting))
        assert not ok
        assert not result.passed
        assert "Invalid validator signature" in result.message
        assert calls == []

    def test_missing_descriptor(self):
        ok, result = _registry().try_run(None)
        assert not ok
        assert not result.passed

    def test_exception_propagates(self):
        with pytest.raises(ValueError, match="boom"):
            _registry().try_run(describe(raises))

    def test_wrong_structured_type_raises(self):
        with pytest.raises(TypeError):
            _registry().try_run(describe(returns_wrong_type))
