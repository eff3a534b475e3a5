"""
validation_shims/registry.py
════════════════════════════

Discovery and invocation of validator functions.

A validator is a module-level function (or a ``staticmethod``) tagged
with :func:`validation_method` that takes no arguments and is annotated
to return either ``bool`` or :class:`~validation_shims.results.ValidatorResult`::

    @validation_method
    def check_scene_names() -> bool:
        ...

    class Project:
        @validation_method
        @staticmethod
        def check_layers() -> ValidatorResult:
            ...

Discovery
─────────
The decorator appends every tagged function to a registration table,
which is the indexed lookup :class:`ValidatorRegistry` consults first.
If that path fails for any reason the registry walks ``sys.modules``
(or an explicit module list) looking for tagged functions instead;
modules and classes that fail to enumerate are skipped individually.

Functions with the wrong shape (instance/class methods, parameters, a
return annotation other than ``bool``/``ValidatorResult``) are still
discovered so they can be listed, but :meth:`ValidatorRegistry.try_run`
refuses to call them.

The registry never catches exceptions raised by a validator body; the
caller (see :mod:`validation_shims.runner`) does.
"""

from __future__ import annotations

import inspect
import logging
import sys
import typing
from dataclasses import dataclass, field
from enum import Enum
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from validation_shims.errors import DiscoveryError, InvalidValidatorSignature
from validation_shims.results import Fail, Pass, ValidatorResult

logger = logging.getLogger(__name__)

MARKER_ATTRIBUTE = "__validation_method__"

# Every function tagged with @validation_method, in definition order.
_REGISTRATION_TABLE: List[Any] = []


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — MARKER
# ═════════════════════════════════════════════════════════════════════════

def _unwrap(obj: Any) -> Any:
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    return obj


def validation_method(func):
    """Tag ``func`` as a validator and add it to the registration table."""
    target = _unwrap(func)
    setattr(target, MARKER_ATTRIBUTE, True)
    _REGISTRATION_TABLE.append(func)
    return func


def is_tagged(obj: Any) -> bool:
    return getattr(_unwrap(obj), MARKER_ATTRIBUTE, False) is True


def registration_table() -> List[Any]:
    return list(_REGISTRATION_TABLE)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — DESCRIPTORS
# ═════════════════════════════════════════════════════════════════════════

class ReturnKind(Enum):
    BOOLEAN = "bool"
    STRUCTURED = "ValidatorResult"
    INVALID = "invalid"


@dataclass(frozen=True)
class ValidatorDescriptor:
    """
    Discovered validator function.

    Attributes
    ----------
    qualified_name    : ``module.Qualname`` of the function
    declaring_context : module name, or ``module.Class`` for static methods
    return_kind       : declared return shape
    is_static         : callable without an instance or class
    parameter_count   : number of declared parameters
    func              : the underlying plain function
    """
    qualified_name: str
    declaring_context: str
    return_kind: ReturnKind
    is_static: bool
    parameter_count: int
    func: Callable[..., Any] = field(compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def label(self) -> str:
        """``Context.name`` without the package path, for display."""
        return f"{self.declaring_context.rsplit('.', 1)[-1]}.{self.name}"

    @property
    def eligible(self) -> bool:
        return (
            self.is_static
            and self.parameter_count == 0
            and self.return_kind is not ReturnKind.INVALID
        )


def _return_kind(func: Callable[..., Any]) -> ReturnKind:
    try:
        annotation = typing.get_type_hints(func).get("return")
    except Exception:
        annotation = getattr(func, "__annotations__", {}).get("return")

    if annotation is bool:
        return ReturnKind.BOOLEAN
    if isinstance(annotation, type) and issubclass(annotation, ValidatorResult):
        return ReturnKind.STRUCTURED
    if isinstance(annotation, str):
        # Forward reference that could not be resolved in the defining module.
        short = annotation.strip("'\"").rsplit(".", 1)[-1]
        if short == "bool":
            return ReturnKind.BOOLEAN
        if short == ValidatorResult.__name__:
            return ReturnKind.STRUCTURED
    return ReturnKind.INVALID


def _defined_in_class(qualname: str) -> bool:
    parts = qualname.split(".")
    return len(parts) > 1 and parts[-2] != "<locals>"


def _class_attribute(func: Callable[..., Any]) -> Any:
    """The raw class-body object ``func`` was defined as, or ``None``."""
    owner: Any = sys.modules.get(getattr(func, "__module__", ""), None)
    *path, name = func.__qualname__.split(".")
    for part in path:
        owner = getattr(owner, part, None)
        if owner is None:
            return None
    if not inspect.isclass(owner):
        return None
    return vars(owner).get(name)


def _takes_receiver(func: Callable[..., Any]) -> bool:
    """True when the first parameter is conventionally ``self`` or ``cls``."""
    try:
        params = list(inspect.signature(func).parameters)
    except (TypeError, ValueError):
        return False
    return bool(params) and params[0] in ("self", "cls")


def describe(obj: Any) -> ValidatorDescriptor:
    """Build the descriptor for a tagged object (function or static/class method)."""
    func = _unwrap(obj)
    if inspect.ismethod(func):
        # Bound method: bound to an instance or a class, never static.
        func = func.__func__
        is_static = False
    elif isinstance(obj, staticmethod):
        is_static = True
    elif isinstance(obj, classmethod):
        is_static = False
    elif _defined_in_class(getattr(func, "__qualname__", "")):
        # Tagged before @staticmethod was applied: ask the class body.
        attribute = _class_attribute(func)
        if attribute is None:
            # Class not reachable by qualname, e.g. defined inside a function.
            is_static = not _takes_receiver(func)
        else:
            is_static = isinstance(attribute, staticmethod)
    else:
        is_static = True

    module = getattr(func, "__module__", None) or "<unknown>"
    qualname = getattr(func, "__qualname__", None) or getattr(func, "__name__", repr(func))
    context = module
    if "." in qualname:
        context = f"{module}.{qualname.rsplit('.', 1)[0]}"

    try:
        parameter_count = len(inspect.signature(func).parameters)
    except (TypeError, ValueError):
        parameter_count = -1

    return ValidatorDescriptor(
        qualified_name=f"{module}.{qualname}",
        declaring_context=context,
        return_kind=_return_kind(func),
        is_static=is_static,
        parameter_count=parameter_count,
        func=func,
    )


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — BRUTE-FORCE WALK
# ═════════════════════════════════════════════════════════════════════════

def _class_members(cls: type) -> Iterable[Any]:
    for value in vars(cls).values():
        if is_tagged(value):
            yield value


def _module_members(module: ModuleType) -> Tuple[List[Any], List[str]]:
    """Tagged objects defined in ``module``; per-class failures become errors."""
    found: List[Any] = []
    errors: List[str] = []
    module_name = getattr(module, "__name__", "")
    for value in list(vars(module).values()):
        if inspect.isclass(value):
            if getattr(value, "__module__", None) != module_name:
                continue
            try:
                found.extend(_class_members(value))
            except Exception as exc:
                errors.append(f"{module_name}.{value.__qualname__}: {exc}")
        elif is_tagged(value) and getattr(_unwrap(value), "__module__", None) == module_name:
            found.append(value)
    return found, errors


def walk_modules(modules: Iterable[ModuleType]) -> List[Any]:
    """Collect tagged objects from every module, skipping ones that fail."""
    found: List[Any] = []
    for module in modules:
        if module is None:
            continue
        try:
            members, errors = _module_members(module)
        except Exception as exc:
            logger.debug("Skipping module %r during validator walk: %s", module, exc)
            continue
        for error in errors:
            logger.debug("Skipping class during validator walk: %s", error)
        found.extend(members)
    return found


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class ValidatorRegistry:
    """
    Host-owned cache of discovered validators.

    Usage
    -----
    >>> registry = ValidatorRegistry()
    >>> for descriptor in registry.get_validators():
    ...     ok, result = registry.try_run(descriptor)
    >>> registry.refresh()   # pick up validators from newly imported modules

    Parameters
    ----------
    table     : registration table to use as the indexed lookup
                (default: the one filled by :func:`validation_method`)
    modules   : modules walked by the fallback path (default: ``sys.modules``)
    use_index : consult the registration table before walking; ``False``
                forces the module walk
    """

    def __init__(
        self,
        table: Optional[Sequence[Any]] = None,
        modules: Optional[Sequence[ModuleType]] = None,
        use_index: bool = True,
    ) -> None:
        self._table = table
        self._modules = modules
        self._use_index = use_index
        self._cached: Optional[List[ValidatorDescriptor]] = None

    # ── discovery ────────────────────────────────────────────────────

    def get_validators(self) -> List[ValidatorDescriptor]:
        if self._cached is None:
            self._cached = self._discover()
        return list(self._cached)

    def refresh(self) -> List[ValidatorDescriptor]:
        self._cached = None
        return self.get_validators()

    def clear(self) -> None:
        self._cached = None

    @property
    def is_cached(self) -> bool:
        return self._cached is not None

    def _discover(self) -> List[ValidatorDescriptor]:
        if self._use_index:
            try:
                return self._discover_indexed()
            except Exception as exc:
                logger.warning("Indexed validator lookup failed (%s); walking modules", exc)
        return self._discover_by_walk()

    def _discover_indexed(self) -> List[ValidatorDescriptor]:
        table = self._table if self._table is not None else _REGISTRATION_TABLE
        if not isinstance(table, (list, tuple)):
            raise DiscoveryError(f"registration table is not a sequence: {table!r}")
        return self._dedupe(describe(obj) for obj in table)

    def _discover_by_walk(self) -> List[ValidatorDescriptor]:
        modules = self._modules
        if modules is None:
            modules = list(sys.modules.values())
        descriptors = []
        for obj in walk_modules(modules):
            try:
                descriptors.append(describe(obj))
            except Exception as exc:
                logger.debug("Could not describe %r: %s", obj, exc)
        return self._dedupe(descriptors)

    @staticmethod
    def _dedupe(descriptors: Iterable[ValidatorDescriptor]) -> List[ValidatorDescriptor]:
        seen: Dict[str, ValidatorDescriptor] = {}
        for descriptor in descriptors:
            # A later definition under the same name (module reload) wins.
            seen.pop(descriptor.qualified_name, None)
            seen[descriptor.qualified_name] = descriptor
        return list(seen.values())

    def find(self, name: str) -> Optional[ValidatorDescriptor]:
        """Look up by qualified name, ``Context.name`` label, or bare name."""
        validators = self.get_validators()
        for attr in ("qualified_name", "label", "name"):
            matches = [d for d in validators if getattr(d, attr) == name]
            if matches:
                return matches[0]
        return None

    @property
    def names(self) -> List[str]:
        return [d.qualified_name for d in self.get_validators()]

    # ── invocation ───────────────────────────────────────────────────

    def try_run(self, descriptor: ValidatorDescriptor) -> Tuple[bool, ValidatorResult]:
        """
        Invoke ``descriptor`` and normalize its return value.

        Returns ``(False, Fail(...))`` without calling anything when the
        signature is not eligible. Exceptions from the validator propagate.
        """
        if descriptor is None or not descriptor.eligible:
            return False, Fail(str(InvalidValidatorSignature(descriptor)))

        value = descriptor.func()
        if descriptor.return_kind is ReturnKind.BOOLEAN:
            return True, Pass() if value is True else Fail()

        if not isinstance(value, ValidatorResult):
            raise TypeError(
                f"{descriptor.qualified_name} returned {type(value).__name__}, "
                f"expected {ValidatorResult.__name__}"
            )
        return True, value


__all__ = [
    "MARKER_ATTRIBUTE",
    "ReturnKind",
    "ValidatorDescriptor",
    "ValidatorRegistry",
    "describe",
    "is_tagged",
    "registration_table",
    "validation_method",
    "walk_modules",
]
