"""
validation_shims/metadata.py
════════════════════════════

The "loaded type universe" the symbol index is built from.

Type information is supplied explicitly at startup as a sequence of
metadata modules. A module is anything with a ``name`` and a
``load_types()`` method; two implementations ship here:

  * :class:`StaticMetadataModule` — an in-memory table of records
  * :class:`JsonMetadataModule`   — a JSON catalog exported by a build

Catalog format::

    {
      "module": "Game.Runtime",
      "types": [
        {"namespace": "Game.Combat", "name": "Weapon"},
        {"namespace": "Game.Combat", "name": "Pool`1"},
        {"namespace": "Game.Tags", "name": "DamageAttribute", "kind": "attribute"},
        {"namespace": "Game.Linq", "name": "Ext", "kind": "class",
         "sealed": true, "abstract": true, "extension_methods": 3}
      ]
    }

Loading is a fallible batch: a module that can only decode part of its
types raises :class:`PartialMetadataLoadError` carrying the records that
did load, and :meth:`TypeUniverse.load_all` keeps those and records the
rest as errors.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Protocol, Sequence, Union

from validation_shims.errors import MetadataLoadError, PartialMetadataLoadError

logger = logging.getLogger(__name__)

TAG_KINDS = frozenset({"attribute", "tag", "annotation"})


@dataclass(frozen=True)
class TypeRecord:
    """
    Metadata for one type definition.

    Attributes
    ----------
    namespace         : dotted declaring namespace ("" for the global namespace)
    name              : simple name, possibly with an arity suffix (``List`1``)
    is_tag            : the type is an attribute/annotation type
    is_sealed         : the type cannot be derived from
    is_abstract       : the type cannot be instantiated
    is_class          : reference type (as opposed to struct/enum/interface)
    extension_methods : number of methods marked as extension methods
    """
    namespace: str
    name: str
    is_tag: bool = False
    is_sealed: bool = False
    is_abstract: bool = False
    is_class: bool = True
    extension_methods: int = 0

    @property
    def is_static_container(self) -> bool:
        """Sealed + abstract class: the shape a static utility class compiles to."""
        return self.is_class and self.is_sealed and self.is_abstract

    @property
    def is_extension_container(self) -> bool:
        return self.is_static_container and self.extension_methods > 0

    @classmethod
    def from_mapping(cls, entry: Mapping[str, Any]) -> TypeRecord:
        """Decode one catalog entry; raises ``KeyError``/``TypeError``/``ValueError``."""
        name = entry["name"]
        if not isinstance(name, str) or not name:
            raise ValueError(f"invalid type name {name!r}")
        namespace = entry.get("namespace") or ""
        if not isinstance(namespace, str):
            raise ValueError(f"invalid namespace {namespace!r}")
        kind = str(entry.get("kind", "class")).lower()
        return cls(
            namespace=namespace,
            name=name,
            is_tag=kind in TAG_KINDS or bool(entry.get("tag", False)),
            is_sealed=bool(entry.get("sealed", False)),
            is_abstract=bool(entry.get("abstract", False)),
            is_class=kind in {"class"} | TAG_KINDS,
            extension_methods=int(entry.get("extension_methods", 0)),
        )


@dataclass
class LoadResult:
    """Successes and failures of a metadata enumeration."""
    types: List[TypeRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def extend(self, other: LoadResult) -> None:
        self.types.extend(other.types)
        self.errors.extend(other.errors)


class MetadataModule(Protocol):
    """A unit of loaded type metadata (an assembly, a package, a catalog)."""

    name: str

    def load_types(self) -> Sequence[TypeRecord]:
        ...


class StaticMetadataModule:
    """In-memory metadata module."""

    def __init__(self, name: str, records: Iterable[TypeRecord] = ()) -> None:
        self.name = name
        self._records = list(records)

    def add(self, record: TypeRecord) -> None:
        self._records.append(record)

    def load_types(self) -> Sequence[TypeRecord]:
        return list(self._records)

    def __repr__(self) -> str:
        return f"<StaticMetadataModule '{self.name}' ({len(self._records)} types)>"


class JsonMetadataModule:
    """Metadata module backed by a JSON catalog file."""

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding
        self.name = str(self.path)

    def _read(self) -> Mapping[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding=self.encoding))
        except (OSError, ValueError) as exc:
            raise MetadataLoadError(self.name, cause=exc) from exc
        if not isinstance(data, dict) or not isinstance(data.get("types"), list):
            raise MetadataLoadError(self.name, f"{self.name}: catalog has no 'types' list")
        if isinstance(data.get("module"), str):
            self.name = data["module"]
        return data

    def load_types(self) -> Sequence[TypeRecord]:
        data = self._read()
        loaded: List[TypeRecord] = []
        errors: List[str] = []
        for index, entry in enumerate(data["types"]):
            try:
                loaded.append(TypeRecord.from_mapping(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                errors.append(f"{self.name}[{index}]: {exc!r}")
        if errors:
            raise PartialMetadataLoadError(self.name, loaded, errors)
        return loaded

    def __repr__(self) -> str:
        return f"<JsonMetadataModule '{self.path}'>"


class TypeUniverse:
    """
    Ordered set of metadata modules currently "loaded" by the host.

    Usage
    -----
    >>> universe = TypeUniverse()
    >>> universe.register(JsonMetadataModule("build/types.json"))
    >>> result = universe.load_all()
    >>> len(result.types), result.errors
    """

    def __init__(self, modules: Optional[Iterable[MetadataModule]] = None) -> None:
        self._modules: List[MetadataModule] = list(modules or [])

    def register(self, module: MetadataModule) -> None:
        self._modules.append(module)

    def unregister(self, name: str) -> None:
        self._modules = [m for m in self._modules if m.name != name]

    @property
    def modules(self) -> List[MetadataModule]:
        return list(self._modules)

    def __iter__(self) -> Iterator[MetadataModule]:
        return iter(list(self._modules))

    def __len__(self) -> int:
        return len(self._modules)

    def load_all(self) -> LoadResult:
        """
        Enumerate every module's types.

        Never raises: partial loads keep their successes, and a module that
        fails outright contributes a single error entry.
        """
        result = LoadResult()
        for module in self._modules:
            result.extend(load_module(module))
        return result


def load_module(module: MetadataModule) -> LoadResult:
    """Enumerate one module as a fallible batch."""
    try:
        return LoadResult(types=list(module.load_types()))
    except PartialMetadataLoadError as exc:
        logger.debug("Partial type load from %s: %s", module.name, exc)
        return LoadResult(types=list(exc.loaded), errors=list(exc.errors))
    except Exception as exc:
        logger.debug("Type load from %s failed: %s", getattr(module, "name", module), exc)
        return LoadResult(errors=[f"{getattr(module, 'name', module)}: {exc}"])


__all__ = [
    "TypeRecord",
    "LoadResult",
    "MetadataModule",
    "StaticMetadataModule",
    "JsonMetadataModule",
    "TypeUniverse",
    "load_module",
]
