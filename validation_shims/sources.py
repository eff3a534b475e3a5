"""
validation_shims/sources.py
═══════════════════════════

Default file enumeration for the analyzer: walk project roots and hand
out ``(path, reader)`` pairs. Reading is deferred to the analyzer so that
one unreadable file is reported there and does not stop enumeration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class SourceFile:
    """A file path together with its full text."""
    path: str
    text: str

    def read(self) -> str:
        return self.text


@dataclass(frozen=True)
class LazySource:
    """A file path whose text is produced on demand by ``reader``."""
    path: str
    reader: Callable[[], str]

    def read(self) -> str:
        return self.reader()


def file_reader(path: Path, encoding: str = "utf-8") -> Callable[[], str]:
    def _read() -> str:
        with open(path, "r", encoding=encoding) as fh:
            return fh.read()
    return _read


def _matches(path: Path, suffixes: Sequence[str]) -> bool:
    name = path.name.lower()
    return any(name.endswith(s.lower()) for s in suffixes)


def iter_source_files(
    roots: Iterable[PathLike],
    suffixes: Sequence[str] = (".cs",),
    base: Optional[PathLike] = None,
    encoding: str = "utf-8",
) -> Iterator[LazySource]:
    """
    Yield every file under ``roots`` whose name ends with one of ``suffixes``.

    Suffixes are matched case-insensitively. Relative roots are resolved
    against ``base`` (default: the working directory). Paths are yielded in
    sorted order per root; a root that does not exist is skipped.
    """
    base_dir = Path(base) if base is not None else Path.cwd()
    seen = set()
    for root in roots:
        root_path = Path(root)
        if not root_path.is_absolute():
            root_path = base_dir / root_path
        if not root_path.exists():
            logger.info("Source root not found, skipping: %s", root_path)
            continue

        candidates = [root_path] if root_path.is_file() else sorted(root_path.rglob("*"))
        for path in candidates:
            if not path.is_file() or not _matches(path, suffixes):
                continue
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            yield LazySource(path=str(path), reader=file_reader(path, encoding))


__all__ = ["SourceFile", "LazySource", "iter_source_files", "file_reader"]
