"""Sorted, path-unique collection of module records."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from wsr.workspace.types import ModuleRecord


def module_sort_key(record: ModuleRecord) -> tuple[str, str]:
    return (record.short_name, record.path.as_posix())


class ModuleIndex(Sequence[ModuleRecord]):
    """Module records ordered by short name, then path.

    Records sharing a path are collapsed; a root record always replaces an
    ordinary record for the same directory.
    """

    def __init__(self, root: Path, records: Iterable[ModuleRecord]):
        self.root = root
        by_path: dict[Path, ModuleRecord] = {}
        for record in records:
            existing = by_path.get(record.path)
            if existing is None or (record.is_root and not existing.is_root):
                by_path[record.path] = record
        self._records = sorted(by_path.values(), key=module_sort_key)
        self._short_name_counts = Counter(r.short_name for r in self._records)

    def __getitem__(self, index):  # type: ignore[override]
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ModuleRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        names = ", ".join(r.short_name for r in self._records)
        return f"ModuleIndex(root={self.root!s}, modules=[{names}])"

    @property
    def root_module(self) -> ModuleRecord | None:
        for record in self._records:
            if record.is_root:
                return record
        return None

    def by_path(self, path: Path | None) -> ModuleRecord | None:
        if path is None:
            return None
        for record in self._records:
            if record.path == path:
                return record
        return None

    def is_unique_short_name(self, record: ModuleRecord) -> bool:
        return self._short_name_counts[record.short_name] <= 1

    def display_path(self, record: ModuleRecord) -> str:
        """Root-relative posix path of a module; ``""`` for the root itself."""
        try:
            relative = record.path.relative_to(self.root).as_posix()
        except ValueError:
            return record.path.as_posix()
        return "" if relative == "." else relative
