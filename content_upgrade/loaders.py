"""Library loaders — hand out the schema of a library at a given version."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from content_upgrade.exceptions import LibraryNotFoundError
from content_upgrade.types import LibraryDescriptor, LibraryName, Version


class BaseLibraryLoader(ABC):
    @abstractmethod
    async def load(self, name: LibraryName, version: Version) -> LibraryDescriptor: ...


class StaticLibraryLoader(BaseLibraryLoader):
    """In-memory catalog of library descriptors keyed by "name major.minor".

    Used by the CLI (from a JSON catalog file) and by tests.
    """

    def __init__(self, catalog: dict[str, LibraryDescriptor | dict[str, Any]] | None = None) -> None:
        self._catalog: dict[tuple[LibraryName, Version], LibraryDescriptor] = {}
        for key, descriptor in (catalog or {}).items():
            name, _, version = key.partition(" ")
            self.add(descriptor, version, name=name)

    def add(
        self,
        descriptor: LibraryDescriptor | dict[str, Any],
        version: str | Version,
        name: LibraryName | None = None,
    ) -> LibraryDescriptor:
        if not isinstance(descriptor, LibraryDescriptor):
            data = dict(descriptor)
            if name:
                data.setdefault("name", name)
            descriptor = LibraryDescriptor.model_validate(data)
        self._catalog[(name or descriptor.name, Version.parse(version))] = descriptor
        return descriptor

    @classmethod
    def from_file(cls, path: str | Path) -> StaticLibraryLoader:
        """Load a catalog file: ``{"Name 1.2": {"semantics": [...]}, ...}``."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(data)

    async def load(self, name: LibraryName, version: Version) -> LibraryDescriptor:
        descriptor = self._catalog.get((name, version))
        if descriptor is None:
            raise LibraryNotFoundError(f"Library {name} {version} not found")
        return descriptor
