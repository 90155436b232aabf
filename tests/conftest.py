"""Shared test fixtures — recording hooks and in-memory library catalogs."""

from __future__ import annotations

from typing import Any

import pytest

from content_upgrade.engine.registry import UpgradeRegistry
from content_upgrade.loaders import StaticLibraryLoader
from content_upgrade.types import LibraryDescriptor, LibraryName, Version


class HookRecorder:
    """Builds upgrade hooks that record their runs in call order."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def make(self, label: str, *, fail: Exception | None = None, sync: bool = False):
        def _apply(params: Any) -> Any:
            self.calls.append(label)
            if fail is not None:
                raise fail
            upgraded = dict(params)
            upgraded["applied"] = list(params.get("applied", [])) + [label]
            return upgraded

        if sync:
            return _apply

        async def _hook(params: Any) -> Any:
            return _apply(params)

        return _hook


class RecordingLibraryLoader(StaticLibraryLoader):
    """Static loader that remembers every load request. No storage."""

    def __init__(self, catalog: dict[str, Any] | None = None) -> None:
        super().__init__(catalog)
        self.loads: list[tuple[LibraryName, Version]] = []

    async def load(self, name: LibraryName, version: Version) -> LibraryDescriptor:
        self.loads.append((name, version))
        return await super().load(name, version)


@pytest.fixture
def recorder():
    return HookRecorder()


@pytest.fixture
def registry():
    return UpgradeRegistry()


@pytest.fixture
def make_loader():
    def _factory(catalog: dict[str, Any]) -> RecordingLibraryLoader:
        return RecordingLibraryLoader(catalog)
    return _factory
