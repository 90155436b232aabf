"""Upgrade Registry — per-library upgrade hooks indexed by major, then minor.

The registry is built by the caller before an upgrade starts and handed to
the engine, which only reads from it. Separate registries never share
state, so independent runs (tests, tenants) cannot interfere.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Awaitable, Callable

from content_upgrade.exceptions import DuplicateHookError
from content_upgrade.types import LibraryName, ParamsTree, Version

UpgradeHook = Callable[[ParamsTree], "ParamsTree | Awaitable[ParamsTree]"]
HookTable = Mapping[int, Mapping[int, UpgradeHook]]


def unwrap_hook(hook: Any) -> UpgradeHook:
    """Accept either a callable or an object exposing ``content_upgrade``."""
    inner = getattr(hook, "content_upgrade", None)
    if inner is not None:
        return inner
    if not callable(hook):
        raise TypeError(f"Upgrade hook must be callable, got {type(hook).__name__}")
    return hook


class UpgradeRegistry:
    """Registry of upgrade hooks for any number of libraries.

    A hook registered at version ``1.5`` transforms parameters written for
    an older version into the shape ``1.5`` expects. Hooks take the params
    and return the upgraded params, either directly or as an awaitable.
    """

    def __init__(self) -> None:
        self._hooks: dict[LibraryName, dict[int, dict[int, UpgradeHook]]] = {}

    def register(self, library: LibraryName, version: str | Version, hook: Any) -> None:
        ver = Version.parse(version)
        minors = self._hooks.setdefault(library, {}).setdefault(ver.major, {})
        if ver.minor in minors:
            raise DuplicateHookError(f"Upgrade hook for {library} {ver} already registered")
        minors[ver.minor] = unwrap_hook(hook)

    def hook(self, library: LibraryName, version: str | Version) -> Callable[[Any], Any]:
        """Decorator form of :meth:`register`."""
        def _decorator(fn: Any) -> Any:
            self.register(library, version, fn)
            return fn
        return _decorator

    def has(self, library: LibraryName) -> bool:
        return library in self._hooks

    def libraries(self) -> list[LibraryName]:
        return sorted(self._hooks)

    def hooks_for(self, library: LibraryName) -> HookTable:
        """Read-only ``major -> minor -> hook`` view, both levels ascending."""
        majors = self._hooks.get(library, {})
        return MappingProxyType({
            major: MappingProxyType(dict(sorted(majors[major].items())))
            for major in sorted(majors)
        })

    def __len__(self) -> int:
        return sum(len(minors) for majors in self._hooks.values() for minors in majors.values())
