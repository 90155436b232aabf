"""Version-range hook dispatcher.

Runs the upgrade hooks a library registered between the version content
was written for and the version it is being upgraded to, in ascending
(major, minor) order. Each hook sees the output of the one before it.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Callable, Literal

from content_upgrade.engine.registry import UpgradeHook, UpgradeRegistry
from content_upgrade.engine.serial import run_serial
from content_upgrade.exceptions import ScriptMissingError
from content_upgrade.types import HookDiagnostic, LibraryDescriptor, ParamsTree, Version

_logger = logging.getLogger(__name__)

FilterMode = Literal["range", "legacy"]
DiagnosticSink = Callable[[HookDiagnostic], None]


def major_in_range(major: int, old: Version, new: Version) -> bool:
    return old.major <= major <= new.major


def hook_in_range(
    major: int, minor: int, old: Version, new: Version, mode: FilterMode = "range"
) -> bool:
    """Whether the hook at ``major.minor`` applies to an ``old -> new`` upgrade.

    ``legacy`` compares the hook's minor straight against both endpoint
    minors whatever the major is. It matches ``range`` only when old and
    new share a major.
    """
    if not major_in_range(major, old, new):
        return False
    if mode == "legacy":
        return old.minor < minor <= new.minor
    return old < Version(major, minor) <= new


async def call_hook(
    hook: UpgradeHook,
    params: ParamsTree,
    library: str,
    version: Version,
    diagnostic_sink: DiagnosticSink | None = None,
) -> ParamsTree:
    """Run one hook. Sync and async failures are reported once, then re-raised."""
    try:
        result = hook(params)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        _logger.error("Upgrade hook %s %s failed: %s", library, version, e, exc_info=True)
        if diagnostic_sink is not None:
            try:
                diagnostic_sink(HookDiagnostic.from_exception(e, library, str(version)))
            except Exception:
                _logger.exception("Diagnostic sink failed for hook %s %s", library, version)
        raise e
    # Hooks that edit params in place may return nothing
    return params if result is None else result


async def run_upgrade_hooks(
    library: LibraryDescriptor,
    old_version: Version,
    new_version: Version,
    params: ParamsTree,
    registry: UpgradeRegistry,
    *,
    mode: FilterMode = "range",
    diagnostic_sink: DiagnosticSink | None = None,
) -> ParamsTree:
    """Thread ``params`` through every hook in ``(old_version, new_version]``."""
    if not registry.has(library.name):
        if library.has_upgrade_script:
            raise ScriptMissingError(f"{library.name} {new_version}")
        return params

    current = params

    async def _major(major: int, minors: Mapping[int, UpgradeHook]) -> None:
        if not major_in_range(major, old_version, new_version):
            return

        async def _minor(minor: int, hook: UpgradeHook) -> None:
            nonlocal current
            if not hook_in_range(major, minor, old_version, new_version, mode):
                return
            _logger.debug("Running upgrade hook %s %d.%d", library.name, major, minor)
            current = await call_hook(
                hook, current, library.name, Version(major, minor), diagnostic_sink
            )

        await run_serial(minors, _minor)

    await run_serial(registry.hooks_for(library.name), _major)
    return current
