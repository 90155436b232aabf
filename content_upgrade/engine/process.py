"""Upgrade orchestrator — upgrades one content tree, sub-content included.

For a library moving from ``old`` to ``new``:

1. load the ``new`` schema,
2. run the library's own hooks over ``(old, new]``,
3. walk the schema's fields and upgrade any embedded sub-content,
   which repeats these steps one level down.

The first failure anywhere aborts the whole tree. Callers never get a
partly upgraded result.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from content_upgrade.config import ContentUpgradeSettings, settings as default_settings
from content_upgrade.engine.hooks import DiagnosticSink, run_upgrade_hooks
from content_upgrade.engine.registry import UpgradeRegistry
from content_upgrade.engine.serial import run_serial
from content_upgrade.engine.walker import FieldWalker
from content_upgrade.exceptions import ParamsBrokenError
from content_upgrade.loaders import BaseLibraryLoader
from content_upgrade.types import FieldDescriptor, LibraryName, ParamsTree, Version

_logger = logging.getLogger(__name__)


class ContentUpgradeProcess:
    """Upgrades parameter trees using one loader and one hook registry."""

    def __init__(
        self,
        loader: BaseLibraryLoader,
        registry: UpgradeRegistry,
        *,
        settings: ContentUpgradeSettings | None = None,
        diagnostic_sink: DiagnosticSink | None = None,
    ) -> None:
        self._loader = loader
        self._registry = registry
        self._settings = settings or default_settings
        self._diagnostic_sink = diagnostic_sink
        self.walker = FieldWalker(self.upgrade)

    async def upgrade(
        self,
        name: LibraryName,
        old_version: str | Version,
        new_version: str | Version,
        params: ParamsTree,
    ) -> ParamsTree:
        """Upgrade ``params`` of library ``name`` and return the new tree."""
        old_version = Version.parse(old_version)
        new_version = Version.parse(new_version)

        library = await self._loader.load(name, new_version)
        params = await run_upgrade_hooks(
            library,
            old_version,
            new_version,
            params,
            self._registry,
            mode=self._settings.version_filter,
            diagnostic_sink=self._diagnostic_sink,
        )
        if not isinstance(params, dict):
            return params
        result = params

        async def _field(_: int, field: FieldDescriptor) -> None:
            nonlocal result
            upgraded = await self.walker.upgrade_field(field, result.get(field.name))
            if upgraded is not None:
                if result is params:
                    result = dict(params)
                result[field.name] = upgraded

        await run_serial(library.semantics, _field)
        return result


def parse_params(serialized_params: str | bytes, content_id: Any) -> ParamsTree:
    """Parse serialized params; anything but a JSON object or array is broken."""
    try:
        params = json.loads(serialized_params)
    except (TypeError, ValueError) as e:
        raise ParamsBrokenError(content_id) from e
    if not isinstance(params, (dict, list)):
        raise ParamsBrokenError(content_id)
    return params


def serialize_params(params: ParamsTree, ensure_ascii: bool = False) -> str:
    return json.dumps(params, separators=(",", ":"), ensure_ascii=ensure_ascii)


async def upgrade_content(
    library_name: LibraryName,
    old_version: str | Version,
    new_version: str | Version,
    serialized_params: str | bytes,
    content_id: Any,
    *,
    loader: BaseLibraryLoader,
    registry: UpgradeRegistry,
    settings: ContentUpgradeSettings | None = None,
    diagnostic_sink: DiagnosticSink | None = None,
) -> str:
    """Upgrade one serialized content item and return it serialized again."""
    params = parse_params(serialized_params, content_id)
    cfg = settings or default_settings

    process = ContentUpgradeProcess(
        loader, registry, settings=cfg, diagnostic_sink=diagnostic_sink,
    )
    _logger.info(
        "Upgrading content %s (%s %s -> %s)",
        content_id, library_name, old_version, new_version,
    )
    upgraded = await process.upgrade(library_name, old_version, new_version, params)
    return serialize_params(upgraded, ensure_ascii=cfg.ensure_ascii)
