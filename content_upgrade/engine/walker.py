"""Field-descriptor walker — finds embedded sub-content inside a params tree.

Descends through ``group`` and ``list`` fields following the library's
semantics and hands every ``library`` field holding an outdated
sub-content back to the orchestrator. Other field types are leaves.

Results follow one convention throughout: ``None`` means "keep the
existing value", anything else replaces it. Replacements are written
into shallow copies, so the input tree is never modified.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from content_upgrade.engine.serial import run_serial
from content_upgrade.exceptions import VersionFormatError
from content_upgrade.types import (
    FieldDescriptor,
    GroupField,
    LibraryField,
    LibraryName,
    LibraryRef,
    ListField,
    ParamsTree,
    Version,
)

_logger = logging.getLogger(__name__)

UpgradeFn = Callable[[LibraryName, Version, Version, ParamsTree], Awaitable[ParamsTree]]


class FieldWalker:
    """Applies field descriptors to parameter values.

    ``upgrade`` is called to upgrade a nested sub-content from the version
    it uses to the version the field offers.
    """

    def __init__(self, upgrade: UpgradeFn) -> None:
        self._upgrade = upgrade

    async def upgrade_field(self, descriptor: FieldDescriptor, value: ParamsTree) -> ParamsTree | None:
        if value is None:
            return None
        if isinstance(descriptor, LibraryField):
            return await self._upgrade_library(descriptor, value)
        if isinstance(descriptor, GroupField):
            if len(descriptor.fields) == 1:
                # Single field groups are stored without the wrapper
                return await self.upgrade_field(descriptor.fields[0], value)
            return await self._upgrade_group(descriptor, value)
        if isinstance(descriptor, ListField):
            return await self._upgrade_list(descriptor, value)
        return None

    async def _upgrade_library(self, descriptor: LibraryField, value: ParamsTree) -> ParamsTree | None:
        if not isinstance(value, dict) or "library" not in value or "params" not in value:
            return None

        try:
            used = LibraryRef.parse(value["library"])
            used_version = used.version
        except (VersionFormatError, AttributeError):
            _logger.warning("Ignoring sub-content with invalid library '%s'", value["library"])
            return None

        for option in descriptor.options:
            try:
                available = LibraryRef.parse(option)
            except VersionFormatError:
                _logger.warning("Ignoring invalid library option '%s' on field '%s'", option, descriptor.name)
                continue
            if available.name != used.name:
                continue
            if available.version_text == used.version_text:
                return None

            available_version = available.version
            if used_version >= available_version:
                # Never downgrade
                return None

            _logger.debug(
                "Upgrading sub-content %s from %s to %s",
                used.name, used_version, available_version,
            )
            upgraded = await self._upgrade(
                available.name, used_version, available_version, value["params"]
            )
            return {
                **value,
                "library": f"{available.name} {available_version}",
                "params": upgraded,
            }

        # Library no longer offered by this field
        return None

    async def _upgrade_group(self, descriptor: GroupField, value: ParamsTree) -> ParamsTree | None:
        if not isinstance(value, dict):
            return None
        result = value

        async def _sub_field(_: int, sub_field: FieldDescriptor) -> None:
            nonlocal result
            upgraded = await self.upgrade_field(sub_field, result.get(sub_field.name))
            if upgraded is not None:
                if result is value:
                    result = dict(value)
                result[sub_field.name] = upgraded

        await run_serial(descriptor.fields, _sub_field)
        return None if result is value else result

    async def _upgrade_list(self, descriptor: ListField, value: ParamsTree) -> ParamsTree | None:
        if not isinstance(value, list):
            return None
        result = value

        async def _item(index: int, item: ParamsTree) -> None:
            nonlocal result
            upgraded = await self.upgrade_field(descriptor.field, item)
            if upgraded is not None:
                if result is value:
                    result = list(value)
                result[index] = upgraded

        await run_serial(value, _item)
        return None if result is value else result
