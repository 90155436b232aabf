"""Serial async iteration — one entry at a time, in order, stop on first error.

Every step runs as its own asyncio task. The caller suspends while the
task runs from the event loop, so nested iterations (a list inside a
group inside sub-content inside a list ...) never stack Python frames on
top of each other.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any, Awaitable, Callable, Hashable

StepFn = Callable[[Hashable, Any], Awaitable[None]]


def _plan(collection: Mapping | Sequence) -> list[Hashable]:
    if isinstance(collection, Mapping):
        return list(collection.keys())
    return list(range(len(collection)))


async def run_serial(collection: Mapping | Sequence, step: StepFn) -> None:
    """Await ``step(key, value)`` for each entry of ``collection``.

    Sequences yield ``(index, item)``, mappings ``(key, value)``. The key
    list is captured before the first step, so adding or removing keys
    while iterating does not change what gets visited. An exception from
    a step stops the iteration and propagates; later entries are skipped.
    """
    for key in _plan(collection):
        if isinstance(collection, Mapping):
            value = collection.get(key)
        else:
            value = collection[key]
        await asyncio.create_task(step(key, value))
