"""Custom exception hierarchy for content_upgrade."""

from __future__ import annotations

from typing import Any


class ContentUpgradeError(Exception):
    """Base for all content upgrade errors."""

    kind = "error"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "message": str(self)}


class ParamsBrokenError(ContentUpgradeError):
    """Serialized parameters could not be parsed into an object."""

    kind = "paramsBroken"

    def __init__(self, content_id: Any) -> None:
        super().__init__(f"Parameters of content {content_id} are broken")
        self.content_id = content_id

    def to_dict(self) -> dict[str, Any]:
        return {"type": "errorParamsBroken", "id": self.content_id}


class ScriptMissingError(ContentUpgradeError):
    """Library declares upgrade hooks but none are registered."""

    kind = "scriptMissing"

    def __init__(self, library: str) -> None:
        super().__init__(f"Upgrade script missing for {library}")
        self.library = library

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "library": self.library}


class VersionFormatError(ContentUpgradeError, ValueError):
    """Text is not a "major.minor" version."""

    kind = "versionFormat"


class LibraryNotFoundError(ContentUpgradeError):
    """The loader has no descriptor for the requested library version."""

    kind = "libraryNotFound"


class DuplicateHookError(ContentUpgradeError):
    """An upgrade hook is already registered for this library version."""

    kind = "duplicateHook"
