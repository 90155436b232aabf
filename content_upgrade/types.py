"""Core types shared across the upgrade engine."""

from __future__ import annotations

import re
import traceback
from dataclasses import dataclass
from typing import Annotated, Any, Literal, TypeAlias, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
)

from content_upgrade.exceptions import VersionFormatError

# ── Parameter trees ───────────────────────────────────────────────────────────

ParamsTree: TypeAlias = Any
LibraryName: TypeAlias = str

_VERSION_RE = re.compile(r"^\s*(\d+)\.(\d+)\s*$")


# ── Versions ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True, order=True)
class Version:
    """A (major, minor) library version, ordered lexicographically."""

    major: int
    minor: int

    @classmethod
    def parse(cls, value: str | Version) -> Version:
        if isinstance(value, Version):
            return value
        match = _VERSION_RE.match(str(value))
        if match is None:
            raise VersionFormatError(f"Invalid version '{value}', expected 'major.minor'")
        return cls(int(match.group(1)), int(match.group(2)))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class LibraryRef:
    """A "name major.minor" library identity as written into params."""

    name: LibraryName
    version_text: str

    @classmethod
    def parse(cls, text: str) -> LibraryRef:
        parts = text.split(" ")[:2]
        if len(parts) < 2 or not parts[0]:
            raise VersionFormatError(f"Invalid library identity '{text}'")
        return cls(parts[0], parts[1])

    @property
    def version(self) -> Version:
        return Version.parse(self.version_text)

    def __str__(self) -> str:
        return f"{self.name} {self.version_text}"


# ── Field descriptors (semantics) ─────────────────────────────────────────────


class LibraryField(BaseModel):
    """Slot holding one embedded sub-content of any listed library version."""

    type: Literal["library"] = "library"
    name: str = ""
    options: list[str] = Field(default_factory=list)


class GroupField(BaseModel):
    """Nested record. A single-field group is stored unwrapped."""

    type: Literal["group"] = "group"
    name: str = ""
    fields: list[FieldDescriptor] = Field(default_factory=list)


class ListField(BaseModel):
    """Homogeneous sequence whose elements all follow ``field``."""

    type: Literal["list"] = "list"
    name: str = ""
    field: FieldDescriptor


class OpaqueField(BaseModel):
    """Any other field type. Never traversed."""

    type: str = "text"
    name: str = ""


def _field_kind(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if kind in ("library", "group", "list") else "other"


FieldDescriptor = Annotated[
    Union[
        Annotated[LibraryField, Tag("library")],
        Annotated[GroupField, Tag("group")],
        Annotated[ListField, Tag("list")],
        Annotated[OpaqueField, Tag("other")],
    ],
    Discriminator(_field_kind),
]

GroupField.model_rebuild()
ListField.model_rebuild()


class LibraryDescriptor(BaseModel):
    """Schema of one library version, as handed out by a loader."""

    model_config = ConfigDict(populate_by_name=True)

    name: LibraryName
    semantics: list[FieldDescriptor] = Field(default_factory=list)
    has_upgrade_script: bool = Field(
        default=False,
        validation_alias=AliasChoices("has_upgrade_script", "upgradesScript", "hasUpgradeScript"),
    )


# ── Diagnostics ───────────────────────────────────────────────────────────────


class HookDiagnostic(BaseModel):
    """Human-readable record of a failed upgrade hook."""

    message: str
    name: str
    stack: str = ""
    library: LibraryName = ""
    version: str = ""

    @classmethod
    def from_exception(
        cls, exc: BaseException, library: LibraryName = "", version: str = ""
    ) -> HookDiagnostic:
        return cls(
            message=str(exc),
            name=type(exc).__name__,
            stack="".join(traceback.format_exception(exc)),
            library=library,
            version=version,
        )
