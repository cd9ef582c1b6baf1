"""Data model for patch histories and conflicts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple

from patchscope.core.errors import InternalError
from patchscope.syntax.tree import Span


class PatchStyle(str, Enum):
    """How a method assignment treats the implementation it replaces."""

    OVERWRITE = "overwrite"  # no reference to the prior implementation
    OVERRIDE = "override"  # calls the same-named ancestor method
    PATCHING = "patching"  # calls a captured copy of the prior method
    MIXING = "mixing"  # ancestor call plus alias, or an indirect alias

    @property
    def replaces(self) -> bool:
        """True for styles that discard the prior implementation."""
        return self in (PatchStyle.OVERWRITE, PatchStyle.OVERRIDE)


class ConflictKind(str, Enum):
    REPLACE = "replace"
    OUTDATED = "outdated"


class MethodKey(NamedTuple):
    """One patchable member slot."""

    class_name: str
    method_name: str
    is_static: bool

    @property
    def display(self) -> str:
        joiner = "." if self.is_static else ".prototype."
        return f"{self.class_name}{joiner}{self.method_name}"

    def on(self, class_name: str) -> MethodKey:
        """The same member slot on another class."""
        return MethodKey(class_name, self.method_name, self.is_static)


@dataclass(frozen=True, eq=False)
class Edit:
    """One recorded method assignment.

    Fixed once the history is built.
    """

    file: str
    span: Span
    style: PatchStyle
    class_name: str
    method_name: str
    is_static: bool
    display_name: str
    target_span: Span
    alias_count: int
    changed: bool
    owner: str | None = None

    @property
    def key(self) -> MethodKey:
        return MethodKey(self.class_name, self.method_name, self.is_static)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "class": self.class_name,
            "method": self.method_name,
            "static": self.is_static,
            "name": self.display_name,
            "style": self.style.value,
            "changed": self.changed,
            "alias_count": self.alias_count,
            "owner": self.owner,
            "span": self.span.to_dict(),
            "target_span": self.target_span.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class AliasRecord:
    """A patching edit on ``subclass`` whose real owner is another class."""

    subclass: str
    index: int


@dataclass(eq=False)
class Conflict:
    """An ordered pair of edits where the later one undermines the earlier.

    ``user_ignored`` is None until the user decides; ``ignored`` then falls
    back to the computed default.
    """

    kind: ConflictKind
    earlier: Edit
    later: Edit
    user_ignored: bool | None = None

    @property
    def edits(self) -> tuple[Edit, Edit]:
        return self.earlier, self.later

    @property
    def default_ignored(self) -> bool:
        # No load order can rescue a full replacement of a full replacement.
        return (
            self.kind is ConflictKind.REPLACE
            and self.earlier.style.replaces
            and self.later.style.replaces
        )

    @property
    def ignored(self) -> bool:
        if self.user_ignored is not None:
            return self.user_ignored
        return self.default_ignored

    def toggle_ignored(self) -> bool:
        """Flip this conflict's ignore state; returns the new state."""
        self.user_ignored = not self.ignored
        return self.user_ignored

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "ignored": self.ignored,
            "edits": [self.earlier.to_dict(), self.later.to_dict()],
        }


InheritanceMap = dict[str, str]


@dataclass(frozen=True)
class EditHistory:
    """Per-slot edit histories and alias registrations, in load order."""

    methods: Mapping[MethodKey, tuple[Edit, ...]]
    aliases: Mapping[MethodKey, tuple[AliasRecord, ...]]

    def resolve(self, key: MethodKey, record: AliasRecord) -> Edit:
        """The patching edit an alias record points at."""
        edits = self.methods.get(key.on(record.subclass), ())
        if record.index >= len(edits):
            raise InternalError.unexpected(
                "alias record points past its history",
                key=key.display,
                subclass=record.subclass,
                index=record.index,
            )
        return edits[record.index]

    @property
    def edit_count(self) -> int:
        return sum(len(edits) for edits in self.methods.values())
