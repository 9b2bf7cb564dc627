"""Changes read from the origin history and the read-only views given to hooks."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from changeflow.authoring import Author, AuthoringPolicy

_LABEL_RE = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9_-]*)(?:=|: )(?P<value>.*)$")


@runtime_checkable
class Reference(Protocol):
    """Opaque reference to a unit of origin history."""

    def as_string(self) -> str: ...


@dataclass(frozen=True)
class Revision:
    """Reference to an origin revision (commit SHA, change number, ...).

    Attributes:
        id: Revision identifier
        url: Optional location of the origin repository
    """

    id: str
    url: str | None = None

    def as_string(self) -> str:
        return self.id


RefLike = Union[Reference, str]


def reference_string(reference: RefLike) -> str:
    """Display form of a reference."""
    if isinstance(reference, str):
        return reference
    return reference.as_string()


def _readonly(labels: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(labels or {}))


@dataclass(frozen=True)
class Change:
    """One unit of history read from the origin.

    Attributes:
        reference: Origin reference
        author: Original author, as recorded in the origin
        message: Original message (may be empty)
        labels: Label mapping (read-only)
    """

    reference: RefLike
    author: Author
    message: str = ""
    labels: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", _readonly(self.labels))


@dataclass(frozen=True)
class ChangeView:
    """Read-only projection of a Change with its author resolved.

    Attributes:
        author: Author resolved through the authoring policy
        reference: Reference display string
        message: Original message
        labels: Label mapping (read-only)
    """

    author: Author
    reference: str
    message: str
    labels: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", _readonly(self.labels))

    @property
    def first_line(self) -> str:
        """First line of the message."""
        return self.message.split("\n", 1)[0]


def to_change_view(change: Change, authoring: AuthoringPolicy) -> ChangeView:
    """Project a Change into the view exposed to hooks.

    Args:
        change: Change from the origin
        authoring: Policy used to resolve the original author

    Returns:
        ChangeView with the resolved author
    """
    return ChangeView(
        author=authoring.resolve(change.author),
        reference=reference_string(change.reference),
        message=change.message,
        labels=change.labels,
    )


def parse_labels(message: str) -> dict[str, str]:
    """Extract ``KEY=value`` and ``Key: value`` lines from a message.

    The first line (the summary) is never treated as a label. Later
    occurrences of a key replace earlier ones.
    """
    labels: dict[str, str] = {}
    for line in message.splitlines()[1:]:
        match = _LABEL_RE.match(line.strip())
        if match:
            labels[match.group("key")] = match.group("value").strip()
    return labels
