"""Transformation context handed to hooks during a migration run.

Holds the working message and author for the commit being produced, plus
read-only views over the changes being migrated and the changes migrated
before.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from changeflow.change import ChangeView, to_change_view

if TYPE_CHECKING:
    from changeflow.authoring import Author, AuthoringPolicy
    from changeflow.change import Change


class ContextState(Enum):
    """Lifecycle of a context within one run."""

    CONSTRUCTED = "constructed"
    TRANSFORMING = "transforming"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class TransformResult:
    """Final commit metadata read back after the hook chain."""

    message: str
    author: Author


class TransformContext:
    """Mutable context for one run of the transformation hooks.

    Hooks may read everything and may replace the message and the author.
    The change batches are captured as tuples when the context is built and
    cannot be modified through it.

    Attributes:
        state: Lifecycle state, maintained by the executor
    """

    def __init__(
        self,
        message: str,
        author: Author,
        current_changes: Iterable[Change],
        migrated_changes: Iterable[Change],
        authoring: AuthoringPolicy,
    ) -> None:
        """Initialize the context.

        Args:
            message: Initial commit message
            author: Initial commit author
            current_changes: Changes migrated in this run, in origin order
            migrated_changes: Changes migrated by previous runs or iterations
            authoring: Policy used to resolve authors in change views
        """
        self._message = message
        self._author = author
        self._current_changes: tuple[Change, ...] = tuple(current_changes)
        self._migrated_changes: tuple[Change, ...] = tuple(migrated_changes)
        self._authoring = authoring
        self.state = ContextState.CONSTRUCTED

    def __repr__(self) -> str:
        return (
            f"TransformContext(message={self._message!r}, author={self._author!r}, "
            f"current_changes={len(self._current_changes)}, "
            f"migrated_changes={len(self._migrated_changes)}, state={self.state.value})"
        )

    @property
    def message(self) -> str:
        """Message to be used in the commit."""
        return self._message

    @message.setter
    def message(self, value: str) -> None:
        self._message = value

    def set_message(self, message: str) -> None:
        """Replace the message to be used in the commit."""
        self._message = message

    @property
    def author(self) -> Author:
        """Author to be used in the commit."""
        return self._author

    @author.setter
    def author(self, value: Author) -> None:
        self._author = value

    def set_author(self, author: Author) -> None:
        """Replace the author to be used in the commit."""
        self._author = author

    @property
    def authoring(self) -> AuthoringPolicy:
        return self._authoring

    @property
    def current_changes(self) -> tuple[ChangeView, ...]:
        """Changes that will be migrated, with resolved authors."""
        return tuple(to_change_view(c, self._authoring) for c in self._current_changes)

    @property
    def migrated_changes(self) -> tuple[ChangeView, ...]:
        """Changes migrated in previous runs, or in previous iterations of this one."""
        return tuple(to_change_view(c, self._authoring) for c in self._migrated_changes)

    def to_result(self) -> TransformResult:
        """Snapshot the working message and author."""
        return TransformResult(message=self._message, author=self._author)
