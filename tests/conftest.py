"""Shared fixtures for changeflow tests."""

import pytest

from changeflow.authoring import Author, Authoring
from changeflow.change import Change, Revision
from changeflow.pipeline.context import TransformContext


@pytest.fixture
def jane() -> Author:
    return Author("Jane Doe", "jane@x.com")


@pytest.fixture
def ci_bot() -> Author:
    return Author("CI Bot", "ci@x.com")


@pytest.fixture
def current_changes() -> list[Change]:
    """Three changes in origin order r1, r2, r3."""
    return [
        Change(Revision("r1"), Author("J", "j@x.com"), "fix\n\nBUG=101", {"BUG": "101"}),
        Change(Revision("r2"), Author("K", "k@x.com"), "second change", {}),
        Change(Revision("r3"), Author("L", "l@x.com"), "third change\n\nbody", {"BUG": "303", "TEAM": "core"}),
    ]


@pytest.fixture
def make_context(jane):
    """Factory for contexts with sensible defaults."""

    def _make(
        message: str = "Fix bug",
        author: Author | None = None,
        current=(),
        migrated=(),
        authoring=None,
    ) -> TransformContext:
        return TransformContext(
            message=message,
            author=author or jane,
            current_changes=current,
            migrated_changes=migrated,
            authoring=authoring or Authoring.pass_thru(),
        )

    return _make

