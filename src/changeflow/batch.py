"""Loading of change batches handed to the pipeline.

A batch file (YAML or JSON) describes one run:

    message: "Fix bug"
    author: "Jane Doe <jane@example.com>"
    current_changes:
      - ref: r1
        author: "J <j@example.com>"
        message: "fix"
        labels: {BUG: "123"}
    migrated_changes: []
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from changeflow.authoring import Author
from changeflow.change import Change, Revision, parse_labels

logger = logging.getLogger(__name__)


def _check_author(value: str) -> str:
    Author.parse(value)
    return value


class ChangeRecord(BaseModel):
    """One change as written in a batch file."""

    ref: str
    """Origin reference (commit SHA, change number, ...)"""

    author: str
    """Original author in 'Name <email>' form"""

    message: str = ""
    """Original message"""

    labels: dict[str, str] | None = None
    """Labels; parsed from the message when omitted"""

    url: str | None = None
    """Origin repository location"""

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str) -> str:
        return _check_author(v)

    def to_change(self) -> Change:
        labels = self.labels if self.labels is not None else parse_labels(self.message)
        return Change(
            reference=Revision(self.ref, url=self.url),
            author=Author.parse(self.author),
            message=self.message,
            labels=labels,
        )


class ChangeBatch(BaseModel):
    """Inputs of one migration run."""

    message: str
    author: str
    current_changes: list[ChangeRecord] = Field(default_factory=list)
    migrated_changes: list[ChangeRecord] = Field(default_factory=list)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str) -> str:
        return _check_author(v)

    def to_author(self) -> Author:
        return Author.parse(self.author)

    def to_changes(self) -> tuple[tuple[Change, ...], tuple[Change, ...]]:
        """Convert records to domain changes.

        Returns:
            (current changes, migrated changes), order preserved
        """
        return (
            tuple(r.to_change() for r in self.current_changes),
            tuple(r.to_change() for r in self.migrated_changes),
        )


def load_batch(path: Path) -> ChangeBatch:
    """Load and validate a batch file.

    JSON is accepted too, being a subset of YAML.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the content is invalid
        yaml.YAMLError: If the file is not valid YAML
    """
    with path.open() as f:
        data = yaml.safe_load(f) or {}

    batch = ChangeBatch.model_validate(data)
    logger.debug(
        "Loaded batch from %s: %d current, %d migrated change(s)",
        path,
        len(batch.current_changes),
        len(batch.migrated_changes),
    )
    return batch
