"""Squash notes hook.

Replaces the message with a summary of every change in the run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from changeflow.pipeline.guards import has_current_changes
from changeflow.pipeline.hook import hook

if TYPE_CHECKING:
    from changeflow.pipeline.context import TransformContext

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "Imported changes:\n\n"


def squash_notes_guard(ctx: TransformContext) -> bool:
    """Guard: Nothing to summarise without current changes."""
    return has_current_changes(ctx)


@hook(reads=["current_changes"], writes=["message"])
def squash_notes(ctx: TransformContext, params: dict[str, Any]) -> None:
    """Replace the message with one bullet per migrated change.

    Args:
        ctx: Transformation context
        params: Optional keys:
            - prefix: Text placed before the list (default "Imported changes:\\n\\n")
            - max: Maximum number of changes listed, >= 0 (default 100)
            - show_ref: Include the change reference (default True)
            - show_author: Include the resolved author (default True)
            - oldest_first: List in origin order instead of newest first (default False)
    """
    prefix: str = params.get("prefix", DEFAULT_PREFIX)
    limit: int = int(params.get("max", 100))
    if limit < 0:
        raise ValueError(f"squash_notes max must be >= 0, got {limit}")
    show_ref: bool = params.get("show_ref", True)
    show_author: bool = params.get("show_author", True)

    changes = list(ctx.current_changes)
    if not params.get("oldest_first", False):
        changes.reverse()

    lines = []
    for change in changes[:limit]:
        parts = ["  -"]
        if show_ref:
            parts.append(change.reference)
        parts.append(change.first_line)
        if show_author:
            parts.append(f"by {change.author}")
        lines.append(" ".join(parts))

    if len(changes) > limit:
        lines.append(f"  (And {len(changes) - limit} more changes)")

    ctx.set_message(prefix + "\n".join(lines) + "\n")
    logger.debug("Squashed %d change(s) into message", len(changes))
