"""Shared guard functions for transformation hooks."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from changeflow.pipeline.context import TransformContext


def has_current_changes(ctx: TransformContext) -> bool:
    """Check whether the run migrates anything.

    Args:
        ctx: Transformation context

    Returns:
        True if there is at least one current change
    """
    return bool(ctx.current_changes)


def has_message(ctx: TransformContext) -> bool:
    """Check whether the working message has content.

    Args:
        ctx: Transformation context

    Returns:
        True if the message is not blank
    """
    return bool(ctx.message.strip())
