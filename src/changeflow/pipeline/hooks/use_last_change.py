"""Use the metadata of the most recent change for the commit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from changeflow.pipeline.guards import has_current_changes
from changeflow.pipeline.hook import hook

if TYPE_CHECKING:
    from changeflow.pipeline.context import TransformContext

logger = logging.getLogger(__name__)


def use_last_change_guard(ctx: TransformContext) -> bool:
    """Guard: Run only when there is a change to take metadata from.

    Args:
        ctx: Transformation context

    Returns:
        True if the run has at least one current change
    """
    return has_current_changes(ctx)


@hook(reads=["current_changes"], writes=["author", "message"])
def use_last_change(ctx: TransformContext, params: dict[str, Any]) -> None:
    """Copy the resolved author and/or message of the last current change.

    The last change is the final element in origin order.

    Args:
        ctx: Transformation context
        params: Optional keys:
            - author: Use the change's resolved author (default True)
            - message: Use the change's message (default False)
    """
    last = ctx.current_changes[-1]

    if params.get("author", True):
        ctx.set_author(last.author)
    if params.get("message", False):
        ctx.set_message(last.message)

    logger.debug("Using metadata of change %s", last.reference)
