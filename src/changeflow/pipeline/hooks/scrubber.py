"""Scrubber hook.

Removes (or replaces) text matching a regular expression from the message.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from changeflow.pipeline.guards import has_message
from changeflow.pipeline.hook import hook

if TYPE_CHECKING:
    from changeflow.pipeline.context import TransformContext


def scrubber_guard(ctx: TransformContext) -> bool:
    """Guard: A blank message has nothing to scrub."""
    return has_message(ctx)


@hook(reads=["message"], writes=["message"])
def scrubber(ctx: TransformContext, params: dict[str, Any]) -> None:
    """Apply ``re.sub(regex, replacement, message)``.

    Args:
        ctx: Transformation context
        params: Keys:
            - regex: Pattern to scrub (required), compiled with re.MULTILINE
            - replacement: Replacement text (default "")
    """
    pattern = re.compile(params["regex"], re.MULTILINE)
    ctx.set_message(pattern.sub(params.get("replacement", ""), ctx.message))
