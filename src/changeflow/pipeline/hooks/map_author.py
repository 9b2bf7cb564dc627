"""Map author hook.

Rewrites the working author through a mapping table.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from changeflow.authoring import Author, lookup_author
from changeflow.pipeline.hook import hook

if TYPE_CHECKING:
    from changeflow.pipeline.context import TransformContext

logger = logging.getLogger(__name__)


@hook(reads=["author"], writes=["author"])
def map_author(ctx: TransformContext, params: dict[str, Any]) -> None:
    """Replace the working author when it appears in the ``authors`` table.

    Args:
        ctx: Transformation context
        params: Keys:
            - authors: Mapping of ``Name <email>`` or email to ``Name <email>``
    """
    table = {key: Author.parse(value) for key, value in params.get("authors", {}).items()}
    mapped = lookup_author(table, ctx.author)
    if mapped is None:
        return

    logger.debug("Mapped author '%s' to '%s'", ctx.author, mapped)
    ctx.set_author(mapped)
