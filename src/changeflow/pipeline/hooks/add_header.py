"""Add header hook.

Prepends a header to the message, with ``${LABEL}`` placeholders taken
from the labels of the most recent change in the run.
"""

from __future__ import annotations

import logging
from string import Template
from typing import TYPE_CHECKING, Any

from changeflow.pipeline.hook import hook

if TYPE_CHECKING:
    from changeflow.pipeline.context import TransformContext

logger = logging.getLogger(__name__)


@hook(reads=["message", "current_changes"], writes=["message"])
def add_header(ctx: TransformContext, params: dict[str, Any]) -> None:
    """Prepend a header to the message.

    Args:
        ctx: Transformation context
        params: Keys:
            - text: Header template (required)
            - ignore_label_not_found: Leave the message untouched when a
              label is missing instead of failing (default False)
            - new_line: Separate header and message with a newline (default True)

    Raises:
        KeyError: If a label is missing and ignore_label_not_found is False
    """
    template = Template(params["text"])
    changes = ctx.current_changes
    labels = dict(changes[-1].labels) if changes else {}

    try:
        header = template.substitute(labels)
    except KeyError as e:
        if params.get("ignore_label_not_found", False):
            logger.debug("add_header: label %s not found, message left unchanged", e)
            return
        raise

    separator = "\n" if params.get("new_line", True) else ""
    ctx.set_message(header + separator + ctx.message)
