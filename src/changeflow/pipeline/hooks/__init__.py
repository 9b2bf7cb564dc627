"""Built-in transformation hooks.

Each hook uses the @hook decorator to register itself under its function
name so configuration can refer to it by that name.
"""

from changeflow.pipeline.hooks.add_header import add_header
from changeflow.pipeline.hooks.map_author import map_author
from changeflow.pipeline.hooks.scrubber import scrubber
from changeflow.pipeline.hooks.squash_notes import squash_notes
from changeflow.pipeline.hooks.use_last_change import use_last_change

__all__ = [
    "add_header",
    "map_author",
    "scrubber",
    "squash_notes",
    "use_last_change",
]
