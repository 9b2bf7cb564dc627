"""changeflow - commit message and author transformation for migration runs."""

from changeflow.authoring import Author, Authoring, AuthoringMode, AuthoringPolicy
from changeflow.change import Change, ChangeView, Revision
from changeflow.pipeline import PipelineExecutor, TransformContext, TransformResult, hook

__all__ = [
    "Author",
    "Authoring",
    "AuthoringMode",
    "AuthoringPolicy",
    "Change",
    "ChangeView",
    "Revision",
    "PipelineExecutor",
    "TransformContext",
    "TransformResult",
    "hook",
]
