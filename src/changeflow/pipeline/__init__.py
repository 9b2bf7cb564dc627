"""Transformation pipeline for commit metadata.

A run builds one TransformContext and hands it to each configured hook in
turn:

    Hook hᵢ = (gᵢ, fᵢ) where:
        gᵢ: Context → Bool    (guard)
        fᵢ: Context → None    (handler, mutates message/author in place)

    apply(h, s) = if guard(s) then handler(s)
"""

from changeflow.pipeline.context import ContextState, TransformContext, TransformResult
from changeflow.pipeline.executor import HookExecutionError, PipelineExecutor
from changeflow.pipeline.hook import HookSpec, Transformer, hook
from changeflow.pipeline.overrides import HookOverride, parse_overrides

__all__ = [
    "ContextState",
    "TransformContext",
    "TransformResult",
    "HookExecutionError",
    "PipelineExecutor",
    "HookSpec",
    "Transformer",
    "hook",
    "HookOverride",
    "parse_overrides",
]
