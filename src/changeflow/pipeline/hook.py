"""Hook specification and decorator.

Defines the HookSpec class, the @hook decorator and the global registry
of named hooks that configuration can refer to.
"""

from __future__ import annotations

import dataclasses
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from changeflow.pipeline.context import TransformContext


# Type aliases
GuardFn = Callable[["TransformContext"], bool]
HandlerFn = Callable[["TransformContext", dict[str, Any]], None]


@runtime_checkable
class Transformer(Protocol):
    """Single capability of a transformation: mutate the context in place."""

    def transform(self, ctx: TransformContext) -> None: ...


def always_true(ctx: TransformContext) -> bool:
    """Default guard that always returns True."""
    return True


@dataclass
class HookSpec:
    """Specification for a transformation hook.

    Attributes:
        name: Hook identifier
        handler: Function that mutates the context
        guard: Predicate that determines if handler should run
        reads: Context keys this hook reads
        writes: Context keys this hook writes
        params: Static parameters passed to handler
    """

    name: str
    handler: HandlerFn
    guard: GuardFn = always_true
    reads: frozenset[str] = field(default_factory=frozenset)
    writes: frozenset[str] = field(default_factory=frozenset)
    params: dict[str, Any] = field(default_factory=dict)

    def should_run(self, ctx: TransformContext) -> bool:
        """Check if this hook should run for the given context."""
        return self.guard(ctx)

    def execute(self, ctx: TransformContext, extra_params: dict[str, Any] | None = None) -> None:
        """Execute the hook handler, ignoring the guard.

        Args:
            ctx: Transformation context
            extra_params: Additional parameters to merge with static params
        """
        params = dict(self.params)
        if extra_params:
            params.update(extra_params)
        self.handler(ctx, params)

    def transform(self, ctx: TransformContext) -> None:
        """Run the handler if the guard passes."""
        if self.should_run(ctx):
            self.execute(ctx)

    def with_params(self, params: dict[str, Any]) -> HookSpec:
        """Copy of this spec with extra static parameters."""
        return dataclasses.replace(self, params={**self.params, **params})


class _HookRegistry:
    """Global registry for hooks decorated with @hook."""

    def __init__(self) -> None:
        self._hooks: dict[str, HookSpec] = {}

    def register_spec(self, spec: HookSpec) -> None:
        """Register a hook specification."""
        self._hooks[spec.name] = spec

    def get_spec(self, name: str) -> HookSpec | None:
        """Get a hook specification by name."""
        return self._hooks.get(name)

    def get_all_specs(self) -> dict[str, HookSpec]:
        """Get all registered hook specifications."""
        return dict(self._hooks)


# Global registry
_registry = _HookRegistry()


def get_registry() -> _HookRegistry:
    """Get the global hook registry."""
    return _registry


def hook(
    *,
    reads: list[str] | None = None,
    writes: list[str] | None = None,
    guard: GuardFn | None = None,
) -> Callable[[HandlerFn], HandlerFn]:
    """Decorator to register a function as a transformation hook.

    Args:
        reads: Context keys this hook reads
        writes: Context keys this hook writes
        guard: Predicate that determines if handler should run

    Returns:
        Decorator function

    Example:
        @hook(reads=["current_changes"], writes=["message"])
        def squash_notes(ctx: TransformContext, params: dict) -> None:
            ...

        # Define guard separately (naming convention: {hook_name}_guard)
        def squash_notes_guard(ctx: TransformContext) -> bool:
            return bool(ctx.current_changes)
    """

    def decorator(fn: HandlerFn) -> HandlerFn:
        # Try to find guard function by convention
        resolved_guard = guard
        if resolved_guard is None:
            module = sys.modules.get(fn.__module__)
            if module:
                resolved_guard = getattr(module, f"{fn.__name__}_guard", None)

        spec = HookSpec(
            name=fn.__name__,
            handler=fn,
            guard=resolved_guard or always_true,
            reads=frozenset(reads or []),
            writes=frozenset(writes or []),
        )
        _registry.register_spec(spec)

        # Attach spec to function for introspection
        fn._hook_spec = spec  # type: ignore[attr-defined]
        return fn

    return decorator


def create_hook_spec(
    name: str,
    handler: HandlerFn,
    *,
    reads: list[str] | None = None,
    writes: list[str] | None = None,
    guard: GuardFn | None = None,
    params: dict[str, Any] | None = None,
) -> HookSpec:
    """Create a HookSpec programmatically (without decorator).

    Args:
        name: Hook identifier
        handler: Function that mutates the context
        reads: Context keys this hook reads
        writes: Context keys this hook writes
        guard: Predicate that determines if handler should run
        params: Static parameters passed to handler

    Returns:
        HookSpec instance
    """
    return HookSpec(
        name=name,
        handler=handler,
        guard=guard or always_true,
        reads=frozenset(reads or []),
        writes=frozenset(writes or []),
        params=params or {},
    )


def as_hook_spec(obj: Any) -> HookSpec:
    """Adapt a hook-like object to a HookSpec.

    Accepts a HookSpec, a function decorated with @hook, an object with a
    ``transform(ctx)`` method, or a plain ``fn(ctx, params)`` function.

    Raises:
        TypeError: If the object cannot act as a hook
    """
    if isinstance(obj, HookSpec):
        return obj

    spec = getattr(obj, "_hook_spec", None)
    if isinstance(spec, HookSpec):
        return spec

    if isinstance(obj, Transformer):
        return create_hook_spec(
            getattr(obj, "name", type(obj).__name__),
            lambda ctx, params: obj.transform(ctx),
        )

    if callable(obj):
        return create_hook_spec(getattr(obj, "__name__", repr(obj)), obj)

    raise TypeError(f"Object of type {type(obj).__name__} cannot be used as a hook")
