"""Debug-mode checks of how hooks use the context.

A hook declares the context keys it reads and writes. Declarations are
checked against the keys a TransformContext actually exposes, and in debug
mode each hook sees a TrackedContext that records which of those keys it
touched so undeclared access can be reported after the run.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from changeflow.pipeline.hook import HookSpec

logger = logging.getLogger(__name__)

CONTEXT_KEYS = frozenset({"message", "author", "current_changes", "migrated_changes"})
"""Keys a hook may declare in ``reads``/``writes``."""

WRITABLE_KEYS = frozenset({"message", "author"})
"""Keys a hook may change; the change batches are read-only."""

_MUTATORS = {"set_message": "message", "set_author": "author"}


def check_declarations(spec: HookSpec) -> list[str]:
    """Check a hook's declared keys against the context surface.

    Args:
        spec: Hook specification to check

    Returns:
        Problem descriptions; empty if the declarations are valid
    """
    problems: list[str] = []

    unknown = (spec.reads | spec.writes) - CONTEXT_KEYS
    if unknown:
        problems.append(f"Hook '{spec.name}' declares unknown context keys: {sorted(unknown)}")

    read_only = (spec.writes & CONTEXT_KEYS) - WRITABLE_KEYS
    if read_only:
        problems.append(f"Hook '{spec.name}' declares writes to read-only keys: {sorted(read_only)}")

    return problems


@dataclass
class HookAccess:
    """Context keys one hook touched during a run."""

    reads: set[str] = field(default_factory=set)
    writes: set[str] = field(default_factory=set)


class AccessTracker:
    """Collects per-hook context access for one run.

    Attributes:
        access: Mapping of hook name to the keys it touched
    """

    def __init__(self) -> None:
        self.access: dict[str, HookAccess] = {}
        self._active: HookAccess | None = None

    @contextmanager
    def tracking(self, hook_name: str) -> Iterator[HookAccess]:
        """Attribute access recorded inside the block to ``hook_name``.

        Args:
            hook_name: Hook currently executing

        Yields:
            The access record for that hook (shared when a hook runs twice)
        """
        self._active = self.access.setdefault(hook_name, HookAccess())
        try:
            yield self._active
        finally:
            self._active = None

    def record(self, key: str, *, write: bool = False) -> None:
        """Record access to a context key by the active hook.

        Access outside a ``tracking`` block is not attributed and is dropped.

        Args:
            key: One of CONTEXT_KEYS
            write: True for a write, False for a read
        """
        if self._active is None:
            return
        (self._active.writes if write else self._active.reads).add(key)

    def validate(self, hooks: Iterable[HookSpec]) -> list[str]:
        """Compare recorded access with what the hooks declared.

        Specs sharing a name pool their declarations.

        Args:
            hooks: Hook specifications that ran

        Returns:
            Violation messages, reads before writes per hook
        """
        declared_reads: dict[str, set[str]] = defaultdict(set)
        declared_writes: dict[str, set[str]] = defaultdict(set)
        for spec in hooks:
            declared_reads[spec.name] |= spec.reads
            declared_writes[spec.name] |= spec.writes

        violations: list[str] = []
        for hook_name, seen in self.access.items():
            undeclared_reads = seen.reads - declared_reads[hook_name]
            if undeclared_reads:
                violations.append(f"Hook '{hook_name}' read undeclared keys: {sorted(undeclared_reads)}")
            undeclared_writes = seen.writes - declared_writes[hook_name]
            if undeclared_writes:
                violations.append(f"Hook '{hook_name}' wrote undeclared keys: {sorted(undeclared_writes)}")
        return violations


class TrackedContext:
    """TransformContext stand-in that records access to context keys.

    Reading one of CONTEXT_KEYS counts as a read. Assigning ``message`` or
    ``author``, or calling ``set_message``/``set_author``, counts as a write.
    Any other assignment raises AttributeError. Other attributes
    (``authoring``, ``state``, ...) are forwarded unrecorded.
    """

    def __init__(self, ctx: Any, tracker: AccessTracker) -> None:
        object.__setattr__(self, "_ctx", ctx)
        object.__setattr__(self, "_tracker", tracker)

    def __getattr__(self, name: str) -> Any:
        ctx = object.__getattribute__(self, "_ctx")
        tracker: AccessTracker = object.__getattribute__(self, "_tracker")

        if name in _MUTATORS:
            tracker.record(_MUTATORS[name], write=True)
        elif name in CONTEXT_KEYS:
            tracker.record(name)

        return getattr(ctx, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in WRITABLE_KEYS:
            raise AttributeError(f"Hooks may only assign {sorted(WRITABLE_KEYS)}, not '{name}'")

        tracker: AccessTracker = object.__getattribute__(self, "_tracker")
        tracker.record(name, write=True)
        setattr(object.__getattribute__(self, "_ctx"), name, value)
