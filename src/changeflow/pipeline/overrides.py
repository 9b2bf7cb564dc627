"""Per-run hook overrides.

Overrides come from the ``overrides`` config list and the CLI ``--hooks``
option, e.g. ``"+squash_notes,-scrubber"``:

- ``+name`` runs the hook even if its guard says no
- ``-name`` skips the hook
- ``name`` leaves the decision to the guard
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class HookOverride(Enum):
    """How a per-run override treats a configured hook."""

    NORMAL = "normal"
    FORCE_RUN = "force_run"
    FORCE_SKIP = "force_skip"


_PREFIXES = {"+": HookOverride.FORCE_RUN, "-": HookOverride.FORCE_SKIP}


@dataclass
class OverrideSet:
    """Overrides for one run, keyed by hook name.

    Attributes:
        overrides: Hook name to override mode
        raw: Override text as given, comma-joined across merges
    """

    overrides: dict[str, HookOverride] = field(default_factory=dict)
    raw: str = ""

    def get_override(self, hook_name: str) -> HookOverride:
        """Look up the override for a hook.

        Args:
            hook_name: Configured hook name

        Returns:
            The override mode, NORMAL for hooks not mentioned
        """
        return self.overrides.get(hook_name, HookOverride.NORMAL)

    def should_run(self, hook_name: str, guard: Callable[[], bool]) -> bool:
        """Decide whether a hook runs.

        The guard is only called for hooks without a forcing override, so a
        skipped hook's guard never sees the context.

        Args:
            hook_name: Configured hook name
            guard: Zero-argument callable evaluating the hook's guard

        Returns:
            True if the hook should execute
        """
        mode = self.get_override(hook_name)
        if mode is HookOverride.NORMAL:
            return guard()
        return mode is HookOverride.FORCE_RUN

    def merge(self, other: OverrideSet) -> OverrideSet:
        """Layer another override set on top of this one.

        Args:
            other: Overrides that take precedence (e.g. from the CLI)

        Returns:
            New set; for hooks named in both, ``other`` wins
        """
        raw = ",".join(text for text in (self.raw, other.raw) if text)
        return OverrideSet(overrides={**self.overrides, **other.overrides}, raw=raw)


def _parse_entry(entry: str) -> tuple[str, HookOverride] | None:
    mode = _PREFIXES.get(entry[0])
    if mode is None:
        return entry, HookOverride.NORMAL
    name = entry[1:].strip()
    return (name, mode) if name else None


def parse_overrides(value: str | None) -> OverrideSet:
    """Parse a comma-separated override string.

    Blank entries and bare prefixes are ignored. A later entry for the same
    hook replaces an earlier one.

    Args:
        value: Override text, or None

    Returns:
        Parsed overrides (empty for None or blank text)

    Examples:
        >>> parse_overrides("+squash_notes,-scrubber").get_override("scrubber")
        <HookOverride.FORCE_SKIP: 'force_skip'>
        >>> parse_overrides(None).overrides
        {}
    """
    text = (value or "").strip()
    parsed = (_parse_entry(entry) for entry in map(str.strip, text.split(",")) if entry)
    overrides = dict(item for item in parsed if item is not None)

    if overrides:
        logger.debug("Parsed hook overrides: %s", overrides)
    return OverrideSet(overrides=overrides, raw=text)
