"""Pipeline executor.

Runs the configured hooks, one at a time and in configured order, over a
single TransformContext.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from changeflow.authoring import Authoring
from changeflow.pipeline.context import ContextState, TransformContext, TransformResult
from changeflow.pipeline.hook import as_hook_spec
from changeflow.pipeline.overrides import HookOverride, OverrideSet
from changeflow.pipeline.validation import AccessTracker, TrackedContext, check_declarations

if TYPE_CHECKING:
    from changeflow.authoring import Author, AuthoringPolicy
    from changeflow.change import Change
    from changeflow.pipeline.hook import HookSpec

logger = logging.getLogger(__name__)


class HookExecutionError(RuntimeError):
    """A hook failed while transforming the context.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, hook_name: str, error: BaseException) -> None:
        super().__init__(f"Hook '{hook_name}' failed: {type(error).__name__}: {error}")
        self.hook_name = hook_name


class PipelineExecutor:
    """Executes hooks in configured order.

    Attributes:
        hooks: Hook specifications in execution order
        extra_params: Additional parameters passed to all hooks
        overrides: Force-run / force-skip overrides
        debug: Track and report undeclared context access
    """

    def __init__(
        self,
        hooks: Sequence[Any],
        extra_params: dict[str, Any] | None = None,
        overrides: OverrideSet | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize executor with hooks.

        Args:
            hooks: HookSpecs or hook-like objects (see ``as_hook_spec``)
            extra_params: Additional parameters passed to all hooks
            overrides: Override set applied to every run
            debug: Enable access tracking
        """
        self.hooks: list[HookSpec] = [as_hook_spec(h) for h in hooks]
        self.extra_params = extra_params or {}
        self.overrides = overrides or OverrideSet()
        self.debug = debug

        if self.hooks:
            logger.info("Pipeline execution order: %s", " → ".join(self.get_execution_order()))
        else:
            logger.info("Pipeline has no hooks configured")

        for spec in self.hooks:
            for problem in check_declarations(spec):
                logger.warning("Hook declaration: %s", problem)

        known = {spec.name for spec in self.hooks}
        for name in self.overrides.overrides:
            if name not in known:
                logger.warning("Override for unknown hook '%s' ignored", name)

    def execute(self, ctx: TransformContext) -> TransformContext:
        """Execute the hook chain over a context.

        Each hook sees the mutations of every hook before it. A failing hook
        stops the chain; mutations already applied are left in place and the
        context cannot be executed again.

        Args:
            ctx: Freshly constructed context for the current run

        Returns:
            The same context, finalized

        Raises:
            ValueError: If the context was already used by a previous run
            HookExecutionError: If a hook guard or handler raises
        """
        if ctx.state is not ContextState.CONSTRUCTED:
            raise ValueError(
                f"TransformContext already used (state: {ctx.state.value}); create a new context per run"
            )
        ctx.state = ContextState.TRANSFORMING

        tracker = AccessTracker() if self.debug else None
        target: Any = TrackedContext(ctx, tracker) if tracker else ctx

        for spec in self.hooks:
            if tracker:
                with tracker.tracking(spec.name):
                    self._execute_hook(target, spec)
            else:
                self._execute_hook(target, spec)

        if tracker:
            for violation in tracker.validate(self.hooks):
                logger.warning("Access validation: %s", violation)

        ctx.state = ContextState.FINALIZED
        return ctx

    def _execute_hook(self, ctx: Any, spec: HookSpec) -> None:
        """Execute a single hook, honoring overrides and guards.

        Raises:
            HookExecutionError: If the guard or the handler raises
        """
        hook_name = spec.name

        try:
            if not self.overrides.should_run(hook_name, lambda: spec.should_run(ctx)):
                reason = "override" if self.overrides.get_override(hook_name) is HookOverride.FORCE_SKIP else "guard"
                logger.debug("Hook '%s' skipped (%s)", hook_name, reason)
                return

            logger.debug("Executing hook '%s'", hook_name)
            spec.execute(ctx, self.extra_params)
        except Exception as e:
            logger.error(
                "Hook '%s' failed: %s: %s",
                hook_name,
                type(e).__name__,
                str(e),
            )
            raise HookExecutionError(hook_name, e) from e

    def run(
        self,
        message: str,
        author: Author,
        current_changes: Iterable[Change],
        migrated_changes: Iterable[Change] = (),
        authoring: AuthoringPolicy | None = None,
    ) -> TransformResult:
        """Build a fresh context, run the chain and return the final metadata.

        Args:
            message: Initial commit message
            author: Initial commit author
            current_changes: Changes migrated in this run
            migrated_changes: Previously migrated changes
            authoring: Authoring policy (pass-through if omitted)

        Returns:
            Final message and author
        """
        ctx = TransformContext(
            message=message,
            author=author,
            current_changes=current_changes,
            migrated_changes=migrated_changes,
            authoring=authoring or Authoring.pass_thru(),
        )
        return self.execute(ctx).to_result()

    def get_execution_order(self) -> list[str]:
        """Get hook names in execution order."""
        return [spec.name for spec in self.hooks]
