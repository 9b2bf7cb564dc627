"""Tests for hook specifications, the decorator and the registry."""

import importlib
from typing import Any

import pytest

from changeflow.pipeline.context import TransformContext
from changeflow.pipeline.hook import (
    HookSpec,
    Transformer,
    _HookRegistry,
    always_true,
    as_hook_spec,
    create_hook_spec,
    get_registry,
    hook,
)

# The package re-exports the ``hook`` decorator, which shadows the submodule
# attribute; resolve the module itself explicitly.
hook_module = importlib.import_module("changeflow.pipeline.hook")


def shout(ctx: TransformContext, params: dict[str, Any]) -> None:
    ctx.set_message(ctx.message.upper() + params.get("suffix", ""))


class TestHookSpec:
    def test_execute_merges_params(self, make_context) -> None:
        spec = create_hook_spec("shout", shout, params={"suffix": "!"})
        ctx = make_context(message="fix")
        spec.execute(ctx, {"suffix": "?"})
        assert ctx.message == "FIX?"

    def test_transform_honors_guard(self, make_context) -> None:
        spec = create_hook_spec("shout", shout, guard=lambda ctx: ctx.message != "skip")
        ctx = make_context(message="skip")
        spec.transform(ctx)
        assert ctx.message == "skip"

        ctx = make_context(message="run")
        spec.transform(ctx)
        assert ctx.message == "RUN"

    def test_is_transformer(self) -> None:
        assert isinstance(create_hook_spec("shout", shout), Transformer)

    def test_with_params_copies(self) -> None:
        spec = create_hook_spec("shout", shout, params={"a": 1})
        derived = spec.with_params({"b": 2})
        assert derived.params == {"a": 1, "b": 2}
        assert spec.params == {"a": 1}

    def test_defaults(self) -> None:
        spec = create_hook_spec("shout", shout)
        assert spec.guard is always_true
        assert spec.reads == frozenset()
        assert spec.writes == frozenset()


class TestHookDecorator:
    def test_registers_with_guard_by_convention(self, make_context) -> None:
        # Guard resolution looks the name up in the defining module
        from changeflow.pipeline.hooks import squash_notes

        spec = get_registry().get_spec("squash_notes")
        assert spec is not None
        assert spec.handler is squash_notes
        assert spec.reads == frozenset({"current_changes"})
        assert spec.writes == frozenset({"message"})
        assert spec.should_run(make_context(current=[])) is False

    def test_decorated_function_registered(self, monkeypatch) -> None:
        monkeypatch.setattr(hook_module, "_registry", _HookRegistry())

        @hook(reads=["message"], writes=["message"], guard=lambda ctx: True)
        def temporary_hook(ctx: TransformContext, params: dict[str, Any]) -> None:
            pass

        spec = get_registry().get_spec("temporary_hook")
        assert isinstance(spec, HookSpec)
        assert temporary_hook._hook_spec is spec  # type: ignore[attr-defined]
        assert spec.reads == frozenset({"message"})
        assert list(get_registry().get_all_specs()) == ["temporary_hook"]


class TestAsHookSpec:
    def test_hook_spec_passthrough(self) -> None:
        spec = create_hook_spec("shout", shout)
        assert as_hook_spec(spec) is spec

    def test_decorated_function(self) -> None:
        from changeflow.pipeline.hooks.scrubber import scrubber

        assert as_hook_spec(scrubber) is get_registry().get_spec("scrubber")

    def test_plain_function(self, make_context) -> None:
        spec = as_hook_spec(shout)
        assert spec.name == "shout"
        ctx = make_context(message="fix")
        spec.transform(ctx)
        assert ctx.message == "FIX"

    def test_transformer_object(self, make_context) -> None:
        class Stamp:
            name = "stamp"

            def transform(self, ctx: TransformContext) -> None:
                ctx.set_message(ctx.message + " [stamped]")

        spec = as_hook_spec(Stamp())
        assert spec.name == "stamp"
        ctx = make_context(message="fix")
        spec.transform(ctx)
        assert ctx.message == "fix [stamped]"

    def test_rejects_non_hooks(self) -> None:
        with pytest.raises(TypeError, match="cannot be used as a hook"):
            as_hook_spec(42)
