"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from changeflow.authoring import Author, AuthoringMode
from changeflow.config import AuthoringConfig, ChangeflowConfig, load_config
from changeflow.pipeline.overrides import HookOverride

CONFIG_YAML = """\
changeflow:
  debug: true
  authoring:
    mode: allowed
    default_author: "Migration Bot <bot@x.com>"
    allowlist: ["jane@x.com"]
    mapping:
      "j@x.com": "Jane Doe <jane@x.com>"
  hooks:
    - squash_notes
    - hook: add_header
      params:
        text: "[import]"
    - changeflow.pipeline.hooks.scrubber.scrubber
  overrides: "-scrubber"
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "changeflow.yaml"
    path.write_text(CONFIG_YAML)
    return path


class TestChangeflowConfig:
    def test_defaults(self) -> None:
        config = ChangeflowConfig()
        assert config.debug is False
        assert config.hooks == []
        assert config.authoring.mode == "pass_thru"
        assert config.load_hooks() == []

    def test_from_yaml(self, config_file: Path) -> None:
        config = ChangeflowConfig.from_yaml(config_file)

        assert config.debug is True
        assert config.config_path == config_file
        assert config.get_overrides().get_override("scrubber") is HookOverride.FORCE_SKIP

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = ChangeflowConfig.from_yaml(tmp_path / "changeflow.yaml")
        assert config.hooks == []

    def test_kwargs_override_file(self, config_file: Path) -> None:
        assert ChangeflowConfig.from_yaml(config_file, debug=False).debug is False

    def test_unknown_keys_warned(self, tmp_path: Path, caplog) -> None:
        path = tmp_path / "changeflow.yaml"
        path.write_text("changeflow:\n  colour: blue\n")
        ChangeflowConfig.from_yaml(path)
        assert "Ignoring unknown config key 'colour'" in caplog.text

    def test_invalid_section(self, tmp_path: Path) -> None:
        path = tmp_path / "changeflow.yaml"
        path.write_text("changeflow: [1, 2]\n")
        with pytest.raises(ValueError, match="Invalid 'changeflow' section"):
            ChangeflowConfig.from_yaml(path)

    @pytest.mark.parametrize(
        ("content", "kind"),
        [("- a\n- b\n", "list"), ("just text\n", "str"), ("42\n", "int")],
    )
    def test_top_level_not_a_mapping(self, tmp_path: Path, content: str, kind: str) -> None:
        path = tmp_path / "changeflow.yaml"
        path.write_text(content)
        with pytest.raises(ValueError, match=f"expected a mapping, got {kind}"):
            ChangeflowConfig.from_yaml(path)

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("CHANGEFLOW_DEBUG", "true")
        assert ChangeflowConfig().debug is True


class TestLoadHooks:
    def test_resolves_names_and_paths_in_order(self, config_file: Path) -> None:
        hooks = ChangeflowConfig.from_yaml(config_file).load_hooks()

        assert [h.name for h in hooks] == ["squash_notes", "add_header", "scrubber"]
        assert hooks[1].params == {"text": "[import]"}

    def test_params_do_not_leak_into_registry(self, config_file: Path) -> None:
        from changeflow.pipeline.hook import get_registry

        ChangeflowConfig.from_yaml(config_file).load_hooks()
        assert get_registry().get_spec("add_header").params == {}

    def test_plain_function_import(self) -> None:
        config = ChangeflowConfig(hooks=["changeflow.pipeline.guards.has_message"])
        [spec] = config.load_hooks()
        assert spec.name == "has_message"

    @pytest.mark.parametrize(
        "entry",
        ["not_a_hook", "changeflow.pipeline.hooks.nope", "no_such_module.hook"],
    )
    def test_unresolvable_hook(self, entry: str) -> None:
        with pytest.raises(ImportError):
            ChangeflowConfig(hooks=[entry]).load_hooks()

    def test_entry_without_hook_key(self) -> None:
        with pytest.raises(ValueError, match="missing 'hook' key"):
            ChangeflowConfig(hooks=[{"params": {}}]).load_hooks()


class TestAuthoringConfig:
    def test_to_authoring(self, config_file: Path) -> None:
        authoring = ChangeflowConfig.from_yaml(config_file).authoring.to_authoring()

        assert authoring.mode is AuthoringMode.ALLOWED
        assert authoring.default_author == Author("Migration Bot", "bot@x.com")
        assert authoring.resolve(Author("J", "j@x.com")) == Author("Jane Doe", "jane@x.com")
        assert authoring.resolve(Author("K", "k@x.com")) == Author("Migration Bot", "bot@x.com")

    def test_default_author_required(self) -> None:
        with pytest.raises(ValidationError, match="requires default_author"):
            AuthoringConfig(mode="overwrite")

    def test_invalid_default_author(self) -> None:
        with pytest.raises(ValidationError, match="Expected format"):
            AuthoringConfig(mode="overwrite", default_author="bot@x.com")

    def test_invalid_mapping_target(self) -> None:
        with pytest.raises(ValidationError):
            AuthoringConfig(mapping={"j@x.com": "Jane"})

    def test_invalid_mode(self) -> None:
        with pytest.raises(ValidationError):
            AuthoringConfig(mode="sometimes")


class TestConfigDiscovery:
    def test_discovers_from_env(self, tmp_path: Path, config_file: Path, monkeypatch) -> None:
        monkeypatch.setenv("CHANGEFLOW_CONFIG_DIR", str(tmp_path))

        config = load_config()
        assert config.config_path == config_file
        assert config.debug is True

    def test_falls_back_to_home(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("CHANGEFLOW_CONFIG_DIR", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert load_config().config_path == tmp_path / ".changeflow" / "changeflow.yaml"

    def test_explicit_dir_wins_over_env(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("CHANGEFLOW_CONFIG_DIR", str(tmp_path / "env"))

        assert load_config(tmp_path).config_path == tmp_path / "changeflow.yaml"
