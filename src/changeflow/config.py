"""Configuration management for changeflow.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **CHANGEFLOW_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${CHANGEFLOW_CONFIG_DIR}/changeflow.yaml`
   - Use case: Development, testing, per-project setups

2. **~/.changeflow Directory** (Fallback)
   - Looks for: `~/.changeflow/changeflow.yaml`
   - Use case: Default user installations

If no `changeflow.yaml` is found, default configuration is applied
(pass-through authoring, no hooks).

Example changeflow.yaml:
-----------------------
changeflow:
  debug: false
  authoring:
    mode: allowed
    default_author: "Migration Bot <bot@example.com>"
    allowlist: ["jane@example.com"]
  hooks:
    - squash_notes
    - hook: add_header
      params:
        text: "Imported from ${ORIGIN}"
    - mypackage.hooks.custom_hook
  overrides: "-scrubber"
"""

import importlib
import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from changeflow.authoring import Author, Authoring, AuthoringMode
from changeflow.pipeline.hook import HookSpec, as_hook_spec, get_registry
from changeflow.pipeline.overrides import OverrideSet, parse_overrides

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "changeflow.yaml"


class AuthoringConfig(BaseModel):
    """Authoring policy configuration."""

    mode: Literal["pass_thru", "overwrite", "allowed"] = "pass_thru"
    """How original authors are resolved"""

    default_author: str | None = None
    """Fallback author in 'Name <email>' form (required unless pass_thru)"""

    allowlist: list[str] = Field(default_factory=list)
    """Emails or 'Name <email>' strings kept as-is in allowed mode"""

    mapping: dict[str, str] = Field(default_factory=dict)
    """Author rewrite table applied before the mode rule"""

    @field_validator("default_author")
    @classmethod
    def validate_default_author(cls, v: str | None) -> str | None:
        if v is not None:
            Author.parse(v)
        return v

    @field_validator("mapping")
    @classmethod
    def validate_mapping(cls, v: dict[str, str]) -> dict[str, str]:
        for target in v.values():
            Author.parse(target)
        return v

    @model_validator(mode="after")
    def check_default_author(self) -> "AuthoringConfig":
        if self.mode != "pass_thru" and self.default_author is None:
            raise ValueError(f"authoring mode '{self.mode}' requires default_author")
        return self

    def to_authoring(self) -> Authoring:
        """Build the authoring policy."""
        return Authoring(
            mode=AuthoringMode(self.mode),
            default_author=Author.parse(self.default_author) if self.default_author else None,
            allowlist=frozenset(self.allowlist),
            mapping={key: Author.parse(value) for key, value in self.mapping.items()},
        )


class ChangeflowConfig(BaseSettings):
    """Main configuration for changeflow that reads from changeflow.yaml."""

    model_config = SettingsConfigDict(
        env_prefix="CHANGEFLOW_",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    authoring: AuthoringConfig = Field(default_factory=AuthoringConfig)

    # Hook entries: registered name, import path, or {"hook": ..., "params": {...}}
    hooks: list[str | dict[str, Any]] = Field(default_factory=list)

    # Override string, e.g. "+squash_notes,-scrubber"
    overrides: str = ""

    config_path: Path = Field(default_factory=lambda: Path("./changeflow.yaml"))

    def get_overrides(self) -> OverrideSet:
        return parse_overrides(self.overrides)

    def load_hooks(self) -> list[HookSpec]:
        """Resolve configured hook entries in order.

        Names of built-in (registered) hooks are tried first, then
        ``module.attribute`` import paths.

        Returns:
            List of HookSpecs, with configured params applied

        Raises:
            ImportError: If a hook cannot be resolved
            ValueError: If an entry is malformed
        """
        # Import built-in hooks so they register themselves
        import changeflow.pipeline.hooks  # noqa: F401

        registry = get_registry()
        loaded: list[HookSpec] = []

        for entry in self.hooks:
            if isinstance(entry, str):
                hook_path = entry
                params: dict[str, Any] = {}
            else:
                hook_path = entry.get("hook", "")
                params = entry.get("params") or {}
                if not hook_path:
                    raise ValueError(f"Hook entry missing 'hook' key: {entry}")

            spec = registry.get_spec(hook_path)
            if spec is None:
                spec = as_hook_spec(_import_object(hook_path))

            if params:
                spec = spec.with_params(params)
            loaded.append(spec)
            logger.debug(f"Loaded hook: {hook_path}" + (f" with params: {params}" if params else ""))

        return loaded

    @classmethod
    def from_yaml(cls, yaml_path: Path, **kwargs: Any) -> "ChangeflowConfig":
        """Load configuration from a changeflow.yaml file.

        Args:
            yaml_path: Path to the changeflow.yaml file
            **kwargs: Values overriding the file

        Returns:
            ChangeflowConfig instance

        Raises:
            ValueError: If the file or its 'changeflow' section is not a mapping
            yaml.YAMLError: If the file is not valid YAML
        """
        section: dict[str, Any] = {}
        if yaml_path.exists():
            with yaml_path.open() as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Invalid config file {yaml_path}: expected a mapping, got {type(data).__name__}")
            section = data.get("changeflow") or {}
            if not isinstance(section, dict):
                raise ValueError(f"Invalid 'changeflow' section in {yaml_path}: {type(section).__name__}")

        known = {k: v for k, v in section.items() if k in cls.model_fields and k != "config_path"}
        for key in section.keys() - known.keys():
            logger.warning(f"Ignoring unknown config key '{key}' in {yaml_path}")

        return cls(config_path=yaml_path, **{**known, **kwargs})


def _import_object(path: str) -> Any:
    if "." not in path:
        raise ImportError(f"Unknown hook '{path}': not a built-in hook and not an import path")
    module_path, attr = path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ImportError(f"Module '{module_path}' has no hook '{attr}'") from e


def find_config_dir() -> Path:
    """Directory holding changeflow.yaml, following the discovery precedence."""
    env_config_dir = os.environ.get("CHANGEFLOW_CONFIG_DIR")
    if env_config_dir:
        logger.info(f"Using config directory from environment: {env_config_dir}")
        return Path(env_config_dir)
    return Path.home() / ".changeflow"


def load_config(config_dir: Path | None = None) -> ChangeflowConfig:
    """Load configuration from a directory (discovered if not given).

    Raises:
        ValueError: If the config file is not a mapping or fails validation
        yaml.YAMLError: If the config file is not valid YAML
    """
    config_dir = config_dir or find_config_dir()
    yaml_path = config_dir / CONFIG_FILENAME
    if yaml_path.exists():
        logger.info(f"Loading changeflow config from: {yaml_path}")
    else:
        logger.info(f"{CONFIG_FILENAME} not found at {yaml_path}, using default config")
    return ChangeflowConfig.from_yaml(yaml_path)

