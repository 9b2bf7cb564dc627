"""changeflow CLI - Tyro implementation."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import attrs
import tyro
import yaml
from pydantic import ValidationError
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from changeflow.batch import load_batch
from changeflow.config import CONFIG_FILENAME, ChangeflowConfig, find_config_dir, load_config
from changeflow.pipeline import HookExecutionError, PipelineExecutor, parse_overrides
from changeflow.pipeline.hook import get_registry

DEFAULT_CONFIG = """\
changeflow:
  debug: false

  authoring:
    # pass_thru | overwrite | allowed
    mode: pass_thru
    # default_author: "Migration Bot <bot@example.com>"
    # allowlist: ["jane@example.com"]

  # Hooks run in this order. Use a built-in name, an import path,
  # or {hook: <name>, params: {...}}.
  hooks:
    - squash_notes
"""


# Subcommand definitions using attrs
@attrs.define
class Run:
    """Run the configured hooks over a change batch and print the result."""

    batch: Annotated[Path, tyro.conf.Positional]
    """Batch file (YAML or JSON) with message, author and changes."""

    json: Annotated[bool, tyro.conf.arg(aliases=["-j"])] = False
    """Output the final message and author as JSON."""

    hooks: Annotated[str | None, tyro.conf.arg(aliases=["-H"])] = None
    """Hook overrides, e.g. '+squash_notes,-scrubber'."""


@attrs.define
class Hooks:
    """List built-in hooks and the configured execution order."""


@attrs.define
class Install:
    """Write a starter changeflow.yaml."""

    force: bool = False
    """Overwrite existing configuration."""


Command = (
    Annotated[Run, tyro.conf.subcommand(name="run")]
    | Annotated[Hooks, tyro.conf.subcommand(name="hooks")]
    | Annotated[Install, tyro.conf.subcommand(name="install")]
)


def setup_logging(debug: bool = False) -> None:
    """Configure logging with 100-character text width."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message).100s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def install_config(config_dir: Path, force: bool = False) -> None:
    """Write the starter configuration file.

    Args:
        config_dir: Directory to write changeflow.yaml into
        force: Overwrite an existing file
    """
    config_path = config_dir / CONFIG_FILENAME
    if config_path.exists() and not force:
        print(f"[yellow]{config_path} already exists. Use --force to overwrite.[/yellow]")
        sys.exit(1)

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG)
    print(f"[green]Wrote {config_path}[/green]")


def run_batch(config: ChangeflowConfig, cmd: Run) -> None:
    """Execute the hook chain for a batch file and print the final metadata."""
    try:
        batch = load_batch(cmd.batch)
        hooks = config.load_hooks()
    except (OSError, ValidationError, ImportError, ValueError, yaml.YAMLError) as e:
        print(f"[red]Error: {escape(str(e))}[/red]", file=sys.stderr)
        sys.exit(1)

    overrides = config.get_overrides().merge(parse_overrides(cmd.hooks))
    executor = PipelineExecutor(hooks, overrides=overrides, debug=config.debug)

    current, migrated = batch.to_changes()
    try:
        result = executor.run(
            batch.message,
            batch.to_author(),
            current,
            migrated,
            authoring=config.authoring.to_authoring(),
        )
    except HookExecutionError as e:
        print(f"[red]Error: {escape(str(e))}[/red]", file=sys.stderr)
        sys.exit(1)

    if cmd.json:
        output = json.dumps({"message": result.message, "author": str(result.author)}, indent=2)
        sys.stdout.write(output + "\n")
        return

    console = Console()
    console.print(f"[bold]Author:[/bold] {escape(str(result.author))}", highlight=False)
    console.print(Panel(result.message, title="Message", expand=False), markup=False)


def show_hooks(config: ChangeflowConfig) -> None:
    """Print built-in hooks and the configured chain."""
    import changeflow.pipeline.hooks  # noqa: F401

    console = Console()
    table = Table(show_header=True, header_style="bold")
    table.add_column("Hook", style="cyan")
    table.add_column("Reads", style="green")
    table.add_column("Writes", style="yellow")

    for name, spec in sorted(get_registry().get_all_specs().items()):
        table.add_row(
            name,
            ", ".join(sorted(spec.reads)) or "-",
            ", ".join(sorted(spec.writes)) or "-",
        )

    console.print("[bold]Registered Hooks:[/bold]")
    console.print(table)

    try:
        order = [spec.name for spec in config.load_hooks()]
    except (ImportError, ValueError) as e:
        print(f"[red]Error loading configured hooks: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print("\n[bold]Execution Order:[/bold]")
    console.print(f"  {' → '.join(order)}" if order else "  [dim](no hooks configured)[/dim]")


def main(
    cmd: Annotated[Command, tyro.conf.arg(name="")],
    *,
    config_dir: Annotated[Path | None, tyro.conf.arg(help="Configuration directory")] = None,
    debug: bool = False,
) -> None:
    """changeflow - commit message and author transformation hooks."""
    if config_dir is None:
        config_dir = find_config_dir()

    if isinstance(cmd, Install):
        setup_logging(debug)
        install_config(config_dir, force=cmd.force)
        return

    try:
        config = load_config(config_dir)
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        print(f"[red]Invalid configuration: {escape(str(e))}[/red]", file=sys.stderr)
        sys.exit(1)

    setup_logging(debug or config.debug)

    if isinstance(cmd, Run):
        run_batch(config, cmd)
    elif isinstance(cmd, Hooks):
        show_hooks(config)


def entry_point() -> None:
    """Entry point for the changeflow command."""
    tyro.cli(main)


if __name__ == "__main__":
    entry_point()
