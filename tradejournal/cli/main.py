"""Main CLI entry point for Trade Journal.

This module provides the main click group and lazy loading
of command modules to keep startup fast.
"""

import importlib
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when one of their
    commands is actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path.

        Commands are looked up by their click name, so ``add-trade`` may be
        defined by a function called ``add_trade``.
        """
        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    # Reports
    "stats": "tradejournal.cli.report",
    "streaks": "tradejournal.cli.report",
    "achievements": "tradejournal.cli.report",
    "bests": "tradejournal.cli.report",
    "growth": "tradejournal.cli.report",
    # Journal
    "trades": "tradejournal.cli.journal",
    "add-trade": "tradejournal.cli.journal",
    "add-entry": "tradejournal.cli.journal",
    # Tags
    "tags": "tradejournal.cli.tags",
    "tag-add": "tradejournal.cli.tags",
    "tag-relate": "tradejournal.cli.tags",
    "tag-check": "tradejournal.cli.tags",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="TRADEJOURNAL_CONFIG",
    help="Path to config.toml (default: ~/.config/tradejournal/config.toml).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """Trade Journal - performance analytics for your trading log.

    Review statistics, streaks, achievements and personal records,
    log trades and daily journal entries, and manage tags.

    \b
    Quick Start:
      tradejournal add-trade AAPL long --entry 180 --exit 185 --pnl 500
      tradejournal stats       # Performance overview
      tradejournal streaks     # Current and best streaks
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
