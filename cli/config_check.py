"""
Configuration Check CLI Command

Validates the tracker, output, store and data source configuration and lists
the configured shows with their resolved options.
"""

import logging
import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from utils.config.config_validator import ConfigValidator
from utils.config.validation_models import ValidationResult
from utils.show_options import resolve_show_options
from utils.showtracker_config import get_show_names

logger = logging.getLogger(__name__)


@click.command("config-check")
@click.option("--verbose", "-v", is_flag=True, help="Show resolved options for every configured show")
@click.pass_context
def config_check(ctx: click.Context, verbose: bool) -> None:
    """
    Validate the configuration file.

    Examples:
        showtracker config-check       # Validate the configuration
        showtracker config-check -v    # Also show resolved per-show options

    Returns:
        None. Exits with code 1 if the configuration is invalid.
    """
    console = Console()

    if not ctx.obj or ctx.obj.get("config_error") or ctx.obj.get("config") is None:
        error = (ctx.obj or {}).get("config_error", "No configuration loaded")
        console.print(Panel(
            f"❌ [bold red]Failed to load configuration:[/bold red]\n{escape(str(error))}",
            title="Configuration Error",
            border_style="red"
        ))
        ctx.exit(1)

    config = ctx.obj["config"]
    result = ConfigValidator().validate(config)
    _display_validation_results(result, console)

    if verbose:
        _display_show_options(config, console)

    if not result.is_valid:
        console.print(Panel(
            "❌ [bold red]Configuration validation failed. Please fix the issues above.[/bold red]",
            border_style="red"
        ))
        ctx.exit(1)

    console.print(Panel("✅ [bold green]Configuration is valid[/bold green]", border_style="green"))


def _display_validation_results(result: ValidationResult, console: Console) -> None:
    for error in result.errors:
        console.print(f"❌ {escape(str(error))}", style="red")
    for warning in result.warnings:
        console.print(f"⚠️  {escape(warning)}", style="yellow")
    for suggestion in result.suggestions:
        console.print(f"💡 {escape(suggestion)}", style="cyan")


def _display_show_options(config, console: Console) -> None:
    table = Table(title="Configured shows")
    table.add_column("Show", style="cyan")
    table.add_column("Display name")
    table.add_column("Check interval (days)", justify="right")
    table.add_column("Freeze window (days)", justify="right")
    table.add_column("History")

    for name in get_show_names(config):
        options = resolve_show_options(name, config)
        table.add_row(
            name,
            options.display_name or "-",
            str(options.days_until_next_check),
            str(options.days_preceding),
            "yes" if options.include_history else "no",
        )
    console.print(table)
