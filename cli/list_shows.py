"""
CLI command to list tracked shows and their state.
"""
import click
import logging
from rich.console import Console
from rich.table import Table
from utils.cli_helpers import pass_showtracker_context, get_service_from_context
from utils.showtracker_config import get_show_names

logger = logging.getLogger(__name__)


def _format_datetime(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


@click.command("list-shows", help="List tracked shows with their next episode and last check.")
@click.pass_context
@pass_showtracker_context
def list_shows(ctx: click.Context) -> None:
    """
    List every configured or stored show.

    Shows that are stored but no longer configured are marked, since they are only
    removed with remove-show.
    """
    config = ctx.obj["config"]
    store = get_service_from_context(ctx, "store")
    states = store.load()
    configured = get_show_names(config)

    names = configured + [name for name in states if name not in configured]
    if not names:
        click.secho("No shows configured or tracked.", fg="yellow")
        return

    table = Table(title="Tracked shows")
    table.add_column("Show", style="cyan")
    table.add_column("Next episode")
    table.add_column("Air date")
    table.add_column("Last check")
    table.add_column("Past", justify="right")
    table.add_column("Status")

    for name in names:
        state = states.get(name)
        status = "configured" if name in configured else "not configured"
        if state is None:
            table.add_row(name, "-", "-", "-", "0", f"{status}, never checked")
            continue
        upcoming = state.upcoming
        table.add_row(
            state.rendered_name if state.display_name else name,
            upcoming.title if upcoming else "-",
            _format_datetime(upcoming.air_date if upcoming else None),
            _format_datetime(state.last_check),
            str(len(state.history)),
            status,
        )

    Console().print(table)
