import sys
import click
import logging
from utils.cli_helpers import pass_showtracker_context, get_service_from_context
from utils.output_writer import write_output
from utils.showtracker_config import get_config_value
from utils.tracker_runner import run_tracker

logger = logging.getLogger(__name__)

"""
CLI command to write entries from the stored state without querying the data source.
"""

@click.command("render", help="Write entries from stored state without refreshing.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (default: [output] file, else stdout)")
@click.option("--no-history", is_flag=True, help="Only write upcoming episodes, not past ones")
@click.pass_context
@pass_showtracker_context
def render(ctx: click.Context, output: str, no_history: bool) -> None:
    """Write entries from the stored state; nothing is refreshed or saved."""
    config = ctx.obj["config"]
    store = get_service_from_context(ctx, "store")

    run = run_tracker(config, store.load(), None, refresh=False,
                      include_history=False if no_history else None)
    try:
        write_output(
            run.lines,
            output or get_config_value(config, "output", "file"),
            get_config_value(config, "output", "header_file"),
        )
    except OSError as e:
        logger.error(f"Unable to write entries: {e}")
        click.secho(f"❌ Unable to write entries: {e}", fg="red", bold=True, err=True)
        sys.exit(1)
