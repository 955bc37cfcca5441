import sys
import click
import logging
from utils.cli_helpers import pass_showtracker_context, get_service_from_context
from utils.clock import SystemClock
from utils.output_writer import write_output
from utils.refresh_scheduler import RefreshScheduler
from utils.showtracker_config import get_config_value
from utils.tracker_runner import run_tracker
from services.store_implementations.store_interface import StoreError

logger = logging.getLogger(__name__)

"""
CLI command to refresh upcoming episodes for every configured show, write the entries and save the store.
"""

@click.command("update", help="Refresh upcoming episodes for configured shows and write the entries.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (default: [output] file, else stdout)")
@click.option("--no-history", is_flag=True, help="Only write upcoming episodes, not past ones")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None, help="Concurrent data source queries (default: [tracker] max_workers)")
@click.pass_context
@pass_showtracker_context
def update(ctx: click.Context, output: str, no_history: bool, workers: int) -> None:
    """
    Refresh every configured show and write the rendered entries.

    Args:
        ctx (click.Context): Click context containing shared config and services.
        output (str): Output file path overriding the configuration.
        no_history (bool): Only render upcoming episodes.
        workers (int): Number of concurrent data source queries.

    Returns:
        None. Exits non-zero if the entries or the store cannot be written.
    """
    config = ctx.obj["config"]
    dry_run = ctx.obj["dry_run"]
    store = get_service_from_context(ctx, "store")
    source = get_service_from_context(ctx, "source")

    logger.info("Starting update")
    states = store.load()
    scheduler = RefreshScheduler(source, SystemClock())
    run = run_tracker(
        config,
        states,
        scheduler,
        include_history=False if no_history else None,
        max_workers=workers,
    )

    for outcome in run.failures:
        click.secho(f"⚠️  {outcome}", fg="yellow", err=True)

    output_error = None
    try:
        write_output(
            run.lines,
            output or get_config_value(config, "output", "file"),
            get_config_value(config, "output", "header_file"),
        )
    except OSError as e:
        logger.error(f"Unable to write entries: {e}")
        output_error = e

    if dry_run:
        logger.info("[DRY RUN] Skipping store save")
        click.secho("[DRY RUN] Tracking state not saved.", fg="yellow", err=True)
    else:
        try:
            store.save(run.states)
        except StoreError as e:
            logger.error(str(e))
            click.secho(f"❌ {e}", fg="red", bold=True, err=True)
            sys.exit(1)

    if output_error:
        click.secho(f"❌ Unable to write entries: {output_error}", fg="red", bold=True, err=True)
        sys.exit(1)
