import sys
import click
import logging
from utils.cli_helpers import pass_showtracker_context, get_service_from_context
from utils.showtracker_config import get_show_names
from services.store_implementations.store_interface import StoreError

logger = logging.getLogger(__name__)

"""
CLI command to remove a show's tracking state from the store.
"""

@click.command("remove-show", help="Remove a show's tracking state from the store.")
@click.argument("show_name")
@click.pass_context
@pass_showtracker_context
def remove_show(ctx: click.Context, show_name: str) -> None:
    """
    Remove a show's tracking state.

    Args:
        ctx (click.Context): Click context containing shared config and services.
        show_name (str): Name of the show as stored.
    """
    store = get_service_from_context(ctx, "store")

    if show_name not in store.load():
        click.secho(f"❌ No tracked show named '{show_name}'", fg="red")
        return

    if show_name in get_show_names(ctx.obj["config"]):
        click.secho(f"⚠️  '{show_name}' is still configured and will be tracked again on the next update", fg="yellow")

    if ctx.obj["dry_run"]:
        logger.info(f"[DRY RUN] Would remove {show_name} from the store")
        click.secho(f"[DRY RUN] Would remove '{show_name}'", fg="yellow")
        return

    try:
        store.remove(show_name)
    except StoreError as e:
        logger.error(str(e))
        click.secho(f"❌ {e}", fg="red", bold=True)
        sys.exit(1)
    logger.info(f"Removed {show_name} from the store")
    click.secho(f"✅ Removed '{show_name}'", fg="green")
