"""
Main entry point for the ShowTracker CLI.
- Sets up the Click command group and context object.
- Dynamically loads all CLI commands from this directory.
"""
import os
import sys
import importlib
import click
import logging
import rich_click as rclick
from utils.showtracker_config import load_configuration, ConfigurationError
from utils.logging_config import setup_logging
from services.store_factory import create_store_service
from services.source_factory import create_source_service

logger = logging.getLogger(__name__)

@rclick.group()
@click.option('--logfile', '-l', type=click.Path(writable=True), help="Log to file")
@click.option('--verbose', '-v', count=True, help="Set verbosity level (-v = INFO, -vv = DEBUG)")
@click.option('--config', '-c', type=click.Path(), default=None, help="Path to config file (default: ~/.config/showtracker/config.ini)")
@click.option('--dry-run', is_flag=True, help="Refresh and render but do not save tracking state")
@click.pass_context
def showtracker_cli(ctx: click.Context, verbose: int, logfile: str, config: str, dry_run: bool) -> None:
    """
    Main CLI group. Sets up the context object with configuration, store and data source.
    All subcommands share this context.

    Args:
        ctx (click.Context): Click context for Click command group.
        verbose (int): Verbosity level (-v = INFO, -vv = DEBUG).
        logfile (str): Path to log file.
        config (str): Path to configuration file.
        dry_run (bool): Do not persist tracking state.

    Returns:
        None
    """
    # If the context object is already set, return it without reinitializing it
    if ctx.obj and all(k in ctx.obj for k in ("config", "store", "source", "dry_run")):
        return

    if logfile:
        log_dir = os.path.dirname(logfile)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    setup_logging(verbosity=verbose, logfile=logfile)

    is_config_check = ctx.invoked_subcommand == 'config-check'

    try:
        logger.info("Loading configuration and initializing services")
        cfg = load_configuration(config)
    except ConfigurationError as e:
        if is_config_check:
            ctx.obj = {"config": None, "store": None, "source": None, "dry_run": dry_run,
                       "config_error": str(e), "config_path": config}
            return
        logger.error(f"❌ {e}")
        click.secho(f"❌ {e}", fg="red", bold=True, err=True)
        sys.exit(1)

    store_service = None
    source_service = None

    # Store
    try:
        store_service = create_store_service(cfg)
        logger.info(f"✓ Store initialized: {store_service}")
    except Exception as e:
        logger.warning(f"⚠️  Store initialization failed: {e}")

    # Data source
    try:
        source_service = create_source_service(cfg)
        logger.info(f"✓ Data source initialized: {source_service}")
    except Exception as e:
        logger.warning(f"⚠️  Data source initialization failed: {e}")

    ctx.obj = {
        "config": cfg,
        "store": store_service,
        "source": source_service,
        "dry_run": dry_run,
        "config_path": config,
    }


# Dynamic discovery loop: auto-register all CLI commands in this directory
COMMAND_DIR = os.path.dirname(__file__)
for filename in sorted(os.listdir(COMMAND_DIR)):
    # Only import .py files that are not main.py or __init__.py
    if filename.endswith(".py") and filename not in {"main.py", "__init__.py"}:
        command_name = filename[:-3]
        module_name = f"cli.{command_name}"
        try:
            module = importlib.import_module(module_name)
            cli_function = getattr(module, command_name, None)
            if cli_function:
                showtracker_cli.add_command(cli_function)
            else:
                logger.debug(f"No command function found in {module_name}")
        except Exception as e:
            logger.debug(f"Failed to import {module_name}: {e}")

if __name__ == '__main__':
    showtracker_cli()
