"""
Tracker run orchestration: refresh every configured show and render the result.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from models.tracking_state import TrackingState
from utils.refresh_scheduler import RefreshScheduler, RefreshOutcome, RefreshAction
from utils.renderer import render_state
from utils.show_options import ShowOptions, resolve_show_options
from utils.showtracker_config import get_config_value, get_show_names, DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)

# Upper bound on concurrent queries against the data source
MAX_WORKERS_LIMIT = 8


@dataclass
class TrackerRun:
    """Result of one tracker run."""
    states: Dict[str, TrackingState]
    lines: List[str]
    outcomes: List[RefreshOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[RefreshOutcome]:
        return [o for o in self.outcomes if o.action == RefreshAction.FAILED]

    @property
    def refreshed(self) -> List[RefreshOutcome]:
        return [o for o in self.outcomes if o.action == RefreshAction.REFRESHED]


def prepare_states(config, states: Dict[str, TrackingState]) -> Tuple[Dict[str, TrackingState], List[Tuple[TrackingState, ShowOptions]]]:
    """
    Pair every configured show with its state and options, creating missing states.

    Existing states are not modified; shows present in the store but no longer
    configured are kept as they are.

    Args:
        config: Normalized configuration.
        states (dict): Loaded states keyed by show name.

    Returns:
        tuple: The updated mapping and the (state, options) pairs in configuration order.
    """
    updated = dict(states)
    work = []
    for show_name in get_show_names(config):
        options = resolve_show_options(show_name, config)
        state = updated.get(show_name)
        if state is None:
            logger.debug(f"Adding {show_name} to database")
            state = TrackingState(show_name=show_name, display_name=options.display_name)
            updated[show_name] = state
        work.append((state, options))
    return updated, work


def resolve_max_workers(config, requested: Optional[int] = None) -> int:
    workers = requested if requested is not None else get_config_value(
        config, "tracker", "max_workers", fallback=1, value_type=int
    )
    if workers < 1:
        logger.warning(f"Invalid max_workers {workers}, using 1")
        return 1
    return min(workers, MAX_WORKERS_LIMIT)


def run_tracker(
    config,
    states: Dict[str, TrackingState],
    scheduler: Optional[RefreshScheduler],
    refresh: bool = True,
    include_history: Optional[bool] = None,
    max_workers: Optional[int] = None,
) -> TrackerRun:
    """
    Refresh every configured show and render the entries.

    Args:
        config: Normalized configuration.
        states (dict): States loaded from the store. The mapping is copied; configured states are updated in place.
        scheduler (RefreshScheduler): Scheduler used to refresh shows (unused when refresh is False).
        refresh (bool): If False, only render the stored state.
        include_history (bool, optional): Overrides the per-show history setting when given.
        max_workers (int, optional): Overrides ``[tracker] max_workers``.

    Returns:
        TrackerRun: Updated mapping, rendered lines in configuration order, and per-show outcomes.
    """
    updated, work = prepare_states(config, states)
    outcomes: List[RefreshOutcome] = []

    if refresh and work:
        if scheduler is None:
            raise ValueError("A scheduler is required to refresh shows")
        workers = resolve_max_workers(config, max_workers)
        logger.info(f"Refreshing {len(work)} shows with {workers} worker(s)")
        if workers == 1:
            outcomes = [scheduler.update(state, options) for state, options in work]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(scheduler.update, state, options) for state, options in work]
                outcomes = [future.result() for future in futures]

    template = get_config_value(config, "output", "template", fallback=DEFAULT_TEMPLATE)
    lines = []
    for state, options in work:
        show_history = options.include_history if include_history is None else include_history
        lines.extend(render_state(state, template, show_history, options.display_name or state.show_name))

    run = TrackerRun(states=updated, lines=lines, outcomes=outcomes)
    if outcomes:
        logger.info(
            f"Run complete: {len(run.refreshed)} refreshed, {len(run.failures)} failed, "
            f"{len(outcomes) - len(run.refreshed) - len(run.failures)} skipped"
        )
    return run
