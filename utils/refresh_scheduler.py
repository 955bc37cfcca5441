"""
Refresh scheduling for tracked shows.

Decides, for one show at one instant, whether the episode data source must be
queried again, performs the query and applies the result to the show's
TrackingState. This is the only code that mutates an existing TrackingState; it also
keeps the stored display name in line with the configured one.

Decision rules:

* Upcoming occurrence has lapsed: always refresh. The lapsed occurrence moves to
  history and ``last_check`` is set whatever the outcome.
* Upcoming occurrence still in the future: refresh only when the show has been
  checked before, less time remains until the air date than has elapsed since the
  last check, and the air date is more than ``days_preceding`` days away. A failed
  refresh leaves the state untouched.
* No upcoming occurrence: refresh when never checked or when more than
  ``days_until_next_check`` days have elapsed. ``last_check`` is set whatever the
  outcome.

Durations are compared exactly; partial days are not truncated.
"""
import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from models.tracking_state import TrackingState
from models.source_result import SourceResult, SourceFailure, FailureKind
from services.source_implementations.source_interface import EpisodeSourceInterface
from utils.clock import Clock, SystemClock
from utils.show_options import ShowOptions

logger = logging.getLogger(__name__)


class DecisionReason(Enum):
    """Why a refresh was or was not attempted."""
    LAPSED = "upcoming occurrence has lapsed"
    MIDPOINT_REACHED = "closer to the air date than to the last check"
    BEFORE_MIDPOINT = "not yet halfway between last check and air date"
    FREEZE_WINDOW = "air date is within the freeze window"
    NO_LAST_CHECK = "upcoming occurrence was never checked"
    NEVER_CHECKED = "no upcoming occurrence and never checked"
    CHECK_INTERVAL_ELAPSED = "no upcoming occurrence and check interval elapsed"
    RECENTLY_CHECKED = "no upcoming occurrence and checked recently"


class RefreshAction(Enum):
    """What happened to a show during one evaluation."""
    SKIPPED = "skipped"
    REFRESHED = "refreshed"
    FAILED = "failed"


@dataclass(frozen=True)
class RefreshDecision:
    refresh: bool
    reason: DecisionReason


@dataclass(frozen=True)
class RefreshOutcome:
    """Result of evaluating one show."""
    show_name: str
    now: datetime.datetime
    decision: RefreshDecision
    action: RefreshAction
    failure: Optional[SourceFailure] = None

    def __str__(self) -> str:
        result = f"{self.show_name}: {self.action.value} ({self.decision.reason.value})"
        if self.failure:
            result += f" - {self.failure}"
        return result


def needs_refresh(state: TrackingState, now: datetime.datetime, options: ShowOptions) -> RefreshDecision:
    """
    Decide whether a show must be refreshed at ``now``.

    Args:
        state (TrackingState): Current tracking state (not modified).
        now (datetime.datetime): Evaluation instant.
        options (ShowOptions): Resolved thresholds for the show.

    Returns:
        RefreshDecision: Whether to refresh and why.
    """
    upcoming = state.upcoming
    last_check = state.last_check

    if upcoming is not None:
        if upcoming.air_date < now:
            return RefreshDecision(True, DecisionReason.LAPSED)
        if upcoming.air_date <= now + datetime.timedelta(days=options.days_preceding):
            return RefreshDecision(False, DecisionReason.FREEZE_WINDOW)
        if last_check is None:
            return RefreshDecision(False, DecisionReason.NO_LAST_CHECK)
        if upcoming.air_date - now < now - last_check:
            return RefreshDecision(True, DecisionReason.MIDPOINT_REACHED)
        return RefreshDecision(False, DecisionReason.BEFORE_MIDPOINT)

    if last_check is None:
        return RefreshDecision(True, DecisionReason.NEVER_CHECKED)
    if now - last_check > datetime.timedelta(days=options.days_until_next_check):
        return RefreshDecision(True, DecisionReason.CHECK_INTERVAL_ELAPSED)
    return RefreshDecision(False, DecisionReason.RECENTLY_CHECKED)


class RefreshScheduler:
    """
    Applies refresh decisions to tracking states.

    Attributes:
        source (EpisodeSourceInterface): Episode data source.
        clock (Clock): Supplies the evaluation instant, read once per show.
    """

    def __init__(self, source: EpisodeSourceInterface, clock: Clock = None):
        self.source = source
        self.clock = clock or SystemClock()

    def update(self, state: TrackingState, options: ShowOptions, now: datetime.datetime = None) -> RefreshOutcome:
        """
        Evaluate one show and update its state in place.

        Args:
            state (TrackingState): State to evaluate and mutate.
            options (ShowOptions): Resolved thresholds for the show.
            now (datetime.datetime, optional): Evaluation instant; read from the clock if omitted.

        Returns:
            RefreshOutcome: What was decided and what happened.
        """
        if now is None:
            now = self.clock.now()

        # Display name never affects scheduling
        if state.display_name != options.display_name:
            state.display_name = options.display_name

        logger.debug(f"Update next episode for show {state.show_name}")
        logger.debug(f"Last check date is {state.last_check}, now is {now}")

        decision = needs_refresh(state, now, options)
        if not decision.refresh:
            logger.debug(f"No refresh for {state.show_name}: {decision.reason.value}")
            return RefreshOutcome(state.show_name, now, decision, RefreshAction.SKIPPED)

        logger.debug(f"Refreshing {state.show_name}: {decision.reason.value}")
        result = self._retrieve_next(state, now)

        if decision.reason == DecisionReason.LAPSED:
            lapsed = state.lapse_upcoming()
            logger.info(f"Moved lapsed occurrence {lapsed} of {state.show_name} to history")
            state.last_check = now
            if result.is_ok:
                state.upcoming = result.value
        elif decision.reason == DecisionReason.MIDPOINT_REACHED:
            if result.is_ok:
                state.upcoming = result.value
                state.last_check = now
        else:
            state.last_check = now
            if result.is_ok:
                state.upcoming = result.value

        if not result.is_ok:
            what = "resolve" if result.failure.kind.is_lookup else "retrieve next episode of"
            logger.error(f"Unable to {what} {state.show_name} [{result.failure.kind.value}]: {result.failure.message}")
            return RefreshOutcome(state.show_name, now, decision, RefreshAction.FAILED, result.failure)

        logger.info(f"Next episode of {state.show_name} is {result.value}")
        return RefreshOutcome(state.show_name, now, decision, RefreshAction.REFRESHED)

    def _retrieve_next(self, state: TrackingState, now: datetime.datetime) -> SourceResult:
        """
        Resolve the show's identifier if needed, then fetch and validate the next occurrence.

        At most one lookup and one fetch are made. A resolved identifier is cached on the
        state even if the fetch then fails.
        """
        if not state.external_id:
            logger.debug(f"No ID for {state.show_name}, resolving...")
            lookup = self._call("resolve_id", state.show_name)
            if not lookup.is_ok:
                return lookup
            state.external_id = lookup.value

        logger.debug(f"Id is {state.external_id}")
        result = self._call("fetch_next", state.external_id)
        if result.is_ok and not result.value.is_future(now):
            return SourceResult.fail(
                FailureKind.MALFORMED,
                f"air date {result.value.air_date.isoformat()} is not after {now.isoformat()}",
            )
        return result

    def _call(self, method: str, argument: str) -> SourceResult:
        try:
            return getattr(self.source, method)(argument)
        except Exception as e:
            logger.exception(f"Unexpected error from {self.source} {method}({argument!r}): {e}")
            kind = FailureKind.LOOKUP_TRANSPORT if method == "resolve_id" else FailureKind.TRANSPORT
            return SourceResult.fail(kind, f"unexpected error: {e}")
