import datetime
import logging
import pytest
from models.source_result import SourceResult, FailureKind
from utils.refresh_scheduler import (
    RefreshScheduler,
    RefreshAction,
    DecisionReason,
    needs_refresh,
)
from utils.show_options import ShowOptions


@pytest.fixture
def scheduler(mock_source, clock):
    return RefreshScheduler(mock_source, clock)


@pytest.fixture
def failing_scheduler(failing_source, clock):
    return RefreshScheduler(failing_source, clock)


# ────────────────────────────────────────────────
# NO UPCOMING OCCURRENCE
# ────────────────────────────────────────────────

def test_never_checked_always_refreshes(scheduler, mock_source, make_state, make_occurrence, default_options, now):
    state = make_state()

    outcome = scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.REFRESHED
    assert outcome.decision.reason == DecisionReason.NEVER_CHECKED
    assert state.upcoming == make_occurrence(5, title="Pilot", season=1, episode=1)
    assert state.last_check == now
    assert state.external_id == "123"
    mock_source.resolve_id.assert_called_once_with("Mock Show")
    mock_source.fetch_next.assert_called_once_with("123")


@pytest.mark.parametrize("elapsed,expected", [
    (datetime.timedelta(days=1), False),
    (datetime.timedelta(days=15), False),
    (datetime.timedelta(days=15, seconds=1), True),
    (datetime.timedelta(days=16), True),
])
def test_check_interval_uses_exact_durations(make_state, default_options, now, elapsed, expected):
    state = make_state(last_check=now - elapsed)

    decision = needs_refresh(state, now, default_options)

    assert decision.refresh is expected
    expected_reason = DecisionReason.CHECK_INTERVAL_ELAPSED if expected else DecisionReason.RECENTLY_CHECKED
    assert decision.reason == expected_reason


def test_check_interval_follows_options(make_state, now, days):
    state = make_state(last_check=now - days(4))

    assert needs_refresh(state, now, ShowOptions(days_until_next_check=3)).refresh is True
    assert needs_refresh(state, now, ShowOptions(days_until_next_check=4)).refresh is False


def test_recently_checked_is_left_alone(scheduler, mock_source, make_state, default_options, now, days):
    state = make_state(last_check=now - days(2), external_id="123")
    before = state.model_copy(deep=True)

    outcome = scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.SKIPPED
    assert state == before
    mock_source.fetch_next.assert_not_called()


def test_failed_refresh_without_upcoming_records_the_attempt(failing_scheduler, make_state, default_options, now, days):
    state = make_state(last_check=now - days(20))

    outcome = failing_scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.FAILED
    assert outcome.failure.kind == FailureKind.TRANSPORT
    assert state.upcoming is None
    assert state.last_check == now
    assert state.history == []


# ────────────────────────────────────────────────
# LAPSED OCCURRENCE
# ────────────────────────────────────────────────

def test_lapsed_occurrence_is_replaced(scheduler, make_state, make_occurrence, default_options, now, days):
    old = make_occurrence(-1, title="Old", season=1, episode=1)
    state = make_state(upcoming=old, last_check=now - days(3), external_id="123")

    outcome = scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.REFRESHED
    assert outcome.decision.reason == DecisionReason.LAPSED
    assert state.history == [old]
    assert state.upcoming == make_occurrence(5)
    assert state.last_check == now


def test_lapsed_occurrence_with_transport_failure(failing_scheduler, make_state, make_occurrence, default_options, now, days):
    old = make_occurrence(-1)
    state = make_state(upcoming=old, last_check=now - days(30), external_id="123")

    outcome = failing_scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.FAILED
    assert state.history == [old]
    assert state.upcoming is None
    assert state.last_check == now


def test_lapsed_occurrence_refreshes_even_without_last_check(scheduler, make_state, make_occurrence, default_options):
    state = make_state(upcoming=make_occurrence(-2))

    assert needs_refresh(state, scheduler.clock.now(), default_options).reason == DecisionReason.LAPSED
    assert scheduler.update(state, default_options).action == RefreshAction.REFRESHED


def test_lapsed_occurrence_is_appended_after_existing_history(failing_scheduler, make_state, make_occurrence, default_options):
    first = make_occurrence(-14, title="First")
    second = make_occurrence(-7, title="Second")
    state = make_state(upcoming=second, history=[first], external_id="123")

    failing_scheduler.update(state, default_options)

    assert state.history == [first, second]


# ────────────────────────────────────────────────
# FUTURE OCCURRENCE
# ────────────────────────────────────────────────

def test_freeze_window_blocks_refresh(scheduler, mock_source, make_state, make_occurrence, default_options, now, days):
    state = make_state(upcoming=make_occurrence(3), last_check=now - days(100), external_id="123")
    before = state.model_copy(deep=True)

    outcome = scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.SKIPPED
    assert outcome.decision.reason == DecisionReason.FREEZE_WINDOW
    assert state == before
    mock_source.fetch_next.assert_not_called()


def test_freeze_window_boundary_is_exclusive(make_state, make_occurrence, default_options, now, days):
    state = make_state(upcoming=make_occurrence(7), last_check=now - days(100))

    assert needs_refresh(state, now, default_options).reason == DecisionReason.FREEZE_WINDOW


def test_occurrence_airing_right_now_is_not_lapsed(make_state, make_occurrence, default_options, now):
    state = make_state(upcoming=make_occurrence(0), last_check=now)

    assert needs_refresh(state, now, default_options).refresh is False


def test_before_midpoint_does_not_refresh(scheduler, mock_source, make_state, make_occurrence, default_options, now, days):
    # 10 days remaining vs 9 days elapsed
    state = make_state(upcoming=make_occurrence(10), last_check=now - days(9), external_id="123")
    before = state.model_copy(deep=True)

    outcome = scheduler.update(state, default_options)

    assert outcome.decision.reason == DecisionReason.BEFORE_MIDPOINT
    assert state == before
    mock_source.fetch_next.assert_not_called()


def test_equal_remaining_and_elapsed_does_not_refresh(make_state, make_occurrence, default_options, now, days):
    state = make_state(upcoming=make_occurrence(10), last_check=now - days(10))

    assert needs_refresh(state, now, default_options).refresh is False


def test_midpoint_reached_refreshes(scheduler, mock_source, make_state, make_occurrence, now, days):
    mock_source.fetch_next.return_value = SourceResult.ok(make_occurrence(12, title="Moved"))
    state = make_state(upcoming=make_occurrence(10), last_check=now - days(11), external_id="123")

    outcome = scheduler.update(state, ShowOptions())

    assert outcome.action == RefreshAction.REFRESHED
    assert outcome.decision.reason == DecisionReason.MIDPOINT_REACHED
    assert state.upcoming.title == "Moved"
    assert state.last_check == now
    assert state.history == []


def test_midpoint_failure_leaves_state_unchanged(failing_scheduler, make_state, make_occurrence, default_options, now, days):
    state = make_state(upcoming=make_occurrence(10), last_check=now - days(11), external_id="123")
    before = state.model_copy(deep=True)

    outcome = failing_scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.FAILED
    assert state == before


def test_future_occurrence_without_last_check_is_not_refreshed(make_state, make_occurrence, default_options, now):
    state = make_state(upcoming=make_occurrence(30))

    assert needs_refresh(state, now, default_options).reason == DecisionReason.NO_LAST_CHECK


def test_freeze_window_follows_options(make_state, make_occurrence, now, days):
    state = make_state(upcoming=make_occurrence(5), last_check=now - days(30))

    assert needs_refresh(state, now, ShowOptions(days_preceding=7)).refresh is False
    assert needs_refresh(state, now, ShowOptions(days_preceding=2)).refresh is True


def test_needs_refresh_does_not_mutate(make_state, make_occurrence, default_options, now):
    state = make_state(upcoming=make_occurrence(-1))
    before = state.model_copy(deep=True)

    needs_refresh(state, now, default_options)

    assert state == before


# ────────────────────────────────────────────────
# MALFORMED DATA
# ────────────────────────────────────────────────

def test_past_air_date_is_rejected_as_malformed(scheduler, mock_source, make_state, make_occurrence, default_options, now):
    mock_source.fetch_next.return_value = SourceResult.ok(make_occurrence(-1))
    state = make_state()

    outcome = scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.FAILED
    assert outcome.failure.kind == FailureKind.MALFORMED
    assert state.upcoming is None
    assert state.last_check == now


def test_air_date_equal_to_now_is_rejected(scheduler, mock_source, make_state, make_occurrence, default_options):
    mock_source.fetch_next.return_value = SourceResult.ok(make_occurrence(0))
    state = make_state()

    outcome = scheduler.update(state, default_options)

    assert outcome.failure.kind == FailureKind.MALFORMED
    assert state.upcoming is None


def test_malformed_failure_never_sets_upcoming(scheduler, mock_source, make_state, make_occurrence, default_options):
    mock_source.fetch_next.return_value = SourceResult.fail(FailureKind.MALFORMED, "missing title")
    old = make_occurrence(-1)
    state = make_state(upcoming=old, external_id="123")

    scheduler.update(state, default_options)

    assert state.upcoming is None
    assert state.history == [old]


def test_failure_kinds_are_distinguishable_in_logs(scheduler, mock_source, make_state, default_options, caplog):
    mock_source.fetch_next.return_value = SourceResult.fail(FailureKind.MALFORMED, "missing title")
    with caplog.at_level(logging.ERROR):
        scheduler.update(make_state(show_name="A"), default_options)
    mock_source.fetch_next.return_value = SourceResult.fail(FailureKind.TRANSPORT, "timed out")
    with caplog.at_level(logging.ERROR):
        scheduler.update(make_state(show_name="B"), default_options)

    assert "Unable to retrieve next episode of A [malformed]: missing title" in caplog.text
    assert "Unable to retrieve next episode of B [transport]: timed out" in caplog.text


# ────────────────────────────────────────────────
# IDENTIFIER RESOLUTION
# ────────────────────────────────────────────────

def test_cached_identifier_skips_lookup(scheduler, mock_source, make_state, default_options):
    state = make_state(external_id="999")

    scheduler.update(state, default_options)

    mock_source.resolve_id.assert_not_called()
    mock_source.fetch_next.assert_called_once_with("999")


def test_lookup_failure_skips_fetch(scheduler, mock_source, make_state, default_options, now):
    mock_source.resolve_id.return_value = SourceResult.fail(FailureKind.LOOKUP_NOT_FOUND, "no match")
    state = make_state()

    outcome = scheduler.update(state, default_options)

    assert outcome.failure.kind == FailureKind.LOOKUP_NOT_FOUND
    assert state.external_id is None
    assert state.last_check == now
    mock_source.fetch_next.assert_not_called()


def test_resolved_identifier_is_kept_when_fetch_fails(failing_scheduler, failing_source, make_state, default_options):
    state = make_state()

    failing_scheduler.update(state, default_options)

    assert state.external_id == "123"
    failing_source.resolve_id.assert_called_once()


def test_source_exception_is_reported_as_transport_failure(scheduler, mock_source, make_state, default_options):
    mock_source.fetch_next.side_effect = RuntimeError("boom")
    state = make_state(external_id="123")

    outcome = scheduler.update(state, default_options)

    assert outcome.action == RefreshAction.FAILED
    assert outcome.failure.kind == FailureKind.TRANSPORT
    assert state.upcoming is None


# ────────────────────────────────────────────────
# IDEMPOTENCE AND CLOCK
# ────────────────────────────────────────────────

@pytest.mark.parametrize("upcoming_offset,last_check_offset", [
    (None, None),
    (None, -20),
    (-1, -3),
    (10, -11),
    (3, -50),
])
def test_repeated_run_at_same_instant_is_idempotent(failing_scheduler, make_state, make_occurrence, default_options, now,
                                                   upcoming_offset, last_check_offset):
    state = make_state(
        upcoming=make_occurrence(upcoming_offset) if upcoming_offset is not None else None,
        last_check=now + datetime.timedelta(days=last_check_offset) if last_check_offset is not None else None,
    )

    failing_scheduler.update(state, default_options)
    after_first = state.model_copy(deep=True)
    failing_scheduler.update(state, default_options)

    assert state == after_first


def test_clock_is_read_per_update(mock_source, clock, make_state, default_options, now, days):
    scheduler = RefreshScheduler(mock_source, clock)
    first = scheduler.update(make_state(show_name="A"), default_options)
    clock.advance(datetime.timedelta(minutes=5))
    second = scheduler.update(make_state(show_name="B"), default_options)

    assert first.now == now
    assert second.now == now + datetime.timedelta(minutes=5)


def test_explicit_now_overrides_clock(scheduler, make_state, default_options, now, days):
    state = make_state()
    later = now + days(1)

    outcome = scheduler.update(state, default_options, now=later)

    assert outcome.now == later
    assert state.last_check == later


def test_outcome_string_includes_failure(failing_scheduler, make_state, default_options):
    outcome = failing_scheduler.update(make_state(), default_options)

    assert str(outcome) == (
        "Mock Show: failed (no upcoming occurrence and never checked) - transport: connection refused"
    )


def test_update_keeps_display_name_in_line_with_options(scheduler, make_state, now, days):
    state = make_state(display_name="Old", last_check=now - days(1))

    outcome = scheduler.update(state, ShowOptions(display_name="New"))

    assert outcome.action == RefreshAction.SKIPPED
    assert state.display_name == "New"
    assert state.last_check == now - days(1)


def test_lookup_failures_are_logged_as_resolution_errors(scheduler, mock_source, make_state, default_options, caplog):
    mock_source.resolve_id.return_value = SourceResult.fail(FailureKind.LOOKUP_NOT_FOUND, "no match")

    with caplog.at_level(logging.ERROR):
        scheduler.update(make_state(), default_options)

    assert "Unable to resolve Mock Show [lookup_not_found]: no match" in caplog.text
