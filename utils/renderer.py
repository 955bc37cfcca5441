"""
Renders tracking state as text entries using a placeholder template.

Placeholders:
    %N  show name
    %n  display name (falls back to the show name)
    %U  air date as YYYY-MM-DD, in UTC
    %T  episode title
    %S  season number, two digits ("??" when unknown)
    %E  episode number, two digits ("??" when unknown)
    %%  a literal percent sign
"""
import re
import datetime
import logging
from typing import List, Optional
from models.occurrence import Occurrence
from models.tracking_state import TrackingState

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"%([NnUTSE%])")
UNKNOWN_ORDINAL = "??"


def _ordinal(value) -> str:
    return UNKNOWN_ORDINAL if value is None else f"{value:02d}"


def render_occurrence(state: TrackingState, occurrence: Occurrence, template: str,
                      display_name: Optional[str] = None) -> str:
    """
    Render one occurrence of a show.

    Air dates are rendered as UTC calendar dates. TMDB only publishes a date, which
    the source stores at ``[tmdb] air_time`` UTC, so converting to local time would
    move those dates to the previous day west of UTC.

    Args:
        state (TrackingState): The show the occurrence belongs to.
        occurrence (Occurrence): The occurrence to render.
        template (str): Placeholder template.
        display_name (str, optional): Name used for %n; defaults to the stored display name.

    Returns:
        str: The rendered line.
    """
    values = {
        "N": state.show_name,
        "n": display_name or state.rendered_name,
        "U": occurrence.air_date.astimezone(datetime.timezone.utc).strftime("%Y-%m-%d"),
        "T": occurrence.title,
        "S": _ordinal(occurrence.season),
        "E": _ordinal(occurrence.episode),
        "%": "%",
    }
    return PLACEHOLDER_PATTERN.sub(lambda match: values[match.group(1)], template)


def render_state(state: TrackingState, template: str, include_history: bool,
                 display_name: Optional[str] = None) -> List[str]:
    """
    Render a show's upcoming occurrence followed, optionally, by its history.

    Args:
        state (TrackingState): State to render.
        template (str): Placeholder template.
        include_history (bool): Whether to append one line per lapsed occurrence.
        display_name (str, optional): Name used for %n.

    Returns:
        List[str]: Lines in order: upcoming first (if any), then history in append order.
    """
    occurrences = [state.upcoming] if state.upcoming is not None else []
    if include_history:
        occurrences.extend(state.history)
    lines = [render_occurrence(state, occurrence, template, display_name) for occurrence in occurrences]
    logger.debug(f"Rendered {len(lines)} lines for {state.show_name}")
    return lines
