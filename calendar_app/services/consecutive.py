"""
Consecutive-holiday runs inside a calendar week.

A run is a maximal stretch of adjacent days that are both in the target
month and holidays. Single days are not runs; two days are a "pair"
highlight; three or more are a "block", which also emphasises the whole week.
"""

from typing import Dict, List

from calendar_app.models.schemas import CalendarGrid, ConsecutiveRun, RunKind, Week


def classify_week(week: Week) -> List[ConsecutiveRun]:
    runs: List[ConsecutiveRun] = []
    start = None

    for idx, day in enumerate(week.days):
        if day.is_current_month and day.is_holiday:
            if start is None:
                start = idx
            continue
        if start is not None and idx - start >= 2:
            runs.append(_make_run(week, start, idx - 1))
        start = None

    end = len(week.days) - 1
    if start is not None and end - start >= 1:
        runs.append(_make_run(week, start, end))
    return runs


def day_highlights(runs: List[ConsecutiveRun]) -> Dict[int, RunKind]:
    """Map day index → highlight kind for every day covered by a run."""
    return {idx: run.kind for run in runs for idx in range(run.start, run.end + 1)}


def annotate_week(week: Week) -> Week:
    """Return a copy of the week carrying its runs, per-day highlights and emphasis."""
    runs = classify_week(week)
    if not runs:
        return week.model_copy(update={"consecutive_runs": [], "emphasized": False})

    highlights = day_highlights(runs)
    days = [
        day.model_copy(update={"highlight": highlights.get(idx)})
        for idx, day in enumerate(week.days)
    ]
    return week.model_copy(update={
        "days": days,
        "consecutive_runs": runs,
        "emphasized": any(run.kind == RunKind.block for run in runs),
    })


def find_consecutive_weeks(grid: CalendarGrid) -> List[Week]:
    """Weeks of the grid that contain at least one run."""
    return [week for week in grid.weeks if classify_week(week)]


def _make_run(week: Week, start: int, end: int) -> ConsecutiveRun:
    return ConsecutiveRun(
        start=start,
        end=end,
        dates=[d.date for d in week.days[start:end + 1]],
    )
