"""
Display ordering for task collections.

Tasks are presented in a single total order, by strict precedence:

  1. priority      high → medium → low → none
  2. deadline      tasks with a deadline first, earliest instant first
  3. estimate      shortest normalised time estimate first, none last
  4. title         case-insensitive ascending

Anything still tied keeps its input order (``sorted`` is stable).
The functions only read attributes, so they work on ``Task`` model
instances as well as on any object exposing the same fields.
"""

import math
from datetime import date, datetime, time, timezone

from .choices import TaskPriority, TimeEstimateUnit

PRIORITY_RANK = {
    TaskPriority.HIGH: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.LOW: 2,
}
NO_PRIORITY_RANK = len(PRIORITY_RANK)

MINUTES_PER_UNIT = {
    TimeEstimateUnit.MINUTES: 1,
    TimeEstimateUnit.HOURS: 60,
    TimeEstimateUnit.DAYS: 60 * 24,
}

# Placeholder compared only between tasks that both lack a deadline.
_NO_DEADLINE = datetime.combine(date.min, time.min, tzinfo=timezone.utc)


def priority_rank(priority):
    """Rank used for sorting; ``None`` and ``"none"`` sort last."""
    return PRIORITY_RANK.get(priority, NO_PRIORITY_RANK)


def estimate_in_minutes(value, unit):
    """
    Normalise a time estimate to minutes.

    A missing value is infinitely large. A value without a unit is
    taken to already be in minutes.
    """
    if value is None:
        return math.inf
    return value * MINUTES_PER_UNIT.get(unit, 1)


def deadline_instant(deadline):
    """
    Convert a deadline to an aware UTC datetime for comparison.

    Plain dates are read as midnight UTC; naive datetimes as UTC.
    """
    if deadline is None:
        return None
    if not isinstance(deadline, datetime):
        deadline = datetime.combine(deadline, time.min)
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=timezone.utc)
    return deadline.astimezone(timezone.utc)


def task_sort_key(task):
    instant = deadline_instant(task.deadline)
    return (
        priority_rank(task.priority),
        # dated tasks before undated ones
        (instant is None, instant or _NO_DEADLINE),
        estimate_in_minutes(task.time_estimate_value, task.time_estimate_unit),
        task.title.casefold(),
    )


def sort_tasks(tasks):
    """Return a new list holding ``tasks`` in display order."""
    return sorted(tasks, key=task_sort_key)


def group_by_category(sorted_tasks):
    """
    Group an already-sorted sequence by ``category_id``.

    Each group keeps the order of the input. Groups appear in the order
    their first task appears.
    """
    grouped = {}
    for task in sorted_tasks:
        grouped.setdefault(task.category_id, []).append(task)
    return grouped
