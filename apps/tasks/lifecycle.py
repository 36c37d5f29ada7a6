"""
Task lifecycle rules.

Pure functions computing the fields that must be persisted alongside a
status or section change, and the guard rules for category deletion.
Nothing here touches the database or reads the clock: callers pass the
current task snapshot and ``now``, and persist the returned fields.

Status machine::

    todo ⇄ in_progress
    any → completed      sets completion_date, archives to past
    any → cancelled      archives to past
    completed/cancelled → todo/in_progress
                         clears completion_date, unarchives to current

A task may be moved into the past section directly only once its status
is completed or cancelled.
"""

from collections import namedtuple

from .choices import TERMINAL_STATUSES, TaskSection, TaskStatus
from .exceptions import (
    InvalidReassignmentTarget,
    InvalidTransition,
    LastCategory,
    ReassignmentRequired,
)

# Fields the engine derives itself; never taken from a client patch.
DERIVED_FIELDS = ("completion_date", "updated_at")


# ---------------------------------------------------------------------------
# Status / section
# ---------------------------------------------------------------------------

def ensure_section_allowed(status, section):
    """Raise ``InvalidTransition`` if ``section`` is past and ``status`` is not terminal."""
    if section == TaskSection.PAST and status not in TERMINAL_STATUSES:
        raise InvalidTransition()


def apply_status_change(current, new_status, *, now):
    """
    Fields to persist when ``current`` moves to ``new_status``.

    Returns ``status``, ``completion_date``, ``section`` and ``updated_at``.
    """
    completion_date = current.completion_date
    section = current.section

    if new_status == TaskStatus.COMPLETED and current.status != TaskStatus.COMPLETED:
        completion_date = now
    elif new_status != TaskStatus.COMPLETED and current.status == TaskStatus.COMPLETED:
        completion_date = None

    if new_status in TERMINAL_STATUSES:
        section = TaskSection.PAST
    elif current.status in TERMINAL_STATUSES:
        # Reopening always lands in current, whatever section preceded archival.
        section = TaskSection.CURRENT

    return {
        "status": new_status,
        "completion_date": completion_date,
        "section": section,
        "updated_at": now,
    }


def apply_section_change(current, new_section, *, now):
    """Fields to persist when ``current`` is moved to ``new_section``."""
    ensure_section_allowed(current.status, new_section)
    return {"section": new_section, "updated_at": now}


def apply_field_update(current, patch, *, now):
    """
    Fields to persist for a generic edit.

    Every field of ``patch`` is passed through except the derived ones.
    A status in the patch triggers the same completion / archival rules
    as ``apply_status_change``. An explicit section in the patch wins
    over the derived one, but is checked against the resulting status.

    Category membership of a new ``category`` must be validated by the
    caller beforehand.
    """
    fields = {k: v for k, v in patch.items() if k not in DERIVED_FIELDS}
    explicit_section = fields.pop("section", None)

    if "status" in fields:
        fields.update(apply_status_change(current, fields["status"], now=now))
    else:
        fields["updated_at"] = now

    if explicit_section is not None:
        ensure_section_allowed(fields.get("status", current.status), explicit_section)
        fields["section"] = explicit_section

    return fields


# ---------------------------------------------------------------------------
# Category deletion
# ---------------------------------------------------------------------------

ReassignTasks = namedtuple("ReassignTasks", ["source", "target"])
DeleteCategory = namedtuple("DeleteCategory", ["category_id"])


def resolve_category_deletion(
    category_id, project_category_count, tasks_in_category_count, reassign_to=None
):
    """
    Plan the deletion of a category.

    Returns the ordered steps to execute: an optional ``ReassignTasks``
    moving every task of the category to ``reassign_to``, then
    ``DeleteCategory``. Raises ``LastCategory`` or
    ``ReassignmentRequired`` when the deletion must be refused.
    """
    if project_category_count <= 1:
        raise LastCategory()

    steps = []
    if tasks_in_category_count > 0:
        if not reassign_to:
            raise ReassignmentRequired()
        if reassign_to == category_id:
            raise InvalidReassignmentTarget(
                "Tasks cannot be reassigned to the category being deleted."
            )
        steps.append(ReassignTasks(source=category_id, target=reassign_to))

    steps.append(DeleteCategory(category_id=category_id))
    return steps


def check_reassignment_target(project_id, target_project_id):
    """
    Verify a reassignment target lives in the same project.

    ``target_project_id`` is ``None`` when the target does not exist.
    """
    if target_project_id is None or target_project_id != project_id:
        raise InvalidReassignmentTarget()
