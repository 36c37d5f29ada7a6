"""
Error kinds raised by the task lifecycle engine.

None of these are fatal: views translate every ``LifecycleError`` into a
400 response carrying the message and the stable ``code``.
"""


class LifecycleError(Exception):
    """Base class for rejected task / category state changes."""

    code = "lifecycle_error"
    default_message = "The requested change is not allowed."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class InvalidTransition(LifecycleError):
    """Illegal status or section move."""

    code = "invalid_transition"
    default_message = "Only completed or cancelled tasks can be moved to Past."


class LastCategory(LifecycleError):
    """Deleting the category would leave the project without one."""

    code = "last_category"
    default_message = (
        "Cannot delete the last category. "
        "Each project must have at least one category."
    )


class ReassignmentRequired(LifecycleError):
    """Category still holds tasks and no reassignment target was given."""

    code = "reassignment_required"
    default_message = "Category has tasks. Provide a reassign_to category ID."


class InvalidReassignmentTarget(LifecycleError):
    """Reassignment target is missing, foreign, or the category being deleted."""

    code = "invalid_reassignment_target"
    default_message = "Reassignment category not found."
