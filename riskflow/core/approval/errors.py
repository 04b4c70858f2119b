"""Typed failures of the approval workflow.

Each error carries the HTTP status the API layer reports for it.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for approval workflow failures."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Forbidden(WorkflowError):
    """Caller lacks the role or identity required for the operation."""

    status_code = 403
    default_message = "Operation not permitted"


class InvalidState(WorkflowError):
    """A precondition on the entity itself is unmet."""

    status_code = 400
    default_message = "Invalid state"


class Conflict(WorkflowError):
    """The operation would violate a single-flight or single-decision invariant."""

    status_code = 409
    default_message = "Conflict"


class DuplicatePendingWorkflow(Conflict):
    """Raised by stores when a second pending workflow would be written for a risk."""

    default_message = "approval already pending"


class NotFound(WorkflowError):
    """Risk or workflow does not exist or belongs to another organization."""

    status_code = 404
    default_message = "Not found"


class InternalError(WorkflowError):
    """Storage or transaction failure. The message is safe to show to callers."""

    status_code = 500
    default_message = "Internal error"
