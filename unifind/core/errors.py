"""
Workflow Errors

Typed outcomes raised by the stores and the workflow engine. Each error names
exactly one kind and carries a human-readable reason that the request layer
forwards verbatim.
"""


class WorkflowError(Exception):
    """Base class for all workflow failures."""

    kind = "WORKFLOW_ERROR"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.reason!r})"


class ValidationError(WorkflowError):
    """Missing or malformed required input."""
    kind = "VALIDATION_ERROR"


class NotFound(WorkflowError):
    """Referenced item or claim does not exist."""
    kind = "NOT_FOUND"


class InvalidState(WorkflowError):
    """Entity is not in the status the operation requires."""
    kind = "INVALID_STATE"


class Conflict(WorkflowError):
    """Duplicate PENDING claim by the same student on the same item."""
    kind = "CONFLICT"


class StoreUnavailable(WorkflowError):
    """The underlying database failed. Not a business error."""
    kind = "STORE_UNAVAILABLE"


class Forbidden(WorkflowError):
    """Principal's role does not allow the operation."""
    kind = "FORBIDDEN"
