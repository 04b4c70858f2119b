"""Translation of workflow errors into HTTP responses."""

from fastapi import HTTPException

from riskflow.core.approval.errors import InternalError, WorkflowError


def to_http_exception(exc: WorkflowError) -> HTTPException:
    """Map a workflow error to an HTTPException carrying its status hint.

    Internal errors never expose storage details to the caller.
    """
    if isinstance(exc, InternalError):
        return HTTPException(status_code=exc.status_code, detail=InternalError.default_message)
    return HTTPException(status_code=exc.status_code, detail=exc.message)
