# estimating/tools/error_classifier.py
from typing import Tuple

from sqlalchemy.exc import SQLAlchemyError

from estimating.errors import ExpressionError, MeasurementsRequired, NotAuthenticated, NotFound
from estimating.schemas.error_type import ErrorType
from estimating.schemas.tool_result import ToolResult

_EXPLANATIONS = {
    ErrorType.INPUT_ERROR: (
        "Input is invalid (broken formula, missing measurements or unknown id). "
        "Ask the user to re-check inputs and retry."
    ),
    ErrorType.PERMISSION_DENIED: "No user context for a write operation. Authenticate and retry.",
    ErrorType.VALIDATION_ERROR: "A value failed validation. Correct the value and retry.",
    ErrorType.DATABASE_ERROR: "Database error occurred. Retry may work. If repeated, escalate with audit details.",
    ErrorType.SYSTEM_ERROR: "Unexpected system error occurred. Retry once; if it fails again, escalate.",
}


def classify_error(e: Exception) -> Tuple[ErrorType, str]:
    '''
    Map a service exception to an ErrorType.

    Order matters: the estimating errors also subclass ValueError /
    RuntimeError / LookupError, so they are matched first.
    '''
    msg = str(e)
    if isinstance(e, NotAuthenticated):
        return ErrorType.PERMISSION_DENIED, msg
    if isinstance(e, (ExpressionError, MeasurementsRequired, NotFound)):
        return ErrorType.INPUT_ERROR, msg
    if isinstance(e, SQLAlchemyError):
        return ErrorType.DATABASE_ERROR, msg
    if isinstance(e, ValueError):
        return ErrorType.VALIDATION_ERROR, msg
    return ErrorType.SYSTEM_ERROR, msg


def failure_result(e: Exception, action: str) -> ToolResult:
    error_type, msg = classify_error(e)
    return ToolResult(
        ok=False,
        error_type=error_type,
        error_message=msg,
        data=None,
        explanation=f"Could not {action}. {_EXPLANATIONS[error_type]}",
        side_effect=False,
        irreversible=False,
        audit_ref_id=None,
    )
