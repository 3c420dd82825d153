# estimating/schemas/tool_result.py
from typing import Any, Dict, Optional

from pydantic import BaseModel

from estimating.schemas.error_type import ErrorType


class ToolResult(BaseModel):
    '''
    Structured outcome of one tool call.

    Field	Meaning
    ok: bool - did the call do what was asked?
    error_type: Optional[ErrorType] - classification of the failure
    error_message: Optional[str] - readable error text
    data: Optional[Dict[str, Any]] - structured result
    explanation: Optional[str] - what happened and what to do next
    side_effect: bool - did the call change persisted state?
    irreversible: bool - can the change not be undone?
    audit_ref_id: Optional[str] - id to trace the change in the audit log
    '''
    ok: bool

    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None

    data: Optional[Dict[str, Any]] = None
    explanation: Optional[str] = None

    side_effect: bool = False
    irreversible: bool = False

    audit_ref_id: Optional[str] = None
