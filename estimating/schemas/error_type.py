# estimating/schemas/error_type.py
from enum import Enum


class ErrorType(str, Enum):
    '''
    Structured classification of operation failures.

    Value	Meaning
    INPUT_ERROR: the request is wrong (bad formula, missing measurements, unknown id). Fix the input and retry.
    VALIDATION_ERROR: a value failed validation (non-editable field, wrong type, nothing eligible).
    BUSINESS_RULE_ERROR: the operation breaks a domain rule.
    PERMISSION_DENIED: no user context, or the user may not do this.
    HUMAN_AUTH_REQUIRED: the operation needs explicit human authorisation.
    SCHEMA_ERROR: arguments do not match the tool's input schema.
    TOOL_CALL_ERROR: arguments are well-formed but wrong for this call.
    TOOL_NOT_ALLOWED: the tool is not in the caller's allowlist.
    SYSTEM_ERROR: unknown or unclassified failure.
    DATABASE_ERROR: the database rejected or failed the operation.
    TIMEOUT_ERROR: a database or external call timed out.
    IRREVERSIBLE_CONFLICT: the operation conflicts with an irreversible state.
    '''
    # input
    INPUT_ERROR = "INPUT_ERROR"

    # business rules
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BUSINESS_RULE_ERROR = "BUSINESS_RULE_ERROR"

    # permissions / authorisation
    PERMISSION_DENIED = "PERMISSION_DENIED"
    HUMAN_AUTH_REQUIRED = "HUMAN_AUTH_REQUIRED"

    # tool calls
    SCHEMA_ERROR = "SCHEMA_ERROR"
    TOOL_CALL_ERROR = "TOOL_CALL_ERROR"
    TOOL_NOT_ALLOWED = "TOOL_NOT_ALLOWED"

    # system
    SYSTEM_ERROR = "SYSTEM_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"

    # irreversible conflicts
    IRREVERSIBLE_CONFLICT = "IRREVERSIBLE_CONFLICT"
