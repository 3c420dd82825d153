# estimating/errors.py
from typing import Optional


class EstimatingError(Exception):
    """Base class for every error raised by the estimating package."""


class ExpressionError(EstimatingError, ValueError):
    '''
    Formula evaluation failure.

    :param expression: the formula that failed
    '''
    def __init__(self, message: str, expression: Optional[str] = None):
        self.expression = expression
        super().__init__(message)


class InvalidExpression(ExpressionError):
    """Malformed formula: illegal character, unbalanced parens, dangling operator."""


class UnknownVariable(ExpressionError):
    def __init__(self, name: str, expression: Optional[str] = None):
        self.name = name
        super().__init__(f"Unknown variable: {name}", expression)


class DivisionByZero(ExpressionError):
    def __init__(self, expression: Optional[str] = None):
        super().__init__("Division by zero", expression)


class MeasurementsRequired(EstimatingError, ValueError):
    """Generation needs measurements with a positive floor area."""


class NotAuthenticated(EstimatingError, RuntimeError):
    """A persistence operation needing a user context was called without one."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotFound(EstimatingError, LookupError):
    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")
