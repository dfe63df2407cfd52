# core/exceptions.py

class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str,*, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when data is invalid or violates constraints."""


class NotFoundError(DomainError):
    """Raised when an entity is not found."""


class BusinessRuleError(DomainError):
    """Raised when business rules are violated (e.g., circular dependencies)."""


class GraphConstructionError(BusinessRuleError):
    """Raised when a task graph cannot be built from the given batch."""


class DependencyValidationError(BusinessRuleError):
    """Raised for cycles, dangling references or overlaps longer than the predecessor."""


class CPMBoundsExceeded(BusinessRuleError):
    """Raised when a CPM pass hits its iteration cap or time budget."""


class DateAssignmentValidationError(ValidationError):
    """Raised when assigned calendar dates are inconsistent."""
    def __init__(self, errors: list[str], *, code: str | None = None):
        super().__init__("; ".join(errors), code=code)
        self.errors = list(errors)


class CalendarBoundsError(ValidationError):
    """Raised when a working-day search runs past its step limit."""
