"""Custom exceptions for consistent error handling."""


class LeaseCoreError(Exception):
    """Base exception for all leasecore errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict[str, str]] | None = None,
    ):
        """
        Initialize leasecore exception.

        Args:
            code: Error code (e.g., "VALIDATION_ERROR")
            message: Human-readable error message
            details: Optional list of field-specific error details
        """
        self.code = code
        self.message = message
        self.details = details or []
        super().__init__(self.message)


class ValidationError(LeaseCoreError):
    """Raised when an operation receives invalid input (400)."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: list[dict[str, str]] | None = None,
    ):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class ScenarioHorizonError(ValidationError):
    """Raised when compared escalation scenarios do not share one horizon."""

    def __init__(self, expected_years: int, mismatched: dict[str, int]):
        details = [
            {"scenario": name, "years": str(years)}
            for name, years in sorted(mismatched.items())
        ]
        super().__init__(
            message=f"All scenarios must project {expected_years} years",
            details=details,
        )
        self.code = "SCENARIO_HORIZON_MISMATCH"
        self.expected_years = expected_years
        self.mismatched = mismatched


class NotFoundError(LeaseCoreError):
    """Raised when a lease or field is not found (404)."""

    def __init__(self, resource_type: str = "Resource", resource_id: str | None = None):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} '{resource_id}' not found"

        super().__init__(
            code="NOT_FOUND",
            message=message,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class IllegalTransitionError(LeaseCoreError):
    """Raised when a verification state transition is not permitted (409)."""

    def __init__(self, from_state: str, action: str, message: str | None = None):
        if message is None:
            message = f"Cannot {action} a field in state '{from_state}'"

        super().__init__(
            code="ILLEGAL_TRANSITION",
            message=message,
        )
        self.from_state = from_state
        self.action = action


class PersistenceError(LeaseCoreError):
    """Raised when the persistence layer returns no data for a write or read."""

    def __init__(self, operation: str, message: str = "Persistence operation failed"):
        super().__init__(
            code="PERSISTENCE_ERROR",
            message=f"{operation}: {message}",
        )
        self.operation = operation
