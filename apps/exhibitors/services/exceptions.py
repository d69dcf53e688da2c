"""
Domain-specific exceptions for exhibitors app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ExhibitorServiceError(Exception):
    """Base exception for all exhibitor service errors."""
    pass


class SlotAlreadyClaimedError(ExhibitorServiceError):
    """Raised when the company already claimed this meal slot."""
    pass


class AllocationExceededError(ExhibitorServiceError):
    """Raised when the requested quantity is more than what is left."""

    def __init__(self, message, remaining=0):
        super().__init__(message)
        self.remaining = remaining


class InvalidQuantityError(ExhibitorServiceError):
    """Raised when the requested quantity is not a positive integer."""
    pass


class EmployeeRequiredError(ExhibitorServiceError):
    """Raised when no active employee of the company is named on a claim."""
    pass


class MealTypeMismatchError(ExhibitorServiceError):
    """Raised when the claimed meal type does not match the slot."""
    pass


class MealSlotNotFoundError(ExhibitorServiceError):
    """Raised when a meal slot id is unknown."""
    pass


class EmployeeNotFoundError(ExhibitorServiceError):
    """Raised when an employee does not exist or belongs to another company."""
    pass


class ClaimNotFoundError(ExhibitorServiceError):
    """Raised when an allocation claim does not exist."""
    pass


class ConfigurationError(ExhibitorServiceError):
    """Raised when the requesting user has no exhibitor profile."""
    pass


class NetworkFailureError(ExhibitorServiceError):
    """Raised when the ledger write fails."""
    pass


class DuplicateExhibitorError(ExhibitorServiceError):
    """Raised when a company code or login email is already registered."""
    pass
