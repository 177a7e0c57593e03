"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class EntitlementException(DomainException):
    """Base exception for subscription and entitlement errors."""

    pass


class CompanyNotFoundError(EntitlementException):
    """Raised when no subscription record exists for a company."""

    def __init__(self, message: str = "Company not found"):
        super().__init__(message, code="COMPANY_NOT_FOUND")


class SeatException(EntitlementException):
    """Base exception for seat mutations rejected locally."""

    pass


class CapacityExceededError(SeatException):
    """Raised when a seat change would exceed the plan's seat count."""

    def __init__(self, message: str = "No available seats. Please upgrade your plan."):
        super().__init__(message, code="CAPACITY_EXCEEDED")


class SelfLockViolationError(SeatException):
    """Raised when the only seated admin tries to remove their own seat."""

    def __init__(
        self,
        message: str = "You cannot remove your own seat while you are the only seated admin",
    ):
        super().__init__(message, code="SELF_LOCK_VIOLATION")


class NotAuthorizedError(SeatException):
    """Raised when a non-admin tries to manage seats."""

    def __init__(self, message: str = "You are not authorized to perform this action"):
        super().__init__(message, code="NOT_AUTHORIZED")


class RemoteSyncError(EntitlementException):
    """Base exception for failures talking to the billing backend."""

    pass


class NetworkError(RemoteSyncError):
    """Transient failure reaching the billing backend. Safe to retry."""

    def __init__(self, message: str = "Failed to sync with server"):
        super().__init__(message, code="NETWORK_ERROR")


class BackendRejectedError(RemoteSyncError):
    """Authoritative negative answer from the billing backend. Do not retry."""

    def __init__(self, message: str = "The billing backend rejected the request"):
        super().__init__(message, code="BACKEND_REJECTED")
