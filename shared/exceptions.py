"""
Custom exceptions and error handling utilities.

This module centralizes all custom exceptions used throughout the application
and provides utilities for consistent error handling and reporting.
Every business-rule failure has its own class so the request layer can pick
a status code without parsing messages.
"""

from typing import Dict, Any, Optional
import logging


# =================== BASE EXCEPTIONS ===================

class MarketplaceError(Exception):
    """Base exception for all marketplace application errors."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: str = None,
        details: Dict[str, Any] = None,
        original_exception: Exception = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.replace("Error", "").lower()
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {
            "error": self.message,
            "code": self.code,
            "type": self.__class__.__name__
        }

        if self.details:
            result["details"] = self.details

        if self.original_exception:
            result["original_error"] = str(self.original_exception)

        return result


# =================== DATA AND VALIDATION EXCEPTIONS ===================

class DataValidationError(MarketplaceError):
    """Raised when a value object or request input is malformed."""
    http_status = 422


class InvalidAmountError(DataValidationError):
    """Raised when a monetary amount is not a positive fixed-precision value."""
    http_status = 400

    def __init__(self, amount: Any, reason: str = None):
        message = f"Invalid amount: {amount}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message=message,
            code="invalid_amount",
            details={"amount": str(amount), "reason": reason}
        )
        self.amount = amount
        self.reason = reason


# =================== CONFIGURATION EXCEPTIONS ===================

class ConfigurationError(MarketplaceError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, errors):
        super().__init__(
            message="Invalid configuration: " + "; ".join(errors),
            code="configuration_error",
            details={"errors": list(errors)}
        )
        self.errors = list(errors)


# =================== ACCESS EXCEPTIONS ===================

class ForbiddenRoleError(MarketplaceError):
    """Raised when a profile does not have the role an operation requires."""
    http_status = 403

    def __init__(self, profile_id: Any, required_role: str, actual_role: Optional[str] = None):
        message = f"Profile {profile_id} must be a {required_role}"
        super().__init__(
            message=message,
            code="forbidden_role",
            details={
                "profile_id": profile_id,
                "required_role": required_role,
                "actual_role": actual_role,
            }
        )
        self.profile_id = profile_id
        self.required_role = required_role
        self.actual_role = actual_role


# =================== REPOSITORY EXCEPTIONS ===================

class RepositoryError(MarketplaceError):
    """Base class for repository errors."""
    pass


class EntityNotFoundError(RepositoryError):
    """Raised when requested entity is not found or not visible to the caller."""
    http_status = 404

    def __init__(self, entity_type: str, identifier: Any, details: Dict[str, Any] = None):
        message = f"{entity_type} not found: {identifier}"
        super().__init__(
            message=message,
            code="not_found",
            details={
                "entity_type": entity_type,
                "identifier": identifier,
                **(details or {})
            }
        )
        self.entity_type = entity_type
        self.identifier = identifier


class StoreUnavailableError(RepositoryError):
    """Raised when the ledger store times out or cannot be reached."""
    http_status = 503

    def __init__(self, operation: str, original_exception: Exception = None):
        message = f"Ledger store unavailable during {operation}"
        super().__init__(
            message=message,
            code="store_unavailable",
            details={"operation": operation},
            original_exception=original_exception
        )
        self.operation = operation


# =================== BUSINESS LOGIC EXCEPTIONS ===================

class BusinessLogicError(MarketplaceError):
    """Base class for business rule violations."""
    http_status = 409


class AlreadyPaidError(BusinessLogicError):
    """Raised when a job has already been settled."""

    def __init__(self, job_id: int):
        super().__init__(
            message=f"Job {job_id} is already paid",
            code="already_paid",
            details={"job_id": job_id}
        )
        self.job_id = job_id


class InsufficientFundsError(BusinessLogicError):
    """Raised when a client's balance does not cover a job price."""
    http_status = 402

    def __init__(self, profile_id: int, balance: Any, required: Any):
        super().__init__(
            message=f"Insufficient funds for profile {profile_id}: balance {balance} < {required}",
            code="insufficient_funds",
            details={
                "profile_id": profile_id,
                "balance": str(balance),
                "required": str(required),
            }
        )
        self.profile_id = profile_id
        self.balance = balance
        self.required = required


class NoOutstandingJobsError(BusinessLogicError):
    """Raised when a client with no unpaid jobs tries to deposit."""

    def __init__(self, profile_id: int):
        super().__init__(
            message=f"Profile {profile_id} has no outstanding jobs",
            code="no_outstanding_jobs",
            details={"profile_id": profile_id}
        )
        self.profile_id = profile_id


class DepositExceedsCapError(BusinessLogicError):
    """Raised when a deposit is larger than the permitted cap."""
    http_status = 400

    def __init__(self, profile_id: int, amount: Any, outstanding: Any, cap: Any):
        super().__init__(
            message=f"Deposit {amount} exceeds cap {cap} for profile {profile_id}",
            code="deposit_exceeds_cap",
            details={
                "profile_id": profile_id,
                "amount": str(amount),
                "outstanding": str(outstanding),
                "cap": str(cap),
            }
        )
        self.profile_id = profile_id
        self.amount = amount
        self.outstanding = outstanding
        self.cap = cap


class NoDataError(BusinessLogicError):
    """Raised when a report has no paid jobs to aggregate."""
    http_status = 404

    def __init__(self, report: str, start: Any, end: Any):
        super().__init__(
            message=f"No paid jobs between {start} and {end}",
            code="no_data",
            details={"report": report, "start": str(start), "end": str(end)}
        )
        self.report = report


# =================== ERROR HANDLING UTILITIES ===================

def handle_exception(
    exception: Exception,
    logger: logging.Logger,
    context: Dict[str, Any] = None,
    reraise: bool = False
) -> Dict[str, Any]:
    """
    Centralized exception handling utility.

    Args:
        exception: The exception to handle
        logger: Logger instance for error reporting
        context: Additional context information
        reraise: Whether to re-raise the exception

    Returns:
        Dictionary representation of the error
    """
    error_dict = {}

    if isinstance(exception, MarketplaceError):
        error_dict = exception.to_dict()
        # Rule violations are expected outcomes; only store failures are errors
        level = logging.ERROR if isinstance(exception, StoreUnavailableError) else logging.WARNING
        logger.log(level, f"{exception.__class__.__name__}: {exception.message}", extra={
            "error_code": exception.code,
            "details": exception.details,
            "context": context
        })
    else:
        error_dict = {
            "error": str(exception),
            "code": "unexpected_error",
            "type": exception.__class__.__name__
        }
        logger.error(f"Unexpected error: {str(exception)}", extra={
            "exception_type": exception.__class__.__name__,
            "context": context
        }, exc_info=True)

    if context:
        error_dict["context"] = context

    if reraise:
        raise exception

    return error_dict


def create_error_response(
    exception: Exception,
    include_details: bool = True
) -> Dict[str, Any]:
    """
    Create standardized error response from exception.

    Args:
        exception: The exception to convert
        include_details: Whether to include detailed error information

    Returns:
        Standardized error response dictionary
    """
    if isinstance(exception, MarketplaceError):
        response = {
            "success": False,
            "error": exception.message,
            "code": exception.code
        }

        if include_details and exception.details:
            response["details"] = exception.details

        return response
    else:
        return {
            "success": False,
            "error": str(exception),
            "code": "unexpected_error"
        }


# =================== EXPORT ALL EXCEPTIONS ===================

__all__ = [
    # Base exceptions
    "MarketplaceError",

    # Data validation exceptions
    "DataValidationError",
    "InvalidAmountError",

    # Configuration exceptions
    "ConfigurationError",

    # Access exceptions
    "ForbiddenRoleError",

    # Repository exceptions
    "RepositoryError",
    "EntityNotFoundError",
    "StoreUnavailableError",

    # Business logic exceptions
    "BusinessLogicError",
    "AlreadyPaidError",
    "InsufficientFundsError",
    "NoOutstandingJobsError",
    "DepositExceedsCapError",
    "NoDataError",

    # Utility functions
    "handle_exception",
    "create_error_response",
]
