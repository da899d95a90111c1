# backend/tutorbooking/core/exceptions.py
"""
Domain-specific exceptions for the tutor scheduling service.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the structured error payload."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = HTTP_422_UNPROCESSABLE


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Raised when no authenticated identity accompanies the request."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking overlaps one or more existing bookings of the tutor."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        conflicting_bookings: Optional[List[Dict[str, Any]]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        payload = dict(details or {})
        conflicts = list(conflicting_bookings or [])
        payload["conflicting_bookings"] = conflicts
        payload["conflicting_public_ids"] = [c["public_id"] for c in conflicts if c.get("public_id")]
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=payload,
        )

    @property
    def conflicting_public_ids(self) -> List[str]:
        return list(self.details.get("conflicting_public_ids", []))


class InvalidStatusTransitionException(ValidationException):
    """Raised when a booking is moved along an edge the lifecycle does not allow."""

    def __init__(self, current: str, target: str):
        if current in ("completed", "cancelled"):
            message = f"Booking is already in terminal status: {current}"
        else:
            message = f"Cannot transition booking from {current} to {target}"
        super().__init__(
            message=message,
            code="INVALID_STATUS_TRANSITION",
            details={"current_status": current, "requested_status": target},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
