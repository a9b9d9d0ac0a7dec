"""
Internal helper functions for booking route handlers.

Translate booking core exceptions and refusal outcomes into HTTP errors so
route handlers stay short.
"""

from __future__ import annotations

from typing import TypeVar

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder

from retreat_booking.errors import BookingError, BookingValidationError, NotFoundError
from retreat_booking.services.outcomes import Refusal

T = TypeVar("T")


def http_error_for(error: BookingError) -> HTTPException:
    """
    Map a booking core exception to an HTTPException.

    Args:
        error: Exception raised by the booking core

    Returns:
        HTTPException: 404 for missing records, 422 for validation errors, 500 otherwise
    """
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, BookingValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": error.field, "message": error.message},
        )
    return HTTPException(status_code=500, detail="Internal server error")


def raise_for_refusal(outcome: T) -> T:
    """
    Raise 409 Conflict if the orchestrator refused the operation.

    Args:
        outcome: Value returned by an orchestrator function

    Returns:
        The outcome unchanged when it is not a refusal

    Raises:
        HTTPException: 409 carrying the refusal's code and details
    """
    if isinstance(outcome, Refusal):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=jsonable_encoder(outcome.detail()),
        )
    return outcome
