from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.engine import Engine

from retreat_booking.dependencies import get_db_engine
from retreat_booking.errors import BookingError
from retreat_booking.routes._reservation_helpers import http_error_for, raise_for_refusal
from retreat_booking.schemas.payments import (
    LedgerEntryResponse,
    PaymentSummaryResponse,
    PaymentUpdatePayload,
    PaymentUpdateResponse,
)
from retreat_booking.schemas.reservations import (
    ReservationCreatePayload,
    ReservationResponse,
    ReservationUpdatePayload,
)
from retreat_booking.schemas.stays import CheckInPayload, CheckOutPayload
from retreat_booking.services.bookings import (
    cancel_reservation,
    check_in,
    check_out,
    create_reservation,
    get_payment_summary,
    get_reservation_view,
    update_payment,
    update_reservation,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/retreats/{retreat_id}/reservations",
    status_code=status.HTTP_201_CREATED,
    response_model=ReservationResponse,
)
def create_reservation_endpoint(
    retreat_id: int,
    payload: ReservationCreatePayload,
    engine: Engine = Depends(get_db_engine),
) -> Any:
    """
    Book a retreat for a guest.

    Args:
        retreat_id: Retreat to book
        payload: Guest, dates and party size

    Returns:
        ReservationResponse: The new reservation (409 if the retreat is full)
    """
    try:
        reservation = raise_for_refusal(
            create_reservation(
                engine,
                retreat_id=retreat_id,
                guest_id=payload.guest_id,
                check_in=payload.check_in_date,
                check_out=payload.check_out_date,
                party_size=payload.number_of_guests,
                status=payload.status,
                total_amount=payload.total_amount,
                room_number=payload.room_number,
                special_requests=payload.special_requests,
                notes=payload.notes,
            )
        )
        return ReservationResponse.model_validate(reservation)

    except HTTPException:
        raise
    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("reservation_creation_failed", retreat_id=retreat_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/{reservation_id}", response_model=ReservationResponse)
def get_reservation_endpoint(
    reservation_id: int, engine: Engine = Depends(get_db_engine)
) -> Any:
    try:
        return ReservationResponse.model_validate(get_reservation_view(engine, reservation_id))
    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("reservation_fetch_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/reservations/{reservation_id}", response_model=ReservationResponse)
def update_reservation_endpoint(
    reservation_id: int,
    payload: ReservationUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> Any:
    """
    Update dates, party size, status or details of a reservation.

    Only fields present in the request body are changed. Capacity is
    re-checked when the stay changes or the reservation is confirmed.
    """
    try:
        patch = payload.model_dump(exclude_unset=True)
        reservation = raise_for_refusal(update_reservation(engine, reservation_id, patch))
        return ReservationResponse.model_validate(reservation)

    except HTTPException:
        raise
    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("reservation_update_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/reservations/{reservation_id}/payment", response_model=PaymentUpdateResponse)
def update_payment_endpoint(
    reservation_id: int,
    payload: PaymentUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> Any:
    """
    Record the amount paid on a reservation.

    The response's `warnings` lists ledger mirror failures; the payment
    itself is committed whenever this returns 200.
    """
    try:
        result = update_payment(
            engine,
            reservation_id,
            paid_amount=payload.paid_amount,
            method=payload.payment_method,
            status=payload.payment_status,
            reference=payload.reference,
        )
        return PaymentUpdateResponse(
            reservation=ReservationResponse.model_validate(result.reservation),
            delta=result.delta,
            ledger_entry_id=result.ledger_entry_id,
            warnings=result.warnings,
        )

    except HTTPException:
        raise
    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("payment_update_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/{reservation_id}/payment", response_model=PaymentSummaryResponse)
def get_payment_endpoint(reservation_id: int, engine: Engine = Depends(get_db_engine)) -> Any:
    try:
        summary = get_payment_summary(engine, reservation_id)
        reservation = summary.reservation
        return PaymentSummaryResponse(
            reservation_id=reservation.id,
            total_amount=reservation.total_amount,
            paid_amount=reservation.paid_amount,
            remaining_balance=summary.remaining_balance,
            payment_status=reservation.payment_status,
            payment_method=reservation.payment_method,
            ledger_entries=[
                LedgerEntryResponse.model_validate(entry) for entry in summary.ledger_entries
            ],
        )

    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("payment_fetch_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations/{reservation_id}/check-in", response_model=ReservationResponse)
def check_in_endpoint(
    reservation_id: int,
    payload: CheckInPayload,
    engine: Engine = Depends(get_db_engine),
) -> Any:
    """
    Check a guest in. A second check-in returns 409 and awards nothing.
    """
    try:
        reservation = raise_for_refusal(
            check_in(
                engine,
                reservation_id,
                staff_member=payload.staff_member,
                metadata=payload.model_dump(exclude={"staff_member"}, exclude_none=True),
            )
        )
        return ReservationResponse.model_validate(reservation)

    except HTTPException:
        raise
    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("check_in_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reservations/{reservation_id}/check-out")
def check_out_endpoint(
    reservation_id: int,
    payload: CheckOutPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Check a guest out, apply final charges and settle loyalty.

    Returns:
        dict: Completed reservation, final amount, review points and any tier upgrade
    """
    try:
        result = raise_for_refusal(
            check_out(
                engine,
                reservation_id,
                staff_member=payload.staff_member,
                additional_charges=payload.additional_charges,
                damage_charges=payload.damage_charges,
                payment_processed=payload.payment_processed,
                additional_notes=payload.additional_notes,
                actual_check_out_time=payload.actual_check_out_time,
                rating=payload.rating,
            )
        )
        return {
            "message": "Check-out completed successfully",
            "reservation": ReservationResponse.model_validate(result.reservation).model_dump(
                mode="json"
            ),
            "final_amount": str(result.final_amount),
            "review_points": result.review_points,
            "new_tier": result.new_tier,
            "warnings": result.warnings,
        }

    except HTTPException:
        raise
    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("check_out_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_200_OK)
def delete_reservation_endpoint(
    reservation_id: int,
    hard: bool = Query(False, description="Permanently delete instead of cancelling"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Cancel a reservation, or permanently delete one with no payment history.

    Args:
        reservation_id: Reservation to cancel or delete
        hard: If True, delete the row (409 when ledger or loyalty history exists)

    Returns:
        dict: Message and the reservation's final state
    """
    try:
        reservation = raise_for_refusal(
            cancel_reservation(engine, reservation_id, hard_delete=hard)
        )
        message = (
            f"Reservation {reservation_id} permanently deleted"
            if hard
            else f"Reservation {reservation_id} cancelled"
        )
        return {
            "message": message,
            "reservation": ReservationResponse.model_validate(reservation).model_dump(mode="json"),
        }

    except HTTPException:
        raise
    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("reservation_delete_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
