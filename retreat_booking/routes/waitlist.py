from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.engine import Engine

from retreat_booking.dependencies import get_db_engine
from retreat_booking.errors import BookingError
from retreat_booking.routes._reservation_helpers import http_error_for
from retreat_booking.schemas.reservations import ReservationResponse
from retreat_booking.schemas.waitlist import WaitlistAddPayload, WaitlistPromotePayload
from retreat_booking.services.outcomes import Refusal
from retreat_booking.services.waitlist import (
    PromotionResult,
    add_to_waitlist,
    auto_promote,
    list_waitlist,
    promote,
    remove_from_waitlist,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


def _promotion_payload(result: PromotionResult) -> dict[str, Any]:
    if isinstance(result.outcome, Refusal):
        return {"entry_id": result.entry_id, "promoted": False, **result.outcome.detail()}
    return {
        "entry_id": result.entry_id,
        "promoted": True,
        "reservation": ReservationResponse.model_validate(result.outcome).model_dump(mode="json"),
    }


@router.get("/retreats/{retreat_id}/waitlist")
def list_waitlist_endpoint(retreat_id: int, engine: Engine = Depends(get_db_engine)) -> Any:
    """
    Waiting guests for a retreat with available spots and promotability.
    """
    try:
        view = list_waitlist(engine, retreat_id)
        return jsonable_encoder(
            {
                "retreat_id": view.retreat_id,
                "capacity": view.capacity,
                "available_spots": view.available_spots,
                "entries": [
                    {**item.entry, "position": item.position, "can_be_promoted": item.can_be_promoted}
                    for item in view.entries
                ],
            }
        )

    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("waitlist_fetch_failed", retreat_id=retreat_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/retreats/{retreat_id}/waitlist", status_code=status.HTTP_201_CREATED)
def add_to_waitlist_endpoint(
    retreat_id: int,
    payload: WaitlistAddPayload,
    engine: Engine = Depends(get_db_engine),
) -> Any:
    try:
        item = add_to_waitlist(
            engine,
            retreat_id=retreat_id,
            guest_id=payload.guest_id,
            check_in=payload.check_in_date,
            check_out=payload.check_out_date,
            party_size=payload.number_of_guests,
            priority=payload.priority,
            special_requests=payload.special_requests,
        )
        return jsonable_encoder(
            {
                "message": f"Added to waitlist at position {item.position}",
                "entry": item.entry,
                "position": item.position,
            }
        )

    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("waitlist_add_failed", retreat_id=retreat_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/retreats/{retreat_id}/waitlist/promote")
def promote_endpoint(
    retreat_id: int,
    payload: WaitlistPromotePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Promote specific entries. Entries that do not fit are reported, not raised.
    """
    try:
        results = promote(engine, retreat_id, payload.entry_ids)
        return jsonable_encoder({"results": [_promotion_payload(result) for result in results]})

    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("waitlist_promote_failed", retreat_id=retreat_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/retreats/{retreat_id}/waitlist/auto-promote")
def auto_promote_endpoint(retreat_id: int, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        results = auto_promote(engine, retreat_id)
        return jsonable_encoder(
            {
                "promoted": sum(1 for result in results if result.promoted),
                "results": [_promotion_payload(result) for result in results],
            }
        )

    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("waitlist_auto_promote_failed", retreat_id=retreat_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/waitlist/{entry_id}")
def remove_from_waitlist_endpoint(entry_id: int, engine: Engine = Depends(get_db_engine)) -> Any:
    try:
        entry = remove_from_waitlist(engine, entry_id)
        return jsonable_encoder({"message": f"Waitlist entry {entry_id} removed", "entry": entry})

    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("waitlist_remove_failed", entry_id=entry_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
