"""
Exceptions raised by the booking core.

Malformed input and missing records are exceptions; business refusals
(capacity, state machine, idempotency) are returned as typed outcomes from
retreat_booking.services.outcomes instead.
"""

from typing import Any, Optional


class BookingError(Exception):
    """Base class for booking core exceptions."""


class BookingValidationError(BookingError):
    """Input is malformed; raised before any storage access."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(BookingError):
    """A referenced retreat, guest, reservation or waitlist entry does not exist."""

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class LedgerWriteFailure(BookingError):
    """
    The mirrored ledger entry could not be written.

    Raised only inside the ledger write path. Callers catch it, log it and
    report it as a warning; the reservation's payment fields stay committed.
    """

    def __init__(self, reservation_id: int, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"ledger write failed for reservation {reservation_id}: {cause}")
        self.reservation_id = reservation_id
        self.cause = cause
