"""
Integration tests for the reservation endpoints.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from retreat_booking.dependencies import get_db_engine
from retreat_booking.main import app


@pytest.fixture
def client(engine: Engine) -> Generator[TestClient, None, None]:
    """Test client whose routes use the per-test SQLite engine."""
    app.dependency_overrides[get_db_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def booking(guest_id: int, party_size: int = 2, **overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "guest_id": guest_id,
        "check_in_date": "2026-03-01",
        "check_out_date": "2026-03-05",
        "number_of_guests": party_size,
    }
    body.update(overrides)
    return body


@pytest.mark.integration
def test_create_and_fetch_reservation(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    retreat_id, guest_id = make_retreat(), make_guest()

    response = client.post(f"/retreats/{retreat_id}/reservations", json=booking(guest_id, 3))

    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "PENDING"
    assert Decimal(created["total_amount"]) == Decimal("300")

    fetched = client.get(f"/reservations/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == created["id"]


@pytest.mark.integration
def test_create_returns_409_when_retreat_is_full(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    retreat_id, guest_id = make_retreat(capacity=20), make_guest()
    client.post(
        f"/retreats/{retreat_id}/reservations", json=booking(guest_id, 15, status="CONFIRMED")
    )

    response = client.post(
        f"/retreats/{retreat_id}/reservations",
        json=booking(guest_id, 6, check_in_date="2026-03-03", check_out_date="2026-03-07"),
    )

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["error"] == "CapacityExceeded"
    assert detail["available"] == 5
    assert detail["requested"] == 6


@pytest.mark.integration
def test_create_validation_and_missing_records(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    retreat_id, guest_id = make_retreat(), make_guest()

    invalid = client.post(f"/retreats/{retreat_id}/reservations", json=booking(guest_id, 0))
    inverted = client.post(
        f"/retreats/{retreat_id}/reservations",
        json=booking(guest_id, check_in_date="2026-03-05", check_out_date="2026-03-01"),
    )
    missing = client.post("/retreats/999/reservations", json=booking(guest_id))

    assert invalid.status_code == 422
    assert invalid.json()["detail"]["field"] == "number_of_guests"
    assert inverted.status_code == 422
    assert inverted.json()["detail"]["field"] == "check_out_date"
    assert missing.status_code == 404
    assert client.get("/reservations/999").status_code == 404


@pytest.mark.integration
def test_patch_rejects_invalid_transition(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    created = client.post(
        f"/retreats/{make_retreat()}/reservations", json=booking(make_guest())
    ).json()

    confirmed = client.patch(f"/reservations/{created['id']}", json={"status": "CONFIRMED"})
    back = client.patch(f"/reservations/{created['id']}", json={"status": "PENDING"})

    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "CONFIRMED"
    assert back.status_code == 409
    assert back.json()["detail"]["error"] == "InvalidStateTransition"


@pytest.mark.integration
def test_payment_update_and_summary(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    created = client.post(
        f"/retreats/{make_retreat()}/reservations",
        json=booking(make_guest(), total_amount="1000"),
    ).json()
    url = f"/reservations/{created['id']}/payment"

    partial = client.put(url, json={"paid_amount": "400", "payment_method": "CARD"})
    full = client.put(url, json={"paid_amount": "1000", "reference": "pi_123"})

    assert partial.status_code == 200
    assert partial.json()["reservation"]["payment_status"] == "PARTIAL"
    assert full.status_code == 200
    body = full.json()
    assert body["reservation"]["payment_status"] == "PAID"
    assert body["reservation"]["status"] == "CONFIRMED"
    assert Decimal(body["delta"]) == Decimal("600")
    assert body["warnings"] == []

    summary = client.get(url).json()
    assert Decimal(summary["remaining_balance"]) == Decimal("0")
    assert len(summary["ledger_entries"]) == 1
    entry = summary["ledger_entries"][0]
    assert Decimal(entry["amount"]) == Decimal("1000")
    assert entry["status"] == "PROCESSED"
    assert entry["reference"] == "pi_123"


@pytest.mark.integration
def test_payment_rejects_unknown_status(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    created = client.post(
        f"/retreats/{make_retreat()}/reservations", json=booking(make_guest())
    ).json()

    response = client.put(
        f"/reservations/{created['id']}/payment",
        json={"paid_amount": "10", "payment_status": "SETTLED"},
    )

    assert response.status_code == 422


@pytest.mark.integration
def test_check_in_twice_returns_409(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    created = client.post(
        f"/retreats/{make_retreat()}/reservations",
        json=booking(make_guest(), status="CONFIRMED"),
    ).json()
    url = f"/reservations/{created['id']}/check-in"

    first = client.post(url, json={"staff_member": "Noor", "room_number": "C-7"})
    second = client.post(url, json={})

    assert first.status_code == 200
    assert first.json()["room_number"] == "C-7"
    assert first.json()["actual_check_in_time"] is not None
    assert second.status_code == 409
    assert second.json()["detail"]["error"] == "AlreadyCheckedIn"


@pytest.mark.integration
def test_check_out_flow(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    created = client.post(
        f"/retreats/{make_retreat()}/reservations",
        json=booking(make_guest(), status="CONFIRMED"),
    ).json()
    reservation_id = created["id"]

    early = client.post(f"/reservations/{reservation_id}/check-out", json={})
    client.post(f"/reservations/{reservation_id}/check-in", json={})
    done = client.post(
        f"/reservations/{reservation_id}/check-out",
        json={"additional_charges": "25", "payment_processed": True, "rating": 5},
    )
    bad_rating = client.post(f"/reservations/{reservation_id}/check-out", json={"rating": 9})

    assert early.status_code == 409
    assert early.json()["detail"]["error"] == "NotCheckedIn"
    assert done.status_code == 200
    body = done.json()
    assert Decimal(body["final_amount"]) == Decimal("225")
    assert body["review_points"] == 50
    assert body["reservation"]["status"] == "COMPLETED"
    assert body["reservation"]["payment_status"] == "PAID"
    assert bad_rating.status_code == 422


@pytest.mark.integration
def test_delete_cancels_or_refuses_hard_delete(
    client: TestClient, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    retreat_id, guest_id = make_retreat(), make_guest()
    paid = client.post(f"/retreats/{retreat_id}/reservations", json=booking(guest_id)).json()
    fresh = client.post(f"/retreats/{retreat_id}/reservations", json=booking(guest_id)).json()
    client.put(f"/reservations/{paid['id']}/payment", json={"paid_amount": "50"})

    refused = client.delete(f"/reservations/{paid['id']}", params={"hard": "true"})
    cancelled = client.delete(f"/reservations/{paid['id']}")
    deleted = client.delete(f"/reservations/{fresh['id']}", params={"hard": "true"})

    assert refused.status_code == 409
    assert refused.json()["detail"]["error"] == "HasDependentLedgerEntries"
    assert cancelled.status_code == 200
    assert cancelled.json()["reservation"]["status"] == "CANCELLED"
    assert deleted.status_code == 200
    assert client.get(f"/reservations/{fresh['id']}").status_code == 404
