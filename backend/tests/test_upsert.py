import pytest
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from auction_api.core.errors import VehicleNotFoundError
from auction_api.models import AuctionHistoryEntry, Vehicle
from auction_api.repositories.vehicles import VehicleRepository
from auction_api.schemas.vehicle import InspectionUpsertRequest, VehicleUpsertRequest


def _vehicle_count(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(Vehicle))


def test_upsert_request_derives_legacy_identity() -> None:
    payload = VehicleUpsertRequest(mgmt_number=" A1 ")

    assert payload.source == "automart"
    assert payload.source_id == "automart:A1"


def test_upsert_request_requires_identity() -> None:
    with pytest.raises(ValidationError):
        VehicleUpsertRequest(model_name="Sonata")


def test_upsert_request_rejects_negative_price() -> None:
    with pytest.raises(ValidationError):
        VehicleUpsertRequest(mgmt_number="A1", price=-1)


def test_upsert_request_accepts_plain_date_and_datetime_strings() -> None:
    payload = VehicleUpsertRequest(mgmt_number="A1", due_date="2026-11-01 14:00:00", result_date="2026-11-02")

    assert payload.due_date is not None and payload.due_date.tzinfo is not None
    assert payload.result_date is not None and payload.result_date.day == 2


def test_upsert_merges_without_overwriting_with_nulls(db: Session) -> None:
    repo = VehicleRepository(db)
    first = repo.upsert(
        VehicleUpsertRequest(
            source="automart",
            mgmt_number="A1",
            car_number="12가3456",
            price=1000,
            status="bidding-open",
            image_urls=["https://img.example.com/1.jpg"],
        )
    )
    second = repo.upsert(VehicleUpsertRequest(source="automart", mgmt_number="A1", status="closed"))

    assert second.id == first.id
    assert second.source_id == "automart:A1"
    assert second.price == 1000
    assert second.car_number == "12가3456"
    assert second.image_urls == ["https://img.example.com/1.jpg"]
    assert second.status == "closed"
    assert _vehicle_count(db) == 1


def test_upsert_is_idempotent(db: Session) -> None:
    repo = VehicleRepository(db)
    payload = VehicleUpsertRequest(source="onbid", source_id="OB-77", price=5000, status="bidding-open")

    first = repo.upsert(payload)
    second = repo.upsert(payload)

    assert first.id == second.id
    assert _vehicle_count(db) == 1
    assert len(repo.history(first.id)) == 1


def test_upsert_appends_history_when_auction_state_changes(db: Session) -> None:
    repo = VehicleRepository(db)
    vehicle = repo.upsert(VehicleUpsertRequest(mgmt_number="H1", price=9000, auction_count=1, status="bidding-open"))
    repo.upsert(VehicleUpsertRequest(mgmt_number="H1", price=8000, auction_count=2))
    repo.upsert(VehicleUpsertRequest(mgmt_number="H1", result_status="sold", final_price=8500))

    history = repo.history(vehicle.id)

    assert len(history) == 3
    assert db.scalar(select(func.count()).select_from(AuctionHistoryEntry)) == 3
    assert {entry.auction_round for entry in history} == {1, 2}
    assert any(entry.final_price == 8500 for entry in history)


def test_upsert_inspection_requires_known_vehicle(db: Session) -> None:
    repo = VehicleRepository(db)

    with pytest.raises(VehicleNotFoundError):
        repo.upsert_inspection(InspectionUpsertRequest(vehicle_source_id="missing", report_data={"ok": True}))


def test_upsert_inspection_replaces_report_and_keeps_known_fields(db: Session) -> None:
    repo = VehicleRepository(db)
    vehicle = repo.upsert(VehicleUpsertRequest(source="automart", source_id="INS-1"))

    repo.upsert_inspection(
        InspectionUpsertRequest(vehicle_source_id="INS-1", vin="KMHXX00XXXX000000", report_data={"panels": 2})
    )
    inspection = repo.upsert_inspection(InspectionUpsertRequest(vehicle_source_id="INS-1", report_data={"panels": 3}))

    assert inspection.vehicle_id == vehicle.id
    assert inspection.vin == "KMHXX00XXXX000000"
    assert inspection.report_data == {"panels": 3}
    assert repo.inspection(vehicle.id) is not None
