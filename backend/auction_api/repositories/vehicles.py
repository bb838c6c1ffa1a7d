import logging
from dataclasses import dataclass
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from auction_api.core.errors import VehicleNotFoundError
from auction_api.db.base import utcnow
from auction_api.db.upsert import insert_for
from auction_api.models.vehicle import AuctionHistoryEntry, Vehicle, VehicleExternalInfo, VehicleInspection
from auction_api.repositories.query import COMPLETED_RESULTS, RESULT_SOLD, Pagination, VehicleQuery
from auction_api.schemas.vehicle import InspectionUpsertRequest, VehicleUpsertRequest

logger = logging.getLogger(__name__)

SOURCE_NAMES = {
    "automart": "Automart public sale",
    "court_auction": "Court auction",
    "onbid": "Onbid",
}

# Columns merged with COALESCE on conflict; identity and timestamps are handled separately.
_VEHICLE_MERGE_COLUMNS = (
    "mgmt_number",
    "car_number",
    "manufacturer",
    "model_name",
    "fuel_type",
    "transmission",
    "year",
    "mileage",
    "price",
    "min_bid_price",
    "location",
    "organization",
    "due_date",
    "auction_count",
    "status",
    "image_urls",
    "detail_url",
    "final_price",
    "result_status",
    "result_date",
    "case_number",
    "court_name",
    "property_type",
)

_INSPECTION_MERGE_COLUMNS = (
    "inspection_date",
    "vin",
    "displacement",
    "mileage_at_inspection",
    "color",
    "drive_type",
    "report_url",
)


class AuctionSnapshot(NamedTuple):
    auction_count: int | None
    status: str | None
    price: int | None
    min_bid_price: int | None
    final_price: int | None
    result_status: str | None


@dataclass
class VehiclePage:
    items: list[tuple[Vehicle, bool]]
    total: int
    pagination: Pagination

    @property
    def total_pages(self) -> int:
        return self.pagination.total_pages(self.total)


@dataclass
class VehicleStats:
    total_count: int
    avg_price: float
    price_min: int
    price_max: int
    by_fuel_type: list[tuple[str, int, float]]
    by_status: list[tuple[str, int]]
    by_source: list[tuple[str, int, float]]
    completed_count: int
    avg_final_price: float
    sale_rate: float


def _snapshot_columns():
    return (
        Vehicle.auction_count,
        Vehicle.status,
        Vehicle.price,
        Vehicle.min_bid_price,
        Vehicle.final_price,
        Vehicle.result_status,
    )


class VehicleRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def page(self, query: VehicleQuery) -> VehiclePage:
        total = self.db.scalar(query.count_statement()) or 0
        rows = self.db.execute(query.page_statement()).all()
        return VehiclePage(
            items=[(row[0], bool(row[1])) for row in rows],
            total=int(total),
            pagination=query.pagination,
        )

    def get(self, vehicle_id: int) -> Vehicle | None:
        return self.db.get(Vehicle, vehicle_id)

    def exists(self, vehicle_id: int) -> bool:
        return self.db.scalar(select(Vehicle.id).where(Vehicle.id == vehicle_id)) is not None

    def _snapshot(self, source: str, source_id: str) -> AuctionSnapshot | None:
        row = self.db.execute(
            select(*_snapshot_columns()).where(Vehicle.source == source).where(Vehicle.source_id == source_id)
        ).first()
        return AuctionSnapshot(*row) if row is not None else None

    def upsert(self, payload: VehicleUpsertRequest) -> Vehicle:
        previous = self._snapshot(payload.source, payload.source_id)

        now = utcnow()
        values = payload.model_dump()
        values["created_at"] = now
        values["updated_at"] = now

        stmt = insert_for(self.db, Vehicle).values(**values)
        table = Vehicle.__table__
        merged = {name: func.coalesce(stmt.excluded[name], table.c[name]) for name in _VEHICLE_MERGE_COLUMNS}
        merged["updated_at"] = stmt.excluded.updated_at
        stmt = stmt.on_conflict_do_update(index_elements=[Vehicle.source, Vehicle.source_id], set_=merged)
        self.db.execute(stmt)

        vehicle = self.db.scalars(
            select(Vehicle)
            .where(Vehicle.source == payload.source)
            .where(Vehicle.source_id == payload.source_id)
            .execution_options(populate_existing=True)
        ).one()

        current = AuctionSnapshot(
            vehicle.auction_count,
            vehicle.status,
            vehicle.price,
            vehicle.min_bid_price,
            vehicle.final_price,
            vehicle.result_status,
        )
        if previous != current:
            self.db.add(
                AuctionHistoryEntry(
                    vehicle_id=vehicle.id,
                    auction_round=vehicle.auction_count,
                    listed_price=vehicle.price,
                    min_bid_price=vehicle.min_bid_price,
                    final_price=vehicle.final_price,
                    status=vehicle.status or "",
                    bid_deadline=vehicle.due_date,
                    result_date=vehicle.result_date,
                    recorded_at=now,
                )
            )
        self.db.commit()

        logger.info(
            "Upserted vehicle %s/%s id=%s (%s).",
            payload.source,
            payload.source_id,
            vehicle.id,
            "created" if previous is None else "merged",
        )
        return vehicle

    def history(self, vehicle_id: int) -> list[AuctionHistoryEntry]:
        return list(
            self.db.scalars(
                select(AuctionHistoryEntry)
                .where(AuctionHistoryEntry.vehicle_id == vehicle_id)
                .order_by(AuctionHistoryEntry.recorded_at.desc(), AuctionHistoryEntry.id.desc())
            ).all()
        )

    def inspection(self, vehicle_id: int) -> VehicleInspection | None:
        return self.db.scalar(select(VehicleInspection).where(VehicleInspection.vehicle_id == vehicle_id))

    def upsert_inspection(self, payload: InspectionUpsertRequest) -> VehicleInspection:
        vehicle_id = self.db.scalar(
            select(Vehicle.id).where(Vehicle.source_id == payload.vehicle_source_id).order_by(Vehicle.id).limit(1)
        )
        if vehicle_id is None:
            raise VehicleNotFoundError(f"vehicle not found for source_id: {payload.vehicle_source_id}")

        now = utcnow()
        values = payload.model_dump(exclude={"vehicle_source_id"})
        values.update(vehicle_id=vehicle_id, scraped_at=now, created_at=now, updated_at=now)

        stmt = insert_for(self.db, VehicleInspection).values(**values)
        table = VehicleInspection.__table__
        merged = {name: func.coalesce(stmt.excluded[name], table.c[name]) for name in _INSPECTION_MERGE_COLUMNS}
        merged.update(
            report_data=stmt.excluded.report_data,
            scraped_at=stmt.excluded.scraped_at,
            updated_at=stmt.excluded.updated_at,
        )
        stmt = stmt.on_conflict_do_update(index_elements=[VehicleInspection.vehicle_id], set_=merged)
        self.db.execute(stmt)
        self.db.commit()

        inspection = self.db.scalars(
            select(VehicleInspection)
            .where(VehicleInspection.vehicle_id == vehicle_id)
            .execution_options(populate_existing=True)
        ).one()
        logger.info("Upserted inspection for vehicle id=%s.", vehicle_id)
        return inspection

    def find_by_car_number(self, car_number: str) -> list[Vehicle]:
        return list(
            self.db.scalars(
                select(Vehicle)
                .where(Vehicle.car_number == car_number)
                .order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
            ).all()
        )

    def external_info(self, car_number: str) -> VehicleExternalInfo | None:
        return self.db.scalar(
            select(VehicleExternalInfo)
            .where(VehicleExternalInfo.car_number == car_number)
            .order_by(VehicleExternalInfo.fetched_at.desc())
            .limit(1)
        )

    def sources(self) -> list[tuple[str, str, int]]:
        count = func.count(Vehicle.id)
        rows = self.db.execute(select(Vehicle.source, count).group_by(Vehicle.source).order_by(count.desc())).all()
        return [(source, SOURCE_NAMES.get(source, source), int(total)) for source, total in rows]

    def stats(self) -> VehicleStats:
        priced = Vehicle.price.is_not(None)
        total_count, avg_price, price_min, price_max = self.db.execute(
            select(
                func.count(Vehicle.id),
                func.coalesce(func.avg(Vehicle.price), 0),
                func.coalesce(func.min(Vehicle.price), 0),
                func.coalesce(func.max(Vehicle.price), 0),
            ).where(priced)
        ).one()

        fuel_count = func.count(Vehicle.id)
        by_fuel_type = self.db.execute(
            select(Vehicle.fuel_type, fuel_count, func.coalesce(func.avg(Vehicle.price), 0))
            .where(Vehicle.fuel_type.is_not(None))
            .group_by(Vehicle.fuel_type)
            .order_by(fuel_count.desc())
        ).all()

        status_count = func.count(Vehicle.id)
        by_status = self.db.execute(
            select(Vehicle.status, status_count)
            .where(Vehicle.status.is_not(None))
            .group_by(Vehicle.status)
            .order_by(status_count.desc())
        ).all()

        source_count = func.count(Vehicle.id)
        by_source = self.db.execute(
            select(Vehicle.source, source_count, func.coalesce(func.avg(Vehicle.price), 0))
            .group_by(Vehicle.source)
            .order_by(source_count.desc())
        ).all()

        completed_count, avg_final_price = self.db.execute(
            select(func.count(Vehicle.id), func.coalesce(func.avg(Vehicle.final_price), 0)).where(
                Vehicle.result_status.in_(COMPLETED_RESULTS)
            )
        ).one()

        sale_rate = 0.0
        if completed_count:
            sold = self.db.scalar(select(func.count(Vehicle.id)).where(Vehicle.result_status == RESULT_SOLD)) or 0
            sale_rate = sold / completed_count * 100

        return VehicleStats(
            total_count=int(total_count),
            avg_price=float(avg_price),
            price_min=int(price_min),
            price_max=int(price_max),
            by_fuel_type=[(fuel, int(count), float(avg)) for fuel, count, avg in by_fuel_type],
            by_status=[(status, int(count)) for status, count in by_status],
            by_source=[(source, int(count), float(avg)) for source, count, avg in by_source],
            completed_count=int(completed_count),
            avg_final_price=float(avg_final_price),
            sale_rate=float(sale_rate),
        )
