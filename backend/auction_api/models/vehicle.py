from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from auction_api.db.base import Base, utcnow


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (
        UniqueConstraint("source", "source_id", name="uq_vehicles_source_source_id"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_vehicles_price_non_negative"),
        CheckConstraint("mileage IS NULL OR mileage >= 0", name="ck_vehicles_mileage_non_negative"),
        CheckConstraint("year IS NULL OR year >= 0", name="ck_vehicles_year_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    mgmt_number: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    car_number: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    manufacturer: Mapped[str | None] = mapped_column(String(128), nullable=True)
    model_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    fuel_type: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    transmission: Mapped[str | None] = mapped_column(String(64), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)

    price: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)
    min_bid_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    final_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    location: Mapped[str | None] = mapped_column(String(256), nullable=True)
    organization: Mapped[str | None] = mapped_column(String(256), nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    auction_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    image_urls: Mapped[list[str] | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    detail_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    source: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    source_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    result_status: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    result_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    case_number: Mapped[str | None] = mapped_column(String(128), nullable=True)
    court_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    property_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow, index=True
    )


class AuctionHistoryEntry(Base):
    __tablename__ = "auction_history"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    vehicle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    auction_round: Mapped[int | None] = mapped_column(Integer, nullable=True)
    listed_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    min_bid_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    final_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    status: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    bid_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    result_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)


class VehicleInspection(Base):
    __tablename__ = "vehicle_inspections"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    vehicle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    inspection_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    vin: Mapped[str | None] = mapped_column(String(64), nullable=True)
    displacement: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mileage_at_inspection: Mapped[int | None] = mapped_column(Integer, nullable=True)
    color: Mapped[str | None] = mapped_column(String(64), nullable=True)
    drive_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    report_data: Mapped[Any] = mapped_column(JSON, nullable=False)
    report_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    scraped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class VehicleExternalInfo(Base):
    __tablename__ = "vehicle_external_info"
    __table_args__ = (UniqueConstraint("car_number", "source", name="uq_vehicle_external_info_car_number_source"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    car_number: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    data: Mapped[Any] = mapped_column(JSON, nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
