from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from auction_api.db.base import INT32_MAX, INT64_MAX

DEFAULT_SOURCE = "automart"


def _parse_timestamp(value: Any) -> Any:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError("expected RFC 3339, 'YYYY-MM-DD HH:MM:SS' or 'YYYY-MM-DD'") from exc
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return value


class VehicleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    mgmt_number: str | None = None
    car_number: str | None = None
    manufacturer: str | None = None
    model_name: str | None = None
    fuel_type: str | None = None
    transmission: str | None = None
    year: int | None = None
    mileage: int | None = None
    price: int | None = None
    min_bid_price: int | None = None
    location: str | None = None
    organization: str | None = None
    due_date: datetime | None = None
    auction_count: int | None = None
    status: str | None = None
    image_urls: list[str] | None = None
    detail_url: str | None = None
    source: str | None = None
    source_id: str | None = None
    final_price: int | None = None
    result_status: str | None = None
    result_date: datetime | None = None
    case_number: str | None = None
    court_name: str | None = None
    property_type: str | None = None
    has_inspection: bool | None = None
    created_at: datetime
    updated_at: datetime


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class VehicleListOut(BaseModel):
    data: list[VehicleOut]
    pagination: PaginationOut


class VehicleUpsertRequest(BaseModel):
    mgmt_number: str | None = Field(None, max_length=64)
    car_number: str | None = Field(None, max_length=32)
    manufacturer: str | None = None
    model_name: str | None = None
    fuel_type: str | None = None
    transmission: str | None = None
    year: int | None = Field(None, ge=0, le=INT32_MAX)
    mileage: int | None = Field(None, ge=0, le=INT32_MAX)
    price: int | None = Field(None, ge=0, le=INT64_MAX)
    min_bid_price: int | None = Field(None, ge=0, le=INT64_MAX)
    location: str | None = None
    organization: str | None = None
    due_date: datetime | None = None
    auction_count: int | None = Field(None, ge=0, le=INT32_MAX)
    status: str | None = None
    image_urls: list[str] | None = None
    detail_url: str | None = None
    source: str = ""
    source_id: str = ""
    final_price: int | None = Field(None, ge=0, le=INT64_MAX)
    result_status: str | None = None
    result_date: datetime | None = None
    case_number: str | None = None
    court_name: str | None = None
    property_type: str | None = None

    @field_validator("due_date", "result_date", mode="before")
    @classmethod
    def _timestamps(cls, value: Any) -> Any:
        return _parse_timestamp(value)

    @model_validator(mode="after")
    def _identity(self) -> "VehicleUpsertRequest":
        self.source = self.source.strip() or DEFAULT_SOURCE
        self.source_id = self.source_id.strip()
        if not self.source_id:
            mgmt_number = (self.mgmt_number or "").strip()
            if not mgmt_number:
                raise ValueError("either source_id or mgmt_number is required")
            self.source_id = f"{self.source}:{mgmt_number}"
        return self


class AuctionHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vehicle_id: int
    auction_round: int | None = None
    listed_price: int | None = None
    min_bid_price: int | None = None
    final_price: int | None = None
    status: str
    bid_deadline: datetime | None = None
    result_date: datetime | None = None
    recorded_at: datetime


class InspectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vehicle_id: int
    inspection_date: date | None = None
    vin: str | None = None
    displacement: int | None = None
    mileage_at_inspection: int | None = None
    color: str | None = None
    drive_type: str | None = None
    report_data: Any
    report_url: str | None = None
    scraped_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class InspectionUpsertRequest(BaseModel):
    vehicle_source_id: str = Field(..., min_length=1)
    inspection_date: date | None = None
    vin: str | None = None
    displacement: int | None = Field(None, ge=0, le=INT32_MAX)
    mileage_at_inspection: int | None = Field(None, ge=0, le=INT32_MAX)
    color: str | None = None
    drive_type: str | None = None
    report_data: Any = Field(...)
    report_url: str | None = None

    @field_validator("inspection_date", mode="before")
    @classmethod
    def _blank_date(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("report_data")
    @classmethod
    def _report_present(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("report_data is required")
        return value


class ExternalInfoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    car_number: str
    data: Any
    source: str
    fetched_at: datetime
    created_at: datetime
    updated_at: datetime


class CarNumberLookupOut(BaseModel):
    vehicles: list[VehicleOut]
    external_info: ExternalInfoOut | None = None
    car365_url: str
