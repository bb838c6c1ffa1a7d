"""Filter, sort and pagination composition for the vehicle listing.

`VehicleQuery` turns a `VehicleFilters` value into two statements that share
one predicate list:

* `count_statement()` -- ``SELECT count(*)`` over the filtered vehicles.
* `page_statement()` -- the filtered vehicles, ordered and cut to one page,
  with the inspection-presence flag attached by a LEFT JOIN on the page rows.

Every user supplied value reaches the database as a bound parameter; the only
identifiers that end up in the SQL text come from fixed allow-lists.
"""

from dataclasses import dataclass
from math import ceil
from typing import Any, Callable

from sqlalchemy import ColumnElement, Select, asc, desc, exists, func, or_, select

from auction_api.db.base import INT64_MAX
from auction_api.models.vehicle import Vehicle, VehicleInspection

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Largest page whose offset still fits a BIGINT.
MAX_PAGE = INT64_MAX // MAX_LIMIT

DEFAULT_SORT_FIELD = "created_at"
SORT_FIELDS: dict[str, Any] = {
    "created_at": Vehicle.created_at,
    "updated_at": Vehicle.updated_at,
    "price": Vehicle.price,
    "year": Vehicle.year,
    "mileage": Vehicle.mileage,
    "due_date": Vehicle.due_date,
}

STATUS_BIDDING_OPEN = "bidding-open"
RESULT_SOLD = "sold"
RESULT_FAILED = "failed"
COMPLETED_RESULTS = (RESULT_SOLD, RESULT_FAILED)

LISTING_TYPE_ACTIVE = "active"
LISTING_TYPE_COMPLETED = "completed"

SEARCH_COLUMNS = (Vehicle.model_name, Vehicle.mgmt_number, Vehicle.car_number, Vehicle.manufacturer)


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return ceil(total / self.limit) if total > 0 else 0


def clamp_pagination(page: int | None, limit: int | None) -> Pagination:
    """Out-of-range values fall back to defaults instead of failing."""
    if page is None or page < 1:
        page = DEFAULT_PAGE
    if limit is None or limit < 1 or limit > MAX_LIMIT:
        limit = DEFAULT_LIMIT
    return Pagination(page=page, limit=limit)


def normalize_sort(sort_by: str | None, sort_dir: str | None) -> tuple[str, str]:
    field = sort_by if sort_by in SORT_FIELDS else DEFAULT_SORT_FIELD
    direction = "ASC" if (sort_dir or "").strip().upper() == "ASC" else "DESC"
    return field, direction


def _icontains(column: Any, value: str) -> ColumnElement[bool]:
    # '%' and '_' in user input match literally.
    return func.lower(column).contains(value.lower(), autoescape=True)


def _has_inspection(present: bool) -> ColumnElement[bool]:
    clause = exists().where(VehicleInspection.vehicle_id == Vehicle.id)
    return clause if present else ~clause


def _search(value: str) -> ColumnElement[bool]:
    return or_(*[_icontains(column, value) for column in SEARCH_COLUMNS])


def _listing_type(value: str) -> ColumnElement[bool] | None:
    if value == LISTING_TYPE_ACTIVE:
        return Vehicle.status == STATUS_BIDDING_OPEN
    if value == LISTING_TYPE_COMPLETED:
        return Vehicle.result_status.in_(COMPLETED_RESULTS)
    return None


@dataclass(frozen=True)
class VehicleFilters:
    year: int | None = None
    year_max: int | None = None
    price_min: int | None = None
    price_max: int | None = None
    mileage_min: int | None = None
    mileage_max: int | None = None
    fuel_type: str | None = None
    status: str | None = None
    source: str | None = None
    result_status: str | None = None
    listing_type: str | None = None
    has_inspection: bool | None = None
    car_number: str | None = None
    search: str | None = None


# Order matters: predicates are folded in this sequence, so bound parameters
# are numbered in this sequence as well.
_PREDICATES: tuple[tuple[str, Callable[[Any], ColumnElement[bool] | None]], ...] = (
    ("year", lambda v: Vehicle.year == v),
    ("year_max", lambda v: Vehicle.year <= v),
    ("price_min", lambda v: Vehicle.price >= v),
    ("price_max", lambda v: Vehicle.price <= v),
    ("mileage_min", lambda v: Vehicle.mileage >= v),
    ("mileage_max", lambda v: Vehicle.mileage <= v),
    ("fuel_type", lambda v: Vehicle.fuel_type == v),
    ("status", lambda v: Vehicle.status == v),
    ("source", lambda v: Vehicle.source == v),
    ("result_status", lambda v: Vehicle.result_status == v),
    ("listing_type", _listing_type),
    ("has_inspection", _has_inspection),
    ("car_number", lambda v: _icontains(Vehicle.car_number, v)),
    ("search", _search),
)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def build_predicates(filters: VehicleFilters) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    for name, build in _PREDICATES:
        value = getattr(filters, name)
        if not _is_present(value):
            continue
        if isinstance(value, str):
            value = value.strip()
        condition = build(value)
        if condition is not None:
            conditions.append(condition)
    return conditions


class VehicleQuery:
    def __init__(
        self,
        filters: VehicleFilters,
        *,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_dir: str | None = None,
    ) -> None:
        self.filters = filters
        self.pagination = clamp_pagination(page, limit)
        self.sort_field, self.sort_direction = normalize_sort(sort_by, sort_dir)
        self.conditions = build_predicates(filters)

    def _order_by(self, columns: Any) -> list[Any]:
        order = asc if self.sort_direction == "ASC" else desc
        sort_column = columns[self.sort_field]
        return [order(sort_column).nullslast(), order(columns["id"])]

    def count_statement(self) -> Select[Any]:
        return select(func.count()).select_from(Vehicle).where(*self.conditions)

    def page_statement(self) -> Select[Any]:
        page_ids = (
            select(Vehicle.id, SORT_FIELDS[self.sort_field].label(self.sort_field))
            .where(*self.conditions)
            .order_by(*self._order_by({"id": Vehicle.id, self.sort_field: SORT_FIELDS[self.sort_field]}))
            .limit(self.pagination.limit)
            .offset(self.pagination.offset)
            .subquery("page")
        )
        has_inspection = VehicleInspection.id.is_not(None).label("has_inspection")
        return (
            select(Vehicle, has_inspection)
            .join(page_ids, page_ids.c.id == Vehicle.id)
            .outerjoin(VehicleInspection, VehicleInspection.vehicle_id == Vehicle.id)
            .order_by(*self._order_by(page_ids.c))
        )
