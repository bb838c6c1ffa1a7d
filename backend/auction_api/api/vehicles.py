from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from auction_api.api.deps import get_vehicle_repository
from auction_api.core.errors import VehicleNotFoundError
from auction_api.db.base import INT64_MAX, INT64_MIN
from auction_api.models.vehicle import Vehicle
from auction_api.repositories.query import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    DEFAULT_SORT_FIELD,
    MAX_PAGE,
    VehicleFilters,
    VehicleQuery,
)
from auction_api.repositories.vehicles import VehicleRepository
from auction_api.schemas.vehicle import (
    AuctionHistoryOut,
    CarNumberLookupOut,
    ExternalInfoOut,
    InspectionOut,
    InspectionUpsertRequest,
    PaginationOut,
    VehicleListOut,
    VehicleOut,
    VehicleUpsertRequest,
)

router = APIRouter(prefix="/api", tags=["vehicles"])

CAR365_HISTORY_URL = "https://www.car365.go.kr/acat/catIntgVhclHist.do?carNo={car_number}"


def _to_vehicle_out(vehicle: Vehicle, has_inspection: bool | None = None) -> VehicleOut:
    out = VehicleOut.model_validate(vehicle)
    if has_inspection is not None:
        out.has_inspection = has_inspection
    return out


def _vehicle_or_404(repo: VehicleRepository, vehicle_id: int) -> Vehicle:
    vehicle = repo.get(vehicle_id)
    if vehicle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
    return vehicle


@router.get("/vehicles", response_model=VehicleListOut)
def list_vehicles(
    repo: VehicleRepository = Depends(get_vehicle_repository),
    page: int = Query(DEFAULT_PAGE, le=MAX_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    year: int | None = Query(None, ge=INT64_MIN, le=INT64_MAX),
    year_max: int | None = Query(None, ge=INT64_MIN, le=INT64_MAX),
    price_min: int | None = Query(None, ge=INT64_MIN, le=INT64_MAX),
    price_max: int | None = Query(None, ge=INT64_MIN, le=INT64_MAX),
    mileage_min: int | None = Query(None, ge=INT64_MIN, le=INT64_MAX),
    mileage_max: int | None = Query(None, ge=INT64_MIN, le=INT64_MAX),
    fuel_type: str | None = Query(None, max_length=64),
    status_: str | None = Query(None, alias="status", max_length=64),
    source: str | None = Query(None, max_length=32),
    result_status: str | None = Query(None, max_length=64),
    listing_type: str | None = Query(None, max_length=16),
    has_inspection: bool | None = Query(None),
    car_number: str | None = Query(None, max_length=32),
    search: str | None = Query(None, max_length=120),
    sort_by: str = Query(DEFAULT_SORT_FIELD),
    sort_dir: str = Query("desc"),
) -> VehicleListOut:
    filters = VehicleFilters(
        year=year,
        year_max=year_max,
        price_min=price_min,
        price_max=price_max,
        mileage_min=mileage_min,
        mileage_max=mileage_max,
        fuel_type=fuel_type,
        status=status_,
        source=source,
        result_status=result_status,
        listing_type=listing_type,
        has_inspection=has_inspection,
        car_number=car_number,
        search=search,
    )
    query = VehicleQuery(filters, page=page, limit=limit, sort_by=sort_by, sort_dir=sort_dir)
    result = repo.page(query)
    return VehicleListOut(
        data=[_to_vehicle_out(vehicle, flag) for vehicle, flag in result.items],
        pagination=PaginationOut(
            page=result.pagination.page,
            limit=result.pagination.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get("/vehicles/lookup/{car_number}", response_model=CarNumberLookupOut)
def lookup_car_number(car_number: str, repo: VehicleRepository = Depends(get_vehicle_repository)) -> CarNumberLookupOut:
    car_number = car_number.strip()
    if not car_number:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Car number is required")

    external_info = repo.external_info(car_number)
    return CarNumberLookupOut(
        vehicles=[_to_vehicle_out(vehicle) for vehicle in repo.find_by_car_number(car_number)],
        external_info=ExternalInfoOut.model_validate(external_info) if external_info is not None else None,
        car365_url=CAR365_HISTORY_URL.format(car_number=car_number),
    )


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut)
def get_vehicle(
    vehicle_id: int = Path(..., ge=1, le=INT64_MAX),
    repo: VehicleRepository = Depends(get_vehicle_repository),
) -> VehicleOut:
    return _to_vehicle_out(_vehicle_or_404(repo, vehicle_id))


@router.get("/vehicles/{vehicle_id}/history", response_model=list[AuctionHistoryOut])
def get_vehicle_history(
    vehicle_id: int = Path(..., ge=1, le=INT64_MAX),
    repo: VehicleRepository = Depends(get_vehicle_repository),
) -> list[AuctionHistoryOut]:
    _vehicle_or_404(repo, vehicle_id)
    return [AuctionHistoryOut.model_validate(entry) for entry in repo.history(vehicle_id)]


@router.get("/vehicles/{vehicle_id}/inspection", response_model=InspectionOut)
def get_vehicle_inspection(
    vehicle_id: int = Path(..., ge=1, le=INT64_MAX),
    repo: VehicleRepository = Depends(get_vehicle_repository),
) -> InspectionOut:
    inspection = repo.inspection(vehicle_id)
    if inspection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inspection not found")
    return InspectionOut.model_validate(inspection)


@router.post("/vehicles/upsert", response_model=VehicleOut)
def upsert_vehicle(payload: VehicleUpsertRequest, repo: VehicleRepository = Depends(get_vehicle_repository)) -> VehicleOut:
    return _to_vehicle_out(repo.upsert(payload))


@router.post("/vehicles/inspection/upsert", response_model=InspectionOut)
def upsert_vehicle_inspection(
    payload: InspectionUpsertRequest,
    repo: VehicleRepository = Depends(get_vehicle_repository),
) -> InspectionOut:
    try:
        inspection = repo.upsert_inspection(payload)
    except VehicleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return InspectionOut.model_validate(inspection)
