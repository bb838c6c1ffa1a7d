from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from auction_api.api.deps import get_current_claims, get_favorites_repository, get_vehicle_repository
from auction_api.core.security import AccessClaims
from auction_api.db.base import INT64_MAX
from auction_api.repositories.favorites import FavoritesRepository
from auction_api.repositories.query import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_PAGE, clamp_pagination
from auction_api.repositories.vehicles import VehicleRepository
from auction_api.schemas.auth import MessageResponse
from auction_api.schemas.favorite import FavoritesCheckRequest, FavoritesCheckResponse, FavoriteStatusResponse
from auction_api.schemas.vehicle import PaginationOut, VehicleListOut, VehicleOut

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.get("", response_model=VehicleListOut)
def list_favorites(
    page: int = Query(DEFAULT_PAGE, le=MAX_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    claims: AccessClaims = Depends(get_current_claims),
    repo: FavoritesRepository = Depends(get_favorites_repository),
) -> VehicleListOut:
    pagination = clamp_pagination(page, limit)
    vehicles, total = repo.list_for_user(claims.user_id, pagination)
    return VehicleListOut(
        data=[VehicleOut.model_validate(vehicle) for vehicle in vehicles],
        pagination=PaginationOut(
            page=pagination.page,
            limit=pagination.limit,
            total=total,
            total_pages=pagination.total_pages(total),
        ),
    )


@router.post("/check", response_model=FavoritesCheckResponse)
def check_favorites(
    payload: FavoritesCheckRequest,
    claims: AccessClaims = Depends(get_current_claims),
    repo: FavoritesRepository = Depends(get_favorites_repository),
) -> FavoritesCheckResponse:
    return FavoritesCheckResponse(favorites=repo.check_batch(claims.user_id, payload.vehicle_ids))


@router.get("/check/{vehicle_id}", response_model=FavoriteStatusResponse)
def check_favorite(
    vehicle_id: int = Path(..., ge=1, le=INT64_MAX),
    claims: AccessClaims = Depends(get_current_claims),
    repo: FavoritesRepository = Depends(get_favorites_repository),
) -> FavoriteStatusResponse:
    return FavoriteStatusResponse(is_favorite=repo.is_favorite(claims.user_id, vehicle_id))


@router.post("/{vehicle_id}", response_model=MessageResponse)
def add_favorite(
    vehicle_id: int = Path(..., ge=1, le=INT64_MAX),
    claims: AccessClaims = Depends(get_current_claims),
    repo: FavoritesRepository = Depends(get_favorites_repository),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
) -> MessageResponse:
    if not vehicles.exists(vehicle_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
    repo.add(claims.user_id, vehicle_id)
    return MessageResponse(message="added to favorites")


@router.delete("/{vehicle_id}", response_model=MessageResponse)
def remove_favorite(
    vehicle_id: int = Path(..., ge=1, le=INT64_MAX),
    claims: AccessClaims = Depends(get_current_claims),
    repo: FavoritesRepository = Depends(get_favorites_repository),
) -> MessageResponse:
    repo.remove(claims.user_id, vehicle_id)
    return MessageResponse(message="removed from favorites")
