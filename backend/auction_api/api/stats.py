from fastapi import APIRouter, Depends

from auction_api.api.deps import get_market_repository, get_vehicle_repository
from auction_api.repositories.market import MarketMappingRepository
from auction_api.repositories.vehicles import VehicleRepository
from auction_api.schemas.stats import (
    FuelMappingOut,
    FuelTypeStats,
    ManufacturerMappingOut,
    MarketMappingsOut,
    ModelMappingOut,
    PriceRange,
    SourceInfo,
    SourceStats,
    StatsOut,
    StatusStats,
)

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=StatsOut)
def get_stats(repo: VehicleRepository = Depends(get_vehicle_repository)) -> StatsOut:
    stats = repo.stats()
    return StatsOut(
        total_count=stats.total_count,
        avg_price=stats.avg_price,
        price_range=PriceRange(min=stats.price_min, max=stats.price_max),
        by_fuel_type=[FuelTypeStats(fuel_type=f, count=c, avg_price=a) for f, c, a in stats.by_fuel_type],
        by_status=[StatusStats(status=s, count=c) for s, c in stats.by_status],
        by_source=[SourceStats(source=s, count=c, avg_price=a) for s, c, a in stats.by_source],
        completed_count=stats.completed_count,
        avg_final_price=stats.avg_final_price,
        sale_rate=stats.sale_rate,
    )


@router.get("/sources", response_model=list[SourceInfo])
def get_sources(repo: VehicleRepository = Depends(get_vehicle_repository)) -> list[SourceInfo]:
    return [SourceInfo(source=source, name=name, count=count) for source, name, count in repo.sources()]


@router.get("/market-mappings", response_model=MarketMappingsOut)
def get_market_mappings(repo: MarketMappingRepository = Depends(get_market_repository)) -> MarketMappingsOut:
    mappings = repo.mappings()
    return MarketMappingsOut(
        manufacturers=[ManufacturerMappingOut.model_validate(item) for item in mappings.manufacturers],
        fuel_types=[FuelMappingOut.model_validate(item) for item in mappings.fuel_types],
        models=[ModelMappingOut.model_validate(item) for item in mappings.models],
    )
