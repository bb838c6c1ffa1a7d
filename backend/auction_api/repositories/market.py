from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from auction_api.models.market import MarketFuelMapping, MarketManufacturerMapping, MarketModelMapping


@dataclass
class MarketMappings:
    manufacturers: list[MarketManufacturerMapping]
    fuel_types: list[MarketFuelMapping]
    models: list[MarketModelMapping]


class MarketMappingRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def mappings(self) -> MarketMappings:
        return MarketMappings(
            manufacturers=list(self.db.scalars(select(MarketManufacturerMapping).order_by(MarketManufacturerMapping.id))),
            fuel_types=list(self.db.scalars(select(MarketFuelMapping).order_by(MarketFuelMapping.id))),
            models=list(self.db.scalars(select(MarketModelMapping).order_by(MarketModelMapping.id))),
        )
