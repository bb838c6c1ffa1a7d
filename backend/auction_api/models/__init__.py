from auction_api.models.favorite import Favorite
from auction_api.models.market import MarketFuelMapping, MarketManufacturerMapping, MarketModelMapping
from auction_api.models.user import EmailVerificationToken, User
from auction_api.models.vehicle import AuctionHistoryEntry, Vehicle, VehicleExternalInfo, VehicleInspection

__all__ = [
    "Vehicle",
    "AuctionHistoryEntry",
    "VehicleInspection",
    "VehicleExternalInfo",
    "User",
    "EmailVerificationToken",
    "Favorite",
    "MarketManufacturerMapping",
    "MarketFuelMapping",
    "MarketModelMapping",
]
