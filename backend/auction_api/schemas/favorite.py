from typing import Annotated

from pydantic import BaseModel, Field

from auction_api.db.base import INT64_MAX

VehicleId = Annotated[int, Field(ge=1, le=INT64_MAX)]


class FavoritesCheckRequest(BaseModel):
    vehicle_ids: list[VehicleId] = Field(default_factory=list, max_length=500)


class FavoritesCheckResponse(BaseModel):
    favorites: dict[int, bool]


class FavoriteStatusResponse(BaseModel):
    is_favorite: bool
