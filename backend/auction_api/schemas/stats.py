from pydantic import BaseModel, ConfigDict


class FuelTypeStats(BaseModel):
    fuel_type: str
    count: int
    avg_price: float


class StatusStats(BaseModel):
    status: str
    count: int


class SourceStats(BaseModel):
    source: str
    count: int
    avg_price: float


class PriceRange(BaseModel):
    min: int
    max: int


class StatsOut(BaseModel):
    total_count: int
    avg_price: float
    price_range: PriceRange
    by_fuel_type: list[FuelTypeStats]
    by_status: list[StatusStats]
    by_source: list[SourceStats]
    completed_count: int
    avg_final_price: float
    sale_rate: float


class SourceInfo(BaseModel):
    source: str
    name: str
    count: int


class ManufacturerMappingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    internal_name: str
    korean_name: str
    is_foreign: bool
    kcar_code: str | None = None
    encar_name: str | None = None


class FuelMappingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    internal_name: str
    encar_name: str | None = None
    kcar_code: str | None = None


class ModelMappingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    internal_name: str
    manufacturer_korean: str
    encar_model_group: str | None = None
    kcar_model_code: str | None = None


class MarketMappingsOut(BaseModel):
    manufacturers: list[ManufacturerMappingOut]
    fuel_types: list[FuelMappingOut]
    models: list[ModelMappingOut]
