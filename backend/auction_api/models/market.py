from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from auction_api.db.base import Base


class MarketManufacturerMapping(Base):
    __tablename__ = "market_manufacturer_mappings"

    id: Mapped[int] = mapped_column(primary_key=True)
    internal_name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    korean_name: Mapped[str] = mapped_column(String(128), nullable=False)
    is_foreign: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    kcar_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
    encar_name: Mapped[str | None] = mapped_column(String(128), nullable=True)


class MarketFuelMapping(Base):
    __tablename__ = "market_fuel_mappings"

    id: Mapped[int] = mapped_column(primary_key=True)
    internal_name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    encar_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    kcar_code: Mapped[str | None] = mapped_column(String(32), nullable=True)


class MarketModelMapping(Base):
    __tablename__ = "market_model_mappings"

    id: Mapped[int] = mapped_column(primary_key=True)
    internal_name: Mapped[str] = mapped_column(String(128), nullable=False)
    manufacturer_korean: Mapped[str] = mapped_column(String(128), nullable=False)
    encar_model_group: Mapped[str | None] = mapped_column(String(128), nullable=True)
    kcar_model_code: Mapped[str | None] = mapped_column(String(32), nullable=True)
