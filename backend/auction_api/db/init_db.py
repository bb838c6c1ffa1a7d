import logging

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from auction_api.db.base import Base
from auction_api.models import MarketFuelMapping, MarketManufacturerMapping, MarketModelMapping

logger = logging.getLogger(__name__)

MANUFACTURERS = [
    {"internal_name": "hyundai", "korean_name": "현대", "is_foreign": False, "kcar_code": "001", "encar_name": "현대"},
    {"internal_name": "kia", "korean_name": "기아", "is_foreign": False, "kcar_code": "002", "encar_name": "기아"},
    {"internal_name": "genesis", "korean_name": "제네시스", "is_foreign": False, "kcar_code": "049", "encar_name": "제네시스"},
    {"internal_name": "chevrolet", "korean_name": "쉐보레", "is_foreign": False, "kcar_code": "003", "encar_name": "쉐보레(GM대우)"},
    {"internal_name": "renault", "korean_name": "르노코리아", "is_foreign": False, "kcar_code": "004", "encar_name": "르노코리아(삼성)"},
    {"internal_name": "kgm", "korean_name": "KG모빌리티", "is_foreign": False, "kcar_code": "005", "encar_name": "KG모빌리티(쌍용)"},
    {"internal_name": "bmw", "korean_name": "BMW", "is_foreign": True, "kcar_code": "012", "encar_name": "BMW"},
    {"internal_name": "mercedes-benz", "korean_name": "벤츠", "is_foreign": True, "kcar_code": "013", "encar_name": "벤츠"},
]

FUEL_TYPES = [
    {"internal_name": "gasoline", "encar_name": "가솔린", "kcar_code": "001"},
    {"internal_name": "diesel", "encar_name": "디젤", "kcar_code": "002"},
    {"internal_name": "lpg", "encar_name": "LPG(일반인 구입)", "kcar_code": "003"},
    {"internal_name": "hybrid", "encar_name": "가솔린+전기", "kcar_code": "004"},
    {"internal_name": "electric", "encar_name": "전기", "kcar_code": "005"},
]

MODELS = [
    {"internal_name": "avante", "manufacturer_korean": "현대", "encar_model_group": "아반떼", "kcar_model_code": None},
    {"internal_name": "sonata", "manufacturer_korean": "현대", "encar_model_group": "쏘나타", "kcar_model_code": None},
    {"internal_name": "grandeur", "manufacturer_korean": "현대", "encar_model_group": "그랜저", "kcar_model_code": None},
    {"internal_name": "k5", "manufacturer_korean": "기아", "encar_model_group": "K5", "kcar_model_code": None},
    {"internal_name": "sorento", "manufacturer_korean": "기아", "encar_model_group": "쏘렌토", "kcar_model_code": None},
]


def seed_market_mappings(db: Session) -> None:
    if db.scalar(select(MarketManufacturerMapping.id).limit(1)) is None:
        db.add_all(MarketManufacturerMapping(**row) for row in MANUFACTURERS)
    if db.scalar(select(MarketFuelMapping.id).limit(1)) is None:
        db.add_all(MarketFuelMapping(**row) for row in FUEL_TYPES)
    if db.scalar(select(MarketModelMapping.id).limit(1)) is None:
        db.add_all(MarketModelMapping(**row) for row in MODELS)
    db.commit()


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
    with Session(engine) as db:
        seed_market_mappings(db)
    logger.info("Database schema ready.")
