from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from auction_api.db.base import utcnow
from auction_api.db.upsert import insert_for
from auction_api.models.favorite import Favorite
from auction_api.models.vehicle import Vehicle
from auction_api.repositories.query import Pagination


class FavoritesRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, user_id: int, vehicle_id: int) -> None:
        stmt = insert_for(self.db, Favorite).values(user_id=user_id, vehicle_id=vehicle_id, created_at=utcnow())
        stmt = stmt.on_conflict_do_nothing(index_elements=[Favorite.user_id, Favorite.vehicle_id])
        self.db.execute(stmt)
        self.db.commit()

    def remove(self, user_id: int, vehicle_id: int) -> None:
        self.db.execute(delete(Favorite).where(Favorite.user_id == user_id).where(Favorite.vehicle_id == vehicle_id))
        self.db.commit()

    def is_favorite(self, user_id: int, vehicle_id: int) -> bool:
        found = self.db.scalar(
            select(Favorite.id).where(Favorite.user_id == user_id).where(Favorite.vehicle_id == vehicle_id)
        )
        return found is not None

    def list_for_user(self, user_id: int, pagination: Pagination) -> tuple[list[Vehicle], int]:
        total = self.db.scalar(select(func.count()).select_from(Favorite).where(Favorite.user_id == user_id)) or 0
        vehicles = self.db.scalars(
            select(Vehicle)
            .join(Favorite, Favorite.vehicle_id == Vehicle.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .limit(pagination.limit)
            .offset(pagination.offset)
        ).all()
        return list(vehicles), int(total)

    def check_batch(self, user_id: int, vehicle_ids: list[int]) -> dict[int, bool]:
        if not vehicle_ids:
            return {}
        found = set(
            self.db.scalars(
                select(Favorite.vehicle_id).where(Favorite.user_id == user_id).where(Favorite.vehicle_id.in_(vehicle_ids))
            ).all()
        )
        return {vehicle_id: vehicle_id in found for vehicle_id in vehicle_ids}
