"""create vehicle tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 10:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())

    if "vehicles" not in tables:
        op.create_table(
            "vehicles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("mgmt_number", sa.String(length=64), nullable=True),
            sa.Column("car_number", sa.String(length=32), nullable=True),
            sa.Column("manufacturer", sa.String(length=128), nullable=True),
            sa.Column("model_name", sa.String(length=256), nullable=True),
            sa.Column("fuel_type", sa.String(length=64), nullable=True),
            sa.Column("transmission", sa.String(length=64), nullable=True),
            sa.Column("year", sa.Integer(), nullable=True),
            sa.Column("mileage", sa.Integer(), nullable=True),
            sa.Column("price", sa.BigInteger(), nullable=True),
            sa.Column("min_bid_price", sa.BigInteger(), nullable=True),
            sa.Column("final_price", sa.BigInteger(), nullable=True),
            sa.Column("location", sa.String(length=256), nullable=True),
            sa.Column("organization", sa.String(length=256), nullable=True),
            _timestamp("due_date", nullable=True),
            sa.Column("auction_count", sa.Integer(), nullable=True),
            sa.Column("status", sa.String(length=64), nullable=True),
            sa.Column("image_urls", sa.JSON(), nullable=True),
            sa.Column("detail_url", sa.String(length=1024), nullable=True),
            sa.Column("source", sa.String(length=32), nullable=False),
            sa.Column("source_id", sa.String(length=128), nullable=False),
            sa.Column("result_status", sa.String(length=64), nullable=True),
            _timestamp("result_date", nullable=True),
            sa.Column("case_number", sa.String(length=128), nullable=True),
            sa.Column("court_name", sa.String(length=128), nullable=True),
            sa.Column("property_type", sa.String(length=64), nullable=True),
            _timestamp("created_at"),
            _timestamp("updated_at"),
            sa.UniqueConstraint("source", "source_id", name="uq_vehicles_source_source_id"),
            sa.CheckConstraint("price IS NULL OR price >= 0", name="ck_vehicles_price_non_negative"),
            sa.CheckConstraint("mileage IS NULL OR mileage >= 0", name="ck_vehicles_mileage_non_negative"),
            sa.CheckConstraint("year IS NULL OR year >= 0", name="ck_vehicles_year_non_negative"),
        )
        for column in (
            "mgmt_number",
            "car_number",
            "fuel_type",
            "year",
            "price",
            "status",
            "source",
            "source_id",
            "result_status",
            "created_at",
            "updated_at",
        ):
            op.create_index(f"ix_vehicles_{column}", "vehicles", [column])

    if "auction_history" not in tables:
        op.create_table(
            "auction_history",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("vehicle_id", sa.Integer(), sa.ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False),
            sa.Column("auction_round", sa.Integer(), nullable=True),
            sa.Column("listed_price", sa.BigInteger(), nullable=True),
            sa.Column("min_bid_price", sa.BigInteger(), nullable=True),
            sa.Column("final_price", sa.BigInteger(), nullable=True),
            sa.Column("status", sa.String(length=64), nullable=False, server_default=""),
            _timestamp("bid_deadline", nullable=True),
            _timestamp("result_date", nullable=True),
            _timestamp("recorded_at"),
        )
        op.create_index("ix_auction_history_vehicle_id", "auction_history", ["vehicle_id"])
        op.create_index("ix_auction_history_recorded_at", "auction_history", ["recorded_at"])

    if "vehicle_inspections" not in tables:
        op.create_table(
            "vehicle_inspections",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "vehicle_id",
                sa.Integer(),
                sa.ForeignKey("vehicles.id", ondelete="CASCADE"),
                nullable=False,
                unique=True,
            ),
            sa.Column("inspection_date", sa.Date(), nullable=True),
            sa.Column("vin", sa.String(length=64), nullable=True),
            sa.Column("displacement", sa.Integer(), nullable=True),
            sa.Column("mileage_at_inspection", sa.Integer(), nullable=True),
            sa.Column("color", sa.String(length=64), nullable=True),
            sa.Column("drive_type", sa.String(length=64), nullable=True),
            sa.Column("report_data", sa.JSON(), nullable=False),
            sa.Column("report_url", sa.String(length=1024), nullable=True),
            _timestamp("scraped_at", nullable=True),
            _timestamp("created_at"),
            _timestamp("updated_at"),
        )

    if "vehicle_external_info" not in tables:
        op.create_table(
            "vehicle_external_info",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("car_number", sa.String(length=32), nullable=False),
            sa.Column("data", sa.JSON(), nullable=False),
            sa.Column("source", sa.String(length=32), nullable=False),
            _timestamp("fetched_at"),
            _timestamp("created_at"),
            _timestamp("updated_at"),
            sa.UniqueConstraint("car_number", "source", name="uq_vehicle_external_info_car_number_source"),
        )
        op.create_index("ix_vehicle_external_info_car_number", "vehicle_external_info", ["car_number"])
        op.create_index("ix_vehicle_external_info_fetched_at", "vehicle_external_info", ["fetched_at"])


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())

    for table_name in ("vehicle_external_info", "vehicle_inspections", "auction_history", "vehicles"):
        if table_name in tables:
            op.drop_table(table_name)
