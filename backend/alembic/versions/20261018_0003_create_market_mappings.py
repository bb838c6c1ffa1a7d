"""create market mapping tables

Revision ID: 20261018_0003
Revises: 20261018_0002
Create Date: 2026-10-18 10:40:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "20261018_0003"
down_revision: Union[str, None] = "20261018_0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())

    if "market_manufacturer_mappings" not in tables:
        op.create_table(
            "market_manufacturer_mappings",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("internal_name", sa.String(length=128), nullable=False, unique=True),
            sa.Column("korean_name", sa.String(length=128), nullable=False),
            sa.Column("is_foreign", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("kcar_code", sa.String(length=32), nullable=True),
            sa.Column("encar_name", sa.String(length=128), nullable=True),
        )

    if "market_fuel_mappings" not in tables:
        op.create_table(
            "market_fuel_mappings",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("internal_name", sa.String(length=64), nullable=False, unique=True),
            sa.Column("encar_name", sa.String(length=64), nullable=True),
            sa.Column("kcar_code", sa.String(length=32), nullable=True),
        )

    if "market_model_mappings" not in tables:
        op.create_table(
            "market_model_mappings",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("internal_name", sa.String(length=128), nullable=False),
            sa.Column("manufacturer_korean", sa.String(length=128), nullable=False),
            sa.Column("encar_model_group", sa.String(length=128), nullable=True),
            sa.Column("kcar_model_code", sa.String(length=32), nullable=True),
        )


def downgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = set(inspector.get_table_names())

    for table_name in ("market_model_mappings", "market_fuel_mappings", "market_manufacturer_mappings"):
        if table_name in tables:
            op.drop_table(table_name)
