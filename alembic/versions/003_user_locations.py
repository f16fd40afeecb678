"""user_locations 테이블 (사용자당 1행, 덮어쓰기, PostGIS geography + GIST)

Revision ID: 003
Revises: 002
Create Date: 2026-10-01 00:00:02.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geography

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LOCATION_EXPR = "ST_SetSRID(ST_MakePoint(lng, lat), 4326)::geography"


def upgrade() -> None:
    postgis = op.get_context().dialect.name == "postgresql"
    columns = [
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]
    if postgis:
        columns.append(
            sa.Column(
                "location",
                Geography(geometry_type="POINT", srid=4326, spatial_index=False),
                sa.Computed(LOCATION_EXPR, persisted=True),
                nullable=False,
            )
        )
    op.create_table("user_locations", *columns, sa.PrimaryKeyConstraint("user_id"))
    if postgis:
        op.execute(
            "CREATE INDEX IF NOT EXISTS idx_user_locations_location_gist "
            "ON user_locations USING GIST (location);"
        )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_user_locations_location_gist;")
    op.drop_table("user_locations")
