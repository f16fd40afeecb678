"""initial moments table (lng/lat + PostGIS geography, expires_at TTL index)

Revision ID: 001
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geography

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# lng/lat 에서 DB 가 계산하는 geography. 앱은 lng/lat 만 쓰므로 두 값이 어긋날 수 없다.
LOCATION_EXPR = "ST_SetSRID(ST_MakePoint(lng, lat), 4326)::geography"


def upgrade() -> None:
    postgis = op.get_context().dialect.name == "postgresql"
    if postgis:
        op.execute("CREATE EXTENSION IF NOT EXISTS postgis;")
    columns = [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("caption", sa.String(length=200), nullable=False),
        sa.Column("media_ref", sa.String(length=500), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
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
    op.create_table("moments", *columns, sa.PrimaryKeyConstraint("id"))
    op.create_index(op.f("ix_moments_id"), "moments", ["id"], unique=False)
    op.create_index(op.f("ix_moments_owner_id"), "moments", ["owner_id"], unique=False)
    op.create_index(op.f("ix_moments_expires_at"), "moments", ["expires_at"], unique=False)
    if postgis:
        # ST_DWithin 반경 검색용
        op.execute("CREATE INDEX IF NOT EXISTS idx_moments_location_gist ON moments USING GIST (location);")


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_moments_location_gist;")
    op.drop_index(op.f("ix_moments_expires_at"), table_name="moments")
    op.drop_index(op.f("ix_moments_owner_id"), table_name="moments")
    op.drop_index(op.f("ix_moments_id"), table_name="moments")
    op.drop_table("moments")
