"""create tariff and charge tables

Revision ID: 0001_create_fee_tables
Revises:
Create Date: 2026-10-12 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_fee_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tariffservice",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("key", sa.String(), nullable=False, index=True),
        sa.Column("fee_per_m2", sa.Numeric(18, 4), nullable=False),
        sa.Column("vat_percent", sa.Numeric(18, 4), nullable=False),
        sa.Column("valid_from", sa.Date(), nullable=False),
        sa.Column("valid_to", sa.Date(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "tariffparking",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("tier", sa.String(), nullable=False, index=True),
        sa.Column("price_per_unit", sa.Numeric(18, 4), nullable=False),
        sa.Column("vat_percent", sa.Numeric(18, 4), nullable=False),
        sa.Column("valid_from", sa.Date(), nullable=False),
        sa.Column("valid_to", sa.Date(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "tariffwater",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("segment", sa.String(), nullable=False, server_default="residential"),
        sa.Column("from_m3", sa.Numeric(18, 4), nullable=False),
        sa.Column("to_m3", sa.Numeric(18, 4), nullable=True),
        sa.Column("unit_price", sa.Numeric(18, 4), nullable=False),
        sa.Column("vat_percent", sa.Numeric(18, 4), nullable=False),
        sa.Column("valid_from", sa.Date(), nullable=False),
        sa.Column("valid_to", sa.Date(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "charge",
        sa.Column("key", sa.String(), primary_key=True),
        sa.Column("period", sa.String(), nullable=False, index=True),
        sa.Column("unit_id", sa.String(), nullable=False, index=True),
        sa.Column("owner_name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False, server_default=""),
        sa.Column("email", sa.String(), nullable=False, server_default=""),
        sa.Column("area_m2", sa.Float(), nullable=False, server_default="0"),
        sa.Column("service_net", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("service_vat", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("service_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("car_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("compact_car_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("moto_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bicycle_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("parking_net", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("parking_vat", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("parking_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("water_m3", sa.Float(), nullable=False, server_default="0"),
        sa.Column("water_net", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("water_vat", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("water_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("adjustments", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_due", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("data_gaps", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("charge")
    op.drop_table("tariffwater")
    op.drop_table("tariffparking")
    op.drop_table("tariffservice")
