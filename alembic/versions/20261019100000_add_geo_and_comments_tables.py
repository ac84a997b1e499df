"""Add geographic reference tables and comments.

Revision ID: 20261019100000
Revises: 20261019000000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019100000"
down_revision: Union[str, None] = "20261019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cities_code"), "cities", ["code"], unique=True)

    op.create_table(
        "districts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("city_code", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["city_code"], ["cities.code"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_districts_code"), "districts", ["code"], unique=True)
    op.create_index(op.f("ix_districts_city_code"), "districts", ["city_code"], unique=False)

    op.create_table(
        "wards",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("district_code", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["district_code"], ["districts.code"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_wards_code"), "wards", ["code"], unique=True)
    op.create_index(op.f("ix_wards_district_code"), "wards", ["district_code"], unique=False)

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_delete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_comments_user_id"), "comments", ["user_id"], unique=False)
    op.create_index(op.f("ix_comments_product_id"), "comments", ["product_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_comments_product_id"), table_name="comments")
    op.drop_index(op.f("ix_comments_user_id"), table_name="comments")
    op.drop_table("comments")
    op.drop_index(op.f("ix_wards_district_code"), table_name="wards")
    op.drop_index(op.f("ix_wards_code"), table_name="wards")
    op.drop_table("wards")
    op.drop_index(op.f("ix_districts_city_code"), table_name="districts")
    op.drop_index(op.f("ix_districts_code"), table_name="districts")
    op.drop_table("districts")
    op.drop_index(op.f("ix_cities_code"), table_name="cities")
    op.drop_table("cities")
