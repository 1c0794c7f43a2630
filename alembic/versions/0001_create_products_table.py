"""create products table

Revision ID: 0001
Revises:
Create Date: 2025-11-25 11:32:30
"""
import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("product_token", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", sa.Numeric(8, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint("product_token", name="uq_products_product_token"),
        sqlite_autoincrement=True,
    )
    op.create_index(
        "ix_products_created_at_id",
        "products",
        [sa.text("created_at DESC"), sa.text("id ASC")],
    )


def downgrade() -> None:
    op.drop_index("ix_products_created_at_id", table_name="products")
    op.drop_table("products")
