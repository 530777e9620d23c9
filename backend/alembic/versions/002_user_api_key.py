"""Add users.api_key.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("users", sa.Column("api_key", sa.String(length=64), nullable=True))
    op.create_unique_constraint("uq_users_api_key", "users", ["api_key"])


def downgrade() -> None:
    op.drop_constraint("uq_users_api_key", "users", type_="unique")
    op.drop_column("users", "api_key")
