"""Create countries table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

Creates the `countries` reference table with unique alpha-2 / alpha-3 codes
and the indexes the list, lookup and continent queries rely on.

Rollback: downgrade() drops the table; re-run scripts/seed_countries.py after
upgrading again.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "countries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(2), nullable=False, comment="ISO 3166-1 alpha-2 code"),
        sa.Column("code3", sa.String(3), nullable=False, comment="ISO 3166-1 alpha-3 code"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("official_name", sa.String(200), nullable=False),
        sa.Column("capital", sa.String(100), nullable=True),
        sa.Column("continent", sa.String(50), nullable=False),
        sa.Column("region", sa.String(100), nullable=False),
        sa.Column("languages", sa.JSON(), nullable=False),
        sa.Column("currencies", sa.JSON(), nullable=False),
        sa.Column("calling_codes", sa.JSON(), nullable=False),
        sa.Column(
            "is_popular_destination",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        sa.Column("flag", sa.String(16), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_countries"),
    )

    op.create_index("ix_countries_code", "countries", ["code"], unique=True)
    op.create_index("ix_countries_code3", "countries", ["code3"], unique=True)
    op.create_index("ix_countries_name", "countries", ["name"])
    op.create_index("ix_countries_continent", "countries", ["continent"])


def downgrade() -> None:
    op.drop_index("ix_countries_continent", table_name="countries")
    op.drop_index("ix_countries_name", table_name="countries")
    op.drop_index("ix_countries_code3", table_name="countries")
    op.drop_index("ix_countries_code", table_name="countries")
    op.drop_table("countries")
