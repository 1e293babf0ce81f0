"""add cdn fields to courses

Revision ID: 8b5e0d4c2f61
Revises: 3f1c2a9b7d10
Create Date: 2026-10-18 09:20:03.551872

"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8b5e0d4c2f61"
down_revision: Union[str, Sequence[str], None] = "3f1c2a9b7d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column("courses", sa.Column("storage_key", sa.Text(), nullable=True))
    op.add_column(
        "courses",
        sa.Column(
            "cdn_enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column("courses", "cdn_enabled")
    op.drop_column("courses", "storage_key")
