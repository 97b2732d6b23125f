"""Create clients table

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

What:  Creates the `clients` table.
How:   PostgreSQL-specific column types: UUID primary key with
       gen_random_uuid(), JSONB metadata, TIMESTAMP WITH TIME ZONE.

Rollback: downgrade() drops the table entirely; all client data is lost.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the clients table and its created_at index."""
    op.create_table(
        "clients",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Unique identifier",
        ),
        sa.Column(
            "name",
            sa.Text(),
            nullable=False,
            comment="Client display name",
        ),
        sa.Column(
            "metadata",
            postgresql.JSONB(none_as_null=True),
            nullable=True,
            comment="Free-form JSON object; NULL when absent",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this client was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this client was last modified (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_clients_created_at",
        "clients",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop the clients table. All client data is lost."""
    op.drop_index("idx_clients_created_at", table_name="clients")
    op.drop_table("clients")
