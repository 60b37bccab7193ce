"""create passenger and driver partitions

Revision ID: 3b1f0c9a2d47
Revises:
Create Date: 2025-11-02 10:14:52.418306
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3b1f0c9a2d47'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PARTITIONS = ("passengers", "drivers")


def upgrade() -> None:
    # gen_random_uuid() is built in from PostgreSQL 13
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    for table in PARTITIONS:
        op.create_table(
            table,
            sa.Column('id', sa.String(length=36), nullable=False,
                      server_default=sa.text("gen_random_uuid()::text")),
            sa.Column('email', sa.String(length=254), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=True),
            sa.Column('document', postgresql.JSONB(astext_type=sa.Text()), nullable=False,
                      server_default=sa.text("'{}'::jsonb")),
            sa.PrimaryKeyConstraint('id'),
        )
        # closes the check-then-insert race on registration
        op.create_index(op.f(f'ix_{table}_email'), table, ['email'], unique=True)


def downgrade() -> None:
    for table in reversed(PARTITIONS):
        op.drop_index(op.f(f'ix_{table}_email'), table_name=table)
        op.drop_table(table)
