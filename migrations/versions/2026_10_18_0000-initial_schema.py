"""Initial schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

from shortener.core.setting import settings
from shortener.db.models import SHORT_CODE_MAX_LENGTH

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE_NAME = settings.TABLE_NAME


def upgrade() -> None:
    """
    Create the mappings table (name from TABLE_NAME):
    - short_code primary key for lookups and create-if-absent inserts
    - expires_at index for external purge jobs
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if TABLE_NAME in existing_tables:
        return

    op.create_table(
        TABLE_NAME,
        sa.Column('short_code', sa.String(length=SHORT_CODE_MAX_LENGTH), nullable=False),
        sa.Column('original_url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('expires_at', sa.BigInteger(), nullable=True),
        sa.Column('click_count', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('short_code')
    )

    op.create_index(
        f'ix_{TABLE_NAME}_expires_at',
        TABLE_NAME,
        ['expires_at']
    )


def downgrade() -> None:
    """Drop the mappings table."""
    op.drop_index(f'ix_{TABLE_NAME}_expires_at', table_name=TABLE_NAME)
    op.drop_table(TABLE_NAME)
