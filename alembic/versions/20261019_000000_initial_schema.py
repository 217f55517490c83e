"""Initial database schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates tables, fields, records, cells, table webhooks and flags.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all initial tables."""

    # =========================================================================
    # Tables & Fields
    # =========================================================================
    op.create_table(
        'tables',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('project_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_tables_project_id', 'tables', ['project_id'])

    op.create_table(
        'fields',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('project_id', sa.String(36), nullable=False),
        sa.Column('table_id', sa.String(36), sa.ForeignKey('tables.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('table_id', 'project_id', 'name', name='uq_fields_table_project_name'),
    )
    op.create_index('ix_fields_table_project', 'fields', ['table_id', 'project_id'])

    # =========================================================================
    # Records & Cells
    # =========================================================================
    op.create_table(
        'records',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('project_id', sa.String(36), nullable=False),
        sa.Column('table_id', sa.String(36), sa.ForeignKey('tables.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_records_table_project', 'records', ['table_id', 'project_id'])
    op.create_index('ix_records_project_id', 'records', ['project_id'])

    op.create_table(
        'cells',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('project_id', sa.String(36), nullable=False),
        sa.Column('record_id', sa.String(36), sa.ForeignKey('records.id', ondelete='CASCADE'), nullable=False),
        sa.Column('field_id', sa.String(36), sa.ForeignKey('fields.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('project_id', 'field_id', 'record_id', name='uq_cells_project_field_record'),
    )
    op.create_index('ix_cells_record_id', 'cells', ['record_id'])

    # =========================================================================
    # Table Webhooks
    # =========================================================================
    op.create_table(
        'table_webhooks',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('project_id', sa.String(36), nullable=False),
        sa.Column('table_id', sa.String(36), sa.ForeignKey('tables.id', ondelete='CASCADE'), nullable=False),
        sa.Column('flow_id', sa.String(64), nullable=False),
        sa.Column('events', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_table_webhooks_project_table', 'table_webhooks', ['project_id', 'table_id'])

    # =========================================================================
    # Flags
    # =========================================================================
    op.create_table(
        'flags',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('value', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('flags')
    op.drop_index('ix_table_webhooks_project_table', table_name='table_webhooks')
    op.drop_table('table_webhooks')
    op.drop_index('ix_cells_record_id', table_name='cells')
    op.drop_table('cells')
    op.drop_index('ix_records_project_id', table_name='records')
    op.drop_index('ix_records_table_project', table_name='records')
    op.drop_table('records')
    op.drop_index('ix_fields_table_project', table_name='fields')
    op.drop_table('fields')
    op.drop_index('ix_tables_project_id', table_name='tables')
    op.drop_table('tables')
