"""create_directory_tables

Revision ID: 4c1d2e7a9b30
Revises:
Create Date: 2026-10-17

Creates the organizations and people tables and the affiliations join
table between them. Affiliation rows are removed together with either
parent (ON DELETE CASCADE).
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '4c1d2e7a9b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create organizations, people and affiliations."""

    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('tax_id', sa.String(length=10), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False),
        sa.Column('postal_code', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_organizations'),
        sa.UniqueConstraint('slug', name='uq_organizations_slug'),
    )
    op.create_index('ix_organizations_tax_id', 'organizations', ['tax_id'], unique=False)

    op.create_table(
        'people',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=31), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_people'),
        sa.UniqueConstraint('email', name='uq_people_email'),
    )

    op.create_table(
        'affiliations',
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['organization_id'], ['organizations.id'],
            name='fk_affiliations_organization_id_organizations',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['person_id'], ['people.id'],
            name='fk_affiliations_person_id_people',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('organization_id', 'person_id', name='pk_affiliations'),
    )
    # Lookups from the person side; the primary key covers the organization side
    op.create_index('ix_affiliations_person_id', 'affiliations', ['person_id'], unique=False)


def downgrade() -> None:
    """Drop the directory tables."""
    op.drop_index('ix_affiliations_person_id', table_name='affiliations')
    op.drop_table('affiliations')
    op.drop_table('people')
    op.drop_index('ix_organizations_tax_id', table_name='organizations')
    op.drop_table('organizations')
