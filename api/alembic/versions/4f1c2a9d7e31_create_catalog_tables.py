"""create_catalog_tables

Revision ID: 4f1c2a9d7e31
Revises:
Create Date: 2026-10-19 09:12:44.318205

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('user_id'),
        sa.UniqueConstraint('email')
    )

    op.create_table(
        'applications',
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('app_code', sa.String(length=10), nullable=False,
                  comment='Two letters and one digit (e.g., HR1)'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('functional_domains', sa.JSON(), nullable=True,
                  comment='Business capability tags'),
        sa.Column('technical_stack', sa.JSON(), nullable=True,
                  comment='Technology / platform tags'),
        sa.Column('status', sa.String(length=50), nullable=True,
                  comment='Active, Inactive, Deprecated, Under Development'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('application_id'),
        sa.UniqueConstraint('app_code')
    )

    op.create_table(
        'application_stakeholders',
        sa.Column('stakeholder_row_id', sa.Integer(), nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False,
                  comment='Stakeholder map key (e.g., productOwner)'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['application_id'], ['applications.application_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('stakeholder_row_id')
    )
    op.create_index(op.f('ix_application_stakeholders_application_id'),
                    'application_stakeholders', ['application_id'], unique=False)

    op.create_table(
        'application_relationships',
        sa.Column('relationship_id', sa.Integer(), nullable=False),
        sa.Column('source_app_id', sa.Integer(), nullable=False),
        sa.Column('target_app_code', sa.String(length=10), nullable=False,
                  comment='Not a foreign key; may name a code that does not exist'),
        sa.Column('relationship_type', sa.String(length=20), nullable=False,
                  comment='functional or technical'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['source_app_id'], ['applications.application_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('relationship_id')
    )
    op.create_index(op.f('ix_application_relationships_source_app_id'),
                    'application_relationships', ['source_app_id'], unique=False)

    op.create_table(
        'stakeholders',
        sa.Column('stakeholder_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('stakeholder_id')
    )
    op.create_index(op.f('ix_stakeholders_name'), 'stakeholders', ['name'], unique=False)

    op.create_table(
        'stakeholder_roles',
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.Column('stakeholder_id', sa.Integer(), nullable=False),
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['stakeholder_id'], ['stakeholders.stakeholder_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['application_id'], ['applications.application_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('role_id')
    )
    op.create_index(op.f('ix_stakeholder_roles_stakeholder_id'),
                    'stakeholder_roles', ['stakeholder_id'], unique=False)
    op.create_index(op.f('ix_stakeholder_roles_application_id'),
                    'stakeholder_roles', ['application_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_stakeholder_roles_application_id'), table_name='stakeholder_roles')
    op.drop_index(op.f('ix_stakeholder_roles_stakeholder_id'), table_name='stakeholder_roles')
    op.drop_table('stakeholder_roles')
    op.drop_index(op.f('ix_stakeholders_name'), table_name='stakeholders')
    op.drop_table('stakeholders')
    op.drop_index(op.f('ix_application_relationships_source_app_id'), table_name='application_relationships')
    op.drop_table('application_relationships')
    op.drop_index(op.f('ix_application_stakeholders_application_id'), table_name='application_stakeholders')
    op.drop_table('application_stakeholders')
    op.drop_table('applications')
    op.drop_table('users')
