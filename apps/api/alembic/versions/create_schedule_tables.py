"""create scheduling tables

Revision ID: create_schedule_tables
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_schedule_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'organizations',
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('timezone', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('org_id')
    )

    op.create_table(
        'positions',
        sa.Column('position_id', sa.Uuid(), nullable=False),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('color', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.org_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('position_id'),
        sa.UniqueConstraint('org_id', 'name', name='uq_positions_org_name')
    )
    op.create_index(op.f('ix_positions_org_id'), 'positions', ['org_id'], unique=False)

    op.create_table(
        'locations',
        sa.Column('location_id', sa.Uuid(), nullable=False),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.org_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('location_id')
    )

    op.create_table(
        'employees',
        sa.Column('employee_id', sa.Uuid(), nullable=False),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('position_id', sa.Uuid(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.org_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['position_id'], ['positions.position_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('employee_id')
    )
    op.create_index(op.f('ix_employees_org_id'), 'employees', ['org_id'], unique=False)

    op.create_table(
        'availability',
        sa.Column('availability_id', sa.Uuid(), nullable=False),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=False),
        sa.Column('weekday', sa.SmallInteger(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.org_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('availability_id')
    )
    op.create_index(op.f('ix_availability_org_id'), 'availability', ['org_id'], unique=False)
    op.create_index(op.f('ix_availability_employee_id'), 'availability', ['employee_id'], unique=False)

    op.create_table(
        'time_off',
        sa.Column('time_off_id', sa.Uuid(), nullable=False),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=False),
        sa.Column('starts_at', sa.Date(), nullable=False),
        sa.Column('ends_at', sa.Date(), nullable=False),
        sa.Column('type', sa.Enum('vacation', 'sick', 'unpaid', 'other', name='time_off_type'), nullable=False),
        sa.Column('status', sa.Enum('pending', 'approved', 'denied', name='time_off_status'), nullable=False),
        sa.Column('note', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.org_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('time_off_id')
    )
    op.create_index(op.f('ix_time_off_org_id'), 'time_off', ['org_id'], unique=False)
    op.create_index(op.f('ix_time_off_employee_id'), 'time_off', ['employee_id'], unique=False)

    op.create_table(
        'shifts',
        sa.Column('shift_id', sa.Uuid(), nullable=False),
        sa.Column('org_id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.Uuid(), nullable=True),
        sa.Column('position_id', sa.Uuid(), nullable=True),
        sa.Column('location_id', sa.Uuid(), nullable=True),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('break_minutes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.Enum('scheduled', 'published', 'completed', 'cancelled', name='shift_status'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.org_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['position_id'], ['positions.position_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.location_id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('shift_id')
    )
    op.create_index('ix_shifts_org_starts_at', 'shifts', ['org_id', 'starts_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_shifts_org_starts_at', table_name='shifts')
    op.drop_table('shifts')
    op.drop_index(op.f('ix_time_off_employee_id'), table_name='time_off')
    op.drop_index(op.f('ix_time_off_org_id'), table_name='time_off')
    op.drop_table('time_off')
    op.drop_index(op.f('ix_availability_employee_id'), table_name='availability')
    op.drop_index(op.f('ix_availability_org_id'), table_name='availability')
    op.drop_table('availability')
    op.drop_index(op.f('ix_employees_org_id'), table_name='employees')
    op.drop_table('employees')
    op.drop_table('locations')
    op.drop_index(op.f('ix_positions_org_id'), table_name='positions')
    op.drop_table('positions')
    op.drop_table('organizations')
    sa.Enum(name='shift_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='time_off_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='time_off_type').drop(op.get_bind(), checkfirst=True)
