"""Initial database schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === USERS TABLE ===
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('role', sa.Enum('CUSTOMER', 'OWNER', 'ADMIN', name='userrole'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # === STORES TABLE ===
    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('address', sa.String(200), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('cuisine_type', sa.Enum(
            'KOREAN', 'JAPANESE', 'CHINESE', 'WESTERN', 'ITALIAN', 'CAFE', 'BAR', 'BBQ',
            'SEAFOOD', 'VEGETARIAN', 'OTHER', name='cuisinetype'
        ), nullable=False),
        sa.Column('price_range', sa.Enum('BUDGET', 'MID_RANGE', 'FINE_DINING', name='pricerange'), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('average_meal_duration', sa.Integer(), nullable=False),
        sa.Column('accepts_reservations', sa.Boolean(), nullable=False),
        sa.Column('accepts_walk_ins', sa.Boolean(), nullable=False),
        sa.Column('has_parking', sa.Boolean(), nullable=True),
        sa.Column('has_wifi', sa.Boolean(), nullable=True),
        sa.Column('has_private_room', sa.Boolean(), nullable=True),
        sa.Column('status', sa.Enum('ACTIVE', 'INACTIVE', 'PENDING', 'SUSPENDED', 'DELETED', name='storestatus'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_stores_id', 'stores', ['id'])

    # === BUSINESS HOURS TABLE ===
    op.create_table(
        'business_hours',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('open_time', sa.Time(), nullable=False),
        sa.Column('close_time', sa.Time(), nullable=False),
        sa.Column('is_closed', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'day_of_week', name='uq_business_hours_store_day'),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_business_hours_day_of_week')
    )
    op.create_index('ix_business_hours_id', 'business_hours', ['id'])

    # === RESERVATIONS TABLE ===
    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('reservation_date', sa.Date(), nullable=False),
        sa.Column('reservation_time', sa.Time(), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('estimated_duration', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum(
            'PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', 'NO_SHOW', name='reservationstatus'
        ), nullable=False),
        sa.Column('special_requests', sa.String(500), nullable=True),
        sa.Column('contact_name', sa.String(20), nullable=False),
        sa.Column('contact_phone', sa.String(20), nullable=False),
        sa.Column('cancellation_reason', sa.String(200), nullable=True),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['customer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('party_size > 0', name='ck_reservations_party_size')
    )
    op.create_index('ix_reservations_id', 'reservations', ['id'])
    op.create_index(
        'ix_reservations_store_date_status', 'reservations',
        ['store_id', 'reservation_date', 'status']
    )

    # === NOTIFICATIONS TABLE ===
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('reservation_id', sa.Integer(), nullable=True),
        sa.Column('message', sa.String(500), nullable=False),
        sa.Column('type', sa.Enum(
            'reservation_created', 'reservation_updated', 'reservation_status_changed', 'general',
            name='notificationtype'
        ), nullable=False),
        sa.Column('is_read', sa.Boolean(), default=False, nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_user_unread', 'notifications', ['user_id', 'is_read'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('reservations')
    op.drop_table('business_hours')
    op.drop_table('stores')
    op.drop_table('users')

    op.execute('DROP TYPE IF EXISTS notificationtype')
    op.execute('DROP TYPE IF EXISTS reservationstatus')
    op.execute('DROP TYPE IF EXISTS storestatus')
    op.execute('DROP TYPE IF EXISTS pricerange')
    op.execute('DROP TYPE IF EXISTS cuisinetype')
    op.execute('DROP TYPE IF EXISTS userrole')
