"""create goals and user_profiles tables

Revision ID: create_goals_and_profiles
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'create_goals_and_profiles'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('display_name', sa.String, nullable=False, server_default=''),
        sa.Column('email', sa.String, nullable=True),
        sa.Column('photo_url', sa.String, nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_user_profiles_email', 'user_profiles', ['email'])

    op.create_table(
        'goals',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=False, server_default=''),
        sa.Column('priority', sa.String(10), nullable=False, server_default='medium'),
        sa.Column('completed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('goal_type', sa.String(10), nullable=False, server_default='custom'),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_recurring', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('recurring_type', sa.String(10), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_goals_user_id', 'goals', ['user_id'])
    op.create_index('ix_goals_user_id_created_at', 'goals', ['user_id', 'created_at'])

def downgrade():
    op.drop_index('ix_goals_user_id_created_at', table_name='goals')
    op.drop_index('ix_goals_user_id', table_name='goals')
    op.drop_table('goals')
    op.drop_index('ix_user_profiles_email', table_name='user_profiles')
    op.drop_table('user_profiles')
