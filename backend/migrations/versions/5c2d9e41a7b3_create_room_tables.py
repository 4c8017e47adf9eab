"""create room, player, draw_point and message tables

Revision ID: 5c2d9e41a7b3
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d9e41a7b3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'room' not in existing_tables:
        op.create_table(
            'room',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('code', sa.String(length=6), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('drawer_id', sa.String(length=32), nullable=True),
            sa.Column('current_word', sa.String(length=64), nullable=True),
            sa.Column('timer', sa.Integer(), nullable=False),
            sa.Column('round', sa.Integer(), nullable=False),
            sa.Column('winner', sa.String(length=64), nullable=True),
            sa.Column('created_at', sa.Float(), nullable=False),
            sa.Column('updated_at', sa.Float(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_room_code', 'room', ['code'], unique=True)

    if 'player' not in existing_tables:
        op.create_table(
            'player',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.String(length=32), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('is_host', sa.Boolean(), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('joined_at', sa.Float(), nullable=False),
            sa.ForeignKeyConstraint(['room_id'], ['room.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('room_id', 'user_id', name='uq_player_room_user'),
        )
        op.create_index('ix_player_user_id', 'player', ['user_id'], unique=False)

    if 'draw_point' not in existing_tables:
        op.create_table(
            'draw_point',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('type', sa.String(length=8), nullable=False),
            sa.Column('x', sa.Float(), nullable=True),
            sa.Column('y', sa.Float(), nullable=True),
            sa.Column('color', sa.String(length=7), nullable=True),
            sa.Column('size', sa.Integer(), nullable=True),
            sa.ForeignKeyConstraint(['room_id'], ['room.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_draw_point_room_id', 'draw_point', ['room_id'], unique=False)

    if 'message' not in existing_tables:
        op.create_table(
            'message',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('sender_id', sa.String(length=32), nullable=False),
            sa.Column('sender_name', sa.String(length=64), nullable=False),
            sa.Column('text', sa.Text(), nullable=False),
            sa.Column('timestamp', sa.BigInteger(), nullable=False),
            sa.Column('is_system', sa.Boolean(), nullable=False),
            sa.ForeignKeyConstraint(['room_id'], ['room.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_message_room_id', 'message', ['room_id'], unique=False)


def downgrade():
    op.drop_index('ix_message_room_id', table_name='message')
    op.drop_table('message')
    op.drop_index('ix_draw_point_room_id', table_name='draw_point')
    op.drop_table('draw_point')
    op.drop_index('ix_player_user_id', table_name='player')
    op.drop_table('player')
    op.drop_index('ix_room_code', table_name='room')
    op.drop_table('room')
