"""create initial schema

Revision ID: 3f1a9c2d7b41
Revises:
Create Date: 2026-10-19 15:40:12.418305

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Step 1: Create the function (required before triggers)
    op.execute('''
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ language 'plpgsql'
    ''')

    # Step 2: Create tables
    op.execute("""
        CREATE TABLE IF NOT EXISTS participants (
            id BIGINT PRIMARY KEY,
            first_name VARCHAR(255) NOT NULL DEFAULT '',
            last_name VARCHAR(255) NOT NULL DEFAULT '',
            username VARCHAR(255),
            wish_list TEXT,
            recipient_id BIGINT,
            santa_id BIGINT,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
            CHECK (recipient_id IS NULL OR recipient_id <> id),
            CHECK (santa_id IS NULL OR santa_id <> id)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS conversation_sessions (
            participant_id BIGINT PRIMARY KEY,
            pending_intent VARCHAR(40) NOT NULL DEFAULT 'none' CHECK (pending_intent IN (
                'none',
                'awaiting_wishlist',
                'awaiting_message_to_recipient',
                'awaiting_message_to_santa'
            )),
            last_throttled_at TIMESTAMP WITH TIME ZONE,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
        )
    """)

    # Step 3: Create indexes
    op.execute('CREATE INDEX IF NOT EXISTS idx_participants_created_at ON participants(created_at)')
    op.execute('CREATE UNIQUE INDEX IF NOT EXISTS idx_participants_santa_id ON participants(santa_id) WHERE santa_id IS NOT NULL')
    op.execute('CREATE UNIQUE INDEX IF NOT EXISTS idx_participants_recipient_id ON participants(recipient_id) WHERE recipient_id IS NOT NULL')

    # Step 4: Create triggers (only after tables exist)
    op.execute('''
        CREATE TRIGGER update_conversation_sessions_updated_at
            BEFORE UPDATE ON conversation_sessions
            FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()
    ''')


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('conversation_sessions')
    op.drop_table('participants')
    op.execute('DROP FUNCTION IF EXISTS update_updated_at_column()')
