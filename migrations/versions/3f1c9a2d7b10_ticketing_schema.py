"""ticketing schema: accounts, events, tickets, event staff, mint jobs

Revision ID: 3f1c9a2d7b10
Revises:
Create Date: 2026-10-18 09:12:44.518203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c9a2d7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('accounts',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('wallet_address', sa.String(length=42), nullable=True),
        sa.Column('encrypted_private_key', sa.Text(), nullable=True),
        sa.Column('encrypted_data_key', sa.Text(), nullable=True),
        sa.Column('wallet_created_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_accounts')),
        sa.UniqueConstraint('wallet_address', name=op.f('uq_accounts_wallet_address'))
    )
    op.create_table('events',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_events'))
    )
    op.create_table('tickets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('owner_user_id', sa.String(length=64), nullable=False),
        sa.Column('token_id', sa.BigInteger(), nullable=True),
        sa.Column('owner_address', sa.String(length=42), nullable=False),
        sa.Column('mint_tx_hash', sa.String(length=66), nullable=True),
        sa.Column('consumed', sa.Boolean(), nullable=False),
        sa.Column('consumed_at', sa.DateTime(), nullable=True),
        sa.Column('chain_backed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name=op.f('fk_tickets_event_id_events')),
        sa.ForeignKeyConstraint(['owner_user_id'], ['accounts.id'], name=op.f('fk_tickets_owner_user_id_accounts')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tickets')),
        sa.UniqueConstraint('token_id', name=op.f('uq_tickets_token_id'))
    )
    with op.batch_alter_table('tickets', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_tickets_event_id'), ['event_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_tickets_owner_user_id'), ['owner_user_id'], unique=False)

    op.create_table('event_staff',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name=op.f('fk_event_staff_event_id_events')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_event_staff')),
        sa.UniqueConstraint('email', 'event_id', name='uq_event_staff_email_event_id')
    )
    with op.batch_alter_table('event_staff', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_event_staff_event_id'), ['event_id'], unique=False)

    op.create_table('mint_jobs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('owner_address', sa.String(length=42), nullable=False),
        sa.Column('metadata_uri', sa.String(length=255), nullable=False),
        sa.Column('tx_hash', sa.String(length=66), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('ticket_id', sa.Integer(), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name=op.f('fk_mint_jobs_event_id_events')),
        sa.ForeignKeyConstraint(['user_id'], ['accounts.id'], name=op.f('fk_mint_jobs_user_id_accounts')),
        sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], name=op.f('fk_mint_jobs_ticket_id_tickets')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_mint_jobs'))
    )
    with op.batch_alter_table('mint_jobs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_mint_jobs_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_mint_jobs_tx_hash'), ['tx_hash'], unique=False)


def downgrade():
    with op.batch_alter_table('mint_jobs', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_mint_jobs_tx_hash'))
        batch_op.drop_index(batch_op.f('ix_mint_jobs_status'))
    op.drop_table('mint_jobs')

    with op.batch_alter_table('event_staff', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_event_staff_event_id'))
    op.drop_table('event_staff')

    with op.batch_alter_table('tickets', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_tickets_owner_user_id'))
        batch_op.drop_index(batch_op.f('ix_tickets_event_id'))
    op.drop_table('tickets')

    op.drop_table('events')
    op.drop_table('accounts')
