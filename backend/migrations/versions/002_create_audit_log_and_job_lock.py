"""Create audit_log and job_lock tables

Revision ID: 002
Revises: 001
Create Date: 2026-09-28 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'audit_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('event', sa.Text(), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('target_user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['member.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['target_user_id'], ['member.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_audit_log_event_created_at', 'audit_log', ['event', 'created_at'])
    op.create_index('ix_audit_log_user_id_created_at', 'audit_log', ['user_id', 'created_at'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])

    # Entries are append-only. FK SET NULL actions must still run when a member
    # row is removed, so only changes to the recorded content are rejected.
    op.execute("""
        CREATE FUNCTION reject_audit_log_change() RETURNS trigger AS $$
        BEGIN
            IF TG_OP = 'DELETE' THEN
                RAISE EXCEPTION 'audit_log entries cannot be deleted';
            END IF;
            IF NEW.event IS DISTINCT FROM OLD.event
               OR NEW.details IS DISTINCT FROM OLD.details
               OR NEW.created_at IS DISTINCT FROM OLD.created_at THEN
                RAISE EXCEPTION 'audit_log entries are immutable';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER audit_log_immutable
        BEFORE UPDATE OR DELETE ON audit_log
        FOR EACH ROW
        EXECUTE FUNCTION reject_audit_log_change();
    """)

    op.create_table(
        'job_lock',
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('owner', sa.Text(), nullable=False),
        sa.Column('acquired_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )


def downgrade():
    op.drop_table('job_lock')

    op.execute('DROP TRIGGER IF EXISTS audit_log_immutable ON audit_log')
    op.execute('DROP FUNCTION IF EXISTS reject_audit_log_change()')

    op.drop_index('ix_audit_log_created_at', table_name='audit_log')
    op.drop_index('ix_audit_log_user_id_created_at', table_name='audit_log')
    op.drop_index('ix_audit_log_event_created_at', table_name='audit_log')
    op.drop_table('audit_log')
