"""Create member, event, document, message and finance tables

Revision ID: 001
Revises:
Create Date: 2026-09-28 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _uuid(name, **kwargs):
    return sa.Column(name, postgresql.UUID(as_uuid=True), **kwargs)


def upgrade():
    op.create_table(
        'member',
        _uuid('id', server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('home_address', sa.Text(), nullable=True),
        sa.Column('business_address', sa.Text(), nullable=True),
        sa.Column('date_of_birth', sa.DateTime(), nullable=True),
        sa.Column('place_of_birth', sa.Text(), nullable=True),
        sa.Column('nationality', sa.Text(), nullable=True),
        sa.Column('position', sa.Text(), nullable=True),
        sa.Column('company', sa.Text(), nullable=True),
        sa.Column('membership_type', sa.Text(), server_default='professional', nullable=True),
        sa.Column('membership_status', sa.Text(), server_default='pending', nullable=True),
        sa.Column('membership_number', sa.Text(), nullable=True),
        sa.Column('marketing_opt_in', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('stripe_customer_id', sa.Text(), nullable=True),
        sa.Column('password_reset_token', sa.Text(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_member_email'),
    )
    op.create_index('ix_member_deleted_at', 'member', ['deleted_at'])
    op.create_index('ix_member_status_updated_at', 'member', ['membership_status', 'updated_at'])

    op.create_table(
        'event',
        _uuid('id', server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('slug', sa.Text(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.Text(), server_default='upcoming', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'event_registration',
        _uuid('id', server_default=sa.text('gen_random_uuid()'), nullable=False),
        _uuid('event_id', nullable=False),
        _uuid('user_id', nullable=True),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('registration_type', sa.Text(), nullable=True),
        sa.Column('payment_status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('payment_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['member.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_event_registration_created_at', 'event_registration', ['created_at'])
    op.create_index('ix_event_registration_user_id', 'event_registration', ['user_id'])

    op.create_table(
        'document',
        _uuid('id', server_default=sa.text('gen_random_uuid()'), nullable=False),
        _uuid('user_id', nullable=False),
        sa.Column('file_name', sa.Text(), nullable=False),
        sa.Column('file_type', sa.Text(), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('object_path', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('upload_date', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        _uuid('verified_by', nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['member.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['verified_by'], ['member.id'], ondelete='SET NULL'),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_document_status'),
    )
    op.create_index('ix_document_upload_date', 'document', ['upload_date'])
    op.create_index('ix_document_user_id', 'document', ['user_id'])

    op.create_table(
        'message',
        _uuid('id', server_default=sa.text('gen_random_uuid()'), nullable=False),
        _uuid('from_user_id', nullable=False),
        _uuid('to_user_id', nullable=False),
        sa.Column('subject', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['from_user_id'], ['member.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['to_user_id'], ['member.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_message_sent_at', 'message', ['sent_at'])
    op.create_index('ix_message_to_user_id', 'message', ['to_user_id'])

    # Finance tables: RESTRICT keeps records under legal hold even if a member row goes
    op.create_table(
        'payment',
        _uuid('id', server_default=sa.text('gen_random_uuid()'), nullable=False),
        _uuid('user_id', nullable=False),
        _uuid('event_id', nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.Text(), server_default='BSD', nullable=False),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('stripe_payment_intent_id', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('payment_date', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['member.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='RESTRICT'),
    )

    op.create_table(
        'invoice',
        _uuid('id', server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('invoice_number', sa.Text(), nullable=False),
        _uuid('user_id', nullable=False),
        sa.Column('member_name', sa.Text(), nullable=False),
        sa.Column('member_email', sa.Text(), nullable=False),
        sa.Column('company_name', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), server_default='generated', nullable=False),
        sa.Column('pdf_path', sa.Text(), nullable=True),
        _uuid('generated_by', nullable=True),
        sa.Column('is_admin_generated', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text("(NOW() AT TIME ZONE 'utc')"), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number', name='uq_invoice_number'),
        sa.ForeignKeyConstraint(['user_id'], ['member.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['generated_by'], ['member.id'], ondelete='SET NULL'),
    )


def downgrade():
    op.drop_table('invoice')
    op.drop_table('payment')

    op.drop_index('ix_message_to_user_id', table_name='message')
    op.drop_index('ix_message_sent_at', table_name='message')
    op.drop_table('message')

    op.drop_index('ix_document_user_id', table_name='document')
    op.drop_index('ix_document_upload_date', table_name='document')
    op.drop_table('document')

    op.drop_index('ix_event_registration_user_id', table_name='event_registration')
    op.drop_index('ix_event_registration_created_at', table_name='event_registration')
    op.drop_table('event_registration')
    op.drop_table('event')

    op.drop_index('ix_member_status_updated_at', table_name='member')
    op.drop_index('ix_member_deleted_at', table_name='member')
    op.drop_table('member')
