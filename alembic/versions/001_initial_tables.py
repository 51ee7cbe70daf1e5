"""Initial tables

Revision ID: 001
Revises:
Create Date: 2026-01-05 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create agendas table
    op.create_table('agendas',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Agenda ID'),
        sa.Column('title', sa.Text(), nullable=False, comment='Agenda title'),
        sa.Column('urgency', sa.String(length=50), nullable=True, comment='Urgency label'),
        sa.Column('deadline', sa.DateTime(), nullable=True, comment='Requested deadline'),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='Low', comment='Priority label'),
        sa.Column('director', sa.Text(), nullable=False, server_default='', comment='Initiating director(s)'),
        sa.Column('initiator', sa.Text(), nullable=False, server_default='', comment='Initiating unit(s)'),
        sa.Column('support', sa.Text(), nullable=True, comment='Supporting unit(s)'),
        sa.Column('contact_person', sa.Text(), nullable=False, server_default='', comment='Contact person'),
        sa.Column('position', sa.Text(), nullable=False, server_default='', comment='Contact person position'),
        sa.Column('phone', sa.Text(), nullable=False, server_default='', comment='Contact person phone'),

        # Attachments (storage paths)
        sa.Column('legal_review', sa.Text(), nullable=True, comment='Legal review document path'),
        sa.Column('risk_review', sa.Text(), nullable=True, comment='Risk review document path'),
        sa.Column('compliance_review', sa.Text(), nullable=True, comment='Compliance review document path'),
        sa.Column('regulation_review', sa.Text(), nullable=True, comment='Regulation review document path'),
        sa.Column('recommendation_note', sa.Text(), nullable=True, comment='Recommendation note path'),
        sa.Column('proposal_note', sa.Text(), nullable=True, comment='Proposal note path'),
        sa.Column('presentation_material', sa.Text(), nullable=True, comment='Presentation material path'),
        sa.Column('supporting_documents', sa.JSON(), nullable=True, comment='Supporting document paths (array)'),
        sa.Column('kepdir_sirkuler_doc', sa.Text(), nullable=True, comment='Circular decision document path'),
        sa.Column('grc_doc', sa.Text(), nullable=True, comment='GRC document path'),
        sa.Column('risalah_ttd', sa.Text(), nullable=True, comment='Signed minutes path'),
        sa.Column('petikan_risalah', sa.Text(), nullable=True, comment='Minutes excerpt path'),

        sa.Column('not_required_files', sa.JSON(), nullable=False, comment='File fields marked not required (array)'),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='DRAFT', comment='Workflow status'),
        sa.Column('cancellation_reason', sa.Text(), nullable=True, comment='Cancellation reason'),
        sa.Column('postponement_reason', sa.Text(), nullable=True, comment='Postponement reason'),

        # Logistics
        sa.Column('execution_date', sa.Date(), nullable=True, comment='Meeting date'),
        sa.Column('start_time', sa.String(length=10), nullable=True, comment='Start time HH:MM'),
        sa.Column('end_time', sa.String(length=50), nullable=True, server_default='Selesai', comment="End time or 'Selesai'"),
        sa.Column('meeting_method', sa.String(length=50), nullable=True, comment='OFFLINE, ONLINE or HYBRID'),
        sa.Column('meeting_location', sa.Text(), nullable=True, comment='Meeting room'),
        sa.Column('meeting_link', sa.Text(), nullable=True, comment='Online meeting link'),
        sa.Column('meeting_type', sa.String(length=30), nullable=False, server_default='RADIR', comment='RADIR, RAKORDIR or KEPDIR_SIRKULER'),
        sa.Column('meeting_number', sa.String(length=50), nullable=True, comment='Session number'),
        sa.Column('meeting_year', sa.String(length=4), nullable=True, comment='Session year'),
        sa.Column('meeting_status', sa.String(length=20), nullable=True, server_default='PENDING', comment='PENDING, SCHEDULED, IN_PROGRESS, COMPLETED, CANCELLED'),

        # Minutes
        sa.Column('pimpinan_rapat', sa.JSON(), nullable=True, comment='Meeting chair(s) (array of options)'),
        sa.Column('attendance_data', sa.JSON(), nullable=True, comment='Attendance keyed by director name'),
        sa.Column('guest_participants', sa.JSON(), nullable=True, comment='Guests (array)'),
        sa.Column('executive_summary', sa.Text(), nullable=True, comment='Executive summary'),
        sa.Column('considerations', sa.Text(), nullable=True, comment='Considerations'),
        sa.Column('risalah_body', sa.Text(), nullable=True, comment='Minutes body'),
        sa.Column('meeting_decisions', sa.JSON(), nullable=True, comment='Decision items (array)'),
        sa.Column('arahan_direksi', sa.JSON(), nullable=True, comment="Directors' directives (array)"),
        sa.Column('dissenting_opinion', sa.Text(), nullable=True, comment='Dissenting opinion'),
        sa.Column('risalah_group_id', sa.String(length=36), nullable=True, comment='Groups agendas minuted together'),

        sa.Column('monev_status', sa.String(length=20), nullable=True, comment='ON_PROGRESS or DONE'),
        sa.Column('user_id', sa.String(length=36), nullable=True, comment='Creator user ID'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), comment='Created at'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), comment='Updated at'),
        sa.PrimaryKeyConstraint('id')
    )

    # Create indexes for agendas
    op.create_index('idx_agendas_meeting_type', 'agendas', ['meeting_type'])
    op.create_index('idx_agendas_status', 'agendas', ['status'])
    op.create_index('idx_agendas_updated_at', 'agendas', ['updated_at'])
    op.create_index('idx_agendas_session', 'agendas', ['meeting_number', 'meeting_year'])

    # Create users table
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Same as the auth provider user ID'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Email address'),
        sa.Column('full_name', sa.Text(), nullable=True, comment='Display name'),
        sa.Column('avatar_url', sa.Text(), nullable=True, comment='Avatar URL'),
        sa.Column('role', sa.String(length=30), nullable=False, server_default='user', comment='Application role'),
        sa.Column('two_factor_secret', sa.Text(), nullable=True, comment='Encrypted TOTP secret'),
        sa.Column('two_factor_enabled', sa.Boolean(), nullable=False, server_default=sa.false(), comment='TOTP required at login'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), comment='Created at'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), comment='Updated at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    # Create login_logs table
    op.create_table('login_logs',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Log ID'),
        sa.Column('user_id', sa.String(length=36), nullable=True, comment='User ID when known'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Email used for the attempt'),
        sa.Column('success', sa.Boolean(), nullable=False, server_default=sa.false(), comment='Whether the attempt succeeded'),
        sa.Column('reason', sa.Text(), nullable=True, comment='Failure reason'),
        sa.Column('ip_address', sa.String(length=64), nullable=True, comment='Client IP'),
        sa.Column('user_agent', sa.Text(), nullable=True, comment='Client user agent'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now(), comment='Attempt time'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_login_logs_email', 'login_logs', ['email'])
    op.create_index('idx_login_logs_created_at', 'login_logs', ['created_at'])


def downgrade() -> None:
    op.drop_index('idx_login_logs_created_at', table_name='login_logs')
    op.drop_index('idx_login_logs_email', table_name='login_logs')
    op.drop_table('login_logs')

    op.drop_table('users')

    op.drop_index('idx_agendas_session', table_name='agendas')
    op.drop_index('idx_agendas_updated_at', table_name='agendas')
    op.drop_index('idx_agendas_status', table_name='agendas')
    op.drop_index('idx_agendas_meeting_type', table_name='agendas')
    op.drop_table('agendas')
