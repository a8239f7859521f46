"""create registration schema

Revision ID: 7f3b2c1d9a40
Revises:
Create Date: 2025-01-15 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7f3b2c1d9a40'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'surveys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_surveys'),
        sa.UniqueConstraint('name', name='uq_surveys_name'),
    )
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=True),
        sa.Column('default_message_ids', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_departments'),
        sa.UniqueConstraint('name', name='uq_departments_name'),
    )
    op.create_table(
        'message_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_message_types'),
        sa.UniqueConstraint('name', name='uq_message_types_name'),
    )
    op.create_table(
        'message_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('message_type_id', sa.Integer(), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], name='fk_message_templates_department_id_departments', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['message_type_id'], ['message_types.id'], name='fk_message_templates_message_type_id_message_types'),
        sa.PrimaryKeyConstraint('id', name='pk_message_templates'),
    )
    op.create_table(
        'respondents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('survey_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('logins', sa.Integer(), nullable=False),
        sa.Column('first_access_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('finalized_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.id'], name='fk_respondents_survey_id_surveys'),
        sa.PrimaryKeyConstraint('id', name='pk_respondents'),
        sa.UniqueConstraint('survey_id', 'token', name='uq_respondents_survey_token'),
    )
    op.create_index('ix_respondents_token', 'respondents', ['token'])
    op.create_table(
        'subjects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('xid', sa.String(length=255), nullable=True),
        sa.Column('survey_id', sa.Integer(), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('respondent_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('middle_name', sa.String(length=50), nullable=True),
        sa.Column('dob', sa.Date(), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['survey_id'], ['surveys.id'], name='fk_subjects_survey_id_surveys'),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], name='fk_subjects_department_id_departments'),
        sa.ForeignKeyConstraint(['respondent_id'], ['respondents.id'], name='fk_subjects_respondent_id_respondents', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_subjects'),
        sa.UniqueConstraint('respondent_id', name='uq_subjects_respondent_id'),
        sa.UniqueConstraint('xid', 'department_id', name='uq_subjects_xid_department'),
    )
    op.create_index('ix_subjects_department_id', 'subjects', ['department_id'])
    op.create_index('ix_subjects_survey_id', 'subjects', ['survey_id'])
    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subject_id', sa.Integer(), nullable=False),
        sa.Column('message_type_id', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('subject_line', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], name='fk_messages_subject_id_subjects', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['message_type_id'], ['message_types.id'], name='fk_messages_message_type_id_message_types'),
        sa.PrimaryKeyConstraint('id', name='pk_messages'),
    )
    op.create_index('ix_messages_unsent', 'messages', ['sent_at'])
    op.create_table(
        'excluded_xids',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('xid', sa.String(length=255), nullable=False),
        sa.Column('department_id', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=True),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], name='fk_excluded_xids_department_id_departments'),
        sa.PrimaryKeyConstraint('id', name='pk_excluded_xids'),
        sa.UniqueConstraint('xid', 'department_id', name='uq_excluded_xids_xid_department'),
    )


def downgrade():
    op.drop_table('excluded_xids')
    op.drop_index('ix_messages_unsent', table_name='messages')
    op.drop_table('messages')
    op.drop_index('ix_subjects_survey_id', table_name='subjects')
    op.drop_index('ix_subjects_department_id', table_name='subjects')
    op.drop_table('subjects')
    op.drop_index('ix_respondents_token', table_name='respondents')
    op.drop_table('respondents')
    op.drop_table('message_templates')
    op.drop_table('message_types')
    op.drop_table('departments')
    op.drop_table('surveys')
