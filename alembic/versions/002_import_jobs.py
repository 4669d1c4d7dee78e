"""add background import job tables

Revision ID: 002_import_jobs
Revises: 001_initial_schema
Create Date: 2025-10-15 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002_import_jobs'
down_revision = '001_initial_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create the tables behind POST /api/import/upload.

    - import_jobs: one row per uploaded workbook, with its row counts
    - import_progress: stages reported by the worker
    """

    op.create_table(
        'import_jobs',
        sa.Column('job_id', sa.String(length=255), nullable=False, comment='Celery task id'),
        sa.Column('filename', sa.String(length=255), nullable=False, comment='Name of the uploaded workbook'),
        sa.Column('file_size_bytes', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='queued', nullable=False),
        sa.Column('requested_by', sa.String(length=255), nullable=True,
                  comment='API key or user that uploaded the workbook'),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('started_at', sa.TIMESTAMP(), nullable=True),
        sa.Column('finished_at', sa.TIMESTAMP(), nullable=True),
        sa.Column('total_rows', sa.Integer(), server_default='0', nullable=False, comment='Non-blank data rows read'),
        sa.Column('imported_rows', sa.Integer(), server_default='0', nullable=False),
        sa.Column('skipped_rows', sa.Integer(), server_default='0', nullable=False,
                  comment='Rows without a registered company name'),
        sa.Column('failed_rows', sa.Integer(), server_default='0', nullable=False,
                  comment='Rows rejected by validation'),
        sa.Column('batches', sa.Integer(), server_default='0', nullable=False),
        sa.Column('warning_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('row_errors', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='First formatted validation errors'),
        sa.Column('error_message', sa.Text(), nullable=True, comment='Why the import stopped'),
        sa.Column('error_traceback', sa.Text(), nullable=True),
        sa.CheckConstraint("status IN ('queued', 'running', 'completed', 'failed', 'cancelled')",
                           name='import_jobs_status_check'),
        sa.PrimaryKeyConstraint('job_id'),
        comment='Company overview workbooks imported by the worker'
    )
    op.create_index('idx_import_jobs_status', 'import_jobs', ['status'])
    op.create_index('idx_import_jobs_created_at', 'import_jobs', ['created_at'])

    op.create_table(
        'import_progress',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_id', sa.String(length=255), nullable=False),
        sa.Column('stage', sa.String(length=50), nullable=False),
        sa.Column('percent', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('rows_processed', sa.Integer(), nullable=True,
                  comment='Data rows read when the stage was reported'),
        sa.Column('recorded_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['job_id'], ['import_jobs.job_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_import_progress_job_id', 'import_progress', ['job_id'])
    op.create_index('idx_import_progress_recorded_at', 'import_progress', ['recorded_at'])


def downgrade() -> None:
    op.drop_index('idx_import_progress_recorded_at', table_name='import_progress')
    op.drop_index('idx_import_progress_job_id', table_name='import_progress')
    op.drop_table('import_progress')

    op.drop_index('idx_import_jobs_created_at', table_name='import_jobs')
    op.drop_index('idx_import_jobs_status', table_name='import_jobs')
    op.drop_table('import_jobs')
