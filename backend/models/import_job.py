"""
Background import job records.

One ``ImportJob`` per workbook handed to the worker, carrying the row
counts the import produced, and one ``ImportProgress`` per stage the
worker reported while reading and inserting.
"""

from enum import Enum
from typing import Any, Dict

from sqlalchemy import (
    Column, Integer, String, TIMESTAMP, ForeignKey, Numeric, Text,
    CheckConstraint, Index, text
)
from sqlalchemy.orm import relationship

from backend.models.schema import Base, JSONType

# Formatted validation errors kept on a job record
MAX_STORED_ERRORS = 200


def progress_key(job_id: str) -> str:
    """Redis key holding the latest progress of a job."""
    return f'import_progress:{job_id}'


class ImportStatus(str, Enum):
    QUEUED = 'queued'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


FINISHED_STATUSES = (ImportStatus.COMPLETED, ImportStatus.FAILED, ImportStatus.CANCELLED)


class ImportJob(Base):
    """
    A company overview workbook imported in the background.

    ``imported_rows``, ``skipped_rows`` and ``failed_rows`` mirror the
    import summary: skipped rows lacked a registered name, failed rows were
    rejected by validation. ``row_errors`` keeps the first formatted
    validation messages.
    """

    __tablename__ = 'import_jobs'
    __table_args__ = (
        CheckConstraint(
            "status IN ('queued', 'running', 'completed', 'failed', 'cancelled')",
            name='import_jobs_status_check'
        ),
        Index('idx_import_jobs_status', 'status'),
        Index('idx_import_jobs_created_at', 'created_at'),
        {'comment': 'Company overview workbooks imported by the worker'}
    )

    job_id = Column(String(255), primary_key=True, comment='Celery task id')
    filename = Column(String(255), nullable=False, comment='Name of the uploaded workbook')
    file_size_bytes = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=ImportStatus.QUEUED.value, server_default='queued')
    requested_by = Column(String(255), nullable=True, comment='API key or user that uploaded the workbook')

    created_at = Column(TIMESTAMP, server_default=text('CURRENT_TIMESTAMP'), nullable=False)
    started_at = Column(TIMESTAMP, nullable=True)
    finished_at = Column(TIMESTAMP, nullable=True)

    total_rows = Column(Integer, nullable=False, default=0, server_default='0',
                        comment='Non-blank data rows read')
    imported_rows = Column(Integer, nullable=False, default=0, server_default='0')
    skipped_rows = Column(Integer, nullable=False, default=0, server_default='0',
                          comment='Rows without a registered company name')
    failed_rows = Column(Integer, nullable=False, default=0, server_default='0',
                         comment='Rows rejected by validation')
    batches = Column(Integer, nullable=False, default=0, server_default='0')
    warning_count = Column(Integer, nullable=False, default=0, server_default='0')
    row_errors = Column(JSONType, nullable=True, comment='First formatted validation errors')

    error_message = Column(Text, nullable=True, comment='Why the import stopped')
    error_traceback = Column(Text, nullable=True)

    progress = relationship(
        'ImportProgress',
        back_populates='job',
        cascade='all, delete-orphan',
        order_by='ImportProgress.id'
    )

    def __repr__(self):
        return f"<ImportJob(job_id='{self.job_id}', filename='{self.filename}', status='{self.status}')>"

    @property
    def latest_progress(self):
        return self.progress[-1] if self.progress else None

    def is_finished(self) -> bool:
        return self.status in FINISHED_STATUSES

    def record_summary(self, summary: Dict[str, Any]):
        """Copy the counts and the first errors of an import summary."""
        self.total_rows = summary['total_rows']
        self.imported_rows = summary['imported']
        self.skipped_rows = summary['skipped']
        self.failed_rows = summary['failed']
        self.batches = summary['batches']
        self.warning_count = summary.get('warning_count', 0)
        self.row_errors = list(summary.get('errors') or [])[:MAX_STORED_ERRORS]


class ImportProgress(Base):
    """A stage reported by the worker: reading, importing, complete or failed."""

    __tablename__ = 'import_progress'
    __table_args__ = (
        Index('idx_import_progress_job_id', 'job_id'),
        Index('idx_import_progress_recorded_at', 'recorded_at'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(
        String(255),
        ForeignKey('import_jobs.job_id', ondelete='CASCADE'),
        nullable=False
    )
    stage = Column(String(50), nullable=False)
    percent = Column(Numeric(5, 2), nullable=False)
    message = Column(Text, nullable=True)
    rows_processed = Column(Integer, nullable=True, comment='Data rows read when the stage was reported')
    recorded_at = Column(TIMESTAMP, server_default=text('CURRENT_TIMESTAMP'), nullable=False)

    job = relationship('ImportJob', back_populates='progress')

    def __repr__(self):
        return f"<ImportProgress(job_id='{self.job_id}', stage='{self.stage}', percent={self.percent})>"
