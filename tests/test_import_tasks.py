"""
Tests for the background import tasks.
"""

from datetime import datetime, timedelta

import pytest

from backend.models.import_job import ImportJob, ImportProgress, ImportStatus
from backend.models.schema import BuyersCompanyOverview


@pytest.fixture
def task_env(session, monkeypatch, tmp_path):
    """Point the task module at the test session, a fake Redis and a temp upload dir."""
    from tasks import import_tasks

    published = {}
    monkeypatch.setattr(import_tasks, 'get_db_session', lambda: session)
    monkeypatch.setattr(import_tasks.redis_client, 'setex',
                        lambda key, ttl, value: published.__setitem__(key, value))
    monkeypatch.setattr(import_tasks, 'TEMP_UPLOAD_DIR', str(tmp_path))
    return import_tasks, published


@pytest.fixture
def queued_job(session):
    session.add(ImportJob(job_id='job-t', filename='buyers.xlsx', status=ImportStatus.QUEUED.value))
    session.commit()


def test_import_task_records_counts(session, task_env, queued_job, make_workbook, acme_row, tmp_path):
    import_tasks, published = task_env

    path = make_workbook([
        acme_row,
        {'company_registered_name': '', 'hq_origin_country': 'Japan'},
        {'company_registered_name': 'Bad Year', 'year_founded': '99'},
    ])
    result = import_tasks.import_company_overviews.apply(args=[path], task_id='job-t').get()

    assert result['imported'] == 1
    assert result['skipped'] == 1
    assert result['failed'] == 1

    job = session.query(ImportJob).filter_by(job_id='job-t').one()
    assert job.status == 'completed'
    assert job.is_finished()
    assert (job.total_rows, job.imported_rows, job.skipped_rows, job.failed_rows) == (3, 1, 1, 1)
    assert job.batches == 1
    assert job.warning_count == 1
    assert job.row_errors == [
        'Row 4: The "Year Founded" must be a 4-digit year. (Attribute: year_founded, Value: "99")'
    ]
    assert job.started_at is not None
    assert job.finished_at is not None

    record = session.query(BuyersCompanyOverview).one()
    assert record.import_job_id == 'job-t'

    progress = session.query(ImportProgress).filter_by(job_id='job-t').order_by(ImportProgress.id).all()
    assert progress[-1].stage == 'complete'
    assert progress[-1].rows_processed == 3
    assert job.latest_progress.stage == 'complete'
    assert 'import_progress:job-t' in published

    # The upload lived in the upload dir, so it is removed afterwards
    assert not (tmp_path / 'buyers.xlsx').exists()


def test_failed_import_records_error_and_removes_upload(session, task_env, queued_job, make_workbook,
                                                        monkeypatch, tmp_path):
    import_tasks, published = task_env
    from services.company_overview_import_service import CompanyOverviewImportService

    def broken(self, file_path):
        raise RuntimeError('database went away')

    monkeypatch.setattr(CompanyOverviewImportService, 'import_file', broken)
    path = make_workbook([{'company_registered_name': 'Acme'}])

    with pytest.raises(RuntimeError, match='database went away'):
        import_tasks.import_company_overviews.apply(args=[path], task_id='job-t').get()

    job = session.query(ImportJob).filter_by(job_id='job-t').one()
    assert job.status == 'failed'
    assert job.error_message == 'database went away'
    assert 'RuntimeError' in job.error_traceback
    assert job.latest_progress.stage == 'failed'

    assert not (tmp_path / 'buyers.xlsx').exists()


def test_remove_temp_upload_only_touches_upload_dir(task_env, tmp_path_factory):
    import_tasks, _ = task_env

    outside = tmp_path_factory.mktemp('elsewhere') / 'keep.xlsx'
    outside.write_bytes(b'data')

    import_tasks.remove_temp_upload(str(outside))

    assert outside.exists()


def test_purge_finished_imports_keeps_recent_and_running(session, task_env):
    import_tasks, _ = task_env
    old = datetime.utcnow() - timedelta(days=40)
    session.add_all([
        ImportJob(job_id='old', filename='a.xlsx', status='completed', finished_at=old),
        ImportJob(job_id='recent', filename='b.xlsx', status='failed', finished_at=datetime.utcnow()),
        ImportJob(job_id='running', filename='c.xlsx', status='running'),
    ])
    session.add(ImportProgress(job_id='old', stage='complete', percent=100))
    session.commit()

    result = import_tasks.purge_finished_imports.apply(kwargs={'days_to_keep': 30}).get()

    assert result['purged_jobs'] == 1
    remaining = {job.job_id for job in session.query(ImportJob)}
    assert remaining == {'recent', 'running'}
    assert session.query(ImportProgress).filter_by(job_id='old').count() == 0
