"""
Tests for the import progress WebSocket.
"""

import pytest

from backend.models.import_job import ImportJob


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    from api import progress
    monkeypatch.setattr(progress.redis_client, 'get', lambda key: None)


def test_unknown_job_is_reported(client):
    with client.websocket_connect('/ws/import/missing') as ws:
        message = ws.receive_json()

    assert message == {'job_id': 'missing', 'error': 'Import job missing not found'}


def test_finished_job_sends_counts_and_closes(client, session):
    session.add(ImportJob(job_id='done', filename='buyers.xlsx', status='completed',
                          total_rows=3, imported_rows=2, skipped_rows=1, batches=1))
    session.commit()

    with client.websocket_connect('/ws/import/done') as ws:
        greeting = ws.receive_json()
        final = ws.receive_json()

    assert greeting == {'job_id': 'done', 'status': 'completed'}
    assert final['finished'] is True
    assert final['status'] == 'completed'
    assert (final['imported_rows'], final['skipped_rows']) == (2, 1)


def test_running_job_streams_progress_until_finished(client, session, monkeypatch):
    from api.routers import websocket as websocket_router

    session.add(ImportJob(job_id='live', filename='buyers.xlsx', status='running'))
    session.commit()
    payload = {'stage': 'importing', 'percent': 50.0, 'message': 'Processed 500 rows',
               'rows_processed': 500, 'recorded_at': '2025-10-15T12:00:30'}

    def progress_then_finish(job_id):
        session.query(ImportJob).filter_by(job_id=job_id).update(
            {'status': 'completed', 'imported_rows': 500}
        )
        session.commit()
        return payload

    monkeypatch.setattr(websocket_router, 'read_progress', progress_then_finish)
    monkeypatch.setattr(websocket_router, 'POLL_INTERVAL', 0)

    with client.websocket_connect('/ws/import/live') as ws:
        greeting = ws.receive_json()
        update = ws.receive_json()
        final = ws.receive_json()

    assert greeting['status'] == 'running'
    assert update['progress'] == payload
    assert final['finished'] is True
    assert final['imported_rows'] == 500
