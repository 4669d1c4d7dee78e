"""
Company Overview Import Service - Framework-agnostic business logic.

Reads an uploaded workbook with a heading row, runs every row through
validation and the row importer, and bulk-inserts the resulting records
in fixed-size batches. Used by the API, the Celery task and the CLI.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import openpyxl
from sqlalchemy.orm import Session

from services.company_overview_importer import (
    CompanyOverviewRowImporter, ImportDiagnostics,
    DEFAULT_BATCH_SIZE, DEFAULT_CHUNK_SIZE
)
from services.row_validation import validate_row

logger = logging.getLogger(__name__)

HEADER_ROW = 1

# Coercion warnings copied into a summary; the rest are only counted
MAX_SUMMARY_WARNINGS = 100


def heading_key(header: Any) -> Optional[str]:
    """
    Slug a heading cell into a column key.

    'Company Registered Name' -> 'company_registered_name',
    "Company's Email" -> 'company_s_email', 'Reason M&A' -> 'reason_ma'.
    """
    if header is None:
        return None
    key = str(header).strip().lower().replace('&', '')
    key = re.sub(r'[^a-z0-9]+', '_', key).strip('_')
    return key or None


def iter_chunks(rows: Iterable[Any], size: int) -> Iterator[List[Any]]:
    """Group an iterable into lists of at most ``size`` items."""
    chunk = []
    for row in rows:
        chunk.append(row)
        if len(chunk) >= size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def format_failure(failure: Dict[str, Any]) -> str:
    """Render a row failure the way the upload endpoint reports it."""
    value = json.dumps(failure.get('value', 'N/A'), default=str)
    return (
        f"Row {failure['row']}: {', '.join(failure['errors'])} "
        f"(Attribute: {failure['attribute']}, Value: {value})"
    )


class CompanyOverviewImportService:
    """
    Import buyer company overviews from a spreadsheet.

    Rows missing the registered name are skipped with a warning, rows
    failing validation are rejected with per-column messages, and every
    other row becomes a record. Records are inserted and committed one
    batch at a time.
    """

    def __init__(
        self,
        db_session: Session,
        progress_callback: Optional[Callable[[str, float, str], None]] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        diagnostics: Optional[ImportDiagnostics] = None,
        import_job_id: Optional[str] = None
    ):
        """
        Initialize import service.

        Args:
            db_session: SQLAlchemy database session
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
            batch_size: Records per bulk insert (default: 500)
            chunk_size: Rows read per chunk (default: 500)
            diagnostics: Warning sink shared with the row importer
            import_job_id: Background job ID stamped on every record
        """
        self.session = db_session
        self.progress_callback = progress_callback or (lambda *args: None)
        self.diagnostics = diagnostics or ImportDiagnostics()
        self.importer = CompanyOverviewRowImporter(
            diagnostics=self.diagnostics,
            batch_size=batch_size,
            chunk_size=chunk_size
        )
        self.import_job_id = import_job_id

        self.stats = {
            'total_rows': 0,
            'imported': 0,
            'skipped': 0,
            'failed': 0,
            'batches': 0,
        }
        self.failures: List[Dict[str, Any]] = []

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.info(f"Progress: {stage} ({percent:.1f}%) - {message}")

    def read_rows(self, file_path: str) -> Iterator[Tuple[int, Dict[str, Any]]]:
        """
        Yield (row_number, row) pairs from the first worksheet.

        The first row is the heading row; blank rows are skipped.
        """
        wb = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
        try:
            ws = wb.worksheets[0]
            rows = ws.iter_rows(values_only=True)
            header = next(rows, None)
            if header is None:
                logger.warning(f"Workbook {file_path} has no heading row")
                return

            keys = [heading_key(h) for h in header]
            logger.info(f"Heading row: {[k for k in keys if k]}")

            for row_number, values in enumerate(rows, start=HEADER_ROW + 1):
                if values is None or all(v is None or (isinstance(v, str) and not v.strip())
                                         for v in values):
                    continue
                row = {}
                for key, value in zip(keys, values):
                    if key:
                        row[key] = value
                yield row_number, row
        finally:
            wb.close()

    def process_row(self, row_number: int, row: Dict[str, Any]):
        """
        Run one row through the gate, validation and mapping.

        Returns:
            Record object, or None when the row was skipped or rejected
        """
        self.stats['total_rows'] += 1

        if not self.importer.has_required_name(row):
            self.importer.model(row, row_number)
            self.stats['skipped'] += 1
            return None

        errors = validate_row(row)
        if errors:
            self.stats['failed'] += 1
            for attribute, messages in errors.items():
                failure = {
                    'row': row_number,
                    'attribute': attribute,
                    'errors': messages,
                    'value': row.get(attribute),
                }
                self.failures.append(failure)
                logger.warning(f"Row {row_number} rejected: {format_failure(failure)}")
            return None

        record = self.importer.model(row, row_number)
        if record is not None and self.import_job_id:
            record.import_job_id = self.import_job_id
        return record

    def bulk_insert(self, records: List[Any]):
        """Insert one batch of records and commit it."""
        if not records:
            return
        try:
            self.session.bulk_save_objects(records)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.stats['batches'] += 1
        self.stats['imported'] += len(records)
        logger.debug(f"Inserted batch {self.stats['batches']} ({len(records)} records)")

    def import_rows(self, rows: Iterable[Tuple[int, Dict[str, Any]]],
                    total_hint: Optional[int] = None) -> Dict[str, Any]:
        """
        Import already-read (row_number, row) pairs.

        Args:
            rows: Iterable of (row_number, row) pairs
            total_hint: Expected row count, used only for progress percentages

        Returns:
            Import summary dictionary
        """
        pending: List[Any] = []
        batch_size = self.importer.batch_size()

        for chunk in iter_chunks(rows, self.importer.chunk_size()):
            for row_number, row in chunk:
                record = self.process_row(row_number, row)
                if record is None:
                    continue
                pending.append(record)
                if len(pending) >= batch_size:
                    self.bulk_insert(pending)
                    pending = []

            if total_hint:
                percent = 10 + 85 * min(self.stats['total_rows'] / total_hint, 1.0)
            else:
                percent = 50
            self._emit_progress('importing', percent,
                                f"Processed {self.stats['total_rows']} rows")

        self.bulk_insert(pending)
        return self.summary()

    def import_file(self, file_path: str) -> Dict[str, Any]:
        """
        Import a workbook.

        Args:
            file_path: Path to the .xlsx file

        Returns:
            Import summary:
            {
                'total_rows': int, 'imported': int, 'skipped': int,
                'failed': int, 'batches': int,
                'failures': [ {row, attribute, errors, value}, ... ],
                'errors': [ 'Row N: ...', ... ],
                'error_count': int,
                'warnings': [ {message, context}, ... ],  # first MAX_SUMMARY_WARNINGS
                'warning_count': int
            }
        """
        logger.info(f"Starting company overview import of {file_path}")
        self._emit_progress('reading', 0, 'Opening workbook...')

        wb = openpyxl.load_workbook(file_path, read_only=True)
        try:
            max_row = wb.worksheets[0].max_row
        finally:
            wb.close()
        total_hint = max(max_row - HEADER_ROW, 0) if max_row else None

        self._emit_progress('importing', 10, 'Importing rows...')
        summary = self.import_rows(self.read_rows(file_path), total_hint=total_hint)

        self._emit_progress('complete', 100, 'Import complete')
        logger.info(
            f"Import finished: {summary['imported']} imported, {summary['skipped']} skipped, "
            f"{summary['failed']} failed of {summary['total_rows']} rows"
        )
        return summary

    def summary(self, detail_limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Counts plus row-level details of the import so far.

        Warnings are capped at MAX_SUMMARY_WARNINGS; ``detail_limit`` also
        caps failures and errors, for summaries stored on a job record.
        """
        warning_limit = MAX_SUMMARY_WARNINGS
        if detail_limit is not None:
            warning_limit = min(warning_limit, detail_limit)
        failures = self.failures[:detail_limit] if detail_limit is not None else self.failures
        return {
            **self.stats,
            'failures': _jsonable(failures),
            'errors': [format_failure(f) for f in failures],
            'error_count': len(self.failures),
            'warnings': [
                {'message': w['message'], 'context': _jsonable(w['context'])}
                for w in self.diagnostics.warnings[:warning_limit]
            ],
            'warning_count': len(self.diagnostics),
            'import_timestamp': datetime.utcnow().isoformat(),
        }


def _jsonable(value: Any) -> Any:
    """Round-trip through JSON so summaries can be stored in JSON columns."""
    return json.loads(json.dumps(value, default=str))
