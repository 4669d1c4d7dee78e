"""
Tests for the company overview import service: reading, batching and summaries.
"""

from unittest.mock import MagicMock

import pytest

from backend.models.schema import BuyersCompanyOverview
from services.company_overview_import_service import (
    CompanyOverviewImportService, MAX_SUMMARY_WARNINGS, format_failure, heading_key, iter_chunks
)


def numbered(rows, start=2):
    return list(enumerate(rows, start=start))


class TestHelpers:

    @pytest.mark.parametrize('heading, key', [
        ('Company Registered Name', 'company_registered_name'),
        ("Company's Email", 'company_s_email'),
        ('Company’s Phone Number', 'company_s_phone_number'),
        ('Reason M&A', 'reason_ma'),
        ('X (Twitter) Link', 'x_twitter_link'),
        ('Designation/Position', 'designation_position'),
        ('  EBITDA Multiples ', 'ebitda_multiples'),
        ('company_registered_name', 'company_registered_name'),
        (None, None),
        ('???', None),
    ])
    def test_heading_key(self, heading, key):
        assert heading_key(heading) == key

    def test_iter_chunks(self):
        assert list(iter_chunks(range(5), 2)) == [[0, 1], [2, 3], [4]]
        assert list(iter_chunks([], 2)) == []

    def test_format_failure(self):
        failure = {'row': 5, 'attribute': 'year_founded',
                   'errors': ['The "Year Founded" must be a 4-digit year.'], 'value': '99'}
        assert format_failure(failure) == (
            'Row 5: The "Year Founded" must be a 4-digit year. '
            '(Attribute: year_founded, Value: "99")'
        )


class TestImportRows:

    def test_batches_of_fixed_size(self, session):
        rows = numbered([{'company_registered_name': f'Company {i}'} for i in range(7)])
        service = CompanyOverviewImportService(session, batch_size=3, chunk_size=2)

        summary = service.import_rows(rows)

        assert summary['imported'] == 7
        assert summary['batches'] == 3
        assert session.query(BuyersCompanyOverview).count() == 7

    def test_outcome_independent_of_batch_boundaries(self, session, acme_row):
        rows = numbered([
            acme_row,
            {'company_registered_name': ''},
            {'company_registered_name': 'Bad Year', 'year_founded': '99'},
            {'company_registered_name': 'Beta KK', 'hq_address': '123 Main St'},
        ])

        small = CompanyOverviewImportService(session, batch_size=1, chunk_size=1).import_rows(rows)
        large = CompanyOverviewImportService(session).import_rows(rows)

        for key in ('total_rows', 'imported', 'skipped', 'failed'):
            assert small[key] == large[key]
        assert small['errors'] == large['errors']
        assert small['batches'] == 2
        assert large['batches'] == 1

        names = [r.reg_name for r in session.query(BuyersCompanyOverview).order_by(BuyersCompanyOverview.id)]
        assert names == ['Acme', 'Beta KK', 'Acme', 'Beta KK']

    def test_skip_fail_and_import(self, session, acme_row):
        rows = numbered([
            acme_row,
            {'company_registered_name': None, 'hq_origin_country': 'Japan'},
            {'company_registered_name': 'Bad Year', 'year_founded': '99', 'website_link': 'nope'},
        ])
        service = CompanyOverviewImportService(session)

        summary = service.import_rows(rows)

        assert summary['total_rows'] == 3
        assert summary['imported'] == 1
        assert summary['skipped'] == 1
        assert summary['failed'] == 1
        assert len(summary['warnings']) == 1
        assert summary['warnings'][0]['context']['row'] == 3

        attributes = {f['attribute'] for f in summary['failures']}
        assert attributes == {'year_founded', 'website_link'}
        assert all(f['row'] == 4 for f in summary['failures'])
        assert 'Row 4: The "Website Link" must be a valid URL. (Attribute: website_link, Value: "nope")' \
            in summary['errors']

    def test_import_job_id_is_stamped(self, session):
        service = CompanyOverviewImportService(session, import_job_id='job-123')
        service.import_rows(numbered([{'company_registered_name': 'Acme'}]))

        record = session.query(BuyersCompanyOverview).one()
        assert record.import_job_id == 'job-123'

    def test_summary_caps_warnings(self, session):
        rows = numbered([{'company_registered_name': '', 'details': 'x' * 50}
                         for _ in range(MAX_SUMMARY_WARNINGS + 20)])
        service = CompanyOverviewImportService(session)

        summary = service.import_rows(rows)

        assert summary['skipped'] == MAX_SUMMARY_WARNINGS + 20
        assert summary['warning_count'] == MAX_SUMMARY_WARNINGS + 20
        assert len(summary['warnings']) == MAX_SUMMARY_WARNINGS

    def test_detail_limit_caps_failures(self, session):
        rows = numbered([{'company_registered_name': f'Bad {i}', 'year_founded': '99'} for i in range(5)])
        service = CompanyOverviewImportService(session)
        service.import_rows(rows)

        summary = service.summary(detail_limit=2)

        assert summary['failed'] == 5
        assert summary['error_count'] == 5
        assert len(summary['errors']) == 2
        assert len(summary['failures']) == 2
        assert summary['errors'][0].startswith('Row 2:')

    def test_insert_failure_rolls_back_and_propagates(self):
        db = MagicMock()
        db.bulk_save_objects.side_effect = RuntimeError('connection lost')
        service = CompanyOverviewImportService(db)

        with pytest.raises(RuntimeError, match='connection lost'):
            service.import_rows(numbered([{'company_registered_name': 'Acme'}]))

        db.rollback.assert_called_once()
        db.commit.assert_not_called()


class TestImportFile:

    def test_workbook_import(self, session, make_workbook, acme_row):
        path = make_workbook([
            acme_row,
            {'company_registered_name': '   '},
            {'hq_origin_country': 'Japan'},
            {'company_registered_name': 'Bad Year', 'year_founded': '99'},
            {'company_registered_name': 'Beta KK', 'hq_address': 'undefined', 'year_founded': 2001},
        ])
        stages = []
        service = CompanyOverviewImportService(
            session,
            progress_callback=lambda stage, percent, message: stages.append((stage, percent))
        )

        summary = service.import_file(path)

        # Row 3 is blank and never reaches the importer
        assert summary['total_rows'] == 4
        assert summary['imported'] == 2
        assert summary['skipped'] == 1
        assert summary['failed'] == 1
        assert summary['errors'] == [
            'Row 5: The "Year Founded" must be a 4-digit year. (Attribute: year_founded, Value: "99")'
        ]

        acme = session.query(BuyersCompanyOverview).filter_by(reg_name='Acme').one()
        assert acme.year_founded == 1998
        assert acme.main_industry_operations == ['Tech', 'Retail']
        assert acme.proj_start_date == '2023-03-15'
        assert acme.hq_address == {'city': 'Tokyo'}
        assert acme.no_pic_needed is True

        beta = session.query(BuyersCompanyOverview).filter_by(reg_name='Beta KK').one()
        assert beta.hq_address == []
        assert beta.year_founded == 2001

        assert stages[0] == ('reading', 0)
        assert stages[-1] == ('complete', 100)
        assert 'importing' in [stage for stage, _ in stages]

    def test_extra_columns_are_ignored(self, session, make_workbook):
        path = make_workbook(
            [{'company_registered_name': 'Acme', 'internal_notes': 'ignore me'}],
            headings=['Company Registered Name', 'Internal Notes']
        )

        summary = CompanyOverviewImportService(session).import_file(path)

        assert summary['imported'] == 1
        assert summary['failed'] == 0

    def test_blank_no_pic_needed_cell_stores_false(self, session, make_workbook):
        path = make_workbook(
            [{'company_registered_name': 'Acme', 'no_pic_needed': None}],
            headings=['Company Registered Name', 'No PIC Needed']
        )

        CompanyOverviewImportService(session).import_file(path)

        record = session.query(BuyersCompanyOverview).one()
        assert record.no_pic_needed is False

    def test_summary_is_json_ready(self, session, make_workbook):
        from datetime import datetime
        path = make_workbook([{'company_registered_name': 'Acme', 'year_founded': datetime(2020, 1, 1)}])

        summary = CompanyOverviewImportService(session).import_file(path)

        assert summary['failed'] == 1
        assert isinstance(summary['failures'][0]['value'], str)
