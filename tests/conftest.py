"""
Pytest configuration and fixtures for company overview import tests.
"""

import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv
import openpyxl

# Load environment
load_dotenv()

# Application modules build their engines at import time
os.environ.setdefault('DATABASE_URL', 'sqlite://')

from backend.models.schema import Base  # noqa: E402

# Test database URL (in-memory SQLite unless a separate test database is given)
TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite://')

HEADINGS = [
    'Company Registered Name', 'HQ Origin Country', 'Company Type', 'Year Founded',
    'Broader Industry Operations', 'Main Industry Operations', 'Niche/Priority Industry',
    'Current Employee Counts', 'Reason M&A', 'Project Start Date',
    'Expected Transaction Timeline', 'Our Person In Charge', 'No PIC Needed', 'Status',
    'Details', "Company's Email", "Company's Phone Number", 'HQ Address',
    'Shareholder Name', 'Seller-side Contact Person Name', 'Designation/Position',
    'Email Address', 'Phone Number', 'Website Link', 'LinkedIn Link', 'X (Twitter) Link',
    'Facebook Link', 'Instagram Link', 'YouTube Link', 'EBITDA Multiples',
]


@pytest.fixture(scope='session')
def engine():
    """Create test database engine."""
    if TEST_DATABASE_URL.startswith('sqlite'):
        eng = create_engine(
            TEST_DATABASE_URL,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool
        )
    else:
        eng = create_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    connection = engine.connect()
    transaction = connection.begin()
    Session = sessionmaker(bind=connection)
    sess = Session()

    yield sess

    sess.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def acme_row():
    """Header-keyed row for a complete, valid company."""
    return {
        'company_registered_name': 'Acme',
        'hq_origin_country': 'Japan',
        'company_type': 'Private',
        'year_founded': 1998,
        'main_industry_operations': 'Tech, Retail',
        'niche_priority_industry': 'SaaS',
        'project_start_date': 45000,
        'no_pic_needed': 'yes',
        'company_s_email': 'info@acmecorp.jp',
        'hq_address': '{"city":"Tokyo"}',
        'shareholder_name': 'Alice, Bob',
        'phone_number': '+81 3 1234, +81 3 5678',
        'website_link': 'https://acme.example.com',
        'ebitda_multiples': '{"years": "3", "amount": "5"}',
    }


@pytest.fixture
def make_workbook(tmp_path):
    """
    Build an .xlsx file from header-keyed row dicts.

    Headings default to the full company overview heading row; any
    key missing from a row leaves the cell blank.
    """
    from services.company_overview_import_service import heading_key

    def _make(rows, headings=None, filename='buyers.xlsx'):
        headings = headings or HEADINGS
        keys = [heading_key(h) for h in headings]

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = 'Buyers'
        ws.append(headings)
        for row in rows:
            ws.append([row.get(key) for key in keys])

        path = tmp_path / filename
        wb.save(path)
        return str(path)

    return _make


@pytest.fixture
def client(session):
    """FastAPI test client bound to the test session."""
    from fastapi.testclient import TestClient
    from api.main import app
    from api.dependencies import get_db

    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
