"""
SQLAlchemy models for the company overview import system.

This module defines the database schema using SQLAlchemy ORM,
matching the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean, Column, Integer, String, Text, TIMESTAMP, JSON, Index, text
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON everywhere else (tests run on SQLite)
JSONType = JSON().with_variant(JSONB(), 'postgresql')


class BuyersCompanyOverview(Base):
    """Company overview profile of a buyer, one per imported spreadsheet row."""

    __tablename__ = 'buyers_company_overviews'
    __table_args__ = (
        Index('idx_bco_reg_name', 'reg_name'),
        Index('idx_bco_import_job', 'import_job_id'),
        {'comment': 'Buyer company overview profiles'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )

    # Company identification & basics
    reg_name = Column(String(255), nullable=True, comment='Registered company name')
    hq_country = Column(String(100), nullable=True, comment='HQ origin country')
    company_type = Column(String(100), nullable=True)
    year_founded = Column(Integer, nullable=True)
    industry_ops = Column(String(255), nullable=True, comment='Broader industry operations')
    main_industry_operations = Column(JSONType, nullable=True, comment='Array of industry names')
    niche_industry = Column(JSONType, nullable=True, comment='Array of niche/priority industries')
    emp_count = Column(String(255), nullable=True, comment='Current employee count')

    # M&A details
    reason_ma = Column(String(255), nullable=True)
    proj_start_date = Column(String(10), nullable=True, comment='Project start date (YYYY-MM-DD)')
    txn_timeline = Column(String(255), nullable=True, comment='Expected transaction timeline')

    # Internal in-charge
    incharge_name = Column(String(100), nullable=True)
    no_pic_needed = Column(Boolean, nullable=True, server_default='false')

    # Status & meta
    status = Column(String(50), nullable=True)
    details = Column(Text, nullable=True)

    # Company contact
    email = Column(String(150), nullable=True)
    phone = Column(String(50), nullable=True)
    hq_address = Column(JSONType, nullable=True, comment='Structured address or fallback wrapper')
    shareholder_name = Column(JSONType, nullable=True, comment='Array of shareholder names')

    # Seller-side contact
    seller_contact_name = Column(String(100), nullable=True)
    seller_designation = Column(String(100), nullable=True)
    seller_email = Column(String(150), nullable=True)
    seller_phone = Column(JSONType, nullable=True, comment='Array of phone numbers')

    # Online presence
    website = Column(String(255), nullable=True)
    linkedin = Column(String(255), nullable=True)
    twitter = Column(String(255), nullable=True)
    facebook = Column(String(255), nullable=True)
    instagram = Column(String(255), nullable=True)
    youtube = Column(String(255), nullable=True)

    ebitda_times = Column(JSONType, nullable=True, comment='EBITDA multiples, e.g. {"years": "3", "amount": "5"}')

    import_job_id = Column(
        String(255),
        nullable=True,
        comment='Background job that imported this record'
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False
    )
    updated_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False
    )

    def __repr__(self):
        return f"<BuyersCompanyOverview(id={self.id}, reg_name='{self.reg_name}')>"
