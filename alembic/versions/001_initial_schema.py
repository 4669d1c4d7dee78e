"""Initial schema for company overview import

Revision ID: 001_initial_schema
Revises: 
Create Date: 2025-10-14

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create buyers_company_overviews table
    op.create_table(
        'buyers_company_overviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reg_name', sa.String(length=255), nullable=True, comment='Registered company name'),
        sa.Column('hq_country', sa.String(length=100), nullable=True, comment='HQ origin country'),
        sa.Column('company_type', sa.String(length=100), nullable=True),
        sa.Column('year_founded', sa.Integer(), nullable=True),
        sa.Column('industry_ops', sa.String(length=255), nullable=True, comment='Broader industry operations'),
        sa.Column('main_industry_operations', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='Array of industry names'),
        sa.Column('niche_industry', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='Array of niche/priority industries'),
        sa.Column('emp_count', sa.String(length=255), nullable=True, comment='Current employee count'),
        sa.Column('reason_ma', sa.String(length=255), nullable=True),
        sa.Column('proj_start_date', sa.String(length=10), nullable=True, comment='Project start date (YYYY-MM-DD)'),
        sa.Column('txn_timeline', sa.String(length=255), nullable=True, comment='Expected transaction timeline'),
        sa.Column('incharge_name', sa.String(length=100), nullable=True),
        sa.Column('no_pic_needed', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('email', sa.String(length=150), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('hq_address', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='Structured address or fallback wrapper'),
        sa.Column('shareholder_name', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='Array of shareholder names'),
        sa.Column('seller_contact_name', sa.String(length=100), nullable=True),
        sa.Column('seller_designation', sa.String(length=100), nullable=True),
        sa.Column('seller_email', sa.String(length=150), nullable=True),
        sa.Column('seller_phone', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='Array of phone numbers'),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('linkedin', sa.String(length=255), nullable=True),
        sa.Column('twitter', sa.String(length=255), nullable=True),
        sa.Column('facebook', sa.String(length=255), nullable=True),
        sa.Column('instagram', sa.String(length=255), nullable=True),
        sa.Column('youtube', sa.String(length=255), nullable=True),
        sa.Column('ebitda_times', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='EBITDA multiples, e.g. {"years": "3", "amount": "5"}'),
        sa.Column('import_job_id', sa.String(length=255), nullable=True,
                  comment='Background job that imported this record'),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        comment='Buyer company overview profiles'
    )

    # Create indexes on buyers_company_overviews table
    op.create_index('idx_bco_reg_name', 'buyers_company_overviews', ['reg_name'])
    op.create_index('idx_bco_import_job', 'buyers_company_overviews', ['import_job_id'])


def downgrade() -> None:
    op.drop_index('idx_bco_import_job', table_name='buyers_company_overviews')
    op.drop_index('idx_bco_reg_name', table_name='buyers_company_overviews')
    op.drop_table('buyers_company_overviews')
