"""Models package for the company overview import system."""
from backend.models.schema import Base, BuyersCompanyOverview
from backend.models.import_job import ImportJob, ImportProgress, ImportStatus

__all__ = ['Base', 'BuyersCompanyOverview', 'ImportJob', 'ImportProgress', 'ImportStatus']
