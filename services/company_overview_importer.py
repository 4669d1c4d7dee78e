"""
Row importer for buyer company overview spreadsheets.

Maps one header-keyed spreadsheet row onto a ``BuyersCompanyOverview``
record. Malformed cells degrade to safe defaults and are reported through
``ImportDiagnostics``; only a missing registered name drops the row.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from backend.models.schema import BuyersCompanyOverview
from services import coercion
from services.row_validation import rules as validation_rules

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500
DEFAULT_CHUNK_SIZE = 500

REQUIRED_COLUMN = 'company_registered_name'


class ImportDiagnostics:
    """
    Collects coercion and skip warnings for one import run.

    Each warning is logged immediately and kept for the import summary.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self.warnings: List[Dict[str, Any]] = []

    def warn(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Record a warning with its context."""
        context = context or {}
        self.warnings.append({'message': message, 'context': context})
        self.log.warning(f"{message} {context}")

    def __len__(self):
        return len(self.warnings)


class Coercion(str, Enum):
    """Coercion applied to a source column."""
    TEXT = 'text'
    INTEGER = 'integer'
    COMMA_LIST = 'comma_list'
    BOOLEAN = 'boolean'
    DATE = 'date'
    JSON = 'json'
    ADDRESS = 'address'


# target field -> (source column, coercion)
COLUMN_MAP = {
    'reg_name': ('company_registered_name', Coercion.TEXT),
    'hq_country': ('hq_origin_country', Coercion.TEXT),
    'company_type': ('company_type', Coercion.TEXT),
    'year_founded': ('year_founded', Coercion.INTEGER),
    'industry_ops': ('broader_industry_operations', Coercion.TEXT),
    'main_industry_operations': ('main_industry_operations', Coercion.COMMA_LIST),
    'niche_industry': ('niche_priority_industry', Coercion.COMMA_LIST),
    'emp_count': ('current_employee_counts', Coercion.TEXT),
    'reason_ma': ('reason_ma', Coercion.TEXT),
    'proj_start_date': ('project_start_date', Coercion.DATE),
    'txn_timeline': ('expected_transaction_timeline', Coercion.TEXT),
    'incharge_name': ('our_person_in_charge', Coercion.TEXT),
    'no_pic_needed': ('no_pic_needed', Coercion.BOOLEAN),
    'status': ('status', Coercion.TEXT),
    'details': ('details', Coercion.TEXT),
    'email': ('company_s_email', Coercion.TEXT),
    'phone': ('company_s_phone_number', Coercion.TEXT),
    'hq_address': ('hq_address', Coercion.ADDRESS),
    'shareholder_name': ('shareholder_name', Coercion.COMMA_LIST),
    'seller_contact_name': ('seller_side_contact_person_name', Coercion.TEXT),
    'seller_designation': ('designation_position', Coercion.TEXT),
    'seller_email': ('email_address', Coercion.TEXT),
    'seller_phone': ('phone_number', Coercion.COMMA_LIST),
    'website': ('website_link', Coercion.TEXT),
    'linkedin': ('linkedin_link', Coercion.TEXT),
    'twitter': ('x_twitter_link', Coercion.TEXT),
    'facebook': ('facebook_link', Coercion.TEXT),
    'instagram': ('instagram_link', Coercion.TEXT),
    'youtube': ('youtube_link', Coercion.TEXT),
    'ebitda_times': ('ebitda_multiples', Coercion.JSON),
}

# Value used when the column is absent or its cell is blank
MISSING_DEFAULTS = {
    'no_pic_needed': False,
}


class CompanyOverviewRowImporter:
    """
    Turns spreadsheet rows into ``BuyersCompanyOverview`` records.

    Rows are independent: the importer holds no per-row state, so chunk
    and batch boundaries never change the outcome.
    """

    def __init__(
        self,
        diagnostics: Optional[ImportDiagnostics] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        self.diagnostics = diagnostics or ImportDiagnostics()
        self._batch_size = batch_size
        self._chunk_size = chunk_size

    def batch_size(self) -> int:
        return self._batch_size

    def chunk_size(self) -> int:
        return self._chunk_size

    def rules(self) -> Dict[str, str]:
        return validation_rules()

    def _warner(self, row_number: Optional[int]) -> Callable[[str, Dict[str, Any]], None]:
        def warn(message: str, context: Dict[str, Any]):
            if row_number is not None:
                context = {**context, 'row': row_number}
            self.diagnostics.warn(message, context)
        return warn

    def has_required_name(self, row: Dict[str, Any]) -> bool:
        value = row.get(REQUIRED_COLUMN)
        return coercion.classify_cell(value) is not coercion.CellKind.EMPTY and value is not False

    def coerce(self, kind: Coercion, value: Any, warn, column: str) -> Any:
        """Apply one coercion to one cell."""
        if kind is Coercion.TEXT:
            return coercion.to_text(value)
        if kind is Coercion.INTEGER:
            return coercion.to_integer(value, warn=warn, column=column)
        if kind is Coercion.COMMA_LIST:
            return coercion.comma_separated_to_list(value)
        if kind is Coercion.BOOLEAN:
            return coercion.string_to_boolean(value)
        if kind is Coercion.DATE:
            return coercion.transform_date(value, warn=warn, column=column)
        if kind is Coercion.JSON:
            return coercion.parse_json_value(value, warn=warn, column=column)
        if kind is Coercion.ADDRESS:
            return coercion.parse_address(value, warn=warn, column=column)
        raise ValueError(f"Unknown coercion: {kind}")

    def map_row(self, row: Dict[str, Any], row_number: Optional[int] = None) -> Dict[str, Any]:
        """Map a row onto record field values without the required-name gate."""
        warn = self._warner(row_number)
        fields = {}
        for target, (source, kind) in COLUMN_MAP.items():
            value = row.get(source)
            if value is None:
                value = MISSING_DEFAULTS.get(target)
            fields[target] = self.coerce(kind, value, warn, source)
        return fields

    def model(self, row: Dict[str, Any], row_number: Optional[int] = None) -> Optional[BuyersCompanyOverview]:
        """
        Build a record from one row.

        Args:
            row: Mapping of column name to raw cell value
            row_number: Spreadsheet row number, used in diagnostics

        Returns:
            Transient BuyersCompanyOverview, or None when the row is skipped
        """
        if not self.has_required_name(row):
            context = {'row_data': row}
            if row_number is not None:
                context['row'] = row_number
            self.diagnostics.warn('Skipping row due to empty Company Registered Name.', context)
            return None

        return BuyersCompanyOverview(**self.map_row(row, row_number))
