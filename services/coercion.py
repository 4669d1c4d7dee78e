"""
Cell coercion helpers for spreadsheet imports.

Every helper converts one raw cell value into a typed field value and
degrades to a neutral fallback instead of raising. Fallbacks are reported
through a ``warn(message, context)`` callable supplied by the caller.
"""

import copy
import json
import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from dateutil import parser as date_parser
from openpyxl.utils.datetime import from_excel

logger = logging.getLogger(__name__)

# Spreadsheet serials that map onto 1970-01-01 .. 2064-04-10
EXCEL_SERIAL_MIN = 25569
EXCEL_SERIAL_MAX = 60000

NULL_TOKENS = ('undefined', 'null')
TRUE_TOKENS = ('1', 'true', 'on', 'yes')
FALSE_TOKENS = ('0', 'false', 'off', 'no', '')

WarnFunc = Callable[[str, Dict[str, Any]], None]


class CellKind(str, Enum):
    """Shape of a raw cell value."""
    EMPTY = 'empty'
    SCALAR = 'scalar'
    ARRAY = 'array'


def classify_cell(value: Any) -> CellKind:
    """
    Tag a raw cell value.

    Some readers pre-decode cells to lists or dicts; those are ARRAY.
    None and whitespace-only text are EMPTY. Everything else is SCALAR.
    """
    if value is None:
        return CellKind.EMPTY
    if isinstance(value, (list, dict)):
        return CellKind.ARRAY
    if isinstance(value, str) and value.strip() == '':
        return CellKind.EMPTY
    return CellKind.SCALAR


def _log_warning(message: str, context: Dict[str, Any]) -> None:
    logger.warning(f"{message} {context}")


def to_text(value: Any) -> Optional[str]:
    """Render a scalar cell as text; integral floats lose their '.0'."""
    if classify_cell(value) is CellKind.EMPTY:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def comma_separated_to_list(value: Any) -> List[Any]:
    """
    Split a comma-delimited cell into a list of trimmed strings.

    Blank input gives an empty list; a pre-decoded list passes through.
    """
    kind = classify_cell(value)
    if kind is CellKind.EMPTY:
        return []
    if kind is CellKind.ARRAY:
        return value
    return [part.strip() for part in to_text(value).split(',')]


def string_to_boolean(value: Any) -> Optional[bool]:
    """Map truthy/falsy text to a bool, None when unrecognized."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if classify_cell(value) is CellKind.ARRAY:
        return None

    token = to_text(value) if not isinstance(value, str) else value
    token = token.strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    return None


def to_integer(value: Any, warn: WarnFunc = _log_warning, column: str = None) -> Optional[int]:
    """Coerce a cell to int, None (with a warning) when it is not integral."""
    kind = classify_cell(value)
    if kind is CellKind.EMPTY:
        return None
    if kind is CellKind.SCALAR and not isinstance(value, bool):
        try:
            number = float(str(value).strip())
            if number.is_integer():
                return int(number)
        except (TypeError, ValueError, OverflowError):
            pass

    warn('Column value is not an integer. Returning null.', {'column': column, 'value': value})
    return None


def parse_json_column(
    value: Any,
    warn: WarnFunc = _log_warning,
    column: str = None,
    empty: Any = None,
    wrap_key: Optional[str] = None
) -> Any:
    """
    Decode a JSON cell that is expected to hold a list or an object.

    Args:
        value: Raw cell value
        warn: Diagnostic sink, called as warn(message, context)
        column: Source column name (for diagnostics)
        empty: Value returned for blank, 'undefined' or 'null' input
        wrap_key: When set, undecodable text is returned as {wrap_key: text}
                  instead of ``empty``

    Returns:
        Decoded list/dict, ``empty`` or the wrapped fallback. Never raises.
    """
    kind = classify_cell(value)
    if kind is CellKind.ARRAY:
        return value
    if kind is CellKind.EMPTY:
        return copy.copy(empty)

    text = to_text(value).strip()

    if text.lower() in NULL_TOKENS:
        warn('Attempted to parse reserved keyword as JSON. Returning fallback.',
             {'column': column, 'value': value})
        return copy.copy(empty)

    try:
        decoded = json.loads(text)
        error = None
    except ValueError as e:
        decoded = None
        error = str(e)

    if isinstance(decoded, (list, dict)):
        return decoded

    if wrap_key:
        warn('Column value was not valid JSON. Storing as string in fallback structure.',
             {'column': column, 'value': value, 'json_error': error})
        return {wrap_key: text}

    warn('Column value was not valid JSON. Returning fallback.',
         {'column': column, 'value': value, 'json_error': error or 'not an array or object'})
    return copy.copy(empty)


def parse_json_value(value: Any, warn: WarnFunc = _log_warning, column: str = None) -> Any:
    """General JSON column: anything but a list/object becomes None."""
    return parse_json_column(value, warn=warn, column=column)


def parse_address(value: Any, warn: WarnFunc = _log_warning, column: str = 'hq_address') -> Any:
    """Address JSON column: blank gives [], free text is kept as full_address_string."""
    return parse_json_column(
        value, warn=warn, column=column, empty=[], wrap_key='full_address_string'
    )


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def transform_date(value: Any, warn: WarnFunc = _log_warning, column: str = None) -> Optional[str]:
    """
    Convert a date cell to 'YYYY-MM-DD'.

    Accepts date/datetime objects, spreadsheet serial numbers within
    [EXCEL_SERIAL_MIN, EXCEL_SERIAL_MAX) and free-text dates.
    """
    kind = classify_cell(value)
    if kind is CellKind.EMPTY or value == 0 or value == '0':
        return None
    if isinstance(value, (datetime, date)):
        return value.strftime('%Y-%m-%d')

    try:
        if kind is CellKind.SCALAR:
            number = _as_number(value)
            if number is not None and EXCEL_SERIAL_MIN <= number < EXCEL_SERIAL_MAX:
                return from_excel(number).strftime('%Y-%m-%d')
        return date_parser.parse(str(value)).strftime('%Y-%m-%d')
    except (ValueError, OverflowError, TypeError) as e:
        warn(f"Failed to parse date: {value} - {e}", {'column': column, 'value': value})
        return None
