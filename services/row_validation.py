"""
Per-column validation rules for company overview spreadsheet rows.

Rules are declared on a pydantic model; ``validate_row`` runs them and
returns human-readable messages keyed by column name.
"""

import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

logger = logging.getLogger(__name__)

URL_SCHEMES = ('http', 'https', 'ftp', 'ftps')
YEAR_PATTERN = re.compile(r'^\d{4}$')
MIN_YEAR_FOUNDED = 1000

EMAIL_COLUMNS = ('company_s_email', 'email_address')
URL_COLUMNS = (
    'website_link', 'linkedin_link', 'x_twitter_link',
    'facebook_link', 'instagram_link', 'youtube_link',
)

# Messages that override the generic ones, keyed by "<column>.<rule>"
CUSTOM_MESSAGES = {
    'company_registered_name.required': 'The "Company Registered Name" is required for each company.',
    'company_s_email.email': 'The "Company’s Email" is not a valid email address.',
    'email_address.email': 'The seller "Email Address" is not a valid email address.',
    'year_founded.digits': 'The "Year Founded" must be a 4-digit year.',
    'website_link.url': 'The "Website Link" must be a valid URL.',
}


class CompanyOverviewRow(BaseModel):
    """Validation rules for one header-keyed company overview row."""

    model_config = ConfigDict(extra='ignore', coerce_numbers_to_str=True)

    company_registered_name: str = Field(..., min_length=1, max_length=255)
    hq_origin_country: Optional[str] = Field(None, max_length=100)
    company_type: Optional[str] = Field(None, max_length=100)
    year_founded: Optional[Any] = None
    broader_industry_operations: Optional[str] = Field(None, max_length=255)
    main_industry_operations: Optional[Union[str, list, dict]] = None
    niche_priority_industry: Optional[Union[str, list, dict]] = None
    current_employee_counts: Optional[Any] = None
    reason_ma: Optional[str] = None
    project_start_date: Optional[Any] = None
    expected_transaction_timeline: Optional[str] = None
    our_person_in_charge: Optional[str] = Field(None, max_length=100)
    no_pic_needed: Optional[Any] = None
    status: Optional[str] = Field(None, max_length=50)
    details: Optional[str] = None
    company_s_email: Optional[str] = Field(None, max_length=150)
    company_s_phone_number: Optional[str] = Field(None, max_length=50)
    hq_address: Optional[Union[str, list, dict]] = None
    shareholder_name: Optional[Union[str, list, dict]] = None
    seller_side_contact_person_name: Optional[str] = Field(None, max_length=100)
    designation_position: Optional[str] = Field(None, max_length=100)
    email_address: Optional[str] = Field(None, max_length=150)
    phone_number: Optional[Union[str, list, dict]] = None
    website_link: Optional[str] = Field(None, max_length=255)
    linkedin_link: Optional[str] = Field(None, max_length=255)
    x_twitter_link: Optional[str] = Field(None, max_length=255)
    facebook_link: Optional[str] = Field(None, max_length=255)
    instagram_link: Optional[str] = Field(None, max_length=255)
    youtube_link: Optional[str] = Field(None, max_length=255)
    seller_id: Optional[Any] = None
    seller_image: Optional[str] = None
    profile_picture: Optional[str] = None
    ebitda_multiples: Optional[Union[str, list, dict]] = None

    @field_validator('year_founded')
    @classmethod
    def check_year_founded(cls, value):
        if value is None:
            return value
        if isinstance(value, bool):
            raise PydanticCustomError('digits', 'The {attribute} must be 4 digits.')
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        text = str(value).strip()
        if not YEAR_PATTERN.match(text):
            raise PydanticCustomError('digits', 'The {attribute} must be 4 digits.')
        year = int(text)
        if year < MIN_YEAR_FOUNDED:
            raise PydanticCustomError(
                'min', 'The {attribute} must be at least {min}.', {'min': MIN_YEAR_FOUNDED}
            )
        current_year = date.today().year
        if year > current_year:
            raise PydanticCustomError(
                'max', 'The {attribute} must not be greater than {max}.', {'max': current_year}
            )
        return year

    @field_validator(*EMAIL_COLUMNS)
    @classmethod
    def check_email(cls, value):
        if value is None:
            return value
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError('email', 'The {attribute} must be a valid email address.')
        return value

    @field_validator(*URL_COLUMNS)
    @classmethod
    def check_url(cls, value):
        if value is None:
            return value
        parsed = urlparse(value)
        if (
            parsed.scheme.lower() not in URL_SCHEMES
            or not parsed.netloc
            or any(ch.isspace() for ch in value)
        ):
            raise PydanticCustomError('url', 'The {attribute} must be a valid URL.')
        return value


def rules() -> Dict[str, str]:
    """Summarize the declared rules per column, e.g. 'nullable|string|max:100'."""
    summary = {}
    for name, field in CompanyOverviewRow.model_fields.items():
        parts = ['required' if field.is_required() else 'nullable']
        if field.annotation in (str, Optional[str]):
            parts.append('string')
        for meta in field.metadata:
            max_length = getattr(meta, 'max_length', None)
            if max_length is not None:
                parts.append(f'max:{max_length}')
        if name in EMAIL_COLUMNS:
            parts.append('email')
        if name in URL_COLUMNS:
            parts.append('url')
        if name == 'year_founded':
            parts.extend(['digits:4', 'integer', f'min:{MIN_YEAR_FOUNDED}', f'max:{date.today().year}'])
        summary[name] = '|'.join(parts)
    return summary


def _attribute_label(column: str) -> str:
    return column.replace('_', ' ')


def _rule_name(error: Dict[str, Any]) -> str:
    error_type = error['type']
    if error_type in ('missing', 'string_too_short'):
        return 'required'
    if error_type == 'string_too_long':
        return 'max'
    if error_type == 'string_type':
        return 'string'
    return error_type


def _format_message(column: str, rule: str, error: Dict[str, Any]) -> str:
    custom = CUSTOM_MESSAGES.get(f'{column}.{rule}')
    if custom:
        return custom

    label = _attribute_label(column)
    ctx = error.get('ctx') or {}
    if rule == 'required':
        return f'The {label} field is required.'
    if rule == 'max' and 'max_length' in ctx:
        return f'The {label} must not be greater than {ctx["max_length"]} characters.'
    if rule == 'string':
        return f'The {label} must be a string.'
    # Custom errors carry an {attribute} placeholder; pydantic has already
    # filled the other ctx values in.
    return error['msg'].replace('{attribute}', label)


def normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Drop absent cells: None and whitespace-only text count as missing."""
    normalized = {}
    for key, value in row.items():
        if value is None:
            continue
        if isinstance(value, str) and value.strip() == '':
            continue
        normalized[key] = value
    return normalized


def validate_row(row: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Validate one header-keyed row.

    Args:
        row: Mapping of column name to raw cell value

    Returns:
        Messages keyed by column; empty when the row is valid
    """
    try:
        CompanyOverviewRow.model_validate(normalize_row(row))
    except ValidationError as e:
        errors: Dict[str, List[str]] = {}
        for error in e.errors():
            column = str(error['loc'][0]) if error['loc'] else '__row__'
            rule = _rule_name(error)
            errors.setdefault(column, []).append(_format_message(column, rule, error))
        return errors
    return {}
