#!/usr/bin/env python3
"""
CSV Parser for business profiles
Turns raw CSV rows into BusinessRecord objects with an inferred industry tag
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .exceptions import InputError
from .models import BusinessRecord, DEFAULT_INDUSTRY, NOT_SPECIFIED, business_id

logger = logging.getLogger(__name__)

MAX_FIELD_LENGTH = 1000

# CSV column headers (matched after trimming)
COL_COMPANY = 'Company / Brand Name'
COL_NAME = 'Name'
COL_DESCRIPTION = 'Your Product or Service in one sentence'
COL_WEBSITE = 'Business Website'
COL_TARGET_MARKET = 'Your Ideal Client / Target Market'
COL_CURRENT_NEED = 'Your current need (capital, marketing, legal, tech etc.)'
COL_EMAIL = 'Contact EMAIL'
COL_PHONE = 'Contact Phone'
COL_LINKEDIN = 'LinkedIn Profile URL'
COL_FUN_FACT = 'Fun Fact About You'

# Order matters: a business can match several categories and the first one wins.
INDUSTRY_KEYWORDS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r'\b(ai|tech|software|automation|consulting)\b', re.I), 'Technology'),
    (re.compile(r'\b(marketing|design|brand|creative|content)\b', re.I), 'Marketing & Design'),
    (re.compile(r'\b(health|wellness|fitness|therapy|massage|mental)\b', re.I), 'Health & Wellness'),
    (re.compile(r'\b(coach|training|speaking|consulting)\b', re.I), 'Coaching & Consulting'),
    (re.compile(r'\b(real estate|property|commercial|appraisal)\b', re.I), 'Real Estate'),
    (re.compile(r'\b(event|party|gift|craft|creative)\b', re.I), 'Events & Gifts'),
    (re.compile(r'\b(food|cookie|restaurant|catering)\b', re.I), 'Food & Beverage'),
    (re.compile(r'\b(freight|logistics|dispatch|transport)\b', re.I), 'Logistics'),
    (re.compile(r'\b(clean|janitorial)\b', re.I), 'Facilities Services'),
    (re.compile(r'\b(art|mural|paint|creative)\b', re.I), 'Arts & Creative'),
]


@dataclass
class ParseResult:
    """Rows read from a CSV file plus the number of malformed rows skipped."""
    rows: List[Dict[str, str]] = field(default_factory=list)
    skipped: int = 0


def sanitize_text(value: Optional[str], max_length: int = MAX_FIELD_LENGTH) -> str:
    """Trim and cap a free-text value. None and blank become ''."""
    if value is None:
        return ''
    text = str(value).strip()
    if not text:
        return ''
    return text[:max_length]


def infer_industry(description: str, name: str) -> str:
    """Infer an industry label from keyword matches over description and name."""
    combined = f"{description or ''} {name or ''}".lower()
    for pattern, industry in INDUSTRY_KEYWORDS:
        if pattern.search(combined):
            return industry
    return DEFAULT_INDUSTRY


def _field(row: Mapping[str, str], column: str) -> str:
    return sanitize_text(row.get(column))


def parse_row(row: Mapping[str, str], index: int) -> BusinessRecord:
    """Build one BusinessRecord from a CSV row. `index` is zero-based."""
    row = {str(k).strip(): v for k, v in row.items() if k is not None}

    company = _field(row, COL_COMPANY)
    contact_name = _field(row, COL_NAME)
    description = _field(row, COL_DESCRIPTION)
    email = _field(row, COL_EMAIL)
    name = company or contact_name or f"Business {index + 1}"

    return BusinessRecord(
        id=business_id(name, email),
        name=name,
        contact_name=contact_name,
        contact_email=email,
        contact_phone=_field(row, COL_PHONE),
        website=_field(row, COL_WEBSITE),
        linkedin=_field(row, COL_LINKEDIN),
        fun_fact=_field(row, COL_FUN_FACT),
        description=description or NOT_SPECIFIED,
        target_market=_field(row, COL_TARGET_MARKET) or NOT_SPECIFIED,
        current_needs=_field(row, COL_CURRENT_NEED) or NOT_SPECIFIED,
        services=description or NOT_SPECIFIED,
        industry=infer_industry(description, company),
    )


def parse_rows(rows: Iterable[Mapping[str, str]]) -> List[BusinessRecord]:
    """Turn raw rows into business records. Rows sharing an id keep the first occurrence."""
    businesses = []
    seen = set()
    for index, row in enumerate(rows):
        business = parse_row(row, index)
        if business.id in seen:
            logger.warning("Duplicate business %r (row %d) skipped", business.name, index + 1)
            continue
        seen.add(business.id)
        businesses.append(business)
    return businesses


def read_csv(file_path) -> ParseResult:
    """Read a CSV file into string rows, skipping (and counting) malformed lines."""
    path = Path(file_path)
    if not path.is_file():
        raise InputError(f"CSV file not found: {path}")

    result = ParseResult()

    def _skip_bad_line(bad_line: List[str]):
        result.skipped += 1
        return None

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine='python',
            on_bad_lines=_skip_bad_line,
            encoding='utf-8',
        )
    except pd.errors.EmptyDataError:
        logger.warning("CSV file %s is empty", path)
        return result
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise InputError(f"Could not read CSV file {path}: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna('')
    result.rows = df.to_dict(orient='records')
    return result


def parse_businesses_csv(file_path) -> List[BusinessRecord]:
    """Read and parse a businesses CSV file."""
    logger.info("Reading CSV file: %s", file_path)
    result = read_csv(file_path)
    if result.skipped:
        logger.warning("CSV parsing warnings: %d malformed row(s) skipped", result.skipped)

    businesses = parse_rows(result.rows)
    logger.info("Parsed %d businesses from CSV", len(businesses))
    return businesses
