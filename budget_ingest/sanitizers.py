"""
Parse loosely formatted spreadsheet values into clean numbers.

Every function here returns ``None`` when there is no usable value, so
callers can tell an explicit ``0``/``False`` apart from a blank or
unparseable cell.  None of them raise.
"""
import math
import re
from decimal import Decimal, InvalidOperation, ROUND_FLOOR

# Leading float literal, the way a spreadsheet export would be read
# ("12.5abc" -> 12.5, "abc" -> no match)
FLOAT_PREFIX = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')

PERCENT_IN_LABEL = re.compile(r'\(\s*(\d+\.?\d*)\s*%\s*\)')

YEAR_IN_TEXT = re.compile(r'\b(20\d{2}|\d{2})\b')

MIN_YEAR = 2000
MAX_YEAR = 2100

TRUE_TOKENS = ('yes', 'y', 'true', '1', 'x', 'funded', 'active')
FALSE_TOKENS = ('no', 'n', 'false', '0', '', 'not funded', 'inactive')

NULL_TOKENS = ('', '-', 'n/a')


def _parse_decimal(text):
    match = FLOAT_PREFIX.match(text)
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def _is_blank(value):
    return value is None or value == ''


def sanitize_currency(value):
    """
    Convert a currency cell to a Decimal

    "$1,234.56" -> 1234.56, "($1,234.56)" -> -1234.56, "-$5" -> -5.
    Returns None for blanks, "-", "N/A" and anything that does not
    start with a number once symbols are removed.
    """
    if _is_blank(value):
        return None

    text = str(value).strip()
    if text.lower() in NULL_TOKENS:
        return None

    # accounting convention for negatives
    accounting_negative = text.startswith('(') and text.endswith(')')

    cleaned = re.sub(r'[$,()\s]', '', text)
    parsed = _parse_decimal(cleaned)
    if parsed is None:
        return None

    return -parsed if accounting_negative else parsed


def sanitize_percentage(value):
    """
    Strip the percent sign, keeping the scale: "10.6%" -> 10.6
    """
    if _is_blank(value):
        return None

    text = str(value).strip()
    if text.lower() in NULL_TOKENS:
        return None

    cleaned = re.sub(r'[%\s]', '', text)
    return _parse_decimal(cleaned)


def extract_percentage_from_label(label):
    """
    Pull a rate out of a descriptive label: "Sales Tax (10.6%)" -> 10.6
    """
    if not label:
        return None

    match = PERCENT_IN_LABEL.search(str(label))
    if match:
        return _parse_decimal(match.group(1))
    return None


def sanitize_number(value):
    if _is_blank(value):
        return None

    if isinstance(value, Decimal):
        return None if value.is_nan() else value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    return sanitize_currency(value)


def sanitize_integer(value):
    """Like `sanitize_number`, rounded to the nearest whole number (halves go up)"""
    number = sanitize_number(value)
    if number is None:
        return None
    number = Decimal(str(number))
    if not number.is_finite():
        return None
    return int((number + Decimal('0.5')).to_integral_value(rounding=ROUND_FLOOR))


def sanitize_boolean(value):
    """
    Interpret yes/no style cells

    An empty string means "explicitly no" and gives False; a missing
    value (None) gives None.  Unrecognized text also gives None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value

    token = str(value).strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    return None


def sanitize_year(value):
    """
    Find a calendar year in a cell

    "2025" -> 2025, "25" -> 2025, "FY 2025" -> 2025.  Years outside
    2000-2100 give None.
    """
    if _is_blank(value):
        return None

    text = str(value).strip()

    match = YEAR_IN_TEXT.search(text)
    if match:
        year = int(match.group(1))
        if year < 100:
            year += 2000
        return year if MIN_YEAR <= year <= MAX_YEAR else None

    digits = re.match(r'^[+-]?\d+', text)
    if not digits:
        return None
    year = int(digits.group(0))
    if MIN_YEAR <= year <= MAX_YEAR:
        return year
    if 0 <= year < 100:
        return 2000 + year
    return None


def sanitize_currency_fields(data, fields):
    """Copy of `data` with each of `fields` present run through `sanitize_currency`"""
    result = dict(data)
    for field in fields:
        if field in result:
            result[field] = sanitize_currency(result[field])
    return result


def sanitize_percentage_fields(data, fields):
    """Copy of `data` with each of `fields` present run through `sanitize_percentage`"""
    result = dict(data)
    for field in fields:
        if field in result:
            result[field] = sanitize_percentage(result[field])
    return result
