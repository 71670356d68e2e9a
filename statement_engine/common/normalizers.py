"""
Field normalizers.

Pure functions that turn locale-formatted statement text into canonical
values. None of them raise on bad input.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DASH_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_DOT_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")

_CURRENCY_AND_SPACE = re.compile(r"[$€£¥₱\s]")


def normalize_date(date_str: Optional[str], day_first: bool = False) -> Optional[str]:
    """
    Normalize a statement date to YYYY-MM-DD.

    Accepts MM/DD/YYYY, DD.MM.YYYY, MM-DD-YYYY and YYYY-MM-DD. By default
    the first group is read as the month; with `day_first` (a DD/MM/YYYY or
    DD.MM.YYYY format) it is read as the day instead.

    Input that matches none of the layouts is returned unchanged so the
    validator can flag it.
    """
    if not date_str:
        return date_str

    value = date_str.strip()

    m = _ISO_DATE.match(value)
    if m:
        year, month, day = m.groups()
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    for regex in (_SLASH_DATE, _DASH_DATE, _DOT_DATE):
        m = regex.match(value)
        if m:
            first, second, year = m.groups()
            month, day = (second, first) if day_first else (first, second)
            return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    return date_str


def normalize_amount(
    amount_str: Optional[str],
    thousands_separator: str = ',',
    decimal_separator: str = '.',
) -> Optional[Decimal]:
    """
    Parse amount string to an exact Decimal using the format's separators.

    Examples (thousands=",")  : "$1,234.56" -> Decimal("1234.56")
    Examples (thousands=".")  : "1.234,56"  -> Decimal("1234.56")

    Returns None when the cleaned text is not a finite number.
    """
    if amount_str is None:
        return None

    cleaned = _CURRENCY_AND_SPACE.sub('', str(amount_str))

    if thousands_separator == ',':
        cleaned = cleaned.replace(',', '')
    elif thousands_separator == '.':
        cleaned = cleaned.replace('.', '')
        cleaned = cleaned.replace(',', '.', 1)
    elif decimal_separator == ',':
        cleaned = cleaned.replace(',', '.', 1)

    if not cleaned:
        return None

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None

    if not value.is_finite():
        return None
    return value


def amount_for_format(amount_str: Optional[str], bank_format) -> Optional[Decimal]:
    """normalize_amount with the separators declared by `bank_format`."""
    return normalize_amount(
        amount_str,
        thousands_separator=bank_format.thousands_separator,
        decimal_separator=bank_format.decimal_separator,
    )
