"""
Built-in bank formats.

Used when no external format configuration is available, so detection
always has at least one candidate.
"""
from typing import List
from .layout import BankFormat, StandardPattern, SimplePattern, CombinedPattern

GENERIC_BANK_ID = 'generic'

_DATE = r"(\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4})"
_US_DATE = r"(\d{2}/\d{2}/\d{4})"
_MONEY = r"([\d,]+\.\d{2})"


def get_default_formats() -> List[BankFormat]:
    generic = BankFormat(
        bank_id=GENERIC_BANK_ID,
        bank_name='Generic Format',
        country='Universal',
        patterns=(
            # Date Description Debit Credit Balance
            StandardPattern(
                'standard',
                rf"^{_DATE}\s+(.+?)\s+{_MONEY}\s+{_MONEY}\s+{_MONEY}\s*$",
            ),
            # Date Description Amount Balance
            SimplePattern(
                'simple',
                rf"^{_DATE}\s+(.+?)\s+{_MONEY}\s+{_MONEY}\s*$",
            ),
            # Date Description Amount D/C Balance
            CombinedPattern(
                'combined',
                rf"^{_DATE}\s+(.+?)\s+{_MONEY}\s+([DC])\s+{_MONEY}\s*$",
            ),
        ),
        date_format='MM/DD/YYYY',
        decimal_separator='.',
        thousands_separator=',',
        amount_position='separate',
        balance_included=True,
    )

    us_bank = BankFormat(
        bank_id='us_bank',
        bank_name='US Bank Format',
        country='US',
        patterns=(
            StandardPattern(
                'standard',
                rf"^{_US_DATE}\s+(.+?)\s+{_MONEY}?\s*{_MONEY}?\s+{_MONEY}\s*$",
            ),
        ),
        date_format='MM/DD/YYYY',
        decimal_separator='.',
        thousands_separator=',',
        amount_position='separate',
        balance_included=True,
    )

    ph_bank = BankFormat(
        bank_id='ph_bank',
        bank_name='Philippine Bank Format',
        country='PH',
        patterns=(
            StandardPattern(
                'standard',
                rf"^{_US_DATE}\s+(.+?)\s+{_MONEY}?\s*{_MONEY}?\s+{_MONEY}\s*$",
            ),
            # BPI prints a fixed-width 40 character description column
            StandardPattern(
                'bpi',
                rf"^{_US_DATE}\s+(.{{40}})\s+{_MONEY}?\s*{_MONEY}?\s+{_MONEY}\s*$",
            ),
        ),
        date_format='MM/DD/YYYY',
        decimal_separator='.',
        thousands_separator=',',
        amount_position='separate',
        balance_included=True,
    )

    return [generic, us_bank, ph_bank]
