"""
Transaction category classification by description keywords.
"""
from typing import Optional

DEBIT = 'DEBIT'
CREDIT = 'CREDIT'
OTHER = 'OTHER'

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS = [
    ('FEE', ['fee', 'charge', 'service charge']),
    ('INTEREST', ['interest', 'dividend']),
    ('TRANSFER', ['transfer', 'wire', 'ach']),
    ('ATM', ['atm', 'cash withdrawal']),
    ('PAYMENT', ['payment', 'bill pay']),
    ('DEPOSIT', ['deposit', 'credit']),
    ('PURCHASE', ['purchase', 'pos', 'card purchase']),
]

# Outflow markers for lines that carry a single unsigned amount.
# English only: statements in other languages fall through to credit.
DEBIT_KEYWORDS = [
    'withdrawal',
    'payment',
    'purchase',
    'fee',
    'charge',
    'debit',
    'transfer out',
    'atm',
]


def is_debit_description(description: str) -> bool:
    lower_desc = (description or '').lower()
    return any(k in lower_desc for k in DEBIT_KEYWORDS)


def categorize(description: str, current_type: Optional[str] = None) -> str:
    """
    Map a description to a category.

    Falls back to `current_type` (DEBIT/CREDIT from parsing), or OTHER.
    """
    lower_desc = (description or '').lower()

    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in lower_desc for k in keywords):
            return category

    return current_type or OTHER
