"""
Shared fixtures for the statement engine tests.
"""
from datetime import date
from decimal import Decimal

import pytest

from statement_engine.common.models import Transaction
from statement_engine.common.settings import Settings
from statement_engine.core.validator import Validator
from statement_engine.parsing.config.defaults import get_default_formats
from statement_engine.parsing.config.layout import BankFormat, SimplePattern
from statement_engine.parsing.config.registry import FormatRegistry
from statement_engine.parsing.pipeline import ExtractionPipeline

# Statement dates in the fixtures sit in early 2024
FIXED_TODAY = date(2024, 6, 30)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def default_formats():
    return {fmt.bank_id: fmt for fmt in get_default_formats()}


@pytest.fixture
def generic_format(default_formats):
    return default_formats['generic']


@pytest.fixture
def us_format(default_formats):
    return default_formats['us_bank']


@pytest.fixture
def no_balance_format():
    """Date, description, signed amount; no balance column."""
    return BankFormat(
        bank_id='no_balance',
        bank_name='No Balance Bank',
        country='US',
        patterns=(
            SimplePattern('signed', r"^(\d{2}/\d{2}/\d{4})\s+(.+?)\s+(-?[\d,]+\.\d{2})\s*$"),
        ),
        amount_position='signed',
        balance_included=False,
    )


@pytest.fixture
def de_format():
    """Day-first dates, dot thousands and comma decimals."""
    return BankFormat(
        bank_id='de_bank',
        bank_name='German Bank Format',
        country='DE',
        patterns=(
            SimplePattern(
                'signed',
                r"^(\d{2}\.\d{2}\.\d{4})\s+(.+?)\s+(-?[\d.]+,\d{2})\s+(-?[\d.]+,\d{2})\s*$",
            ),
        ),
        date_format='DD.MM.YYYY',
        decimal_separator=',',
        thousands_separator='.',
        amount_position='signed',
    )


@pytest.fixture
def registry(settings):
    """Registry holding the built-in formats."""
    return FormatRegistry(formats=get_default_formats(), settings=settings)


@pytest.fixture
def validator(settings):
    return Validator(settings, today=FIXED_TODAY)


@pytest.fixture
def pipeline(registry, settings, validator):
    return ExtractionPipeline(registry, settings, validator=validator)


@pytest.fixture
def make_transaction():
    """Factory for transactions with sensible defaults."""
    def _make(date='2024-01-15', description='Grocery Store Purchase', debit=None, credit=None,
              balance=None, line_number=1):
        if debit is None and credit is None:
            debit = Decimal('10.00')
        return Transaction(
            date=date,
            description=description,
            debit=Decimal(debit) if debit is not None else None,
            credit=Decimal(credit) if credit is not None else None,
            balance=Decimal(balance) if balance is not None else None,
            line_number=line_number,
        )
    return _make
