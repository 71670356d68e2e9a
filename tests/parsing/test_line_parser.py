"""
Unit tests for TransactionLineParser

Tests cover:
- Standard, simple and combined pattern extraction
- Debit keyword heuristic for single-amount lines
- Signed single-column formats
- Debit/credit exclusivity and amount sign
- Idempotent parsing
"""
from decimal import Decimal
from unittest.mock import patch

import pytest

from statement_engine.parsing.config.layout import (
    PATTERN_KINDS,
    BankFormat,
    CombinedPattern,
    LinePattern,
    SimplePattern,
    StandardPattern,
)
from statement_engine.parsing.line_parser import TransactionLineParser


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def generic_parser(generic_format):
    return TransactionLineParser(generic_format)


@pytest.fixture
def us_parser(us_format):
    return TransactionLineParser(us_format)


# =============================================================================
# SIMPLE PATTERN
# =============================================================================

class TestSimplePattern:

    def test_grocery_purchase_is_debit(self, generic_parser):
        line = "01/15/2024  Grocery Store Purchase   45.67             1954.33"
        t = generic_parser.parse_line(line, 7)

        assert t is not None
        assert t.date == "2024-01-15"
        assert t.description == "Grocery Store Purchase"
        assert t.debit == Decimal("45.67")
        assert t.credit is None
        assert t.balance == Decimal("1954.33")
        assert t.amount == Decimal("-45.67")
        assert t.line_number == 7
        assert t.raw_line == line

    def test_no_debit_keyword_is_credit(self, generic_parser):
        t = generic_parser.parse_line("01/20/2024 Salary ACME Corp 2,500.00 4,454.33", 1)

        assert t.credit == Decimal("2500.00")
        assert t.debit is None
        assert t.balance == Decimal("4454.33")
        assert t.transaction_type == "CREDIT"

    def test_category_overrides_direction(self, generic_parser):
        t = generic_parser.parse_line("01/21/2024 Monthly service fee 12.00 4,442.33", 1)
        assert t.debit == Decimal("12.00")
        assert t.transaction_type == "FEE"

    def test_signed_format_uses_sign(self, de_format):
        parser = TransactionLineParser(de_format)

        debit = parser.parse_line("15.01.2024 Supermarkt Einkauf -45,67 1.954,33", 1)
        credit = parser.parse_line("16.01.2024 Gehalt 2.500,00 4.454,33", 2)

        assert debit.date == "2024-01-15"
        assert debit.debit == Decimal("45.67")
        assert debit.balance == Decimal("1954.33")
        assert credit.credit == Decimal("2500.00")
        assert credit.date == "2024-01-16"

    def test_zero_amount_discarded(self, generic_parser):
        assert generic_parser.parse_line("01/15/2024 Adjustment 0.00 100.00", 1) is None


# =============================================================================
# STANDARD PATTERN
# =============================================================================

class TestStandardPattern:

    def test_three_columns_zero_credit(self, generic_parser):
        t = generic_parser.parse_line("01/15/2024 Wire transfer out 250.00 0.00 1,750.00", 1)

        assert t.debit == Decimal("250.00")
        assert t.credit is None
        assert t.balance == Decimal("1750.00")
        assert t.transaction_type == "TRANSFER"

    def test_three_columns_zero_debit(self, generic_parser):
        t = generic_parser.parse_line("01/15/2024 Cash in 0.00 300.00 2,050.00", 1)
        assert t.credit == Decimal("300.00")
        assert t.debit is None

    def test_both_columns_filled_falls_through_to_simple(self, generic_parser):
        t = generic_parser.parse_line("01/15/2024 Odd line 10.00 20.00 30.00", 1)

        assert t.description == "Odd line 10.00"
        assert t.credit == Decimal("20.00")
        assert t.debit is None
        assert t.balance == Decimal("30.00")

    def test_us_bank_single_amount(self, us_parser):
        t = us_parser.parse_line("01/15/2024 ATM Withdrawal 100.00 1,854.33", 1)
        assert t.debit == Decimal("100.00")
        assert t.balance == Decimal("1854.33")
        assert t.transaction_type == "ATM"

    def test_us_bank_requires_four_digit_year(self, us_parser):
        assert us_parser.parse_line("01/15/24 ATM Withdrawal 100.00 1,854.33", 1) is None


# =============================================================================
# COMBINED PATTERN
# =============================================================================

class TestCombinedPattern:

    def test_debit_indicator(self, generic_parser):
        t = generic_parser.parse_line("02/01/2024 Rent 1,200.00 D 800.00", 1)
        assert t.debit == Decimal("1200.00")
        assert t.credit is None
        assert t.balance == Decimal("800.00")

    def test_credit_indicator(self, generic_parser):
        t = generic_parser.parse_line("02/02/2024 Refund from store 50.00 C 850.00", 1)
        assert t.credit == Decimal("50.00")
        assert t.debit is None


# =============================================================================
# GENERAL BEHAVIOUR
# =============================================================================

class TestParserBehaviour:

    @pytest.mark.parametrize("line", [
        "Opening Balance: 500.00",
        "Thank you for banking with us",
        "01/15/2024 Description only",
    ])
    def test_non_matching_lines(self, generic_parser, line):
        assert generic_parser.parse_line(line, 1) is None

    @pytest.mark.parametrize("line", [
        "01/15/2024 Grocery Store Purchase 45.67 1954.33",
        "01/20/2024 Salary ACME Corp 2,500.00 4,454.33",
        "02/01/2024 Rent 1,200.00 D 800.00",
        "01/15/2024 Wire transfer out 250.00 0.00 1,750.00",
    ])
    def test_exactly_one_side_and_sign(self, generic_parser, line):
        t = generic_parser.parse_line(line, 1)
        assert (t.debit is None) != (t.credit is None)
        if t.debit is not None:
            assert t.amount == -t.debit
        else:
            assert t.amount == t.credit

    def test_idempotent_apart_from_id(self, generic_parser):
        line = "01/15/2024 Grocery Store Purchase 45.67 1954.33"
        first = generic_parser.parse_line(line, 3).to_dict()
        second = generic_parser.parse_line(line, 3).to_dict()

        assert first.pop('transaction_id') != second.pop('transaction_id')
        assert first == second

    def test_transaction_id_carries_line_number(self, generic_parser):
        t = generic_parser.parse_line("01/15/2024 Grocery Store Purchase 45.67 1954.33", 12)
        assert t.transaction_id.startswith("txn_12_")

    def test_later_pattern_used_when_earlier_misses(self):
        fmt = BankFormat(
            bank_id='two',
            bank_name='Two Patterns',
            country='US',
            patterns=(
                StandardPattern('first', r"^(\d{2}/\d{2}/\d{4})\s+(.+?)\s+([\d.]+)\s+([\d.]+)\s+([\d.]+)$"),
                StandardPattern('second', r"^(\d{2}/\d{2}/\d{4})\s+(.+?)\s+([\d.]+)\s+()([\d.]+)$"),
            ),
        )
        t = TransactionLineParser(fmt).parse_line("01/15/2024 Coffee 4.50 95.50", 1)
        assert t.debit == Decimal("4.50")
        assert t.balance == Decimal("95.50")

    def test_unknown_pattern_type_raises(self):
        fmt = BankFormat(
            bank_id='bad', bank_name='Bad', country='US',
            patterns=(LinePattern('raw', r"^(\S+)\s+(\S+)\s+(\S+)$"),),
        )
        with pytest.raises(TypeError):
            TransactionLineParser(fmt).parse_line("01/15/2024 Coffee 4.50", 1)


class TestLinePattern:

    def test_regex_compiled_once(self):
        pattern = StandardPattern('standard', r"^(\S+)$")
        with patch('statement_engine.parsing.config.layout.re.compile') as compile_:
            assert pattern.match("token")
            assert pattern.match("two words") is None
        compile_.assert_not_called()

    def test_compiled_regex_not_part_of_equality(self):
        assert StandardPattern('standard', r"^a$") == StandardPattern('standard', r"^a$")
        assert hash(StandardPattern('standard', r"^a$")) == hash(StandardPattern('standard', r"^a$"))
        assert StandardPattern('standard', r"^a$") != SimplePattern('standard', r"^a$")

    def test_kinds_map_to_pattern_classes(self):
        assert PATTERN_KINDS == {
            'standard': StandardPattern,
            'simple': SimplePattern,
            'combined': CombinedPattern,
        }

    @pytest.mark.parametrize("date_format,expected", [
        ('DD.MM.YYYY', True),
        ('dd/mm/yyyy', True),
        ('MM/DD/YYYY', False),
    ])
    def test_day_first(self, date_format, expected):
        fmt = BankFormat(bank_id='x', bank_name='X', country='US', patterns=(), date_format=date_format)
        assert fmt.day_first is expected
