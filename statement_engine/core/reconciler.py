"""
Balance reconciliation.

Finds the statement's opening/closing balances, orders transactions
chronologically and fills in running balances when the statement does
not print them.
"""
import re
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from statement_engine.common.logging_config import get_logger
from statement_engine.common.models import Finding, FindingCode, Severity, Transaction
from statement_engine.common.normalizers import normalize_amount

logger = get_logger(__name__)

# A money amount with a two-digit decimal tail, not followed by more
# date or number characters ("01/01/2024" never reads as 1.00)
_AMOUNT = r"\s*:?\s*[$€£¥₱]?\s*(-?\d[\d.,]*[.,]\d{2})(?![/\-.,]?\d)"

OPENING_PATTERNS = [
    r"Opening\s*Balance" + _AMOUNT,
    r"Beginning\s*Balance" + _AMOUNT,
    r"Previous\s*Balance" + _AMOUNT,
]

CLOSING_PATTERNS = [
    r"Closing\s*Balance" + _AMOUNT,
    r"Ending\s*Balance" + _AMOUNT,
    r"Current\s*Balance" + _AMOUNT,
]

BALANCE_CALCULATED_NOTE = '(Balance calculated)'


def _parse_iso(value: Optional[str]) -> Optional[date]:
    try:
        return datetime.strptime(value or '', '%Y-%m-%d').date()
    except ValueError:
        return None


def sort_by_date(transactions: List[Transaction]) -> List[Transaction]:
    """
    Stable chronological sort. Ties keep input order; dates that are not
    canonical sort after every real date.
    """
    def key(t):
        d = _parse_iso(t.date)
        return (0, d) if d is not None else (1, date.min)

    return sorted(transactions, key=key)


class BalanceReconciler:
    """
    Computes or checks running balances.

    Attributes:
        tolerance: Allowed drift when comparing computed and stated balances
    """

    def __init__(self, tolerance: Decimal = Decimal('0.02')):
        self.tolerance = tolerance

    def extract_balances(self, text: str, bank_format=None) -> Tuple[Optional[Decimal], Optional[Decimal]]:
        """
        Scan the text for opening and closing balance statements.

        Label patterns are tried in order and the first one that matches
        anywhere in the text wins. A format may override either side with
        its own pattern (group 1 = amount).

        Returns:
            (opening, closing), each None when not found
        """
        opening_patterns = OPENING_PATTERNS
        closing_patterns = CLOSING_PATTERNS
        if bank_format is not None:
            if bank_format.opening_balance_pattern:
                opening_patterns = [bank_format.opening_balance_pattern]
            if bank_format.closing_balance_pattern:
                closing_patterns = [bank_format.closing_balance_pattern]

        opening = self._first_amount(text, opening_patterns, bank_format)
        closing = self._first_amount(text, closing_patterns, bank_format)

        logger.debug("Statement balances scanned", opening=opening, closing=closing)
        return opening, closing

    def _first_amount(self, text: str, patterns: List[str], bank_format) -> Optional[Decimal]:
        thousands = bank_format.thousands_separator if bank_format is not None else ','
        decimal_sep = bank_format.decimal_separator if bank_format is not None else '.'

        for pattern in patterns:
            m = re.search(pattern, text or '', re.IGNORECASE)
            if m:
                value = normalize_amount(m.group(1), thousands, decimal_sep)
                if value is not None:
                    return value
        return None

    def backfill(self, transactions: List[Transaction], opening_balance: Optional[Decimal]) -> bool:
        """
        Write running balances onto date-sorted transactions.

        Only runs when no transaction carries a balance of its own and an
        opening balance is known.

        Returns:
            True if balances were written
        """
        if not transactions or opening_balance is None:
            return False
        if any(t.balance is not None for t in transactions):
            return False

        running = opening_balance
        for t in transactions:
            running += t.amount or Decimal('0')
            t.balance = running
            t.notes = f"{t.notes} {BALANCE_CALCULATED_NOTE}".strip()

        logger.debug("Running balances calculated", count=len(transactions), final_balance=running)
        return True

    def check_closing(
        self,
        transactions: List[Transaction],
        opening_balance: Optional[Decimal],
        closing_balance: Optional[Decimal],
    ) -> Optional[Finding]:
        """Validate that opening + movements = closing."""
        if opening_balance is None or closing_balance is None:
            return None

        movements = sum((t.amount or Decimal('0') for t in transactions), Decimal('0'))
        calculated = opening_balance + movements
        diff = abs(calculated - closing_balance)

        if diff <= self.tolerance:
            return None

        return Finding(
            code=FindingCode.CLOSING_BALANCE_MISMATCH,
            message=(
                f"Closing balance mismatch: calculated {calculated:.2f}, "
                f"statement says {closing_balance:.2f} (diff: {diff:.2f})"
            ),
            severity=Severity.MEDIUM,
            context={
                'opening_balance': opening_balance,
                'closing_balance': closing_balance,
                'calculated_closing': calculated,
                'difference': diff,
            },
        )
