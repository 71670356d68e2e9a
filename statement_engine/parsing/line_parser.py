"""
Transaction Line Parser

Turns single statement lines into transactions using the line patterns of a
BankFormat.
"""
import uuid
from decimal import Decimal
from typing import Optional, Tuple

from statement_engine.common.logging_config import get_logger
from statement_engine.common.models import Transaction
from statement_engine.core.classifier import CREDIT, DEBIT, categorize, is_debit_description
from statement_engine.common.normalizers import amount_for_format, normalize_date
from .config.layout import BankFormat, CombinedPattern, LinePattern, SimplePattern, StandardPattern

logger = get_logger(__name__)


class TransactionLineParser:
    """
    Pattern-driven line parser.

    Tries the format's patterns in declaration order; the first pattern
    that matches and yields a usable amount wins. Lines that match nothing
    return None and are simply not transactions.
    """

    def __init__(self, bank_format: BankFormat):
        """
        Args:
            bank_format: Format whose patterns and separators to apply
        """
        self.bank_format = bank_format

    def parse_line(self, line: str, line_number: Optional[int] = None) -> Optional[Transaction]:
        """
        Parse one cleaned line.

        Args:
            line: Statement line (already trimmed)
            line_number: 1-based position in the cleaned text

        Returns:
            Transaction, or None if no pattern produced one
        """
        for pattern in self.bank_format.patterns:
            match = pattern.match(line)
            if not match:
                continue

            fields = self._extract_fields(pattern, match)
            if fields is None:
                logger.debug(
                    f"Pattern '{pattern.name}' matched but amounts were unusable",
                    line_number=line_number,
                    pattern=pattern.name,
                )
                continue

            date_raw, description, debit, credit, balance = fields
            txn_type = DEBIT if debit is not None else CREDIT

            return Transaction(
                transaction_id=f"txn_{line_number}_{uuid.uuid4().hex[:12]}",
                date=normalize_date(date_raw, day_first=self.bank_format.day_first),
                description=description,
                debit=debit,
                credit=credit,
                balance=balance,
                transaction_type=categorize(description, txn_type),
                raw_line=line,
                line_number=line_number,
            )

        return None

    def _extract_fields(
        self, pattern: LinePattern, match
    ) -> Optional[Tuple[str, str, Optional[Decimal], Optional[Decimal], Optional[Decimal]]]:
        """
        Map regex groups to (date, description, debit, credit, balance).

        Returns None when the match does not carry exactly one non-zero
        debit or credit.
        """
        groups = match.groups()

        def group(i):
            return groups[i] if i < len(groups) else None

        date_raw = group(0)
        description = (group(1) or '').strip()

        if isinstance(pattern, StandardPattern):
            debit = self._amount(group(2))
            credit = self._amount(group(3))
            balance = self._amount(group(4))

        elif isinstance(pattern, SimplePattern):
            amount = self._amount(group(2))
            if amount is None:
                return None
            if self.bank_format.amount_position == 'signed' and amount != 0:
                # Signed single column: the sign is authoritative
                debit, credit = (-amount, None) if amount < 0 else (None, amount)
            elif is_debit_description(group(1)):
                debit, credit = amount, None
            else:
                debit, credit = None, amount
            balance = self._amount(group(3))

        elif isinstance(pattern, CombinedPattern):
            amount = self._amount(group(2))
            indicator = (group(3) or '').strip().upper()
            if amount is None or indicator not in ('D', 'C'):
                return None
            if indicator == 'D':
                debit, credit = amount, None
            else:
                debit, credit = None, amount
            balance = self._amount(group(4))

        else:
            raise TypeError(f"Unsupported line pattern: {type(pattern).__name__}")

        # Zero columns are empty columns
        if debit is not None and debit == 0:
            debit = None
        if credit is not None and credit == 0:
            credit = None

        if (debit is None) == (credit is None):
            return None

        return date_raw, description, debit, credit, balance

    def _amount(self, raw: Optional[str]) -> Optional[Decimal]:
        if raw is None or not raw.strip():
            return None
        return amount_for_format(raw, self.bank_format)
