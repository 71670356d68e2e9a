"""
Validator

Field- and record-level business rules for extracted transactions.
Rules never raise: every problem becomes a Finding in either the errors
list (blocking) or the warnings list (non-blocking).
"""
import dataclasses
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Tuple

from statement_engine.common.models import (
    Finding,
    FindingCode,
    ProcessingStatus,
    Severity,
    Transaction,
    quantize_amount,
)
from statement_engine.common.settings import Settings
from .duplicates import DuplicateDetector

SUPPORTED_DATE_FORMATS = ['YYYY-MM-DD', 'MM/DD/YYYY', 'DD.MM.YYYY', 'MM-DD-YYYY']

UNSAFE_DESCRIPTION_CHARS = set('<>{}')
MIN_DESCRIPTION_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 500


class ValidationResult:
    """Accumulates findings for one validation call."""

    def __init__(self):
        self.errors: List[Finding] = []
        self.warnings: List[Finding] = []

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, code: str, message: str, severity: str = Severity.HIGH, context: dict = None):
        self.errors.append(Finding(code, message, severity, dict(context or {})))

    def add_warning(self, code: str, message: str, severity: str = Severity.LOW, context: dict = None):
        self.warnings.append(Finding(code, message, severity, dict(context or {})))

    def merge(self, other: 'ValidationResult', **context) -> None:
        """Absorb another result, stamping `context` onto its findings."""
        self.errors.extend(_with_context(f, context) for f in other.errors)
        self.warnings.extend(_with_context(f, context) for f in other.warnings)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def summary(self) -> dict:
        return {
            'valid': self.valid,
            'error_count': len(self.errors),
            'warning_count': len(self.warnings),
            'critical_errors': len([e for e in self.errors if e.severity == Severity.CRITICAL]),
        }


def _with_context(finding: Finding, context: dict) -> Finding:
    if not context:
        return finding
    merged = dict(finding.context)
    merged.update(context)
    return dataclasses.replace(finding, context=merged)


def _parse_iso(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        return None


def _decimal_places(value: Decimal) -> int:
    exponent = value.normalize().as_tuple().exponent
    return -exponent if exponent < 0 else 0


class Validator:
    """
    Applies the validation rules.

    Args:
        settings: Thresholds (future days, past years, amount ceiling, ...)
        today: Reference date for date-range rules (defaults to date.today())
    """

    def __init__(self, settings: Optional[Settings] = None, today: Optional[date] = None):
        self.settings = settings or Settings()
        self._today = today
        self.duplicate_detector = DuplicateDetector()

    @property
    def today(self) -> date:
        return self._today or date.today()

    # ------------------------------------------------------------------
    # Field rules
    # ------------------------------------------------------------------

    def validate_date(self, date_str: Any, allow_future: bool = False) -> ValidationResult:
        result = ValidationResult()

        if not date_str or not isinstance(date_str, str):
            result.add_error(
                FindingCode.INVALID_DATE_FORMAT,
                'Date is required and must be a string',
                Severity.HIGH,
                {'date': date_str},
            )
            return result

        parsed = _parse_iso(date_str)
        if parsed is None:
            result.add_error(
                FindingCode.INVALID_DATE_FORMAT,
                f"Invalid date format: {date_str}",
                Severity.HIGH,
                {'date': date_str, 'supported_formats': SUPPORTED_DATE_FORMATS},
            )
            return result

        max_future = self.today + timedelta(days=self.settings.max_future_days)
        min_past = date(self.today.year - self.settings.max_past_years, 1, 1)

        if not allow_future and parsed > max_future:
            result.add_error(
                FindingCode.FUTURE_DATE,
                f"Date is in the future: {date_str}",
                Severity.HIGH,
                {'date': date_str, 'max_future_date': max_future.isoformat()},
            )

        if parsed < min_past:
            result.add_warning(
                FindingCode.DATE_TOO_OLD,
                f"Date is older than {self.settings.max_past_years} years: {date_str}",
                Severity.MEDIUM,
                {'date': date_str, 'min_past_date': min_past.isoformat()},
            )

        return result

    def validate_amount(
        self, amount: Any, allow_negative: bool = False, allow_zero: bool = True
    ) -> Tuple[ValidationResult, Optional[Decimal]]:
        """
        Validate a monetary amount.

        Returns:
            (result, rounded value). The rounded value uses the configured
            decimal places; callers keep the raw value for diagnostics.
        """
        result = ValidationResult()

        if amount is None or amount == '':
            result.add_error(FindingCode.INVALID_AMOUNT, 'Amount is required', Severity.HIGH, {'amount': amount})
            return result, None

        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount).replace(',', '').strip())
        except InvalidOperation:
            value = None

        if value is None or not value.is_finite():
            result.add_error(
                FindingCode.INVALID_AMOUNT,
                f"Amount is not a valid number: {amount}",
                Severity.HIGH,
                {'amount': amount},
            )
            return result, None

        if not allow_negative and value < 0:
            result.add_error(
                FindingCode.NEGATIVE_AMOUNT,
                f"Amount cannot be negative: {value}",
                Severity.MEDIUM,
                {'amount': value},
            )

        if not allow_zero and value == 0:
            result.add_warning(FindingCode.INVALID_AMOUNT, 'Amount is zero', Severity.LOW, {'amount': value})

        ceiling = self.settings.max_transaction_amount
        if abs(value) > ceiling:
            result.add_warning(
                FindingCode.AMOUNT_TOO_LARGE,
                f"Amount exceeds maximum ({ceiling}): {value}",
                Severity.MEDIUM,
                {'amount': value, 'max_amount': ceiling},
            )

        places = _decimal_places(value)
        if places > self.settings.decimal_places:
            result.add_warning(
                FindingCode.INVALID_DECIMAL_PLACES,
                f"Amount has too many decimal places ({places}), expected {self.settings.decimal_places}",
                Severity.LOW,
                {'amount': value, 'decimal_places': places},
            )

        return result, quantize_amount(value, self.settings.decimal_places)

    def validate_description(self, description: Any) -> ValidationResult:
        result = ValidationResult()

        if not description or not isinstance(description, str) or not description.strip():
            result.add_error(
                FindingCode.INVALID_DESCRIPTION,
                'Description is required',
                Severity.MEDIUM,
                {'description': description},
            )
            return result

        trimmed = description.strip()

        if len(trimmed) < MIN_DESCRIPTION_LENGTH:
            result.add_warning(
                FindingCode.INVALID_DESCRIPTION,
                f"Description is too short (minimum {MIN_DESCRIPTION_LENGTH} characters)",
                Severity.LOW,
                {'description': trimmed, 'length': len(trimmed)},
            )

        if len(trimmed) > MAX_DESCRIPTION_LENGTH:
            result.add_warning(
                FindingCode.INVALID_DESCRIPTION,
                f"Description is very long (>{MAX_DESCRIPTION_LENGTH} characters)",
                Severity.LOW,
                {'description': trimmed[:50] + '...', 'length': len(trimmed)},
            )

        if UNSAFE_DESCRIPTION_CHARS & set(trimmed):
            result.add_warning(
                FindingCode.INVALID_DESCRIPTION,
                'Description contains potentially unsafe characters',
                Severity.MEDIUM,
                {'description': trimmed},
            )

        return result

    # ------------------------------------------------------------------
    # Record rules
    # ------------------------------------------------------------------

    def validate_transaction(self, transaction: Transaction, index: int = 0) -> ValidationResult:
        result = ValidationResult()
        context = {'transaction_index': index, 'line_number': transaction.line_number}

        if not transaction.date:
            result.add_error(
                FindingCode.MISSING_REQUIRED_FIELD,
                'Transaction date is required',
                Severity.HIGH,
                {**context, 'field': 'date'},
            )
        else:
            result.merge(self.validate_date(transaction.date), **context, field='date')

        has_amount = transaction.debit is not None or transaction.credit is not None
        if not has_amount:
            result.add_error(
                FindingCode.MISSING_REQUIRED_FIELD,
                'Transaction must have debit or credit amount',
                Severity.HIGH,
                {**context, 'field': 'amount'},
            )

        for field_name in ('debit', 'credit'):
            value = getattr(transaction, field_name)
            if value is not None:
                amount_result, _ = self.validate_amount(
                    value, allow_negative=self.settings.allow_negative_amounts
                )
                result.merge(amount_result, **context, field=field_name)

        description_result = self.validate_description(transaction.description)
        if description_result.has_errors() and transaction.date and has_amount:
            # The record is still usable; a bad description only degrades it
            description_result.warnings = description_result.errors + description_result.warnings
            description_result.errors = []
        result.merge(description_result, **context, field='description')

        if transaction.balance is not None:
            balance_result, _ = self.validate_amount(transaction.balance, allow_negative=True)
            balance_result.warnings = []
            result.merge(balance_result, **context, field='balance')

        return result

    def validate_balance_consistency(self, transactions: List[Transaction]) -> List[Finding]:
        """
        Check prev.balance + curr.amount == curr.balance for adjacent pairs.

        Mismatches beyond the tolerance are MEDIUM warnings on the later
        transaction of the pair; statements legitimately round.
        """
        findings = []
        tolerance = self.settings.balance_tolerance

        for i in range(1, len(transactions)):
            prev = transactions[i - 1]
            curr = transactions[i]

            if prev.balance is None or curr.balance is None or curr.amount is None:
                continue

            expected = prev.balance + curr.amount
            diff = abs(expected - curr.balance)

            if diff > tolerance:
                findings.append(Finding(
                    code=FindingCode.BALANCE_MISMATCH,
                    message=(
                        f"Balance mismatch at transaction {i}: expected {expected:.2f}, "
                        f"got {curr.balance:.2f} (diff: {diff:.2f})"
                    ),
                    severity=Severity.MEDIUM,
                    context={
                        'transaction_index': i,
                        'previous_index': i - 1,
                        'line_number': curr.line_number,
                        'expected_balance': expected,
                        'actual_balance': curr.balance,
                        'difference': diff,
                    },
                ))

        return findings

    def validate_transactions(self, transactions: List[Transaction]) -> ValidationResult:
        """
        Validate a whole list: per-record rules, duplicates and balance
        consistency.
        """
        result = ValidationResult()

        if not transactions:
            result.add_warning(FindingCode.NO_TRANSACTIONS, 'No transactions found', Severity.HIGH)
            return result

        for index, transaction in enumerate(transactions):
            result.merge(self.validate_transaction(transaction, index))

        result.warnings.extend(self.duplicate_detector.detect(transactions))
        result.warnings.extend(self.validate_balance_consistency(transactions))
        return result


def apply_status(transactions: List[Transaction], errors: List[Finding], warnings: List[Finding]) -> None:
    """
    Attach findings to their transactions and set processing_status.

    ERROR if any error references the transaction, WARNING if only warnings
    do, VALID otherwise.
    """
    by_index = {}
    for level, findings in ((ProcessingStatus.ERROR, errors), (ProcessingStatus.WARNING, warnings)):
        for f in findings:
            idx = f.transaction_index
            if idx is None or not 0 <= idx < len(transactions):
                continue
            by_index.setdefault(idx, []).append((level, f))

    for idx, t in enumerate(transactions):
        attached = by_index.get(idx, [])
        t.error_messages = [f.message for _, f in attached]
        levels = {level for level, _ in attached}
        if ProcessingStatus.ERROR in levels:
            t.processing_status = ProcessingStatus.ERROR
        elif ProcessingStatus.WARNING in levels:
            t.processing_status = ProcessingStatus.WARNING
        else:
            t.processing_status = ProcessingStatus.VALID
