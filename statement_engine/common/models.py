from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional


class Severity:
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'
    CRITICAL = 'CRITICAL'


class ProcessingStatus:
    VALID = 'VALID'
    WARNING = 'WARNING'
    ERROR = 'ERROR'


class FindingCode:
    # Extraction
    UNKNOWN_FORMAT = 'UNKNOWN_FORMAT'
    NO_TRANSACTIONS = 'NO_TRANSACTIONS'

    # Dates
    INVALID_DATE_FORMAT = 'INVALID_DATE_FORMAT'
    FUTURE_DATE = 'FUTURE_DATE'
    DATE_TOO_OLD = 'DATE_TOO_OLD'

    # Amounts
    INVALID_AMOUNT = 'INVALID_AMOUNT'
    NEGATIVE_AMOUNT = 'NEGATIVE_AMOUNT'
    AMOUNT_TOO_LARGE = 'AMOUNT_TOO_LARGE'
    INVALID_DECIMAL_PLACES = 'INVALID_DECIMAL_PLACES'

    # Records
    MISSING_REQUIRED_FIELD = 'MISSING_REQUIRED_FIELD'
    DUPLICATE_TRANSACTION = 'DUPLICATE_TRANSACTION'
    BALANCE_MISMATCH = 'BALANCE_MISMATCH'
    CLOSING_BALANCE_MISMATCH = 'CLOSING_BALANCE_MISMATCH'
    INVALID_DESCRIPTION = 'INVALID_DESCRIPTION'


def quantize_amount(value: Optional[Decimal], places: int = 2) -> Optional[Decimal]:
    """Round a Decimal half-up to `places` decimals (None passes through)."""
    if value is None:
        return None
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _plain(value: Any) -> Any:
    """Convert context values into JSON-friendly primitives."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class Finding:
    """
    A structured error or warning.

    Shared by the validator, the balance reconciler and the duplicate
    detector. Whether a finding is blocking depends on which list it lands
    in (errors vs warnings), not on its severity.
    """
    code: str
    message: str
    severity: str = Severity.LOW
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def transaction_index(self) -> Optional[int]:
        return self.context.get('transaction_index')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'message': self.message,
            'severity': self.severity,
            'context': _plain(self.context),
            'timestamp': self.timestamp,
        }


@dataclass
class Transaction:
    """
    Canonical representation of a statement line turned into a transaction.

    `amount` is derived from debit/credit and cannot be set directly:
    -debit for outflows, +credit for inflows.
    """
    date: Optional[str]
    description: str
    debit: Optional[Decimal] = None
    credit: Optional[Decimal] = None
    balance: Optional[Decimal] = None
    transaction_type: Optional[str] = None
    transaction_id: Optional[str] = None
    processing_status: str = ProcessingStatus.VALID
    error_messages: List[str] = field(default_factory=list)
    notes: str = ''
    raw_line: str = ''
    line_number: Optional[int] = None

    @property
    def amount(self) -> Optional[Decimal]:
        if self.debit is not None:
            return -abs(self.debit)
        if self.credit is not None:
            return abs(self.credit)
        return None

    def to_dict(self, decimal_places: int = 2) -> Dict[str, Any]:
        def money(v):
            q = quantize_amount(v, decimal_places)
            return str(q) if q is not None else None

        return {
            'transaction_id': self.transaction_id,
            'date': self.date,
            'description': self.description,
            'debit': money(self.debit),
            'credit': money(self.credit),
            'amount': money(self.amount),
            'balance': money(self.balance),
            'transaction_type': self.transaction_type,
            'processing_status': self.processing_status,
            'error_messages': list(self.error_messages),
            'notes': self.notes,
            'raw_line': self.raw_line,
            'line_number': self.line_number,
        }


@dataclass
class ExtractionResult:
    """Outcome of one extraction call. Built fresh for every call."""
    success: bool = False
    transactions: List[Transaction] = field(default_factory=list)
    bank_format: Any = None
    total_transactions: int = 0
    valid_transactions: int = 0
    invalid_transactions: int = 0
    opening_balance: Optional[Decimal] = None
    closing_balance: Optional[Decimal] = None
    total_debits: Decimal = Decimal('0')
    total_credits: Decimal = Decimal('0')
    errors: List[Finding] = field(default_factory=list)
    warnings: List[Finding] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, decimal_places: int = 2) -> Dict[str, Any]:
        def money(v):
            q = quantize_amount(v, decimal_places)
            return str(q) if q is not None else None

        fmt = None
        if self.bank_format is not None:
            fmt = {
                'bank_id': self.bank_format.bank_id,
                'bank_name': self.bank_format.bank_name,
                'country': self.bank_format.country,
            }

        return {
            'success': self.success,
            'transactions': [t.to_dict(decimal_places) for t in self.transactions],
            'bank_format': fmt,
            'total_transactions': self.total_transactions,
            'valid_transactions': self.valid_transactions,
            'invalid_transactions': self.invalid_transactions,
            'opening_balance': money(self.opening_balance),
            'closing_balance': money(self.closing_balance),
            'total_debits': money(self.total_debits),
            'total_credits': money(self.total_credits),
            'errors': [f.to_dict() for f in self.errors],
            'warnings': [f.to_dict() for f in self.warnings],
            'metadata': _plain(self.metadata),
        }
