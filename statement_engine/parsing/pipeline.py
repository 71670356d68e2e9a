"""
Extraction Pipeline

Orchestrates one extraction pass over a statement text: format detection,
line parsing, balance reconciliation, duplicate detection, validation and
aggregation.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Union

from statement_engine.common.logging_config import bind_context, extraction_context, get_logger
from statement_engine.common.models import (
    ExtractionResult,
    Finding,
    FindingCode,
    ProcessingStatus,
    Severity,
    Transaction,
)
from statement_engine.common.settings import Settings
from statement_engine.core.duplicates import DuplicateDetector
from statement_engine.core.reconciler import BalanceReconciler, sort_by_date
from statement_engine.core.validator import Validator, apply_status
from .config.layout import BankFormat
from .config.registry import FormatRegistry
from .line_parser import TransactionLineParser
from .lines import is_candidate_line, split_lines

logger = get_logger(__name__)


class Stage:
    DETECTING_FORMAT = 'DETECTING_FORMAT'
    PARSING_LINES = 'PARSING_LINES'
    RECONCILING_BALANCES = 'RECONCILING_BALANCES'
    DETECTING_DUPLICATES = 'DETECTING_DUPLICATES'
    VALIDATING = 'VALIDATING'
    AGGREGATING = 'AGGREGATING'
    DONE = 'DONE'
    FAILED = 'FAILED'


class ExtractionPipeline:
    """
    Main orchestrator for statement extraction.

    Handles:
    - Format detection (or an explicit format hint)
    - Line classification and parsing
    - Balance reconciliation and running-balance back-fill
    - Duplicate detection and rule-based validation
    - Aggregation into an ExtractionResult

    Each call works on its own in-memory state; the registry is the only
    shared object and is read-only, so one pipeline can serve many threads.
    """

    def __init__(self, registry: FormatRegistry, settings: Optional[Settings] = None, validator: Optional[Validator] = None):
        """
        Initialize pipeline with format registry.

        Args:
            registry: FormatRegistry with available bank formats
            settings: Engine settings (defaults to the registry's settings)
            validator: Validator override (tests pin "today" through this)
        """
        self.registry = registry
        self.settings = settings or registry.settings
        self.validator = validator or Validator(self.settings)
        self.reconciler = BalanceReconciler(self.settings.balance_tolerance)
        self.duplicate_detector = DuplicateDetector()

    def extract_by_format_id(self, text: str, bank_id: str) -> ExtractionResult:
        """
        Extract using an explicit format id.

        Raises:
            FormatNotFoundError: if the id is not registered
        """
        return self.extract(text, bank_format=self.registry.get(bank_id))

    def extract(self, text: str, bank_format: Union[BankFormat, str, None] = None) -> ExtractionResult:
        """
        Extract and validate transactions from statement text.

        Args:
            text: Full statement text
            bank_format: Optional BankFormat or bank id; bypasses detection

        Returns:
            ExtractionResult (never raises for data-quality problems)

        Raises:
            FormatNotFoundError: if `bank_format` is an unknown id
        """
        with extraction_context():
            return self._run(text or '', bank_format)

    def _run(self, text: str, bank_format: Union[BankFormat, str, None]) -> ExtractionResult:
        result = ExtractionResult()
        stages: List[str] = []

        def enter(stage: str):
            stages.append(stage)
            logger.debug(f"Stage {stage}", stage=stage)

        # 1. Format
        enter(Stage.DETECTING_FORMAT)
        if isinstance(bank_format, str):
            fmt = self.registry.get(bank_format)
        elif bank_format is not None:
            fmt = bank_format
        else:
            fmt = self.registry.detect(text)

        if fmt is None:
            enter(Stage.FAILED)
            logger.error("No bank format available for extraction")
            result.errors.append(Finding(
                code=FindingCode.UNKNOWN_FORMAT,
                message='Could not detect bank format',
                severity=Severity.CRITICAL,
            ))
            result.metadata = self._metadata(None, 0, stages, False)
            return result

        result.bank_format = fmt
        bind_context(bank_id=fmt.bank_id)

        # 2. Lines
        enter(Stage.PARSING_LINES)
        lines = split_lines(text)
        parser = TransactionLineParser(fmt)
        transactions: List[Transaction] = []
        for line_number, line in enumerate(lines, start=1):
            if not is_candidate_line(line):
                continue
            transaction = parser.parse_line(line, line_number)
            if transaction is not None:
                transactions.append(transaction)

        # 3. Balances
        enter(Stage.RECONCILING_BALANCES)
        result.opening_balance, result.closing_balance = self.reconciler.extract_balances(text, fmt)
        transactions = sort_by_date(transactions)
        balance_calculated = self.reconciler.backfill(transactions, result.opening_balance)

        # 4. Duplicates
        enter(Stage.DETECTING_DUPLICATES)
        duplicate_findings = self.duplicate_detector.detect(transactions)

        # 5. Validation
        enter(Stage.VALIDATING)
        errors: List[Finding] = []
        warnings: List[Finding] = list(duplicate_findings)

        if not transactions:
            warnings.append(Finding(
                code=FindingCode.NO_TRANSACTIONS,
                message='No transactions found',
                severity=Severity.HIGH,
                context={'lines_processed': len(lines)},
            ))

        for index, transaction in enumerate(transactions):
            record = self.validator.validate_transaction(transaction, index)
            errors.extend(record.errors)
            warnings.extend(record.warnings)

        warnings.extend(self.validator.validate_balance_consistency(transactions))

        closing_finding = self.reconciler.check_closing(
            transactions, result.opening_balance, result.closing_balance
        )
        if closing_finding is not None:
            warnings.append(closing_finding)

        apply_status(transactions, errors, warnings)

        # 6. Totals
        enter(Stage.AGGREGATING)
        result.transactions = transactions
        result.errors = errors
        result.warnings = warnings
        result.total_transactions = len(transactions)
        result.invalid_transactions = len([t for t in transactions if t.processing_status == ProcessingStatus.ERROR])
        result.valid_transactions = result.total_transactions - result.invalid_transactions
        result.total_debits = sum((t.debit for t in transactions if t.debit is not None), Decimal('0'))
        result.total_credits = sum((t.credit for t in transactions if t.credit is not None), Decimal('0'))
        result.success = result.total_transactions > 0

        enter(Stage.DONE)
        result.metadata = self._metadata(fmt, len(lines), stages, balance_calculated)

        logger.info(
            "Extraction finished",
            bank_id=fmt.bank_id,
            tx_count=result.total_transactions,
            invalid=result.invalid_transactions,
            error_count=len(errors),
            warning_count=len(warnings),
        )
        return result

    @staticmethod
    def _metadata(fmt: Optional[BankFormat], lines_processed: int, stages: List[str], balance_calculated: bool) -> dict:
        return {
            'extracted_at': datetime.now(timezone.utc).isoformat(),
            'lines_processed': lines_processed,
            'bank_format': fmt.bank_name if fmt else None,
            'bank_id': fmt.bank_id if fmt else None,
            'stages': list(stages),
            'balance_calculated': balance_calculated,
        }
