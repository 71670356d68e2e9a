"""
Statement Engine

Extracts transactions from bank statement text and validates them:
format detection, line parsing, normalization, classification, balance
reconciliation, duplicate detection and rule-based validation.
"""

from .common.models import ExtractionResult, Finding, Transaction, Severity, ProcessingStatus, FindingCode
from .common.settings import Settings
from .parsing import (
    BankFormat,
    ExtractionPipeline,
    FormatNotFoundError,
    FormatRegistry,
    FormatRegistryError,
    StatementFacade,
)

__version__ = '1.0.0'

__all__ = [
    'ExtractionResult',
    'Finding',
    'Transaction',
    'Severity',
    'ProcessingStatus',
    'FindingCode',
    'Settings',
    'BankFormat',
    'ExtractionPipeline',
    'FormatNotFoundError',
    'FormatRegistry',
    'FormatRegistryError',
    'StatementFacade',
]
