# Shared models, settings and logging
from .models import (
    Transaction,
    ExtractionResult,
    Finding,
    Severity,
    ProcessingStatus,
    FindingCode,
)
from .settings import Settings

__all__ = [
    'Transaction',
    'ExtractionResult',
    'Finding',
    'Severity',
    'ProcessingStatus',
    'FindingCode',
    'Settings',
]
