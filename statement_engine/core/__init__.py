# Classification, reconciliation, duplicate detection and validation
from .classifier import categorize, is_debit_description
from .reconciler import BalanceReconciler, sort_by_date
from .duplicates import DuplicateDetector
from .validator import Validator, ValidationResult, apply_status

__all__ = [
    'categorize',
    'is_debit_description',
    'BalanceReconciler',
    'sort_by_date',
    'DuplicateDetector',
    'Validator',
    'ValidationResult',
    'apply_status',
]
