# Configuration submodule
from .layout import BankFormat, LinePattern, StandardPattern, SimplePattern, CombinedPattern
from .registry import FormatRegistry
from .defaults import get_default_formats, GENERIC_BANK_ID

__all__ = [
    'BankFormat',
    'LinePattern',
    'StandardPattern',
    'SimplePattern',
    'CombinedPattern',
    'FormatRegistry',
    'get_default_formats',
    'GENERIC_BANK_ID',
]
