"""
Parsing Module

- Format configuration and registry (detection, lookups)
- Line classification and transaction line parsing
- Pipeline orchestration and the DataFrame facade
"""

# Configuration
from .config.layout import BankFormat, LinePattern, StandardPattern, SimplePattern, CombinedPattern
from .config.registry import FormatRegistry

# Parsing
from .lines import clean_text, is_header_line, is_candidate_line
from .line_parser import TransactionLineParser

# Pipeline & Facade
from .pipeline import ExtractionPipeline, Stage
from .facade import StatementFacade
from .exceptions import StatementEngineError, FormatNotFoundError, FormatRegistryError

__all__ = [
    # Config
    'BankFormat',
    'LinePattern',
    'StandardPattern',
    'SimplePattern',
    'CombinedPattern',
    'FormatRegistry',
    # Parsing
    'clean_text',
    'is_header_line',
    'is_candidate_line',
    'TransactionLineParser',
    # Pipeline
    'ExtractionPipeline',
    'Stage',
    'StatementFacade',
    # Errors
    'StatementEngineError',
    'FormatNotFoundError',
    'FormatRegistryError',
]
