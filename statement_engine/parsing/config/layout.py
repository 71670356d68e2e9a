"""
Bank Format Configuration

Defines the immutable dataclasses that describe how one bank lays out a
transaction line, plus its date and number conventions.
"""
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

STANDARD = 'standard'
SIMPLE = 'simple'
COMBINED = 'combined'

DAY_FIRST_DATE_FORMATS = ('DD/MM/YYYY', 'DD.MM.YYYY', 'DD-MM-YYYY')


@dataclass(frozen=True)
class LinePattern:
    """
    A named regex that recognises one kind of transaction line.

    Subclasses fix the meaning of each capture group (their `kind` is the
    configuration name); the parser dispatches on the subclass, never on
    `name`. The regex is compiled once, when the pattern is built.

    Attributes:
        name: Configured name (e.g. "standard", "bpi")
        regex: Pattern matched against a cleaned line
    """
    name: str
    regex: str
    compiled: 're.Pattern' = field(init=False, repr=False, compare=False)

    kind = None

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.regex))

    def match(self, line: str) -> Optional['re.Match']:
        return self.compiled.match(line)


@dataclass(frozen=True)
class StandardPattern(LinePattern):
    """Groups: date, description, debit?, credit?, balance?"""
    kind = STANDARD


@dataclass(frozen=True)
class SimplePattern(LinePattern):
    """Groups: date, description, amount, balance?"""
    kind = SIMPLE


@dataclass(frozen=True)
class CombinedPattern(LinePattern):
    """Groups: date, description, amount, D/C indicator, balance?"""
    kind = COMBINED


PATTERN_KINDS = {cls.kind: cls for cls in (StandardPattern, SimplePattern, CombinedPattern)}


@dataclass(frozen=True)
class BankFormat:
    """
    Configuration for one bank statement format.

    Used by TransactionLineParser to turn lines into transactions and by
    the registry to score raw text during detection.

    Attributes:
        bank_id: Identifier (e.g. "us_bank")
        bank_name: Human-readable name (e.g. "US Bank Format")
        country: Country code or "Universal"
        patterns: Line patterns, tried in declaration order
        date_format: Declared date layout (e.g. "MM/DD/YYYY")
        decimal_separator: "." or ","
        thousands_separator: "," or "." (or "" / " ")
        amount_position: "separate" (debit/credit columns) or "signed"
        balance_included: Whether lines usually carry a running balance
    """
    bank_id: str
    bank_name: str
    country: str
    patterns: Tuple[LinePattern, ...]
    date_format: str = 'MM/DD/YYYY'
    decimal_separator: str = '.'
    thousands_separator: str = ','
    amount_position: str = 'separate'
    balance_included: bool = True

    # Balance statement overrides (group 1 = amount)
    opening_balance_pattern: Optional[str] = None
    closing_balance_pattern: Optional[str] = None

    @property
    def day_first(self) -> bool:
        return self.date_format.upper() in DAY_FIRST_DATE_FORMATS

    def summary(self) -> dict:
        """Public view of the format: no patterns."""
        return {
            'bank_id': self.bank_id,
            'bank_name': self.bank_name,
            'country': self.country,
        }
