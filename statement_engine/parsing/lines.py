"""
Line preparation and header/noise classification.
"""
import re
from typing import List

HEADER_KEYWORDS = [
    'date',
    'description',
    'debit',
    'credit',
    'balance',
    'transaction',
    'amount',
    'reference',
    'page',
    'statement',
    'account',
]

# Two hits mark a column header or page footer; real transaction lines
# rarely contain two of these words.
HEADER_KEYWORD_THRESHOLD = 2


def clean_text(text: str) -> str:
    """Normalize newlines, tabs and runs of spaces, then trim every line."""
    if not text:
        return ''
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    lines = []
    for line in text.split('\n'):
        line = re.sub(r"[ \t\f\v]+", ' ', line).strip()
        lines.append(line)
    return '\n'.join(lines)


def split_lines(text: str) -> List[str]:
    return clean_text(text).split('\n') if text else []


def header_keyword_count(line: str) -> int:
    lower_line = line.lower()
    return sum(1 for k in HEADER_KEYWORDS if k in lower_line)


def is_header_line(line: str) -> bool:
    """True for column headers, page markers and statement banners."""
    return header_keyword_count(line) >= HEADER_KEYWORD_THRESHOLD


def is_candidate_line(line: str) -> bool:
    """
    Checks if a line should be handed to the transaction parser.
    Blank lines and header/noise lines are rejected.
    """
    if not line or not line.strip():
        return False
    return not is_header_line(line)
