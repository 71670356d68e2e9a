"""
Format Registry

Loads bank format definitions once, exposes read-only lookups over them and
detects which format a statement text most likely uses.
"""
import os
import re
import json
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import yaml

from statement_engine.common.logging_config import get_logger
from statement_engine.common.settings import Settings
from ..exceptions import FormatNotFoundError, FormatRegistryError
from .defaults import GENERIC_BANK_ID, get_default_formats
from .layout import PATTERN_KINDS, STANDARD, BankFormat, LinePattern

logger = get_logger(__name__)

CONFIG_EXTENSIONS = ('.json', '.yaml', '.yml')

# camelCase keys used by older JSON configs
_KEY_ALIASES = {
    'bankId': 'bank_id',
    'bankName': 'bank_name',
    'dateFormat': 'date_format',
    'decimalSeparator': 'decimal_separator',
    'thousandsSeparator': 'thousands_separator',
    'amountPosition': 'amount_position',
    'balanceIncluded': 'balance_included',
    'openingBalancePattern': 'opening_balance_pattern',
    'closingBalancePattern': 'closing_balance_pattern',
}

_FORMAT_FIELDS = {
    'bank_id', 'bank_name', 'country', 'date_format', 'decimal_separator',
    'thousands_separator', 'amount_position', 'balance_included',
    'opening_balance_pattern', 'closing_balance_pattern',
}


class FormatRegistry:
    """
    Registry for bank statement formats.

    The registry is owned by the caller: build one at startup and hand it to
    every ExtractionPipeline. Definitions load lazily and at most once;
    concurrent first callers wait on the same load. Afterwards the format
    tuple never changes, so reads need no lock.
    """

    def __init__(
        self,
        source: Optional[str] = None,
        formats: Optional[Sequence[BankFormat]] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            source: Path to a format file or a directory of format files
            formats: Pre-built formats (skips loading entirely)
            settings: Engine settings; supplies the default source and
                      the detection thresholds
        """
        self.settings = settings or Settings()
        self.source = source if source is not None else self.settings.bank_formats_config
        self._formats: Optional[Tuple[BankFormat, ...]] = None
        self._lock = threading.Lock()
        self.load_count = 0

        if formats is not None:
            self._formats = tuple(formats)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'FormatRegistry':
        return cls(settings=settings)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def formats(self) -> Tuple[BankFormat, ...]:
        formats = self._formats
        if formats is None:
            formats = self._ensure_loaded()
        return formats

    def _ensure_loaded(self) -> Tuple[BankFormat, ...]:
        with self._lock:
            if self._formats is None:
                self._formats = tuple(self._load())
                self.load_count += 1
            return self._formats

    def _load(self) -> List[BankFormat]:
        if not self.source:
            logger.debug("No format configuration supplied, using built-in formats")
            return get_default_formats()

        if not os.path.exists(self.source):
            logger.warning(
                f"Format configuration not found: {self.source}. Using built-in formats.",
                source=self.source,
            )
            return get_default_formats()

        if os.path.isdir(self.source):
            paths = [
                os.path.join(self.source, fname)
                for fname in sorted(os.listdir(self.source))
                if fname.lower().endswith(CONFIG_EXTENSIONS)
            ]
        else:
            paths = [self.source]

        formats: List[BankFormat] = []
        for fpath in paths:
            for data in self._read_definitions(fpath):
                formats.append(self._parse_format(data, fpath))
            logger.debug(f"Loaded formats from {fpath}", source=fpath)

        if not formats:
            logger.warning(
                f"No formats defined in {self.source}. Using built-in formats.",
                source=self.source,
            )
            return get_default_formats()

        seen = set()
        for fmt in formats:
            if fmt.bank_id in seen:
                raise FormatRegistryError("Duplicate bank format id", source=self.source, bank_id=fmt.bank_id)
            seen.add(fmt.bank_id)

        logger.info(f"Format registry loaded with {len(formats)} formats", source=self.source)
        return formats

    def _read_definitions(self, fpath: str) -> List[Dict[str, Any]]:
        """Reads a config file and returns its raw format definitions."""
        try:
            with open(fpath, 'r', encoding='utf-8') as f:
                if fpath.lower().endswith(('.yaml', '.yml')):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise FormatRegistryError(f"Cannot read format configuration: {e}", source=fpath) from e

        if data is None:
            return []
        if isinstance(data, dict) and 'formats' in data:
            data = data['formats']
        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
            raise FormatRegistryError("Format configuration must be a list of objects", source=fpath)
        return data

    def _parse_format(self, data: Dict[str, Any], source: str = 'inline') -> BankFormat:
        """Converts one raw definition into a BankFormat."""
        normalized = {_KEY_ALIASES.get(k, k): v for k, v in data.items()}

        bank_id = normalized.get('bank_id')
        if not bank_id:
            raise FormatRegistryError("Format definition is missing bank_id", source=source)

        patterns = self._parse_patterns(normalized.get('patterns'), source, bank_id)
        kwargs = {k: v for k, v in normalized.items() if k in _FORMAT_FIELDS}
        kwargs.setdefault('bank_name', bank_id)
        kwargs.setdefault('country', 'Universal')

        for key in ('opening_balance_pattern', 'closing_balance_pattern'):
            if kwargs.get(key):
                self._check_regex(kwargs[key], source, bank_id)

        return BankFormat(patterns=patterns, **kwargs)

    def _parse_patterns(self, raw: Any, source: str, bank_id: str) -> Tuple[LinePattern, ...]:
        if isinstance(raw, dict):
            # {"standard": "^...$", "bpi": "^...$"}: a kind name is its own
            # kind, any other name is a standard (debit/credit columns) line
            entries = [
                {'name': name, 'kind': name if name in PATTERN_KINDS else STANDARD, 'regex': regex}
                for name, regex in raw.items()
            ]
        elif isinstance(raw, list):
            entries = raw
        else:
            raise FormatRegistryError("Format must define at least one pattern", source=source, bank_id=bank_id)

        patterns = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get('regex'):
                raise FormatRegistryError(f"Invalid pattern entry: {entry!r}", source=source, bank_id=bank_id)
            name = entry.get('name') or entry.get('kind')
            kind = entry.get('kind') or name
            cls = PATTERN_KINDS.get(kind)
            if cls is None:
                raise FormatRegistryError(
                    f"Unknown pattern kind '{kind}' (expected one of {', '.join(PATTERN_KINDS)})",
                    source=source,
                    bank_id=bank_id,
                )
            self._check_regex(entry['regex'], source, bank_id)
            patterns.append(cls(name=name, regex=entry['regex']))

        if not patterns:
            raise FormatRegistryError("Format must define at least one pattern", source=source, bank_id=bank_id)
        return tuple(patterns)

    @staticmethod
    def _check_regex(regex: str, source: str, bank_id: str) -> None:
        try:
            re.compile(regex)
        except re.error as e:
            raise FormatRegistryError(f"Invalid regex {regex!r}: {e}", source=source, bank_id=bank_id) from e

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def default_format(self) -> Optional[BankFormat]:
        """The generic format, or the first registered one."""
        formats = self.formats
        for fmt in formats:
            if fmt.bank_id == GENERIC_BANK_ID:
                return fmt
        return formats[0] if formats else None

    def get(self, bank_id: str) -> BankFormat:
        """Get format by id. Raises FormatNotFoundError for unknown ids."""
        for fmt in self.formats:
            if fmt.bank_id == bank_id:
                return fmt
        raise FormatNotFoundError(bank_id, available=self.list_ids())

    def list_ids(self) -> List[str]:
        return [f.bank_id for f in self.formats]

    def list_formats(self, country: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, str]]:
        """
        List supported formats (id, name, country only).

        Args:
            country: Case-insensitive country filter
            search: Case-insensitive substring matched against id and name
        """
        result = []
        for fmt in self.formats:
            if country and (fmt.country or '').lower() != country.lower():
                continue
            if search:
                needle = search.lower()
                if needle not in fmt.bank_id.lower() and needle not in fmt.bank_name.lower():
                    continue
            result.append(fmt.summary())
        return result

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def count_matches(self, lines: Iterable[str], fmt: BankFormat) -> int:
        """Counts pattern hits over lines, one per (line, pattern) pair."""
        count = 0
        for line in lines:
            for pattern in fmt.patterns:
                if pattern.match(line):
                    count += 1
        return count

    def detect(self, text: str) -> Optional[BankFormat]:
        """
        Detect the format of a statement text.

        Scores each non-default format over the first lines of the text and
        returns the first one (in registry order) that reaches the match
        threshold. Falls back to the default format.

        The default (generic) format is never scored: its loose patterns
        match almost any dated line and would shadow every bank-specific
        format listed after it.

        Returns:
            A BankFormat, or None only when the registry is empty
        """
        default = self.default_format
        if default is None:
            return None

        lines = [line.strip() for line in (text or '').splitlines()[:self.settings.detection_scan_lines]]

        for fmt in self.formats:
            if fmt is default:
                continue
            matches = self.count_matches(lines, fmt)
            logger.debug(f"Format {fmt.bank_id} scored {matches} matches", bank_id=fmt.bank_id, matches=matches)
            if matches >= self.settings.detection_min_matches:
                logger.info(f"Detected format: {fmt.bank_name}", bank_id=fmt.bank_id, matches=matches)
                return fmt

        logger.info(f"No format reached the threshold, using {default.bank_name}", bank_id=default.bank_id)
        return default
