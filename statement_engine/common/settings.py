"""
Engine Settings

Environment-driven configuration for extraction and validation.
"""
import os
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_decimal(name: str, default: str) -> Decimal:
    return Decimal(os.getenv(name) or default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """
    Tunables shared by the registry, the validator and the pipeline.

    Attributes:
        bank_formats_config: Path to a format file or directory (None = built-ins)
        max_future_days: Dates further ahead than this are errors
        max_past_years: Dates before Jan 1 of (this year - N) are warnings
        max_transaction_amount: Amounts above this (absolute) are warnings
        decimal_places: Output precision for amounts
        balance_tolerance: Allowed drift between stated and computed balances
        detection_scan_lines: Lines inspected by format detection
        detection_min_matches: Pattern hits needed to pick a format
        allow_negative_amounts: Accept negative debit/credit values
        log_level: Level used by the CLI when it sets up logging
    """
    bank_formats_config: Optional[str] = None
    max_future_days: int = 7
    max_past_years: int = 10
    max_transaction_amount: Decimal = Decimal("999999.99")
    decimal_places: int = 2
    balance_tolerance: Decimal = Decimal("0.02")
    detection_scan_lines: int = 50
    detection_min_matches: int = 3
    allow_negative_amounts: bool = False
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls) -> "Settings":
        level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
        return cls(
            bank_formats_config=os.getenv("BANK_FORMATS_CONFIG") or None,
            max_future_days=_env_int("MAX_FUTURE_DAYS", 7),
            max_past_years=_env_int("MAX_PAST_YEARS", 10),
            max_transaction_amount=_env_decimal("MAX_TRANSACTION_AMOUNT", "999999.99"),
            decimal_places=_env_int("DECIMAL_PLACES", 2),
            balance_tolerance=_env_decimal("BALANCE_TOLERANCE", "0.02"),
            detection_scan_lines=_env_int("DETECTION_SCAN_LINES", 50),
            detection_min_matches=_env_int("DETECTION_MIN_MATCHES", 3),
            allow_negative_amounts=_env_bool("ALLOW_NEGATIVE_AMOUNTS", False),
            log_level=getattr(logging, level_name, logging.INFO),
        )
