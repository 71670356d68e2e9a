import logging
from decimal import Decimal

from statement_engine.common.settings import Settings


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.bank_formats_config is None
        assert s.max_future_days == 7
        assert s.max_past_years == 10
        assert s.max_transaction_amount == Decimal('999999.99')
        assert s.decimal_places == 2
        assert s.balance_tolerance == Decimal('0.02')
        assert s.detection_scan_lines == 50
        assert s.detection_min_matches == 3
        assert s.allow_negative_amounts is False
        assert s.log_level == logging.INFO

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('BANK_FORMATS_CONFIG', '/etc/formats.yaml')
        monkeypatch.setenv('MAX_FUTURE_DAYS', '3')
        monkeypatch.setenv('BALANCE_TOLERANCE', '0.05')
        monkeypatch.setenv('DETECTION_MIN_MATCHES', '5')
        monkeypatch.setenv('ALLOW_NEGATIVE_AMOUNTS', 'yes')
        monkeypatch.setenv('LOG_LEVEL', 'debug')

        s = Settings.from_env()

        assert s.bank_formats_config == '/etc/formats.yaml'
        assert s.max_future_days == 3
        assert s.balance_tolerance == Decimal('0.05')
        assert s.detection_min_matches == 5
        assert s.allow_negative_amounts is True
        assert s.log_level == logging.DEBUG

    def test_from_env_blank_values_use_defaults(self, monkeypatch):
        monkeypatch.setenv('MAX_PAST_YEARS', '')
        monkeypatch.setenv('MAX_TRANSACTION_AMOUNT', '')
        monkeypatch.delenv('LOG_LEVEL', raising=False)

        s = Settings.from_env()

        assert s.max_past_years == 10
        assert s.max_transaction_amount == Decimal('999999.99')
        assert s.log_level == logging.INFO
