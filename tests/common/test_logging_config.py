"""
Tests for structured logging: JSON output and extraction-id context.
"""
import json
import logging
from decimal import Decimal

from statement_engine.common.logging_config import (
    JSONFormatter,
    bind_context,
    extraction_context,
    get_extraction_id,
    get_logger,
)


def _record(msg='hello', **extra_fields):
    record = logging.LogRecord('statement_engine.test', logging.INFO, __file__, 10, msg, None, None)
    if extra_fields:
        record.extra_fields = extra_fields
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data['message'] == 'hello'
        assert data['level'] == 'INFO'
        assert data['logger'] == 'statement_engine.test'
        assert data['extraction_id'] == 'GLOBAL'

    def test_extra_fields_merged_and_decimals_serialised(self):
        data = json.loads(JSONFormatter().format(_record(bank_id='us_bank', opening=Decimal('500.00'))))
        assert data['bank_id'] == 'us_bank'
        assert data['opening'] == '500.00'

    def test_context_fields_in_output(self):
        with extraction_context('abc123'):
            bind_context(bank_id='us_bank')
            data = json.loads(JSONFormatter().format(_record()))
        assert data['extraction_id'] == 'abc123'
        assert data['bank_id'] == 'us_bank'


class TestExtractionContext:

    def test_fresh_id_per_scope(self):
        with extraction_context() as first:
            assert get_extraction_id() == first
        with extraction_context() as second:
            assert second != first
        assert get_extraction_id() is None

    def test_nested_scope_restores_outer(self):
        with extraction_context('outer'):
            with extraction_context('inner'):
                assert get_extraction_id() == 'inner'
            assert get_extraction_id() == 'outer'

    def test_bind_outside_scope_is_ignored(self):
        bind_context(bank_id='us_bank')
        data = json.loads(JSONFormatter().format(_record()))
        assert data['extraction_id'] == 'GLOBAL'
        assert 'bank_id' not in data


class TestStructuredLoggerAdapter:

    def test_keyword_arguments_become_extra_fields(self, caplog):
        logger = get_logger('statement_engine.test_adapter')
        with caplog.at_level(logging.INFO, logger='statement_engine.test_adapter'):
            logger.info('Layout detected', bank_id='us_bank', matches=4)

        record = caplog.records[-1]
        assert record.extra_fields == {'bank_id': 'us_bank', 'matches': 4}

    def test_caller_extra_is_not_mutated(self, caplog):
        logger = get_logger('statement_engine.test_adapter')
        extra = {'extra_fields': {'source': 'cli'}}
        with caplog.at_level(logging.INFO, logger='statement_engine.test_adapter'):
            logger.info('Loaded', extra=extra, count=2)

        assert extra == {'extra_fields': {'source': 'cli'}}
        assert caplog.records[-1].extra_fields == {'source': 'cli', 'count': 2}
