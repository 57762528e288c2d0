"""
Tests for logging setup, redaction and structured output
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler

from stackex.core.logging import (
    ContextLoggerAdapter,
    JSONFormatter,
    SensitiveDataFilter,
    redact_message,
    setup_logging,
    with_log_context,
)


def _record(msg, *args, **extra):
    record = logging.LogRecord("stackex.test", logging.INFO, __file__, 10, msg, args, None)
    record.__dict__.update(extra)
    return record


class TestRedactMessage:
    """Test free-text redaction"""

    def test_key_query_parameter(self):
        """Test key= in a URL is masked"""
        url = "https://api.stackexchange.com/2.2/questions/1?filter=default&key=abc123&site=stackoverflow"
        redacted = redact_message(url)
        assert "abc123" not in redacted
        assert "key=[REDACTED]&site=stackoverflow" in redacted

    def test_access_token_query_parameter(self):
        """Test access_token= in a URL is masked"""
        assert redact_message("/me?access_token=tok(1)") == "/me?access_token=[REDACTED]"

    def test_key_value_pairs(self):
        """Test api_key: value pairs are masked"""
        assert "hunter2" not in redact_message("api_key: hunter2, site: so")
        assert redact_message('{"password": "hunter2"}') == '{"password": "[REDACTED]"}'

    def test_plain_text_untouched(self):
        """Test ordinary messages are unchanged"""
        assert redact_message("Backoff of 10s recorded for questions/1") == "Backoff of 10s recorded for questions/1"

    def test_filter_parameter_not_mistaken_for_key(self):
        """Test parameters that merely end in 'key' survive"""
        assert redact_message("?monkey=1") == "?monkey=1"


class TestSensitiveDataFilter:
    """Test record-level redaction"""

    def test_message_redacted(self):
        """Test the formatted message is redacted"""
        record = _record("GET %s", "https://x/questions?key=secret")
        SensitiveDataFilter().filter(record)
        assert record.getMessage() == "GET https://x/questions?key=[REDACTED]"

    def test_sensitive_extra_fields(self):
        """Test sensitive extras are masked and others kept"""
        record = _record("msg", api_key="secret", route="questions/1")
        SensitiveDataFilter().filter(record)
        assert record.api_key == "[REDACTED]"
        assert record.route == "questions/1"

    def test_nested_extras(self):
        """Test mappings inside extras are walked"""
        record = _record("msg", params={"key": "secret", "site": "so"})
        SensitiveDataFilter().filter(record)
        assert record.params == {"key": "[REDACTED]", "site": "so"}

    def test_always_passes(self):
        """Test the filter never drops records"""
        assert SensitiveDataFilter().filter(_record("hello")) is True


class TestJSONFormatter:
    """Test structured output"""

    def test_fields(self):
        """Test the standard fields and extras are emitted"""
        output = json.loads(JSONFormatter().format(_record("hello %s", "world", route="questions/1")))
        assert output["message"] == "hello world"
        assert output["level"] == "INFO"
        assert output["logger"] == "stackex.test"
        assert output["route"] == "questions/1"
        assert "timestamp" in output

    def test_redacts_without_filter(self):
        """Test the formatter redacts even when no filter ran"""
        output = json.loads(JSONFormatter().format(_record("url ?key=abc", access_token="t")))
        assert "abc" not in output["message"]
        assert output["access_token"] == "[REDACTED]"

    def test_exception_included(self):
        """Test exc_info is rendered"""
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("stackex.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        output = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in output["exception"]


class TestLogContext:
    """Test contextual adapters"""

    def test_context_added(self, caplog):
        """Test context fields land on the record"""
        log = with_log_context(logging.getLogger("stackex.test"), route="questions/1")
        assert isinstance(log, ContextLoggerAdapter)
        with caplog.at_level("INFO", logger="stackex"):
            log.info("sent")
        assert caplog.records[-1].route == "questions/1"

    def test_nested_context_merged(self):
        """Test wrapping an adapter merges instead of nesting"""
        outer = with_log_context(logging.getLogger("stackex.test"), route="a", attempt=1)
        inner = with_log_context(outer, route="b")
        assert inner.logger is logging.getLogger("stackex.test")
        assert inner.extra == {"route": "b", "attempt": 1}

    def test_none_values_skipped(self):
        """Test None context values are not added"""
        assert with_log_context(logging.getLogger("stackex.test"), route=None).extra == {}


class TestSetupLogging:
    """Test handler installation"""

    def test_console_handler(self):
        """Test a console handler with the redaction filter is installed"""
        logger = setup_logging("DEBUG")
        assert logger.name == "stackex"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert any(isinstance(f, SensitiveDataFilter) for f in logger.handlers[0].filters)

    def test_json_format(self):
        """Test json format installs the JSONFormatter"""
        logger = setup_logging("INFO", log_format="json")
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_rotating_file(self, tmp_path):
        """Test a log file adds a rotating handler"""
        log_file = tmp_path / "logs" / "stackex.log"
        logger = setup_logging("INFO", log_file=log_file, max_bytes=1024, backup_count=2)
        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 1024
        logger.info("written with key=abc&x")
        file_handlers[0].flush()
        assert "written" in log_file.read_text()

    def test_env_level(self, monkeypatch):
        """Test LOG_LEVEL is used when no level is passed"""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert setup_logging().level == logging.ERROR

    def test_invalid_level_falls_back(self, capsys):
        """Test an unknown level falls back to INFO with a warning"""
        assert setup_logging("LOUD").level == logging.INFO
        assert "Invalid log level" in capsys.readouterr().err

    def test_repeated_setup_replaces_handlers(self):
        """Test calling twice does not duplicate handlers"""
        setup_logging("INFO")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1
