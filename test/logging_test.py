"""
로깅 설정 테스트

실행: python -m pytest test/logging_test.py -v
"""

import json
import logging

import pytest

from common.logging import CustomJsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """테스트 후 루트 로거 상태 복원"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """setup_logging() 테스트"""

    def test_json_format(self):
        setup_logging(level="debug", json_format=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_text_format_with_file(self, tmp_path):
        log_file = tmp_path / "worker.log"

        setup_logging(level="INFO", json_format=False, log_file=str(log_file))
        logging.getLogger("worker.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging(level="LOUD")

    def test_json_record_fields(self):
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
        record = logging.LogRecord("worker.main", logging.INFO, __file__, 1, "Claimed job %s", (5,), None)

        data = json.loads(formatter.format(record))

        assert data["message"] == "Claimed job 5"
        assert data["level"] == "INFO"
        assert data["logger"] == "worker.main"
        assert "timestamp" in data
