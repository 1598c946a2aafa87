import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from newswatch.utils.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    for var in ("LOG_LEVEL", "LOG_OUTPUT", "LOG_FORMAT", "LOG_FILE_PATH", "K8S_CLUSTER", "KUBERNETES_SERVICE_HOST"):
        monkeypatch.delenv(var, raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_defaults_log_to_stderr_at_info():
    configure_logging(log_format="text")

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert [type(h) for h in root.handlers] == [logging.StreamHandler]
    assert logging.getLogger("httpx").level == logging.WARNING


def test_file_output_creates_log_directory(tmp_path):
    log_file = tmp_path / "nested" / "app.log"

    configure_logging(level="DEBUG", output="file", file_path=str(log_file), log_format="text")
    get_logger("nw.test").debug("written to disk")
    for handler in logging.getLogger().handlers:
        handler.flush()

    (handler,) = logging.getLogger().handlers
    assert isinstance(handler, RotatingFileHandler)
    assert "written to disk" in log_file.read_text()


def test_environment_selects_both_outputs_and_json(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_OUTPUT", "both")
    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("LOG_FILE_PATH", str(tmp_path / "app.log"))

    configure_logging()

    root = logging.getLogger()
    assert len(root.handlers) == 2
    record = logging.LogRecord("nw.test", logging.INFO, __file__, 1, "hello", None, None)
    assert json.loads(root.handlers[0].format(record))["message"] == "hello"


def test_module_level_is_raised_independently():
    configure_logging(level="DEBUG", log_format="text", module="nw.aggregator")

    assert logging.getLogger("nw.aggregator").level == logging.DEBUG


def test_unknown_output_is_rejected():
    with pytest.raises(ValueError):
        configure_logging(output="syslog")
    with pytest.raises(ValueError):
        configure_logging(output="stderr", log_format="xml")
