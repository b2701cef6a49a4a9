import json
import logging
import sys

from utils.loggers.json_logger import JsonLogger, determine_log_path, get_logger


def make_record(**extra):
    record = logging.LogRecord(
        name="companion", level=logging.INFO, pathname=__file__, lineno=10,
        msg="Markov model trained", args=(), exc_info=None, func="train")
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_logger_format():
    data = json.loads(JsonLogger().format(make_record(metrics={"sentences": 2})))

    assert data["level"] == "INFO"
    assert data["logger"] == "companion"
    assert data["message"] == "Markov model trained"
    assert data["function"] == "train"
    assert data["metrics"] == {"sentences": 2}
    assert "exception" not in data


def test_json_logger_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = make_record()
        record.exc_info = sys.exc_info()

    data = json.loads(JsonLogger().format(record))
    assert data["exception"]["type"] == "ValueError"
    assert data["exception"]["message"] == "boom"


def test_determine_log_path_creates_directory(tmp_path):
    log_file = tmp_path / "logs" / "companion.log"
    assert determine_log_path(str(log_file)) == str(log_file)
    assert log_file.parent.is_dir()


def test_get_logger_writes_json_file(tmp_path):
    log_file = tmp_path / "companion.log"
    logger = get_logger("test_companion_file", log_file=str(log_file), console_json=False)

    logger.debug("Response generated", extra={"metrics": {"words": 4}})
    for handler in logger.handlers:
        handler.flush()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    assert json.loads(line)["metrics"] == {"words": 4}


def test_get_logger_replaces_handlers():
    logger = get_logger("test_companion_handlers")
    logger = get_logger("test_companion_handlers", console_level=logging.ERROR)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.ERROR
    assert isinstance(logger.handlers[0].formatter, JsonLogger)
