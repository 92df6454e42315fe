import json

from shared.logger import ScopeLogger


def _records(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_json_log_file_carries_operation_and_extra(tmp_path):
    log_path = tmp_path / "logs" / "notescope.jsonl"
    log = ScopeLogger(
        "test-json", log_level="DEBUG", log_file=log_path,
        json_logs=True, console_output=False,
    )
    with log.operation("decode:.note.ABI-tag"):
        log.warning("Skipping note region %s", ".note.ABI-tag", field="name")
    log.info("done")
    for handler in log.underlying.handlers:
        handler.flush()

    skipped, done = _records(log_path)
    assert skipped["level"] == "WARNING"
    assert skipped["logger"] == "notescope.test-json"
    assert skipped["message"] == "Skipping note region .note.ABI-tag"
    assert skipped["component"] == "test-json"
    assert skipped["operation"] == "decode:.note.ABI-tag"
    assert skipped["extra"] == {"field": "name"}
    assert "operation" not in done


def test_exception_records_traceback(tmp_path):
    log_path = tmp_path / "errors.jsonl"
    log = ScopeLogger(
        "test-exc", log_file=log_path, json_logs=True, console_output=False
    )
    try:
        raise ValueError("bad image")
    except ValueError:
        log.exception("Analysis failed")
    for handler in log.underlying.handlers:
        handler.flush()

    (record,) = _records(log_path)
    assert record["level"] == "ERROR"
    assert "ValueError: bad image" in record["exc_info"]


def test_level_filters_debug(tmp_path):
    log_path = tmp_path / "plain.log"
    log = ScopeLogger("test-plain", log_file=log_path, console_output=False)
    with log.timed("note decoding"):
        log.debug("hidden")
    log.info("visible")
    for handler in log.underlying.handlers:
        handler.flush()

    text = log_path.read_text(encoding="utf-8")
    assert "visible" in text
    assert "hidden" not in text
    assert "Completed: note decoding" not in text
    assert log.component == "test-plain"


def test_quiet_logger_writes_nothing_to_stderr(capsys):
    log = ScopeLogger("test-quiet", console_output=False)
    log.warning("Skipping note region %s", ".note.broken")
    assert capsys.readouterr().err == ""
    assert log.underlying.handlers
