"""Unit tests for docbackup.logs."""

import logging

from docbackup.logs import (
    ConsoleHandler,
    PayloadFormatter,
    attach_run_log_file,
    configure_logging,
    detach_handler,
)


def test_attach_run_log_file_creates_directory_and_file(tmp_path):
    log_dir = tmp_path / "nested" / "log"
    logger = logging.getLogger("docbackup.tests.file")
    logger.setLevel(logging.INFO)

    handler = attach_run_log_file("nightly", log_dir, logger=logger)
    try:
        logger.info("Fetching page 1...")
    finally:
        detach_handler(handler, logger)

    files = list(log_dir.glob("cosmos_backup_nightly_*.log"))
    assert len(files) == 1
    assert "Fetching page 1..." in files[0].read_text(encoding="utf-8")
    assert handler not in logger.handlers


def test_payload_formatter_appends_json():
    formatter = PayloadFormatter("%(message)s")
    record = logging.LogRecord("docbackup", logging.INFO, __file__, 1, "Run failed", None, None)
    record.payload = {"document": "d1", "page": 2}

    output = formatter.format(record)

    assert output.startswith("Run failed\n")
    assert '"document": "d1"' in output
    assert '"page": 2' in output


def test_payload_formatter_without_payload():
    formatter = PayloadFormatter("%(message)s")
    record = logging.LogRecord("docbackup", logging.INFO, __file__, 1, "plain", None, None)
    assert formatter.format(record) == "plain"


def test_configure_logging_installs_one_console_handler():
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        configure_logging(logging.DEBUG)
        configure_logging(logging.DEBUG)

        console = [h for h in root.handlers if isinstance(h, ConsoleHandler)]
        assert len(console) == 1
        assert isinstance(console[0].formatter, PayloadFormatter)
        assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            if handler not in original_handlers:
                root.removeHandler(handler)
        root.setLevel(original_level)
