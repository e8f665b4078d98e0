"""
Unit tests for structured logging.
"""

import json
import logging

import pytest

from erth_sdk.logging import StructuredLogger, create_file_logger, LogLevel


class TestStructuredLogger:

    @pytest.mark.unit
    def test_json_line(self, caplog):
        logger = StructuredLogger(component="erth-test")

        with caplog.at_level(logging.INFO, logger="erth-test"):
            entry = logger.info("Broadcast accepted", tx_hash="ABC", size=120)

        record = json.loads(caplog.records[-1].getMessage())
        assert record["message"] == "Broadcast accepted"
        assert record["tx_hash"] == "ABC"
        assert record["details"] == {"size": 120}
        assert "error" not in record
        assert entry.component == "erth-test"

    @pytest.mark.unit
    def test_plain_output(self, caplog):
        logger = StructuredLogger(component="erth-plain", json_output=False)

        with caplog.at_level(logging.WARNING, logger="erth-plain"):
            logger.warning("Slow node", tx_hash="DEF")

        assert caplog.records[-1].getMessage() == "[WARNING] Slow node tx_hash=DEF"

    @pytest.mark.unit
    def test_operation_success(self, caplog):
        logger = StructuredLogger(component="erth-op")

        with caplog.at_level(logging.DEBUG, logger="erth-op"):
            with logger.operation("execute") as op:
                op.set_tx_hash("AAA")
                op.add_detail("message_count", 2)

        record = json.loads(caplog.records[-1].getMessage())
        assert record["message"] == "Completed execute"
        assert record["tx_hash"] == "AAA"
        assert record["details"] == {"message_count": 2}
        assert record["duration_ms"] >= 0

    @pytest.mark.unit
    def test_operation_failure(self, caplog):
        logger = StructuredLogger(component="erth-fail")

        with caplog.at_level(logging.ERROR, logger="erth-fail"):
            with pytest.raises(RuntimeError):
                with logger.operation("query"):
                    raise RuntimeError("node down")

        record = json.loads(caplog.records[-1].getMessage())
        assert record["level"] == "ERROR"
        assert record["error"] == "node down"

    @pytest.mark.unit
    def test_file_logger(self, tmp_path):
        path = tmp_path / "erth.log"
        logger = create_file_logger(str(path), component="erth-file", level=LogLevel.INFO)

        logger.info("written")
        for handler in logging.getLogger("erth-file-file").handlers:
            handler.flush()

        assert json.loads(path.read_text().strip().splitlines()[-1])["message"] == "written"
