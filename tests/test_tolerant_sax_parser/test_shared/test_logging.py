"""Tests for correlation-aware logging."""

import logging

from tolerant_sax_parser.shared.logging import CorrelationLogger, get_logger

LOGGER_NAME = "tolerant_sax_parser.test"


class TestCorrelationLogger:
    """Test structured fields on log records."""

    def test_fields_added(self, caplog):
        """Test component and correlation ID are attached to records."""
        logger = get_logger(LOGGER_NAME, "req-42", "scanner")
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            logger.debug("scanned", extra={"offset": 7})

        record = caplog.records[-1]
        assert record.getMessage() == "scanned"
        assert record.component == "scanner"
        assert record.correlation_id == "req-42"
        assert record.offset == 7

    def test_default_component(self):
        """Test the component defaults to the last part of the logger name."""
        logger = CorrelationLogger("tolerant_sax_parser.decoding.decoder")
        assert logger.component == "decoder"
        assert logger.correlation_id is None

    def test_levels(self, caplog):
        """Test each level method logs at its level."""
        logger = get_logger(LOGGER_NAME)
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            logger.info("i")
            logger.warning("w")
            logger.error("e")

        assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING, logging.ERROR]

    def test_exception_includes_traceback(self, caplog):
        """Test exception() records the active exception."""
        logger = get_logger(LOGGER_NAME)
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            try:
                raise ValueError("bad")
            except ValueError:
                logger.exception("failed")

        assert caplog.records[-1].exc_info[0] is ValueError

    def test_with_correlation(self):
        """Test deriving a logger with another correlation ID."""
        logger = get_logger(LOGGER_NAME, "a", "comp")
        derived = logger.with_correlation("b")
        assert derived.correlation_id == "b"
        assert derived.component == "comp"
        assert logger.correlation_id == "a"

    def test_enabled_levels(self):
        """Test level checks follow the underlying logger."""
        logging.getLogger(LOGGER_NAME).setLevel(logging.WARNING)
        try:
            logger = get_logger(LOGGER_NAME)
            assert logger.isEnabledFor(logging.ERROR)
            assert not logger.isEnabledFor(logging.DEBUG)
        finally:
            logging.getLogger(LOGGER_NAME).setLevel(logging.NOTSET)

    def test_call_extra_applies_to_one_record(self, caplog):
        """Test per-call extra values apply to that record only."""
        logger = get_logger(LOGGER_NAME, "keep", "comp")
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            logger.debug("first", extra={"correlation_id": "once"})
            logger.debug("second")

        assert [r.correlation_id for r in caplog.records] == ["once", "keep"]
