"""
Unit Tests for Logging Configuration
"""

import logging

import pytest
from loguru import logger

from petcover.utils.logging import get_logger, setup_logging


@pytest.mark.unit
class TestLoggingSetup:
    """loguru sinks and standard library interception"""

    def test_stdlib_records_reach_loguru_file(self, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        setup_logging(level="DEBUG", log_file=str(log_file))
        try:
            logging.getLogger("petcover.services.adjudicator").warning("Annual limit overrun: test")
            get_logger("petcover.tests").info("Ledger ready")
        finally:
            logger.remove()
            logging.basicConfig(handlers=[], force=True)

        content = log_file.read_text()
        assert "Annual limit overrun: test" in content
        assert "Ledger ready" in content

    def test_level_filters(self, tmp_path):
        log_file = tmp_path / "engine.log"
        setup_logging(level="WARNING", log_file=str(log_file))
        try:
            logging.getLogger("petcover.services.usage_ledger").debug("Usage incremented: hidden")
        finally:
            logger.remove()
            logging.basicConfig(handlers=[], force=True)

        assert "hidden" not in log_file.read_text()
