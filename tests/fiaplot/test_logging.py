"""
Tests for the package-level Loguru configuration helpers.
"""

import io

import pytest

import fiaplot
from fiaplot import (
    LoggingConfigError,
    configure_file_logging,
    configure_test_logging,
    get_logger_state,
    initialize_production_logging,
    is_logging_initialized,
    logger,
    reset_logging,
    validate_log_level,
)


@pytest.fixture
def restore_logging():
    yield
    reset_logging()


class TestValidateLogLevel:
    @pytest.mark.parametrize("level", ["debug", "Info", "WARNING", "trace"])
    def test_levels_are_normalised(self, level):
        assert validate_log_level(level) == level.upper()

    def test_invalid_level(self):
        with pytest.raises(LoggingConfigError, match="Invalid log level"):
            validate_log_level("verbose")


class TestConfigureLogging:
    def test_test_logging_writes_to_stream(self, restore_logging):
        stream = io.StringIO()

        sink_ids = configure_test_logging(console_level="INFO", console_destination=stream)
        logger.debug("hidden message")
        logger.info("discovery started")

        output = stream.getvalue()
        assert "discovery started" in output
        assert "hidden message" not in output
        assert set(sink_ids) == {"console"}
        assert get_logger_state().is_test_mode()
        assert is_logging_initialized()

    def test_file_logging_creates_directory(self, tmp_path, restore_logging):
        log_file = tmp_path / "nested" / "fiaplot.log"

        sink_id = configure_file_logging(log_file, level="INFO")
        logger.info("written to file")
        logger.remove(sink_id)

        assert "written to file" in log_file.read_text(encoding="utf-8")

    def test_production_logging(self, tmp_path, restore_logging):
        sink_ids = initialize_production_logging(console_level="ERROR", log_dir=tmp_path)
        logger.debug("kept in file")

        assert set(sink_ids) == {"console", "file"}
        assert sorted(get_logger_state().sink_ids) == sorted(sink_ids.values())
        log_files = list(tmp_path.glob("fiaplot_*.log"))
        assert len(log_files) == 1
        assert not get_logger_state().is_test_mode()

    def test_reset(self, restore_logging):
        configure_test_logging(console_destination=io.StringIO())

        reset_logging()

        assert not is_logging_initialized()
        assert get_logger_state().sink_ids == []


def test_pytest_run_is_detected():
    assert fiaplot._is_pytest_running()
