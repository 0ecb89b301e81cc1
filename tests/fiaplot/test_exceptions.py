"""
Tests for the fiaplot exception hierarchy.
"""

import pytest

from fiaplot import logger
from fiaplot.exceptions import (
    AuthError,
    ConfigError,
    DataFetchError,
    DiscoveryCancelled,
    DiscoveryError,
    FiaPlotError,
    MetadataFetchError,
    PathEnumerationError,
    log_and_raise,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls, parent, code",
        [
            (ConfigError, FiaPlotError, "CONFIG_001"),
            (DiscoveryError, FiaPlotError, "DISCOVERY_001"),
            (PathEnumerationError, DiscoveryError, "DISCOVERY_002"),
            (MetadataFetchError, DiscoveryError, "DISCOVERY_003"),
            (DiscoveryCancelled, DiscoveryError, "DISCOVERY_004"),
            (DataFetchError, FiaPlotError, "DATA_001"),
            (AuthError, FiaPlotError, "AUTH_001"),
        ],
    )
    def test_default_codes(self, cls, parent, code):
        error = cls("failure")

        assert isinstance(error, parent)
        assert isinstance(error, Exception)
        assert error.error_code == code

    def test_base_default_code(self):
        assert FiaPlotError("failure").error_code == "FIAPLOT_001"

    def test_cancelled_default_message(self):
        assert DiscoveryCancelled().message == "Discovery run cancelled"


class TestContext:
    def test_str_includes_code_and_context(self):
        error = DataFetchError("Request failed", context={"path": "/entry/data/counts"})

        text = str(error)

        assert text.startswith("Request failed [Error Code: DATA_001, Context: ")
        assert "path=/entry/data/counts" in text
        assert error.message == "Request failed"

    def test_source_function_is_recorded(self):
        error = FiaPlotError("failure")
        assert error.context["source_function"] == "test_source_function_is_recorded"

    def test_source_function_skips_subclass_constructors(self):
        def list_file_paths():
            return PathEnumerationError("listing failed")

        error = list_file_paths()

        assert error.context["source_function"] == "list_file_paths"

    @pytest.mark.parametrize("cls", [ConfigError, MetadataFetchError, DataFetchError, DiscoveryCancelled, AuthError])
    def test_source_function_for_every_subclass(self, cls):
        error = cls("failure")
        assert error.context["source_function"] == "test_source_function_for_every_subclass"

    def test_with_context_chains(self):
        error = DataFetchError("Request failed").with_context({"file": "/archive/run.nxs"})

        assert isinstance(error, DataFetchError)
        assert error.context["file"] == "/archive/run.nxs"

    def test_discovery_context_paths_are_strings(self, tmp_path):
        error = PathEnumerationError("listing failed", context={"file": tmp_path / "run.nxs"})
        assert error.context["file"] == str(tmp_path / "run.nxs")

    def test_config_path_is_a_string(self, tmp_path):
        error = ConfigError("missing", context={"config_path": tmp_path})
        assert error.context["config_path"] == str(tmp_path)

    def test_repr(self):
        error = AuthError("rejected", error_code="AUTH_002")
        assert repr(error).startswith("AuthError(message='rejected', error_code='AUTH_002'")


class TestLogAndRaise:
    def test_logs_then_raises(self, caplog):
        with pytest.raises(ConfigError):
            log_and_raise(ConfigError("Invalid batch size", "CONFIG_003"), logger)

        assert "ConfigError: Invalid batch size" in caplog.text

    def test_without_logger(self):
        with pytest.raises(DataFetchError):
            log_and_raise(DataFetchError("Request failed"))
