"""
Tests for PlottingSettings and load_settings.

Covers environment variables, YAML overrides, keyword overrides and the
ConfigError codes raised for each failure.
"""

import pytest

from fiaplot.config import PlottingSettings, load_settings
from fiaplot.exceptions import ConfigError


@pytest.fixture
def env(clean_fia_environment):
    return clean_fia_environment


class TestDefaults:
    def test_defaults(self, env):
        settings = load_settings()

        assert settings.plotting_api_url == "http://localhost:8000"
        assert settings.timeout == 30.0
        assert settings.batch_size == 15
        assert settings.api_style == "plotting"
        assert settings.dev_mode is False
        assert settings.validate_paths is True
        assert settings.error_markers == ["error", "err"]
        assert settings.auth_token is None


class TestEnvironment:
    def test_environment_variables(self, env):
        env.setenv("FIA_PLOTTING_API_URL", "https://plotting.example/")
        env.setenv("FIA_BATCH_SIZE", "5")
        env.setenv("FIA_DEV_MODE", "true")
        env.setenv("FIA_ERROR_MARKERS", '["sigma"]')

        settings = PlottingSettings()

        assert settings.plotting_api_url == "https://plotting.example"
        assert settings.batch_size == 5
        assert settings.dev_mode is True
        assert settings.error_markers == ["sigma"]

    def test_lowercase_variables(self, env):
        env.setenv("fia_api_style", "h5grove")
        assert PlottingSettings().api_style == "h5grove"


class TestYamlOverrides:
    def test_yaml_overrides_environment(self, env, tmp_path):
        env.setenv("FIA_BATCH_SIZE", "5")
        config = tmp_path / "fiaplot.yaml"
        config.write_text("batch_size: 8\ntimeout: 120\n", encoding="utf-8")

        settings = load_settings(config)

        assert settings.batch_size == 8
        assert settings.timeout == 120.0

    def test_keyword_overrides_win(self, env, tmp_path):
        config = tmp_path / "fiaplot.yaml"
        config.write_text("batch_size: 8\n", encoding="utf-8")

        assert load_settings(str(config), batch_size=3).batch_size == 3

    def test_empty_file(self, env, tmp_path):
        config = tmp_path / "empty.yaml"
        config.write_text("", encoding="utf-8")

        assert load_settings(config).batch_size == 15


class TestErrors:
    def test_missing_file(self, env, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(tmp_path / "missing.yaml")

        assert exc_info.value.error_code == "CONFIG_001"
        assert exc_info.value.context["config_path"] == str(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, env, tmp_path):
        config = tmp_path / "broken.yaml"
        config.write_text("batch_size: [1, 2\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_settings(config)

        assert exc_info.value.error_code == "CONFIG_002"

    def test_non_mapping_yaml(self, env, tmp_path):
        config = tmp_path / "list.yaml"
        config.write_text("- batch_size\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="must contain a mapping") as exc_info:
            load_settings(config)

        assert exc_info.value.error_code == "CONFIG_002"

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"batch_size": 0}, "batch_size"),
            ({"timeout": -1}, "timeout"),
            ({"plotting_api_url": "ftp://plotting"}, "plotting_api_url"),
            ({"api_style": "rest"}, "api_style"),
            ({"error_markers": []}, "error_markers"),
            ({"error_markers": ["error", " "]}, "error_markers"),
        ],
    )
    def test_validation_errors(self, env, overrides, field):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(**overrides)

        assert exc_info.value.error_code == "CONFIG_003"
        assert any(field in detail for detail in exc_info.value.context["validation_errors"])

    def test_empty_error_markers_from_environment(self, env):
        env.setenv("FIA_ERROR_MARKERS", "[]")

        with pytest.raises(ConfigError) as exc_info:
            load_settings()

        assert exc_info.value.error_code == "CONFIG_003"
        assert any("error_markers cannot be empty" in detail for detail in exc_info.value.context["validation_errors"])
