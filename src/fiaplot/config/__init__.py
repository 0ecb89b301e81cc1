"""Configuration for fiaplot."""

from fiaplot.config.settings import PlottingSettings, load_settings

__all__ = ["PlottingSettings", "load_settings"]
