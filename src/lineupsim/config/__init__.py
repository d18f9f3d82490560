"""Configuration loading."""

from lineupsim.config.settings import SimConfig, get_config

__all__ = ["SimConfig", "get_config"]
