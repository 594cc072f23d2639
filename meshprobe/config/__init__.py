"""Harness configuration."""

from .provider import ConfigProvider, EnvConfigProvider, HarnessConfig, YamlConfigProvider

__all__ = ["ConfigProvider", "EnvConfigProvider", "HarnessConfig", "YamlConfigProvider"]
