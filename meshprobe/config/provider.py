"""Configuration provider following Black Box Design principles."""
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml

logger = logging.getLogger("meshprobe.config")


@dataclass(frozen=True)
class HarnessConfig:
    """Harness configuration."""
    cli_path: str
    namespace: str = "linkerd"
    k8s_context: str = ""
    cluster_domain: str = "cluster.local"
    verbose: bool = False
    retry_interval: float = 1.0
    http_timeout: float = 10.0
    http_retry_timeout: float = 60.0
    stream_grace_period: float = 0.5
    testdata_dir: str = "testdata"

    def validate(self) -> "HarnessConfig":
        """Check the CLI binary setting; returns self for chaining."""
        if not self.cli_path:
            raise ValueError("CLI path is required (MESHPROBE_CLI)")
        if not os.path.isabs(self.cli_path):
            raise ValueError(f"CLI path must be absolute, got {self.cli_path}")
        if not os.path.exists(self.cli_path):
            raise ValueError(f"CLI binary does not exist: {self.cli_path}")
        if self.retry_interval <= 0:
            raise ValueError(f"retry interval must be positive, got {self.retry_interval}")
        return self


# field name -> (environment variable, YAML key)
SETTINGS = {
    "cli_path": ("MESHPROBE_CLI", "cli"),
    "namespace": ("MESHPROBE_NAMESPACE", "namespace"),
    "k8s_context": ("MESHPROBE_K8S_CONTEXT", "k8sContext"),
    "cluster_domain": ("MESHPROBE_CLUSTER_DOMAIN", "clusterDomain"),
    "verbose": ("MESHPROBE_VERBOSE", "verbose"),
    "retry_interval": ("MESHPROBE_RETRY_INTERVAL", "retryIntervalSeconds"),
    "http_timeout": ("MESHPROBE_HTTP_TIMEOUT", "httpTimeoutSeconds"),
    "http_retry_timeout": ("MESHPROBE_HTTP_RETRY_TIMEOUT", "httpRetryTimeoutSeconds"),
    "stream_grace_period": ("MESHPROBE_STREAM_GRACE_PERIOD", "streamGracePeriodSeconds"),
    "testdata_dir": ("MESHPROBE_TESTDATA_DIR", "testdataDir"),
}


def _convert(name: str, value: Any) -> Any:
    """Coerce a raw setting to the type of the HarnessConfig field."""
    field_type = {f.name: f.type for f in fields(HarnessConfig)}[name]
    if field_type in (bool, "bool"):
        if isinstance(value, bool):
            return value
        return str(value).lower() == "true"
    if field_type in (float, "float"):
        return float(value)
    return str(value)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_harness_config(self) -> HarnessConfig:
        """Get harness configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def overrides(self) -> Dict[str, Any]:
        """Settings present in the environment, converted to field types."""
        values = {}
        for name, (env_var, _) in SETTINGS.items():
            raw = self.environ.get(env_var)
            if raw is not None and raw != "":
                values[name] = _convert(name, raw)
        return values

    def get_harness_config(self) -> HarnessConfig:
        """Get harness configuration from environment variables."""
        values = self.overrides()
        return HarnessConfig(**{"cli_path": "", **values}).validate()


class YamlConfigProvider:
    """
    YAML file configuration provider.

    Environment variables take precedence over values in the file, so a CI
    job can reuse a checked-in file and only swap the binary path.
    """

    def __init__(self, config_path: str, environ: Optional[Dict[str, str]] = None):
        self.config_path = Path(config_path)
        self.env = EnvConfigProvider(environ)

    def _load_file(self) -> Dict[str, Any]:
        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {self.config_path} must contain a mapping")

        values = {}
        for name, (_, key) in SETTINGS.items():
            if key in data and data[key] is not None:
                values[name] = _convert(name, data[key])

        unknown = set(data) - {key for _, key in SETTINGS.values()}
        if unknown:
            logger.warning(f"Ignoring unknown config keys in {self.config_path}: {sorted(unknown)}")

        return values

    def get_harness_config(self) -> HarnessConfig:
        """Get harness configuration from the file, overridden by the environment."""
        config = HarnessConfig(**{"cli_path": "", **self._load_file()})
        return replace(config, **self.env.overrides()).validate()
