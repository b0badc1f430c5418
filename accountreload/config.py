"""
Runtime configuration for accountreload.

Settings come from the environment and can be overridden per provider:

    ACCOUNTRELOAD_ADAPTER_PACKAGE     base package for adapter modules
                                      (default: accountreload.providers)
    ACCOUNTRELOAD_ADAPTER_<SERVICE>   full module path for one provider,
                                      e.g. ACCOUNTRELOAD_ADAPTER_PRONOTE=acme.pronote
    ACCOUNTRELOAD_LOG_LEVEL           DEBUG, INFO, WARNING, ... (default: INFO)
    ACCOUNTRELOAD_LOG_FORMAT          json or text (default: json)
    ACCOUNTRELOAD_LOG_FILE            optional log file path
"""

from __future__ import annotations

import os
import re
import threading
from dataclasses import dataclass, field
from typing import Mapping, Optional

from accountreload.core import AccountService
from accountreload.exceptions import ConfigurationError
from accountreload.types import ModulePath

ENV_PREFIX = "ACCOUNTRELOAD_"
DEFAULT_ADAPTER_PACKAGE = "accountreload.providers"

_MODULE_PATH_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMATS = ("json", "text")


@dataclass(frozen=True)
class ReloadConfig:
    """Configuration for adapter lookup and logging.

    Attributes:
        adapter_package: Package holding one adapter module per service.
        adapter_overrides: Per-service module paths that replace the default.
        log_level: Root log level name.
        log_format: "json" or "text".
        log_file: Optional path for a rotating log file.
    """

    adapter_package: str = DEFAULT_ADAPTER_PACKAGE
    adapter_overrides: Mapping[AccountService, str] = field(default_factory=dict)
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not _MODULE_PATH_RE.match(self.adapter_package):
            raise ConfigurationError("adapter_package", f"not a module path: {self.adapter_package!r}")
        for service, path in self.adapter_overrides.items():
            if not service.requires_adapter:
                raise ConfigurationError(
                    f"adapter_overrides[{service.value}]", "service does not use an adapter"
                )
            if not _MODULE_PATH_RE.match(path):
                raise ConfigurationError(
                    f"adapter_overrides[{service.value}]", f"not a module path: {path!r}"
                )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError("log_level", f"unknown level {self.log_level!r}")
        if self.log_format not in _LOG_FORMATS:
            raise ConfigurationError("log_format", f"expected one of {_LOG_FORMATS}")

    def adapter_module(self, service: AccountService) -> ModulePath:
        """Module path the registry imports for ``service`` by default."""
        override = self.adapter_overrides.get(service)
        if override:
            return ModulePath(override)
        return ModulePath(f"{self.adapter_package}.{service.value}")

    def default_adapter_modules(self) -> dict[AccountService, ModulePath]:
        return {
            service: self.adapter_module(service)
            for service in AccountService
            if service.requires_adapter
        }

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ReloadConfig:
        """Build a config from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        overrides: dict[AccountService, str] = {}
        for service in AccountService:
            if not service.requires_adapter:
                continue
            value = env.get(f"{ENV_PREFIX}ADAPTER_{service.name}", "").strip()
            if value:
                overrides[service] = value

        return cls(
            adapter_package=env.get(f"{ENV_PREFIX}ADAPTER_PACKAGE", DEFAULT_ADAPTER_PACKAGE).strip(),
            adapter_overrides=overrides,
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").strip().upper(),
            log_format=env.get(f"{ENV_PREFIX}LOG_FORMAT", "json").strip().lower(),
            log_file=env.get(f"{ENV_PREFIX}LOG_FILE", "").strip() or None,
        )


_config: Optional[ReloadConfig] = None
_config_lock = threading.Lock()


def get_config() -> ReloadConfig:
    """Return the process-wide config, reading the environment on first use."""
    global _config
    with _config_lock:
        if _config is None:
            _config = ReloadConfig.from_env()
        return _config


def set_config(config: ReloadConfig) -> None:
    """Replace the process-wide config."""
    global _config
    with _config_lock:
        _config = config


def reset_config() -> None:
    """Forget the cached config so the next get_config() re-reads the environment."""
    global _config
    with _config_lock:
        _config = None


__all__ = [
    "ENV_PREFIX",
    "DEFAULT_ADAPTER_PACKAGE",
    "ReloadConfig",
    "get_config",
    "set_config",
    "reset_config",
]
