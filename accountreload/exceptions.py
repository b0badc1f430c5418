"""
Custom exception types for accountreload.

Library code raises these only for its own failures: bad configuration,
adapters that break their capability contract, or malformed accounts.
Exceptions raised by provider adapters are never wrapped and reach the
caller unchanged.
"""

from __future__ import annotations

from typing import Any


class AccountReloadError(Exception):
    """Base exception for all accountreload errors.

    Catch this to handle every library-originated failure with a single
    handler. Adapter failures are not subclasses of this.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(AccountReloadError):
    """Raised when environment or explicit configuration is invalid."""

    def __init__(self, setting: str, reason: str):
        super().__init__(
            f"Invalid configuration for {setting}: {reason}",
            {"setting": setting, "reason": reason},
        )
        self.setting = setting
        self.reason = reason


# ============================================================================
# Adapter Errors
# ============================================================================


class AdapterError(AccountReloadError):
    """Base exception for adapter registration and contract errors."""

    pass


class AdapterNotRegisteredError(AdapterError):
    """Raised when no adapter source is registered for a service."""

    def __init__(self, service: str):
        super().__init__(f"No adapter registered for service: {service}", {"service": service})
        self.service = service


class AdapterContractError(AdapterError):
    """Raised when an adapter, or the value it returned, breaks its contract.

    Covers both a resolved adapter missing the callable its service needs
    and an adapter result that cannot be read as an instance/authentication
    pair.
    """

    def __init__(self, service: str, reason: str):
        super().__init__(
            f"Adapter for {service} broke its contract: {reason}",
            {"service": service, "reason": reason},
        )
        self.service = service
        self.reason = reason


# ============================================================================
# Account Errors
# ============================================================================


class InvalidAccountError(AccountReloadError):
    """Raised when an account cannot be reloaded because its fields are malformed."""

    def __init__(self, service: str, reason: str):
        super().__init__(
            f"Invalid {service} account: {reason}",
            {"service": service, "reason": reason},
        )
        self.service = service
        self.reason = reason


__all__ = [
    "AccountReloadError",
    "ConfigurationError",
    "AdapterError",
    "AdapterNotRegisteredError",
    "AdapterContractError",
    "InvalidAccountError",
]
