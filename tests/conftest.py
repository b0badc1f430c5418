"""
Shared pytest fixtures for the accountreload test suite.

Provides fake provider adapters and an isolated registry so dispatcher
tests never import real provider modules.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from accountreload.config import ReloadConfig, reset_config, set_config
from accountreload.core import Account, AccountService
from accountreload.logging_config import clear_context
from accountreload.registry import AdapterRegistry, reset_registry


def pytest_configure(config):
    """Register custom markers.

    - unit: isolated unit tests with no external dependencies
    - integration: tests that import adapter modules from disk
    """
    config.addinivalue_line("markers", "unit: isolated unit tests with no external dependencies")
    config.addinivalue_line("markers", "integration: tests that import adapter modules from disk")


# ============================================================================
# Global Test Setup
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_globals():
    """Reset process-wide config, registry and log context around each test."""
    reset_config()
    reset_registry()
    clear_context()
    yield
    reset_config()
    reset_registry()
    clear_context()


@pytest.fixture
def default_config():
    """Config with defaults only, ignoring the caller's environment."""
    config = ReloadConfig()
    set_config(config)
    return config


# ============================================================================
# Fake Adapters
# ============================================================================


class FakeArdInstance:
    """ARD client stand-in returning fixed balances."""

    def __init__(self, balances=None, error: Exception | None = None):
        self.balances = balances if balances is not None else [{"amount": 12.5}]
        self.error = error
        self.calls = 0

    async def get_online_payments(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.balances


@pytest.fixture
def fake_adapters():
    """One AsyncMock-backed adapter per delegating service."""
    return {
        AccountService.PRONOTE: SimpleNamespace(
            reload_instance=AsyncMock(
                return_value={"instance": "pronote-client", "authentication": {"token": "new"}}
            )
        ),
        AccountService.MULTI: SimpleNamespace(
            reload_instance=AsyncMock(
                return_value={"instance": "multi-client", "authentication": {"session": "s2"}}
            )
        ),
        AccountService.TURBOSELF: SimpleNamespace(
            reload=AsyncMock(return_value={"token": "turbo-new"})
        ),
        AccountService.ARD: SimpleNamespace(reload=AsyncMock(return_value=FakeArdInstance())),
        AccountService.IZLY: SimpleNamespace(reload=AsyncMock(return_value="izly-client")),
        AccountService.SKOLENGO: SimpleNamespace(
            reload=AsyncMock(
                return_value=SimpleNamespace(instance="skolengo-client", authentication={"refresh": "r2"})
            )
        ),
        AccountService.ECOLEDIRECTE: SimpleNamespace(
            reload=AsyncMock(
                return_value={"instance": "ed-client", "authentication": {"token": "ed-new"}}
            )
        ),
    }


@pytest.fixture
def registry(fake_adapters):
    """Registry holding the fake adapters as ready instances."""
    reg = AdapterRegistry(use_defaults=False)
    for service, adapter in fake_adapters.items():
        reg.register_instance(service, adapter)
    return reg


@pytest.fixture
def make_account():
    """Factory for accounts with sensible defaults."""

    def _make(service, authentication=None, instance=None, **kwargs):
        return Account(
            service=service,
            authentication=authentication,
            instance=instance,
            **kwargs,
        )

    return _make
