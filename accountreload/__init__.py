"""
accountreload: revive lapsed provider sessions behind one async call.

Accounts belong to one of several education-data providers (Pronote,
Turboself, ARD, Izly, Skolengo, EcoleDirecte, multi-service and local
accounts). Each provider rebuilds its client differently; ``reload`` hides
that behind a single contract:

    from accountreload import Account, AccountService, reload

    account = Account(service=AccountService.IZLY, authentication={"token": "abc"})
    result = await reload(account)
    store(result.authentication)      # persist the refreshed credentials
    client = result.instance          # swap in the live client

Provider adapters are imported lazily, only when an account of that
provider is reloaded. See :mod:`accountreload.registry` and
:mod:`accountreload.config` for where they are looked up.
"""

from __future__ import annotations

import importlib
from typing import Any

_EXPORT_MAP = {
    'Account': ('accountreload.core', 'Account'),
    'AccountReloadError': ('accountreload.exceptions', 'AccountReloadError'),
    'AccountReloader': ('accountreload.protocols', 'AccountReloader'),
    'AccountService': ('accountreload.core', 'AccountService'),
    'AdapterContractError': ('accountreload.exceptions', 'AdapterContractError'),
    'AdapterError': ('accountreload.exceptions', 'AdapterError'),
    'AdapterNotRegisteredError': ('accountreload.exceptions', 'AdapterNotRegisteredError'),
    'AdapterRegistry': ('accountreload.registry', 'AdapterRegistry'),
    'ConfigurationError': ('accountreload.exceptions', 'ConfigurationError'),
    'IdentityProvider': ('accountreload.core', 'IdentityProvider'),
    'InstanceReloader': ('accountreload.protocols', 'InstanceReloader'),
    'InvalidAccountError': ('accountreload.exceptions', 'InvalidAccountError'),
    'OnlinePaymentsClient': ('accountreload.protocols', 'OnlinePaymentsClient'),
    'Reconnected': ('accountreload.core', 'Reconnected'),
    'ReloadConfig': ('accountreload.config', 'ReloadConfig'),
    'ReloadDispatcher': ('accountreload.dispatcher', 'ReloadDispatcher'),
    'configure_logging': ('accountreload.logging_config', 'configure_logging'),
    'get_config': ('accountreload.config', 'get_config'),
    'get_registry': ('accountreload.registry', 'get_registry'),
    'reload': ('accountreload.dispatcher', 'reload'),
}


def __getattr__(name: str) -> Any:
    """Lazily import public symbols to avoid heavy import side effects."""
    try:
        module_name, attr_name = _EXPORT_MAP[name]
    except KeyError as exc:
        raise AttributeError(f"module 'accountreload' has no attribute {name!r}") from exc
    module = importlib.import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))


from accountreload.__version__ import __version__  # noqa: E402

__all__ = [
    # Core
    "Account",
    "AccountService",
    "IdentityProvider",
    "Reconnected",
    # Dispatch
    "ReloadDispatcher",
    "reload",
    # Adapters
    "AdapterRegistry",
    "get_registry",
    "InstanceReloader",
    "AccountReloader",
    "OnlinePaymentsClient",
    # Configuration & logging
    "ReloadConfig",
    "get_config",
    "configure_logging",
    # Errors
    "AccountReloadError",
    "AdapterError",
    "AdapterNotRegisteredError",
    "AdapterContractError",
    "ConfigurationError",
    "InvalidAccountError",
]
