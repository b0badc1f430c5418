"""
Reload dispatcher: one entry point for reviving any account's session.

``reload(account)`` picks the strategy for the account's service, runs the
provider adapter through it and returns a uniform :class:`Reconnected`.
Each strategy owns the mapping from its adapter's output shape to the pair:

    PRONOTE, MULTI          adapter.reload_instance(authentication) is the pair
    LOCAL                   no adapter; instance = identity raw data or True,
                            authentication = True
    TURBOSELF               adapter.reload(account) is the authentication;
                            the current instance is kept
    ARD                     adapter.reload(account) is the instance; its
                            balances are merged into the old authentication
    IZLY                    adapter.reload(account) is the instance;
                            authentication is kept
    SKOLENGO, ECOLEDIRECTE  adapter.reload(account) is the pair
    UNRECOGNIZED            no adapter; Reconnected(None, None) and a warning

Adapter errors are never caught here. The input account is never mutated.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional

from accountreload.core import Account, AccountService, Reconnected
from accountreload.exceptions import AdapterContractError, InvalidAccountError
from accountreload.logging_config import LogContext, get_logger
from accountreload.registry import AdapterRegistry, get_registry

logger = get_logger(__name__)

Strategy = Callable[["ReloadDispatcher", Account], Awaitable[Reconnected]]


def as_reconnected(service: AccountService, result: Any) -> Reconnected:
    """Read an adapter's pair-shaped result as a Reconnected.

    Accepts a Reconnected, a mapping with ``instance`` and ``authentication``
    keys, or an object exposing both attributes.

    Raises:
        AdapterContractError: If ``result`` has neither shape.
    """
    if isinstance(result, Reconnected):
        return result
    if isinstance(result, Mapping):
        if "instance" in result and "authentication" in result:
            return Reconnected(instance=result["instance"], authentication=result["authentication"])
    elif hasattr(result, "instance") and hasattr(result, "authentication"):
        return Reconnected(instance=result.instance, authentication=result.authentication)
    raise AdapterContractError(
        service.value,
        f"expected an instance/authentication pair, got {type(result).__name__}",
    )


# =============================================================================
# Strategies
# =============================================================================


async def _reload_from_authentication(dispatcher: ReloadDispatcher, account: Account) -> Reconnected:
    # PRONOTE and MULTI: the adapter rebuilds everything from the stored credentials
    adapter = dispatcher.registry.resolve(account.service)
    result = await adapter.reload_instance(account.authentication)
    return as_reconnected(account.service, result)


async def _reload_local(dispatcher: ReloadDispatcher, account: Account) -> Reconnected:
    raw_data = account.identity_provider.raw_data if account.identity_provider else None
    return Reconnected(instance=raw_data or True, authentication=True)


async def _reload_turboself(dispatcher: ReloadDispatcher, account: Account) -> Reconnected:
    adapter = dispatcher.registry.resolve(AccountService.TURBOSELF)
    authentication = await adapter.reload(account)
    # The Turboself session object is not swapped on reload.
    return Reconnected(instance=account.instance, authentication=authentication)


async def _reload_ard(dispatcher: ReloadDispatcher, account: Account) -> Reconnected:
    if account.authentication is not None and not isinstance(account.authentication, Mapping):
        raise InvalidAccountError(
            AccountService.ARD.value,
            f"authentication must be a mapping, got {type(account.authentication).__name__}",
        )
    adapter = dispatcher.registry.resolve(AccountService.ARD)
    instance = await adapter.reload(account)
    balances = await instance.get_online_payments()
    return Reconnected(
        instance=instance,
        authentication={**(account.authentication or {}), "balances": balances},
    )


async def _reload_izly(dispatcher: ReloadDispatcher, account: Account) -> Reconnected:
    adapter = dispatcher.registry.resolve(AccountService.IZLY)
    instance = await adapter.reload(account)
    return Reconnected(instance=instance, authentication=account.authentication)


async def _reload_passthrough(dispatcher: ReloadDispatcher, account: Account) -> Reconnected:
    # SKOLENGO and ECOLEDIRECTE return both fields themselves
    adapter = dispatcher.registry.resolve(account.service)
    result = await adapter.reload(account)
    return as_reconnected(account.service, result)


async def _reload_unrecognized(dispatcher: ReloadDispatcher, account: Account) -> Reconnected:
    logger.warning("Service not implemented")
    return Reconnected(instance=None, authentication=None)


STRATEGIES: dict[AccountService, Strategy] = {
    AccountService.PRONOTE: _reload_from_authentication,
    AccountService.LOCAL: _reload_local,
    AccountService.TURBOSELF: _reload_turboself,
    AccountService.ARD: _reload_ard,
    AccountService.IZLY: _reload_izly,
    AccountService.SKOLENGO: _reload_passthrough,
    AccountService.ECOLEDIRECTE: _reload_passthrough,
    AccountService.MULTI: _reload_from_authentication,
    AccountService.UNRECOGNIZED: _reload_unrecognized,
}

_missing = set(AccountService) - set(STRATEGIES)
if _missing:  # pragma: no cover - guards edits to the table above
    raise RuntimeError(f"No reload strategy for: {sorted(s.value for s in _missing)}")


# =============================================================================
# Dispatcher
# =============================================================================


class ReloadDispatcher:
    """Stateless router from an account to its provider's reload strategy.

    The only state is the adapter registry, which caches loaded adapters.
    Concurrent reloads of different accounts are independent; reloads of the
    same account are not de-duplicated.
    """

    def __init__(self, registry: AdapterRegistry | None = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> AdapterRegistry:
        if self._registry is None:
            return get_registry()
        return self._registry

    async def reload(self, account: Account) -> Reconnected:
        """Reload ``account`` and return its new instance and authentication.

        Raises:
            Exception: Whatever the adapter (or its import) raised, unchanged.
        """
        service = AccountService.parse(account.service)
        strategy = STRATEGIES[service]
        with LogContext(service=service.value, account=account.label):
            logger.debug("Reloading account")
            return await strategy(self, account)


_default_dispatcher: Optional[ReloadDispatcher] = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> ReloadDispatcher:
    """Return the process-wide dispatcher (bound to the process-wide registry)."""
    global _default_dispatcher
    with _dispatcher_lock:
        if _default_dispatcher is None:
            _default_dispatcher = ReloadDispatcher()
        return _default_dispatcher


async def reload(account: Account) -> Reconnected:
    """Reload ``account`` with the process-wide dispatcher.

    Takes the service of the account and rebuilds the provider session from
    the stored authentication. The caller persists the returned
    authentication and swaps in the returned instance.
    """
    return await get_dispatcher().reload(account)


__all__ = [
    "STRATEGIES",
    "ReloadDispatcher",
    "as_reconnected",
    "get_dispatcher",
    "reload",
]
