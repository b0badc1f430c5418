"""
Capability contracts for provider adapters.

An adapter is any object (usually a module) exposing the coroutine its
service needs. These protocols let adapters be type-checked and mocked
without importing a real provider client.

    Pronote, Multi           reload_instance(authentication) -> pair
    Turboself                reload(account) -> authentication
    ARD                      reload(account) -> instance with get_online_payments()
    Izly                     reload(account) -> instance
    Skolengo, EcoleDirecte   reload(account) -> pair

A "pair" is a Reconnected, a mapping with ``instance`` and
``authentication`` keys, or an object with those two attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from accountreload.core import AccountService

if TYPE_CHECKING:
    from accountreload.core import Account


@runtime_checkable
class InstanceReloader(Protocol):
    """Adapter rebuilding a full session from stored authentication (Pronote, Multi)."""

    async def reload_instance(self, authentication: Any) -> Any:
        """Return the new instance and refreshed authentication as a pair."""
        ...


@runtime_checkable
class AccountReloader(Protocol):
    """Adapter reloading from the whole account (Turboself, ARD, Izly, Skolengo, EcoleDirecte).

    What ``reload`` returns depends on the service; see the module docstring.
    """

    async def reload(self, account: "Account") -> Any:
        ...


@runtime_checkable
class OnlinePaymentsClient(Protocol):
    """ARD client instance able to fetch the account's balances."""

    async def get_online_payments(self) -> Any:
        ...


# Name of the callable each delegating service requires on its adapter.
REQUIRED_CAPABILITY: dict[AccountService, str] = {
    AccountService.PRONOTE: "reload_instance",
    AccountService.MULTI: "reload_instance",
    AccountService.TURBOSELF: "reload",
    AccountService.ARD: "reload",
    AccountService.IZLY: "reload",
    AccountService.SKOLENGO: "reload",
    AccountService.ECOLEDIRECTE: "reload",
}


__all__ = [
    "InstanceReloader",
    "AccountReloader",
    "OnlinePaymentsClient",
    "REQUIRED_CAPABILITY",
]
