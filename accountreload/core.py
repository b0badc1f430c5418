"""
Core abstractions for accountreload: service tags, accounts and reload results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from accountreload.serialization import SerializableMixin
from accountreload.types import AccountId, AuthenticationPayload, InstanceHandle


class AccountService(str, Enum):
    """Provider an account belongs to.

    Closed set of eight known providers plus UNRECOGNIZED, which stands in
    for any tag this library does not know how to reload.
    """

    PRONOTE = "pronote"
    LOCAL = "local"
    TURBOSELF = "turboself"
    ARD = "ard"
    IZLY = "izly"
    SKOLENGO = "skolengo"
    ECOLEDIRECTE = "ecoledirecte"
    MULTI = "multi"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, value: Any) -> AccountService:
        """Map a raw tag (member, value or name, any case) to a member.

        Unknown values map to UNRECOGNIZED; this never raises.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key or member.name.lower() == key:
                    return member
        return cls.UNRECOGNIZED

    @property
    def is_recognized(self) -> bool:
        return self is not AccountService.UNRECOGNIZED

    @property
    def requires_adapter(self) -> bool:
        """Whether reloading this service goes through a provider adapter."""
        return self not in (AccountService.LOCAL, AccountService.UNRECOGNIZED)


@dataclass
class IdentityProvider(SerializableMixin):
    """Identity backing a Local account."""

    identifier: Optional[str] = None
    name: Optional[str] = None
    raw_data: Any = None


@dataclass
class Account(SerializableMixin):
    """An account bound to one provider.

    ``authentication`` is the persisted credential blob; ``instance`` is the
    live client built from it and is never serialized.
    """

    service: AccountService
    authentication: AuthenticationPayload = None
    instance: InstanceHandle = None
    identity_provider: Optional[IdentityProvider] = None
    local_id: Optional[AccountId] = None
    name: Optional[str] = None

    _exclude_fields = ("instance",)

    def __post_init__(self) -> None:
        self.service = AccountService.parse(self.service)
        if isinstance(self.identity_provider, dict):
            self.identity_provider = IdentityProvider.from_dict(self.identity_provider)

    @property
    def label(self) -> str:
        """Short identifier for log lines."""
        return self.local_id or self.name or self.service.value


@dataclass(frozen=True)
class Reconnected(SerializableMixin):
    """Normalized result of a reload: the new live instance and refreshed credentials."""

    instance: InstanceHandle = None
    authentication: AuthenticationPayload = None

    _exclude_fields = ("instance",)

    def apply_to(self, account: Account) -> Account:
        """Return a copy of ``account`` carrying this result's instance and authentication.

        The original account is left as is; callers decide when to swap.
        """
        return Account(
            service=account.service,
            authentication=self.authentication,
            instance=self.instance,
            identity_provider=account.identity_provider,
            local_id=account.local_id,
            name=account.name,
        )


__all__ = [
    "AccountService",
    "IdentityProvider",
    "Account",
    "Reconnected",
]
