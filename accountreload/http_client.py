"""
Standardized HTTP client configuration for provider adapters.

The dispatcher performs no I/O and applies no timeout of its own; adapters
that talk to a provider over HTTP should create their sessions here so every
provider gets a bounded, consistent timeout.

Usage:
    from accountreload.http_client import create_client_session

    async def reload(account):
        async with create_client_session(AccountService.IZLY) as session:
            async with session.post(url, json=payload) as resp:
                ...
"""

from __future__ import annotations

from typing import Optional

import aiohttp
from aiohttp import ClientTimeout

from accountreload.core import AccountService

__all__ = [
    "DEFAULT_TIMEOUT",
    "PROVIDER_TIMEOUTS",
    "get_timeout",
    "create_client_session",
]

# Default timeout for provider requests (30 seconds total)
DEFAULT_TIMEOUT = ClientTimeout(
    total=30,
    connect=10,
    sock_read=20,
)

# Providers whose login flows chain several redirects get more time
PROVIDER_TIMEOUTS: dict[AccountService, ClientTimeout] = {
    AccountService.PRONOTE: ClientTimeout(total=60, connect=10, sock_read=45),
    AccountService.SKOLENGO: ClientTimeout(total=60, connect=10, sock_read=45),
    AccountService.ECOLEDIRECTE: ClientTimeout(total=45, connect=10, sock_read=30),
    AccountService.TURBOSELF: ClientTimeout(total=20, connect=5, sock_read=15),
    AccountService.IZLY: ClientTimeout(total=20, connect=5, sock_read=15),
}


def get_timeout(service: Optional[AccountService] = None) -> ClientTimeout:
    """Timeout for ``service``, or DEFAULT_TIMEOUT when it has no specific entry."""
    if service is None:
        return DEFAULT_TIMEOUT
    return PROVIDER_TIMEOUTS.get(AccountService.parse(service), DEFAULT_TIMEOUT)


def create_client_session(
    service: Optional[AccountService] = None,
    timeout: ClientTimeout | None = None,
    **kwargs,
) -> aiohttp.ClientSession:
    """Create an aiohttp ClientSession with the provider's timeout.

    Args:
        service: Provider the session talks to; selects the default timeout.
        timeout: Explicit timeout, overriding the provider default.
        **kwargs: Additional arguments passed to ClientSession.

    Must be called from within a running event loop.
    """
    if timeout is None:
        timeout = get_timeout(service)
    return aiohttp.ClientSession(timeout=timeout, **kwargs)
