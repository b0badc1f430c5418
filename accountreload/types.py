"""
Shared type definitions for accountreload.

Usage:
    from accountreload.types import AuthenticationPayload, InstanceHandle

    def persist(authentication: AuthenticationPayload) -> None:
        ...
"""

from __future__ import annotations

from typing import Any, Callable, NewType, TypeAlias

# === Semantic String Types ===

AccountId = NewType("AccountId", str)
"""Local identifier of a stored account (used as a persistence key)."""

ModulePath = NewType("ModulePath", str)
"""Dotted import path of a provider adapter module."""

# === Payload Types ===

AuthenticationPayload: TypeAlias = Any
"""Serializable credential/session blob. Concrete shape depends on the service."""

InstanceHandle: TypeAlias = Any
"""Live, process-local provider client. Never serialized."""

JsonDict: TypeAlias = dict[str, Any]
"""A JSON-serializable dictionary."""

# === Callback Types ===

AdapterFactory: TypeAlias = Callable[[], Any]
"""Zero-argument callable that builds an adapter object on first use."""
