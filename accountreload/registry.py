"""
Provider-keyed registry of reload adapters.

Each delegating service maps to an adapter source that is only turned into
a live adapter the first time that service is dispatched. Nothing is
imported or constructed for providers that are never used, so a broken or
slow provider only costs something when one of its accounts is reloaded.

Three registration modes, as in a DI container:
- module: a dotted import path, imported with importlib on first use
- factory: a zero-argument callable, called once on first use
- instance: a ready adapter object

Usage:
    from accountreload.registry import AdapterRegistry

    registry = AdapterRegistry()                       # defaults from config
    registry.register_module(AccountService.PRONOTE, "acme.pronote.reload")
    registry.register_factory(AccountService.IZLY, make_izly_adapter)

    adapter = registry.resolve(AccountService.PRONOTE)  # imported here
"""

from __future__ import annotations

import importlib
import threading
from typing import Any, Literal, Optional

from accountreload.config import ReloadConfig, get_config
from accountreload.core import AccountService
from accountreload.exceptions import AdapterContractError, AdapterNotRegisteredError
from accountreload.logging_config import get_logger
from accountreload.protocols import REQUIRED_CAPABILITY
from accountreload.types import AdapterFactory

logger = get_logger(__name__)

SourceKind = Literal["module", "factory", "instance"]


class AdapterRegistration:
    """A registered adapter source and, once resolved, its cached adapter."""

    def __init__(
        self,
        module_path: str | None = None,
        factory: AdapterFactory | None = None,
        instance: Any = None,
    ) -> None:
        modes = sum([module_path is not None, factory is not None, instance is not None])
        if modes != 1:
            raise ValueError("Exactly one of module_path, factory, or instance must be provided")
        self.module_path = module_path
        self.factory = factory
        self._adapter = instance
        self._loaded = instance is not None

    @property
    def kind(self) -> SourceKind:
        if self.module_path is not None:
            return "module"
        if self.factory is not None:
            return "factory"
        return "instance"

    @property
    def loaded(self) -> bool:
        return self._loaded

    def resolve(self) -> Any:
        """Return the adapter, importing or constructing it on first call.

        Errors from importlib or the factory propagate unchanged and leave
        the registration unloaded, so a later call retries.
        """
        if self._loaded:
            return self._adapter
        if self.module_path is not None:
            adapter = importlib.import_module(self.module_path)
        else:
            adapter = self.factory()
        self._adapter = adapter
        self._loaded = True
        return adapter

    def reset(self) -> None:
        """Drop a lazily built adapter. Instance registrations are kept."""
        if self.kind != "instance":
            self._adapter = None
            self._loaded = False

    def describe(self) -> str:
        if self.module_path is not None:
            return self.module_path
        if self.factory is not None:
            return f"factory:{getattr(self.factory, '__qualname__', repr(self.factory))}"
        return f"instance:{type(self._adapter).__name__}"


class AdapterRegistry:
    """Thread-safe map from service to lazily resolved adapter.

    By default every delegating service is registered with the module path
    given by the config (``ReloadConfig.adapter_module``). Pass
    ``use_defaults=False`` for an empty registry.
    """

    def __init__(self, config: ReloadConfig | None = None, use_defaults: bool = True) -> None:
        self._registrations: dict[AccountService, AdapterRegistration] = {}
        self._lock = threading.RLock()
        if use_defaults:
            for service, path in (config or get_config()).default_adapter_modules().items():
                self._registrations[service] = AdapterRegistration(module_path=path)

    @staticmethod
    def _check_service(service: AccountService) -> AccountService:
        service = AccountService.parse(service)
        if not service.requires_adapter:
            raise ValueError(f"Service {service.value!r} does not use an adapter")
        return service

    def register_module(self, service: AccountService, module_path: str) -> AdapterRegistry:
        """Register a module to import the first time ``service`` is resolved."""
        service = self._check_service(service)
        with self._lock:
            self._registrations[service] = AdapterRegistration(module_path=module_path)
        return self

    def register_factory(self, service: AccountService, factory: AdapterFactory) -> AdapterRegistry:
        """Register a factory called once, the first time ``service`` is resolved."""
        service = self._check_service(service)
        with self._lock:
            self._registrations[service] = AdapterRegistration(factory=factory)
        return self

    def register_instance(self, service: AccountService, adapter: Any) -> AdapterRegistry:
        """Register a ready adapter object for ``service``."""
        if adapter is None:
            raise ValueError("adapter must not be None")
        service = self._check_service(service)
        with self._lock:
            self._registrations[service] = AdapterRegistration(instance=adapter)
        return self

    def unregister(self, service: AccountService) -> bool:
        """Remove a registration. Returns True if one existed."""
        with self._lock:
            return self._registrations.pop(AccountService.parse(service), None) is not None

    def is_registered(self, service: AccountService) -> bool:
        with self._lock:
            return AccountService.parse(service) in self._registrations

    def is_loaded(self, service: AccountService) -> bool:
        """Whether the adapter for ``service`` has already been imported/constructed."""
        with self._lock:
            registration = self._registrations.get(AccountService.parse(service))
            return registration is not None and registration.loaded

    def loaded_services(self) -> list[AccountService]:
        with self._lock:
            return [s for s, r in self._registrations.items() if r.loaded]

    def registered_services(self) -> list[AccountService]:
        with self._lock:
            return list(self._registrations)

    def describe(self) -> dict[str, dict[str, Any]]:
        """Source and load state of each registration, keyed by service value."""
        with self._lock:
            return {
                service.value: {
                    "kind": registration.kind,
                    "source": registration.describe(),
                    "loaded": registration.loaded,
                }
                for service, registration in self._registrations.items()
            }

    def resolve(self, service: AccountService) -> Any:
        """Return the adapter for ``service``, loading it on first use.

        Raises:
            AdapterNotRegisteredError: No source registered for the service.
            AdapterContractError: The adapter lacks the callable the service needs.
            Exception: Any import or factory error, unchanged.
        """
        service = AccountService.parse(service)
        with self._lock:
            registration = self._registrations.get(service)
            if registration is None:
                raise AdapterNotRegisteredError(service.value)
            first_load = not registration.loaded
            adapter = registration.resolve()

        if first_load:
            logger.debug("Adapter loaded", service=service.value, source=registration.describe())

        capability = REQUIRED_CAPABILITY.get(service)
        if capability and not callable(getattr(adapter, capability, None)):
            raise AdapterContractError(service.value, f"missing callable {capability!r}")
        return adapter

    def reset(self, service: Optional[AccountService] = None) -> None:
        """Drop cached adapters (all, or only ``service``) so they load again on next use."""
        with self._lock:
            if service is not None:
                registration = self._registrations.get(AccountService.parse(service))
                if registration is not None:
                    registration.reset()
                return
            for registration in self._registrations.values():
                registration.reset()


_default_registry: Optional[AdapterRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> AdapterRegistry:
    """Return the process-wide registry, built from the config on first use."""
    global _default_registry
    with _registry_lock:
        if _default_registry is None:
            _default_registry = AdapterRegistry()
        return _default_registry


def set_registry(registry: AdapterRegistry) -> None:
    global _default_registry
    with _registry_lock:
        _default_registry = registry


def reset_registry() -> None:
    """Forget the process-wide registry; the next get_registry() rebuilds it."""
    global _default_registry
    with _registry_lock:
        _default_registry = None


__all__ = [
    "AdapterRegistration",
    "AdapterRegistry",
    "get_registry",
    "set_registry",
    "reset_registry",
]
