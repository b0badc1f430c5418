"""Tests for the provider adapter registry."""

import sys
import textwrap
import threading
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from accountreload.config import ReloadConfig
from accountreload.core import AccountService
from accountreload.exceptions import AdapterContractError, AdapterNotRegisteredError
from accountreload.registry import (
    AdapterRegistration,
    AdapterRegistry,
    get_registry,
    reset_registry,
    set_registry,
)


@pytest.fixture
def adapter_package(tmp_path, monkeypatch):
    """Write a throwaway adapter package to disk and put it on sys.path."""
    package = tmp_path / "fake_providers"
    package.mkdir()
    (package / "__init__.py").write_text("")
    (package / "izly.py").write_text(
        textwrap.dedent(
            """
            LOADS = []
            LOADS.append("loaded")

            async def reload(account):
                return "izly-client"
            """
        )
    )
    (package / "pronote.py").write_text("VALUE = 1\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    yield "fake_providers"
    for name in list(sys.modules):
        if name == "fake_providers" or name.startswith("fake_providers."):
            del sys.modules[name]


class TestAdapterRegistration:
    """Tests for a single registration."""

    def test_requires_exactly_one_source(self):
        with pytest.raises(ValueError, match="Exactly one"):
            AdapterRegistration()
        with pytest.raises(ValueError, match="Exactly one"):
            AdapterRegistration(module_path="a.b", factory=lambda: None)

    def test_instance_is_loaded_immediately(self):
        adapter = object()
        registration = AdapterRegistration(instance=adapter)

        assert registration.kind == "instance"
        assert registration.loaded
        assert registration.resolve() is adapter

    def test_factory_is_called_once(self):
        factory = MagicMock(return_value="adapter")
        registration = AdapterRegistration(factory=factory)

        assert not registration.loaded
        assert registration.resolve() == "adapter"
        assert registration.resolve() == "adapter"
        factory.assert_called_once_with()

    def test_failed_factory_can_be_retried(self):
        factory = MagicMock(side_effect=[RuntimeError("boom"), "adapter"])
        registration = AdapterRegistration(factory=factory)

        with pytest.raises(RuntimeError):
            registration.resolve()
        assert not registration.loaded
        assert registration.resolve() == "adapter"

    def test_reset_keeps_instances(self):
        adapter = object()
        registration = AdapterRegistration(instance=adapter)

        registration.reset()

        assert registration.resolve() is adapter

    def test_describe(self):
        def build_adapter():
            return None

        assert AdapterRegistration(module_path="pkg.mod").describe() == "pkg.mod"
        assert AdapterRegistration(factory=build_adapter).describe().startswith("factory:")
        assert AdapterRegistration(instance=SimpleNamespace()).describe() == "instance:SimpleNamespace"


class TestDefaults:
    """Default registrations come from the config."""

    def test_every_delegating_service_is_registered(self):
        registry = AdapterRegistry(ReloadConfig())

        assert set(registry.registered_services()) == {
            s for s in AccountService if s.requires_adapter
        }
        assert not registry.is_registered(AccountService.LOCAL)
        assert not registry.is_registered(AccountService.UNRECOGNIZED)

    def test_default_module_paths(self):
        registry = AdapterRegistry(ReloadConfig())

        described = registry.describe()

        assert described["pronote"]["source"] == "accountreload.providers.pronote"
        assert described["ecoledirecte"]["kind"] == "module"
        assert described["ard"]["loaded"] is False

    def test_overrides_are_used(self):
        config = ReloadConfig(
            adapter_package="acme.adapters",
            adapter_overrides={AccountService.IZLY: "izly_client.reload"},
        )

        described = AdapterRegistry(config).describe()

        assert described["izly"]["source"] == "izly_client.reload"
        assert described["turboself"]["source"] == "acme.adapters.turboself"

    def test_constructing_registry_imports_nothing(self, adapter_package):
        config = ReloadConfig(adapter_package=adapter_package)

        AdapterRegistry(config)

        assert f"{adapter_package}.izly" not in sys.modules


class TestRegistration:
    """Tests for registering adapter sources."""

    def test_register_and_resolve_instance(self):
        adapter = SimpleNamespace(reload=AsyncMock())
        registry = AdapterRegistry(use_defaults=False).register_instance(AccountService.IZLY, adapter)

        assert registry.resolve(AccountService.IZLY) is adapter

    def test_register_accepts_raw_names(self):
        registry = AdapterRegistry(use_defaults=False)
        registry.register_instance("Izly", SimpleNamespace(reload=AsyncMock()))

        assert registry.is_registered(AccountService.IZLY)

    @pytest.mark.parametrize("service", [AccountService.LOCAL, AccountService.UNRECOGNIZED, "nope"])
    def test_services_without_adapter_are_rejected(self, service):
        with pytest.raises(ValueError, match="does not use an adapter"):
            AdapterRegistry(use_defaults=False).register_module(service, "pkg.mod")

    def test_register_instance_rejects_none(self):
        with pytest.raises(ValueError):
            AdapterRegistry(use_defaults=False).register_instance(AccountService.ARD, None)

    def test_unregister(self):
        registry = AdapterRegistry(ReloadConfig())

        assert registry.unregister(AccountService.ARD) is True
        assert registry.unregister(AccountService.ARD) is False
        with pytest.raises(AdapterNotRegisteredError):
            registry.resolve(AccountService.ARD)

    def test_reregistering_replaces_loaded_adapter(self):
        registry = AdapterRegistry(use_defaults=False)
        first = SimpleNamespace(reload=AsyncMock())
        second = SimpleNamespace(reload=AsyncMock())
        registry.register_instance(AccountService.IZLY, first)
        registry.resolve(AccountService.IZLY)

        registry.register_instance(AccountService.IZLY, second)

        assert registry.resolve(AccountService.IZLY) is second


class TestResolution:
    """Tests for lazy resolution and contract checks."""

    def test_module_is_imported_on_first_resolve(self, adapter_package):
        registry = AdapterRegistry(ReloadConfig(adapter_package=adapter_package))

        assert not registry.is_loaded(AccountService.IZLY)
        module = registry.resolve(AccountService.IZLY)

        assert module.__name__ == f"{adapter_package}.izly"
        assert registry.is_loaded(AccountService.IZLY)
        assert registry.loaded_services() == [AccountService.IZLY]
        assert f"{adapter_package}.turboself" not in sys.modules

    def test_module_is_imported_once(self, adapter_package):
        registry = AdapterRegistry(ReloadConfig(adapter_package=adapter_package))

        first = registry.resolve(AccountService.IZLY)
        second = registry.resolve(AccountService.IZLY)

        assert first is second
        assert first.LOADS == ["loaded"]

    def test_missing_module_propagates_import_error(self, adapter_package):
        registry = AdapterRegistry(ReloadConfig(adapter_package=adapter_package))

        with pytest.raises(ModuleNotFoundError):
            registry.resolve(AccountService.SKOLENGO)
        assert not registry.is_loaded(AccountService.SKOLENGO)

    def test_module_without_capability_breaks_contract(self, adapter_package):
        registry = AdapterRegistry(ReloadConfig(adapter_package=adapter_package))

        with pytest.raises(AdapterContractError, match="reload_instance"):
            registry.resolve(AccountService.PRONOTE)

    def test_factory_error_propagates(self):
        error = RuntimeError("cannot build client")
        registry = AdapterRegistry(use_defaults=False)
        registry.register_factory(AccountService.ARD, MagicMock(side_effect=error))

        with pytest.raises(RuntimeError) as exc_info:
            registry.resolve(AccountService.ARD)

        assert exc_info.value is error

    def test_non_callable_capability_breaks_contract(self):
        registry = AdapterRegistry(use_defaults=False)
        registry.register_instance(AccountService.MULTI, SimpleNamespace(reload_instance="nope"))

        with pytest.raises(AdapterContractError):
            registry.resolve(AccountService.MULTI)

    def test_resolve_unregistered(self):
        with pytest.raises(AdapterNotRegisteredError) as exc_info:
            AdapterRegistry(use_defaults=False).resolve(AccountService.TURBOSELF)

        assert exc_info.value.service == "turboself"

    def test_reset_forces_rebuild(self):
        factory = MagicMock(side_effect=lambda: SimpleNamespace(reload=AsyncMock()))
        registry = AdapterRegistry(use_defaults=False).register_factory(AccountService.IZLY, factory)

        first = registry.resolve(AccountService.IZLY)
        registry.reset()
        second = registry.resolve(AccountService.IZLY)

        assert first is not second
        assert factory.call_count == 2

    def test_reset_single_service(self):
        registry = AdapterRegistry(use_defaults=False)
        registry.register_factory(AccountService.IZLY, lambda: SimpleNamespace(reload=AsyncMock()))
        registry.register_factory(AccountService.ARD, lambda: SimpleNamespace(reload=AsyncMock()))
        registry.resolve(AccountService.IZLY)
        registry.resolve(AccountService.ARD)

        registry.reset(AccountService.IZLY)

        assert registry.loaded_services() == [AccountService.ARD]

    def test_concurrent_first_resolution_builds_once(self):
        calls = []
        barrier = threading.Barrier(8)

        def factory():
            calls.append(1)
            return SimpleNamespace(reload=AsyncMock())

        registry = AdapterRegistry(use_defaults=False).register_factory(AccountService.IZLY, factory)
        results = []

        def worker():
            barrier.wait()
            results.append(registry.resolve(AccountService.IZLY))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert all(r is results[0] for r in results)


class TestProcessRegistry:
    """Tests for the process-wide registry accessors."""

    def test_get_registry_is_cached(self, default_config):
        assert get_registry() is get_registry()

    def test_set_and_reset(self, default_config):
        custom = AdapterRegistry(use_defaults=False)
        set_registry(custom)
        assert get_registry() is custom

        reset_registry()
        assert get_registry() is not custom
