"""
Adapter health check.

Resolves the adapter of every delegating provider (or the ones named with
``--service``) and reports which load and satisfy their contract.

    python -m accountreload doctor
    python -m accountreload doctor --service pronote --service izly --json
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from accountreload.core import AccountService
from accountreload.logging_config import configure_logging, get_logger
from accountreload.registry import AdapterRegistry, get_registry
from accountreload.types import JsonDict

logger = get_logger(__name__)


@dataclass
class AdapterCheck:
    """Outcome of resolving one provider's adapter."""

    service: str
    source: str
    ok: bool
    error_type: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> JsonDict:
        return {
            "service": self.service,
            "source": self.source,
            "ok": self.ok,
            "error_type": self.error_type,
            "error": self.error,
        }


def check_adapters(
    registry: AdapterRegistry,
    services: Sequence[AccountService] | None = None,
) -> list[AdapterCheck]:
    """Try to resolve each service's adapter and collect the outcome."""
    targets = list(services) if services else registry.registered_services()
    described = registry.describe()
    checks: list[AdapterCheck] = []
    for service in targets:
        source = described.get(service.value, {}).get("source", "-")
        try:
            registry.resolve(service)
        except Exception as e:  # report every failure kind, including import errors
            logger.debug("Adapter check failed", service=service.value, error=str(e))
            checks.append(
                AdapterCheck(service.value, source, ok=False, error_type=type(e).__name__, error=str(e))
            )
        else:
            checks.append(AdapterCheck(service.value, source, ok=True))
    return checks


def _parse_services(names: Sequence[str]) -> list[AccountService]:
    services = []
    for name in names:
        service = AccountService.parse(name)
        if not service.requires_adapter:
            raise argparse.ArgumentTypeError(f"{name!r} is not a provider with an adapter")
        services.append(service)
    return services


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="accountreload doctor",
        description="Check that provider reload adapters can be loaded.",
    )
    parser.add_argument(
        "--service",
        action="append",
        default=[],
        metavar="NAME",
        help="Only check this provider (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    return parser


def main(argv: Sequence[str] | None = None, registry: AdapterRegistry | None = None) -> int:
    """Run the check. Returns 0 when every checked adapter resolves, 1 otherwise."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        services = _parse_services(args.service)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    configure_logging(json_output=args.json)
    checks = check_adapters(registry or get_registry(), services)

    if args.json:
        print(json.dumps([c.to_dict() for c in checks], indent=2))
    else:
        for check in checks:
            status = "OK  " if check.ok else "FAIL"
            line = f"{status} {check.service:<14} {check.source}"
            if not check.ok:
                line += f"  ({check.error_type}: {check.error})"
            print(line)

    return 0 if all(c.ok for c in checks) else 1


if __name__ == "__main__":
    sys.exit(main())
