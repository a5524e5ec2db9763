"""Command line entry point.

Resolves a location snapshot stored as YAML and prints the price and
duration every service ends up with for one staff member:

    python -m pricing_engine.main resolve snapshot.yml --staff 7

Snapshot layout::

    currency: EUR
    location_id: 1
    services:
      - {service_id: 1, name: Haircut, default_price_minor: 1000, default_duration_minutes: 60}
    location_overrides:
      - {service_id: 1, custom_price_minor: 1200}
    staff_overrides:
      - {user_id: 7, service_id: 1, can_perform: true, custom_duration_minutes: 45}
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config import config
from .core.container import Container
from .models import LocationOverride, ResolvedOverride, Service, StaffOverride
from .services.currency import CurrencyService, format_duration

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        format=config.logging.log_format,
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
    )


def load_snapshot(path: Path, user_id: int | None = None) -> dict[str, Any]:
    """Load and validate a location snapshot.

    Args:
        path: YAML snapshot file.
        user_id: Staff member whose overrides are kept, None keeps none.

    Returns:
        Dictionary with 'currency', 'services', 'location_overrides' and
        'staff_overrides' keys holding validated models.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    location_id = int(data.get("location_id", 0))
    services = [Service(**row) for row in data.get("services", [])]
    location_overrides = [
        LocationOverride(location_id=location_id, **row) for row in data.get("location_overrides", [])
    ]
    staff_overrides = [
        StaffOverride(location_id=location_id, **row)
        for row in data.get("staff_overrides", [])
        if user_id is not None and row.get("user_id") == user_id
    ]
    return {
        "currency": data.get("currency"),
        "services": services,
        "location_overrides": location_overrides,
        "staff_overrides": staff_overrides,
    }


def render_table(
    services: list[Service],
    resolved: list[ResolvedOverride],
    currency_service: CurrencyService,
    currency: str | None,
) -> str:
    names = {service.service_id: service.name for service in services}
    lines = []
    for result in resolved:
        badges = []
        if result.location_is_custom:
            badges.append("location custom")
        if result.staff_is_custom:
            badges.append("staff custom")
        if not result.staff_enabled:
            badges.append("disabled")
        lines.append(
            f"{names[result.service_id]}: "
            f"location {currency_service.format_price(result.location.price_minor, currency)} / "
            f"{format_duration(result.location.duration_minutes)}, "
            f"staff {currency_service.format_price(result.staff.price_minor, currency)} / "
            f"{format_duration(result.staff.duration_minutes)}"
            + (f" [{', '.join(badges)}]" if badges else "")
        )
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pricing-engine", description=__doc__.splitlines()[0])
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve effective prices of a location snapshot")
    resolve.add_argument("snapshot", type=Path, help="YAML snapshot file")
    resolve.add_argument("--staff", type=int, default=None, help="Staff user id")
    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    container = Container()
    currency_service = container.currency_service()

    try:
        snapshot = load_snapshot(args.snapshot, args.staff)
    except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
        logger.error(f"Cannot load snapshot {args.snapshot}: {e}")
        return 1

    currency = snapshot["currency"]
    resolver = container.resolver(minor_units=currency_service.get_minor_units(currency))
    resolved = resolver.resolve_location(
        snapshot["services"], snapshot["location_overrides"], snapshot["staff_overrides"]
    )
    print(render_table(snapshot["services"], resolved, currency_service, currency))
    return 0


if __name__ == "__main__":
    sys.exit(main())
