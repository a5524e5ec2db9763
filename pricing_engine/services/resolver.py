"""Override resolution service.

Resolves the effective price and duration of a service through the
three-tier inheritance chain:

- Service default
- Location override (inherits from the service default)
- Staff override (inherits from the location's effective value)

Each custom field is resolved independently: a tier may override the price
while inheriting the duration. Resolution never raises; incomplete or
inconsistent input falls back to "fully inherited, not custom".
"""

import logging
from collections.abc import Iterable

from ..models import (
    EffectiveValue,
    LocationOverride,
    LocationService,
    ResolvedOverride,
    Service,
    StaffOverride,
    StaffService,
)
from .currency import DEFAULT_MINOR_UNITS, from_storage

logger = logging.getLogger(__name__)


def coalesce(custom: int | None, inherited: int) -> int:
    """Return the custom value when set, otherwise the inherited one."""
    return inherited if custom is None else custom


def collapse(value: int | None, inherited: int) -> int | None:
    """Store ``None`` instead of a value equal to the inherited one."""
    if value is None or value == inherited:
        return None
    return value


def collapse_override(
    price_minor: int | None,
    duration_minutes: int | None,
    inherited_price_minor: int,
    inherited_duration_minutes: int,
) -> tuple[int | None, int | None]:
    """Collapse price and duration independently against their inherited values."""
    return (
        collapse(price_minor, inherited_price_minor),
        collapse(duration_minutes, inherited_duration_minutes),
    )


def _sanitize_price(value: int | None) -> int | None:
    if value is None or value < 0:
        return None
    return value


def _sanitize_duration(value: int | None) -> int | None:
    if value is None or value < 1:
        return None
    return value


class OverrideResolver:
    """Pure resolver of effective values per tier.

    Attributes:
        minor_units: Currency minor units used to derive display prices.
    """

    def __init__(self, minor_units: int = DEFAULT_MINOR_UNITS):
        self.minor_units = minor_units

    def _effective(self, price_minor: int, duration_minutes: int, is_custom: bool) -> EffectiveValue:
        return EffectiveValue(
            price_minor=price_minor,
            price=from_storage(price_minor, self.minor_units),
            duration_minutes=duration_minutes,
            is_custom=is_custom,
        )

    def resolve(
        self,
        service: Service,
        location_override: LocationOverride | None = None,
        staff_override: StaffOverride | None = None,
        can_perform: bool | None = None,
    ) -> ResolvedOverride:
        """Resolve one (service, location, staff) combination.

        Args:
            service: Catalog service providing the defaults.
            location_override: Location override row, None when missing.
            staff_override: Staff override row, None when the staff member was
                never configured for the service.
            can_perform: Explicit enablement gate, defaults to the staff row's
                flag (False when the row is missing).

        Returns:
            ResolvedOverride with effective values at both tiers.
        """
        if location_override is not None and location_override.service_id != service.service_id:
            logger.warning(
                f"Location override for service {location_override.service_id} "
                f"ignored while resolving service {service.service_id}"
            )
            location_override = None
        if staff_override is not None and staff_override.service_id != service.service_id:
            logger.warning(
                f"Staff override for service {staff_override.service_id} "
                f"ignored while resolving service {service.service_id}"
            )
            staff_override = None

        location_price = _sanitize_price(location_override.custom_price_minor if location_override else None)
        location_duration = _sanitize_duration(
            location_override.custom_duration_minutes if location_override else None
        )
        staff_price = _sanitize_price(staff_override.custom_price_minor if staff_override else None)
        staff_duration = _sanitize_duration(staff_override.custom_duration_minutes if staff_override else None)

        if can_perform is None:
            can_perform = staff_override.can_perform if staff_override else False

        location_is_custom = location_price is not None or location_duration is not None
        location_price_minor = coalesce(location_price, service.default_price_minor)
        location_duration_minutes = coalesce(location_duration, service.default_duration_minutes)

        # Disabled rows keep their stored values but never count as custom
        staff_is_custom = can_perform and (staff_price is not None or staff_duration is not None)

        return ResolvedOverride(
            service_id=service.service_id,
            location=self._effective(location_price_minor, location_duration_minutes, location_is_custom),
            staff=self._effective(
                coalesce(staff_price, location_price_minor),
                coalesce(staff_duration, location_duration_minutes),
                staff_is_custom,
            ),
            location_is_custom=location_is_custom,
            staff_is_custom=staff_is_custom,
            staff_enabled=can_perform,
        )

    def resolve_location_service(self, location_service: LocationService) -> EffectiveValue:
        """Effective value of an already joined location row."""
        return self._effective(
            location_service.effective_price_minor,
            location_service.effective_duration_minutes,
            location_service.is_custom,
        )

    def resolve_staff_service(self, staff_service: StaffService) -> EffectiveValue:
        """Effective value of a staff drawer row."""
        return self._effective(
            staff_service.effective_price_minor,
            staff_service.effective_duration_minutes,
            staff_service.can_perform and staff_service.has_stored_override,
        )

    def resolve_location(
        self,
        services: Iterable[Service],
        location_overrides: Iterable[LocationOverride],
        staff_overrides: Iterable[StaffOverride] = (),
    ) -> list[ResolvedOverride]:
        """Resolve every service of a location for one staff member.

        Overrides are matched by service id; rows whose service is missing
        from ``services`` are ignored.
        """
        location_by_service = {row.service_id: row for row in location_overrides}
        staff_by_service = {row.service_id: row for row in staff_overrides}
        return [
            self.resolve(
                service,
                location_by_service.get(service.service_id),
                staff_by_service.get(service.service_id),
            )
            for service in services
        ]


def refresh_inherited(staff_service: StaffService, location_service: LocationService) -> StaffService:
    """Point a staff row at the location's current effective values."""
    return staff_service.model_copy(
        update={
            "inherited_price_minor": location_service.effective_price_minor,
            "inherited_duration_minutes": location_service.effective_duration_minutes,
        }
    )


def staff_row_is_custom(staff_service: StaffService) -> bool:
    """Badge/count flag of a staff row: enabled and holding an override."""
    return staff_service.can_perform and staff_service.has_stored_override
