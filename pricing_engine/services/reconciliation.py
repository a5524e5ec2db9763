"""Reconciliation of location assignments with staff settings.

The staff drawer shows one row per service currently assigned at the
location. The location's assignment list is the only source of truth for
which services exist; staff settings are left-joined onto it:

- a staff setting that exists is projected onto the location's current
  effective values
- a service never configured for the staff member gets a disabled row
- a staff setting whose service left the location is dropped
"""

import logging
from collections.abc import Iterable, Sequence

from ..models import LocationService, ServiceFilter, StaffOverride, StaffService
from .resolver import refresh_inherited, staff_row_is_custom

logger = logging.getLogger(__name__)


def synthesize_staff_service(location_service: LocationService) -> StaffService:
    """Default row for a service the staff member was never configured for."""
    return StaffService(
        service_id=location_service.service_id,
        service_name=location_service.service_name,
        can_perform=False,
        category=location_service.category,
        inherited_price_minor=location_service.effective_price_minor,
        inherited_duration_minutes=location_service.effective_duration_minutes,
        custom_price_minor=None,
        custom_duration_minutes=None,
        is_custom=False,
    )


def project_staff_service(staff_service: StaffService, location_service: LocationService) -> StaffService:
    """Existing staff row, inheriting from the location's current effective values."""
    row = refresh_inherited(staff_service, location_service)
    return row.model_copy(
        update={
            "service_name": location_service.service_name,
            "category": location_service.category,
            "is_custom": staff_row_is_custom(row),
        }
    )


def merge_staff_services(
    location_services: Sequence[LocationService],
    staff_services: Iterable[StaffService],
) -> list[StaffService]:
    """Left-join the location's services with the staff member's settings.

    Args:
        location_services: Services assigned at the location, in display order.
        staff_services: The staff member's existing settings.

    Returns:
        One row per location service, in location order.
    """
    staff_by_service = {row.service_id: row for row in staff_services}
    assigned_ids = {service.service_id for service in location_services}

    merged: list[StaffService] = []
    synthesized = 0
    for location_service in location_services:
        existing = staff_by_service.get(location_service.service_id)
        if existing is None:
            merged.append(synthesize_staff_service(location_service))
            synthesized += 1
        else:
            merged.append(project_staff_service(existing, location_service))

    dropped = [service_id for service_id in staff_by_service if service_id not in assigned_ids]
    if synthesized or dropped:
        logger.debug(
            f"Merged {len(merged)} staff services: {synthesized} synthesized, "
            f"{len(dropped)} stale dropped {dropped}"
        )
    return merged


def staff_services_from_overrides(
    location_services: Sequence[LocationService],
    staff_overrides: Iterable[StaffOverride],
) -> list[StaffService]:
    """Build drawer rows straight from stored staff override records."""
    location_by_service = {service.service_id: service for service in location_services}
    rows = []
    for override in staff_overrides:
        location_service = location_by_service.get(override.service_id)
        if location_service is None:
            continue
        rows.append(
            StaffService(
                service_id=override.service_id,
                service_name=location_service.service_name,
                can_perform=override.can_perform,
                category=location_service.category,
                inherited_price_minor=location_service.effective_price_minor,
                inherited_duration_minutes=location_service.effective_duration_minutes,
                custom_price_minor=override.custom_price_minor,
                custom_duration_minutes=override.custom_duration_minutes,
            )
        )
    return merge_staff_services(location_services, rows)


def filter_staff_services(
    rows: Iterable[StaffService], service_filter: ServiceFilter | str = ServiceFilter.ALL
) -> list[StaffService]:
    """Apply the drawer's all/enabled/custom filter to the (draft) rows."""
    service_filter = ServiceFilter(service_filter)
    if service_filter is ServiceFilter.ENABLED:
        return [row for row in rows if row.can_perform]
    if service_filter is ServiceFilter.CUSTOM:
        return [row for row in rows if staff_row_is_custom(row)]
    return list(rows)


def count_enabled(rows: Iterable[StaffService]) -> int:
    return sum(1 for row in rows if row.can_perform)


def count_custom(rows: Iterable[StaffService]) -> int:
    return sum(1 for row in rows if staff_row_is_custom(row))
