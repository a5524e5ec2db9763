"""Team setup helpers: location counters and copying a staff setup."""

import logging
from collections.abc import Iterable, Mapping, Sequence

from ..models import LocationService, LocationServiceSummary, StaffService, StaffSummary
from .resolver import collapse, staff_row_is_custom

logger = logging.getLogger(__name__)


def summarize_staff(user_id: int, rows: Iterable[StaffService]) -> StaffSummary:
    """Count enabled services and enabled custom rates of one staff member."""
    summary = StaffSummary(user_id=user_id)
    for row in rows:
        if row.can_perform:
            summary.services_enabled += 1
        if staff_row_is_custom(row):
            summary.overrides_count += 1
    return summary


def summarize_location_service(
    service_id: int, staff_rows: Mapping[int, Sequence[StaffService]]
) -> LocationServiceSummary:
    """Count how many staff members perform a service, and how many customize it.

    Args:
        service_id: Service to summarize.
        staff_rows: Drawer rows per user id.
    """
    summary = LocationServiceSummary(service_id=service_id)
    for rows in staff_rows.values():
        for row in rows:
            if row.service_id != service_id:
                continue
            if row.can_perform:
                summary.staff_count += 1
            if staff_row_is_custom(row):
                summary.staff_with_overrides += 1
    return summary


def apply_location_summaries(
    location_services: Sequence[LocationService], staff_rows: Mapping[int, Sequence[StaffService]]
) -> list[LocationService]:
    """Location rows with their staff counters recomputed."""
    updated = []
    for service in location_services:
        summary = summarize_location_service(service.service_id, staff_rows)
        updated.append(
            service.model_copy(
                update={
                    "staff_count": summary.staff_count,
                    "staff_with_overrides": summary.staff_with_overrides,
                }
            )
        )
    return updated


def copy_staff_setup(
    source_rows: Sequence[StaffService],
    target_rows: Sequence[StaffService],
    copy_enabled_services: bool = True,
    copy_custom_pricing: bool = True,
) -> list[StaffService]:
    """Copy one staff member's setup onto another at the same location.

    Only services present in both lists are touched. Copied custom values
    are collapsed against the target's own inherited values.

    Returns:
        New target rows, in target order.
    """
    source_by_service = {row.service_id: row for row in source_rows}
    copied = []
    touched = 0
    for row in target_rows:
        source = source_by_service.get(row.service_id)
        if source is None:
            copied.append(row)
            continue

        update: dict[str, object] = {}
        if copy_enabled_services:
            update["can_perform"] = source.can_perform
        if copy_custom_pricing:
            update["custom_price_minor"] = collapse(source.custom_price_minor, row.inherited_price_minor)
            update["custom_duration_minutes"] = collapse(
                source.custom_duration_minutes, row.inherited_duration_minutes
            )
        changed = row.model_copy(update=update)
        copied.append(changed.model_copy(update={"is_custom": staff_row_is_custom(changed)}))
        touched += 1

    logger.debug(f"Copied staff setup onto {touched} of {len(target_rows)} services")
    return copied
