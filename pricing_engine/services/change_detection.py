"""Structural change detection between drafts and committed rows.

Rows are matched by key (service id or user id) and compared on their
override fields only, so re-building equal rows never counts as a change.
A missing attribute and None both mean "no override".
"""

from collections.abc import Iterable, Sequence
from typing import Any

from ..messages import UNSAVED_CHANGES_WARNING

STAFF_SERVICE_FIELDS = ("can_perform", "custom_price_minor", "custom_duration_minutes")
OVERRIDE_FIELDS = ("custom_price_minor", "custom_duration_minutes")


def _value(row: Any, field: str) -> Any:
    if isinstance(row, dict):
        return row.get(field)
    return getattr(row, field, None)


def rows_differ(draft: Any, committed: Any, fields: Iterable[str] = STAFF_SERVICE_FIELDS) -> bool:
    """Compare two rows on the given fields."""
    return any(_value(draft, field) != _value(committed, field) for field in fields)


def is_dirty(
    draft: Sequence[Any],
    committed: Sequence[Any],
    key: str = "service_id",
    fields: Iterable[str] = STAFF_SERVICE_FIELDS,
) -> bool:
    """Check whether a draft list differs from its committed baseline.

    Args:
        draft: Rows currently being edited.
        committed: Baseline rows.
        key: Attribute used to match rows.
        fields: Attributes compared on matched rows.

    Returns:
        True when the row count differs, a draft row has no committed
        counterpart, or any compared field differs.
    """
    if len(draft) != len(committed):
        return True

    fields = tuple(fields)
    committed_by_key = {_value(row, key): row for row in committed}
    for row in draft:
        baseline = committed_by_key.get(_value(row, key))
        if baseline is None or rows_differ(row, baseline, fields):
            return True
    return False


def should_confirm_navigation(*sessions: Any) -> bool:
    """True when any open session holds unsaved edits."""
    return any(getattr(session, "is_open", False) and session.is_dirty for session in sessions)


def unsaved_changes_prompt(*sessions: Any) -> str | None:
    """Warning shown before leaving the page, None when nothing is pending."""
    if should_confirm_navigation(*sessions):
        return UNSAVED_CHANGES_WARNING
    return None
