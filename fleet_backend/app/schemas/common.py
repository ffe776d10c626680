"""
Shared schema helpers.
"""

from datetime import datetime
from typing import Any, Iterable

from pydantic import BaseModel

from fleet_backend.app.core.clock import as_utc


def normalize_timestamp(value: Any) -> Any:
    """Store every timestamp as UTC."""
    if isinstance(value, datetime):
        return as_utc(value)
    return value


def coerce_calendar_date(value: Any) -> Any:
    """Accept full ISO timestamps where only a calendar date is stored."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


def reject_explicit_nulls(model: BaseModel, fields: Iterable[str]) -> None:
    """
    Patches may omit a required column but may not null it out.

    Raises:
        ValueError: If one of `fields` was sent as null
    """
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")
