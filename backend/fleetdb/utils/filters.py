from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

from fastapi import HTTPException, status

E = TypeVar("E", bound=Enum)

# Dashboard filter widgets send "all" for "no filter".
_NO_FILTER_VALUES = {"", "all"}


def parse_enum_filter(value: Optional[str], enum_cls: Type[E], field: str) -> Optional[E]:
    if value is None:
        return None
    cleaned = value.strip().lower()
    if cleaned in _NO_FILTER_VALUES:
        return None
    try:
        return enum_cls(cleaned)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {field} '{value}'. Expected one of: all, {allowed}.",
        )


def parse_text_filter(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    if cleaned.lower() in _NO_FILTER_VALUES:
        return None
    return cleaned
