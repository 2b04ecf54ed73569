"""
Cell Converter for the Excel Import/Export System.

Fixed per-type coercion of raw cell content. Data cells are text formatted
in the template, but values typed by Excel (numbers, dates) are accepted too.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser

from src.core.exceptions import CellConversionError

from .models import ScalarType


def cell_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw)


def to_integer(raw: Any) -> int:
    if isinstance(raw, bool):
        raise CellConversionError(f"'{raw}' is not an integer", value=raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)

    text = cell_text(raw).strip().upper()
    if text == "":
        return 0
    try:
        return int(text)
    except ValueError:
        raise CellConversionError(f"'{raw}' is not an integer", value=raw)


def to_boolean(raw: Any, true_marker: str) -> bool:
    if isinstance(raw, bool):
        return raw
    return cell_text(raw).strip().upper() == true_marker.upper()


def to_date(raw: Any, python_type: Optional[type], day_first: bool) -> Optional[date]:
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        return raw
    else:
        text = cell_text(raw).strip()
        if text == "":
            return None
        try:
            parsed = date_parser.parse(text, dayfirst=day_first)
        except (ValueError, OverflowError):
            raise CellConversionError(f"'{raw}' is not a valid date", value=raw)

    if python_type is not None and not issubclass(python_type, datetime):
        return parsed.date()
    return parsed


def to_text(raw: Any) -> Optional[str]:
    text = cell_text(raw).strip().upper()
    if text == "":
        return None
    return text


def convert_cell(
    raw: Any,
    scalar_type: ScalarType,
    python_type: Optional[type] = None,
    true_marker: str = "O",
    day_first: bool = True,
) -> Any:
    """
    Convert raw cell content to a field value.

    - Integer: trimmed text, empty is 0
    - Boolean: true only for the affirmative marker (case-insensitive)
    - Date: day-first date parsing, empty is None
    - Text: trimmed and upper-cased, empty is None

    Raises:
        CellConversionError: If the content cannot be converted
    """
    if scalar_type is ScalarType.INTEGER:
        return to_integer(raw)
    if scalar_type is ScalarType.BOOLEAN:
        return to_boolean(raw, true_marker)
    if scalar_type is ScalarType.DATE:
        return to_date(raw, python_type, day_first)
    return to_text(raw)
