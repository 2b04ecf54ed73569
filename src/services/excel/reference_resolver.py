"""
Foreign Reference Resolver for the Excel Import/Export System.

A bare numeric key means nothing to the person filling the sheet, so foreign
keys travel as "<id> - <label>" strings. Only the leading key is read back;
staleness of the label is not checked here.
"""
from __future__ import annotations

import logging
from typing import Any, List, Type

from src.core.exceptions import MalformedReferenceError, SchemaError
from src.core.interfaces import IReferenceDataSource

from .annotations import get_identifier_field
from .constraints import is_blank
from .schema_introspector import KEY_SENTINEL

logger = logging.getLogger(__name__)

IDENTIFIER_SEPARATOR = " - "


def format_identifier(key: Any, label: Any) -> str:
    return f"{key}{IDENTIFIER_SEPARATOR}{label}"


def parse_identifier(cell_value: Any) -> int:
    """
    Extract the primary key from an identifier string.

    Args:
        cell_value: Cell content such as "7 - Smith"

    Returns:
        The leading integer key

    Raises:
        MalformedReferenceError: If the leading token is missing or not an integer
    """
    if isinstance(cell_value, int) and not isinstance(cell_value, bool):
        return cell_value
    if isinstance(cell_value, float) and cell_value.is_integer():
        return int(cell_value)
    if is_blank(cell_value):
        raise MalformedReferenceError("Reference is empty", value=cell_value)

    leading = str(cell_value).split()[0]  # "<id> - <label>"
    try:
        return int(leading)
    except ValueError:
        raise MalformedReferenceError(f"'{cell_value}' does not start with a numeric identifier", value=cell_value)


class ForeignReferenceResolver:
    """Builds the pick-list identifiers of a referenced entity type"""

    def __init__(self, source: IReferenceDataSource):
        self._source = source

    def build_identifiers(self, referenced_type: Type[Any]) -> List[str]:
        """
        Build "<id> - <label>" for every current instance of a type.

        The label field is the one nominated by the type's
        ``excel_entity(identifier=...)`` decorator.

        Raises:
            SchemaError: If the type nominates no identifier field
        """
        label_field = get_identifier_field(referenced_type)
        if not label_field:
            raise SchemaError(
                f"{referenced_type.__name__} does not declare an identifier field",
                entity_type=referenced_type.__name__
            )

        identifiers = [
            format_identifier(getattr(instance, KEY_SENTINEL), getattr(instance, label_field))
            for instance in self._source.get_all(referenced_type)
        ]
        logger.debug(f"Built {len(identifiers)} identifiers for {referenced_type.__name__}")
        return identifiers

    @staticmethod
    def parse_identifier(cell_value: Any) -> int:
        return parse_identifier(cell_value)
