"""
Schema Introspector for the Excel Import/Export System.

Turns a SQLAlchemy model into an ordered list of field descriptors.
Best effort: fields that cannot be represented in a cell are kept in the
list but flagged as non-exportable, nothing is raised.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, List, Optional, Type

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

from .annotations import INFO_KEY
from .constraints import Required, RequiredIf, MaxLength, MinLength, Pattern, ValueRange, OneOf
from .models import FieldDescriptor, FieldKind, ScalarType

logger = logging.getLogger(__name__)

KEY_SENTINEL = "id"


def field_kind(name: str) -> FieldKind:
    """
    Classify a field by its name.

    ``id`` is the primary key, any other name holding an ``id`` token
    (``customer_id``, ``id_customer``) is a foreign key.
    """
    if name == KEY_SENTINEL:
        return FieldKind.PRIMARY_KEY
    if KEY_SENTINEL in name.lower().split("_"):
        return FieldKind.FOREIGN_KEY
    return FieldKind.SCALAR


def scalar_type_for(python_type: Optional[type]) -> Optional[ScalarType]:
    """Map a Python type to a cell type, None when not Excel compatible"""
    if python_type is None:
        return None
    # bool is a subclass of int, datetime a subclass of date
    if issubclass(python_type, bool):
        return ScalarType.BOOLEAN
    if issubclass(python_type, int):
        return ScalarType.INTEGER
    if issubclass(python_type, str):
        return ScalarType.TEXT
    if issubclass(python_type, (date, datetime)):
        return ScalarType.DATE
    return None


def snake_case(name: str) -> str:
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    return re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1).lower()


def _column_python_type(column) -> Optional[type]:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _build_constraints(column, annotations: dict, scalar_type: Optional[ScalarType], required: bool) -> tuple:
    constraints = []
    if required:
        constraints.append(Required())
    if "required_if" in annotations:
        sibling, trigger = annotations["required_if"]
        constraints.append(RequiredIf(sibling, trigger))
    if scalar_type is ScalarType.TEXT:
        length = getattr(column.type, "length", None)
        if length:
            constraints.append(MaxLength(length))
    if "min_length" in annotations:
        constraints.append(MinLength(annotations["min_length"]))
    if "pattern" in annotations:
        constraints.append(Pattern(annotations["pattern"]))
    if "value_range" in annotations:
        minimum, maximum = annotations["value_range"]
        constraints.append(ValueRange(minimum, maximum))
    if "options" in annotations:
        constraints.append(OneOf(annotations["options"]))
    return tuple(constraints)


def describe_fields(entity_type: Type[Any]) -> List[FieldDescriptor]:
    """
    Describe every field of an entity type, in declaration order.

    Columns come first, followed by relationships (non-exportable, carrying
    their target type so foreign keys can find their navigation field).

    Args:
        entity_type: A mapped SQLAlchemy model class

    Returns:
        Ordered list of field descriptors (empty if the type is not mapped)
    """
    try:
        mapper = inspect(entity_type)
    except NoInspectionAvailable:
        logger.warning(f"{getattr(entity_type, '__name__', entity_type)} is not a mapped entity")
        return []

    descriptors: List[FieldDescriptor] = []

    for name, column in mapper.columns.items():
        annotations = column.info.get(INFO_KEY, {})
        python_type = _column_python_type(column)
        scalar_type = scalar_type_for(python_type)
        kind = field_kind(name)
        required = annotations.get("required", not column.nullable)

        if scalar_type is None:
            logger.debug(f"{entity_type.__name__}.{name} is not Excel compatible, skipped")

        descriptors.append(FieldDescriptor(
            name=name,
            kind=kind,
            scalar_type=scalar_type,
            python_type=python_type,
            display_name=annotations.get("display_name", name),
            required=bool(required) and kind is not FieldKind.PRIMARY_KEY,
            options=tuple(annotations.get("options", ())),
            constraints=_build_constraints(column, annotations, scalar_type, bool(required)),
        ))

    for relationship in mapper.relationships:
        descriptors.append(FieldDescriptor(
            name=relationship.key,
            kind=FieldKind.SCALAR,
            scalar_type=None,
            display_name=relationship.key,
            target=relationship.mapper.class_,
        ))

    return descriptors


def exportable_fields(descriptors: List[FieldDescriptor]) -> List[FieldDescriptor]:
    """Fields that get a column in the template, order preserved"""
    return [descriptor for descriptor in descriptors if descriptor.is_exportable]


def find_navigation_field(descriptors: List[FieldDescriptor], foreign_key: FieldDescriptor) -> Optional[FieldDescriptor]:
    """
    Find the relationship field backing a foreign key.

    The navigation field is the relationship whose target type name
    (snake case) is contained in the foreign key name: ``customer`` for
    ``customer_id``.
    """
    key_name = foreign_key.name.lower()
    for descriptor in descriptors:
        if descriptor.target is None:
            continue
        if snake_case(descriptor.target.__name__) in key_name:
            return descriptor
    return None
