"""
Annotation helpers used by entity models to describe how they appear in
the Excel template, plus the registry of exportable entity types.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

INFO_KEY = "excel"
IDENTIFIER_ATTRIBUTE = "__excel_identifier__"


def excel_field(
    display_name: Optional[str] = None,
    required: Optional[bool] = None,
    min_length: Optional[int] = None,
    pattern: Optional[str] = None,
    value_range: Optional[Tuple[Any, Any]] = None,
    required_if: Optional[Tuple[str, Any]] = None,
    options: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    """
    Build the ``info`` mapping of a column.

    Usage:
        age = Column(Integer, info=excel_field(required_if=("is_minor", True)))

    Args:
        display_name: Label shown instead of the attribute name
        required: Overrides the required flag derived from ``nullable``
        min_length: Minimum text length
        pattern: Regular expression the whole value must match
        value_range: Inclusive (min, max), either bound may be None
        required_if: (sibling field, value) making this field required
        options: Enumerated values rendered as a pick-list

    Returns:
        Dict to pass as ``Column(info=...)``
    """
    annotations: Dict[str, Any] = {}
    if display_name is not None:
        annotations["display_name"] = display_name
    if required is not None:
        annotations["required"] = required
    if min_length is not None:
        annotations["min_length"] = min_length
    if pattern is not None:
        annotations["pattern"] = pattern
    if value_range is not None:
        annotations["value_range"] = tuple(value_range)
    if required_if is not None:
        annotations["required_if"] = tuple(required_if)
    if options is not None:
        annotations["options"] = tuple(options)
    return {INFO_KEY: annotations}


class EntityRegistry:
    """Exportable entity types by name (case-insensitive)"""

    def __init__(self):
        self._entities: Dict[str, Type[Any]] = {}

    def register(self, entity_type: Type[Any]) -> Type[Any]:
        self._entities[entity_type.__name__.lower()] = entity_type
        return entity_type

    def get(self, name: str) -> Optional[Type[Any]]:
        return self._entities.get(name.lower())

    def all(self) -> List[Type[Any]]:
        return [self._entities[key] for key in sorted(self._entities)]

    def clear(self):
        self._entities.clear()


entity_registry = EntityRegistry()


def excel_entity(identifier: Optional[str] = None):
    """
    Class decorator marking a model as exportable.

    Args:
        identifier: Attribute used as the human readable label when other
            entities reference this one ("<id> - <label>")
    """
    def decorator(entity_type):
        setattr(entity_type, IDENTIFIER_ATTRIBUTE, identifier)
        entity_registry.register(entity_type)
        return entity_type
    return decorator


def get_identifier_field(entity_type: Type[Any]) -> Optional[str]:
    return getattr(entity_type, IDENTIFIER_ATTRIBUTE, None)
