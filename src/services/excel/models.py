"""
Data models for the Excel Import/Export System.

Immutable dataclasses describing entity fields and import/export results.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple, Type

from src.core.settings import XLSX_MEDIA_TYPE


class FieldKind(Enum):
    """Role of a field in the template"""
    PRIMARY_KEY = "primary_key"
    FOREIGN_KEY = "foreign_key"
    SCALAR = "scalar"


class ScalarType(Enum):
    """Cell types the template knows how to render and parse"""
    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Derived description of one entity field.

    Attributes:
        name: Attribute name, matched against the hidden name row on import
        kind: Primary key, foreign key or scalar
        scalar_type: Cell type, None when the field is not Excel compatible
        python_type: Python type of the column (None for relationships)
        display_name: Human label shown in the template
        required: Whether the field is marked with the required marker
        options: Enumerated values rendered as a pick-list
        constraints: Declarative rules checked on import
        target: Related entity type, set only for relationship fields
    """
    name: str
    kind: FieldKind
    scalar_type: Optional[ScalarType]
    python_type: Optional[type] = None
    display_name: str = ""
    required: bool = False
    options: Tuple[str, ...] = ()
    constraints: Tuple[Any, ...] = ()
    target: Optional[Type[Any]] = None

    @property
    def is_exportable(self) -> bool:
        """Primary keys and non Excel compatible fields never reach the template"""
        return self.kind is not FieldKind.PRIMARY_KEY and self.scalar_type is not None

    @property
    def is_foreign_key(self) -> bool:
        return self.kind is FieldKind.FOREIGN_KEY

    @property
    def has_options(self) -> bool:
        return len(self.options) > 0

    def assign(self, record: Any, value: Any) -> None:
        """Set this field's value on a record"""
        setattr(record, self.name, value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "scalar_type": self.scalar_type.value if self.scalar_type else None,
            "display_name": self.display_name,
            "required": self.required,
            "options": list(self.options),
            "constraints": [repr(c) for c in self.constraints],
        }


@dataclass(frozen=True)
class CellError:
    """
    A rejected cell of the data sheet.

    Attributes:
        row_number: Worksheet row (1-based)
        column_number: Worksheet column (1-based)
        field_name: Field the column is bound to
        error_type: Error code (malformed reference, conversion, constraint)
        message: Human readable description
        value: Raw cell value
    """
    row_number: int
    column_number: int
    field_name: str
    error_type: str
    message: str
    value: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row_number,
            "column": self.column_number,
            "field": self.field_name,
            "type": self.error_type,
            "message": self.message,
            "value": None if self.value is None else str(self.value),
        }


@dataclass(frozen=True)
class ImportOutcome:
    """
    Result of one validation pass over a workbook.

    Either every non blank row was valid and ``records`` holds the built
    entities, or ``content`` holds the annotated workbook and ``records`` is
    empty.
    """
    records: List[Any] = field(default_factory=list)
    errors: List[CellError] = field(default_factory=list)
    content: Optional[bytes] = None
    total_rows: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ExcelFile:
    """Downloadable workbook"""
    content: bytes
    filename: str
    media_type: str = XLSX_MEDIA_TYPE


@dataclass(frozen=True)
class ImportResult:
    """
    Result of a complete import call.

    Attributes:
        entity_type: Name of the imported entity type
        total_rows: Non blank data rows found in the workbook
        inserted_rows: Records handed to the persistence sink
        errors: Rejected cells (empty on success)
        error_file: Annotated workbook to send back (None on success)
    """
    entity_type: str
    total_rows: int
    inserted_rows: int
    errors: List[CellError] = field(default_factory=list)
    error_file: Optional[ExcelFile] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dict for the API response"""
        return {
            "entity_type": self.entity_type,
            "total_rows": self.total_rows,
            "inserted_rows": self.inserted_rows,
            "errors_count": len(self.errors),
            "errors": [err.to_dict() for err in self.errors[:100]],
        }
