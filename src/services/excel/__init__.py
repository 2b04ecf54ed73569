"""
Excel Import/Export System Package

Turns entity types into fillable Excel templates and filled templates back
into validated records.
"""

__all__ = [
    'FieldDescriptor',
    'FieldKind',
    'ScalarType',
    'CellError',
    'ImportOutcome',
    'ImportResult',
    'ExcelFile',
    'describe_fields',
    'ForeignReferenceResolver',
    'TemplateGenerator',
    'ImportValidator',
    'ExcelService',
    'excel_entity',
    'excel_field',
    'entity_registry',
]

from .models import FieldDescriptor, FieldKind, ScalarType, CellError, ImportOutcome, ImportResult, ExcelFile
from .annotations import excel_entity, excel_field, entity_registry
from .schema_introspector import describe_fields
from .reference_resolver import ForeignReferenceResolver
from .template_generator import TemplateGenerator
from .import_validator import ImportValidator
from .excel_service import ExcelService
