"""
Template Generator for the Excel Import/Export System.

Renders the field descriptors of an entity type into a two-sheet workbook:

- data sheet: hidden field-name row, type row, display-name row, then empty
  data rows up to the row limit;
- options sheet (hidden): pick-list values, one column per pick-list field,
  aligned on the data sheet's column index.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Type

from openpyxl import Workbook
from openpyxl.styles import PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.datavalidation import DataValidation

from src.core.exceptions import SchemaError
from src.core.settings import ExcelSettings, TYPE_LABELS

from .models import FieldDescriptor
from .reference_resolver import ForeignReferenceResolver
from .schema_introspector import describe_fields, exportable_fields, find_navigation_field
from .workbook_codec import save_workbook_bytes

logger = logging.getLogger(__name__)

TEXT_FORMAT = "@"
MAX_SHEET_TITLE = 31


def data_sheet_title(entity_type: Type[Any]) -> str:
    return f"Import - {entity_type.__name__}"[:MAX_SHEET_TITLE]


def options_sheet_title(entity_type: Type[Any]) -> str:
    return f"Options - {entity_type.__name__}"[:MAX_SHEET_TITLE]


def template_fields(entity_type: Type[Any], descriptors: Optional[List[FieldDescriptor]] = None) -> List[FieldDescriptor]:
    """
    Exportable fields of an entity type, in column order.

    Raises:
        SchemaError: If the entity type has no usable field
    """
    if descriptors is None:
        descriptors = describe_fields(entity_type)
    fields = exportable_fields(descriptors)
    if not fields:
        raise SchemaError(
            f"{getattr(entity_type, '__name__', entity_type)} has no field that can be exported",
            entity_type=getattr(entity_type, "__name__", str(entity_type))
        )
    return fields


class TemplateGenerator:
    """Builds the fillable template of an entity type"""

    def __init__(self, resolver: ForeignReferenceResolver, settings: ExcelSettings):
        self._resolver = resolver
        self._settings = settings

    def export(self, entity_type: Type[Any]) -> bytes:
        """Build the template and return its xlsx content"""
        return save_workbook_bytes(self.build(entity_type))

    def build(self, entity_type: Type[Any]) -> Workbook:
        """
        Build the template workbook of an entity type.

        Raises:
            SchemaError: If the entity has no usable field, or a foreign key
                has no navigation field to resolve its target type
        """
        descriptors = describe_fields(entity_type)
        fields = template_fields(entity_type, descriptors)

        workbook = Workbook()
        data_sheet = workbook.active
        data_sheet.title = data_sheet_title(entity_type)
        options_sheet = workbook.create_sheet(options_sheet_title(entity_type))

        for column_number, field in enumerate(fields, start=1):
            self._write_header(data_sheet, field, column_number)

            if field.is_foreign_key:
                navigation = find_navigation_field(descriptors, field)
                if navigation is None:
                    raise SchemaError(
                        f"Foreign key {entity_type.__name__}.{field.name} has no navigation field",
                        entity_type=entity_type.__name__,
                        field_name=field.name
                    )
                values = self._resolver.build_identifiers(navigation.target)
                self._add_pick_list(data_sheet, options_sheet, column_number, values)
            elif field.has_options:
                self._add_pick_list(data_sheet, options_sheet, column_number, field.options)

        self._apply_presentation(data_sheet, options_sheet, len(fields))

        logger.info(f"Template built for {entity_type.__name__}", extra={
            "entity_type": entity_type.__name__,
            "columns": len(fields),
        })
        return workbook

    def _write_header(self, data_sheet, field: FieldDescriptor, column_number: int) -> None:
        settings = self._settings
        display_name = field.display_name
        if field.required:
            display_name += settings.required_marker

        data_sheet.cell(row=settings.name_row, column=column_number, value=field.name)
        data_sheet.cell(row=settings.type_row, column=column_number, value=TYPE_LABELS[field.scalar_type.value])
        data_sheet.cell(row=settings.display_name_row, column=column_number, value=display_name)

    def _add_pick_list(self, data_sheet, options_sheet, column_number: int, values: Sequence[str]) -> None:
        """Write option values in the options sheet and restrict the data column to them"""
        settings = self._settings
        column_letter = get_column_letter(column_number)

        if not values:
            logger.warning(f"No option values for column {column_letter}, pick-list skipped")
            return

        row_number = settings.first_option_row
        for value in values:
            options_sheet.cell(row=row_number, column=column_number, value=value)
            row_number += 1
        last_option_row = row_number - 1

        formula = (
            f"'{options_sheet.title}'!"
            f"${column_letter}${settings.first_option_row}:${column_letter}${last_option_row}"
        )
        validation = DataValidation(type="list", formula1=formula, allow_blank=True)
        validation.error = "Choose a value from the list."
        validation.errorTitle = "Invalid value"
        data_sheet.add_data_validation(validation)
        validation.add(f"{column_letter}{settings.first_data_row}:{column_letter}{settings.row_limit}")

    def _apply_presentation(self, data_sheet, options_sheet, column_count: int) -> None:
        settings = self._settings

        options_sheet.sheet_state = "hidden"
        data_sheet.row_dimensions[settings.name_row].hidden = True
        data_sheet.freeze_panes = f"A{settings.first_data_row}"

        header_fill = PatternFill("solid", fgColor=settings.header_fill_color)
        for row_number in (settings.type_row, settings.display_name_row):
            for column_number in range(1, column_count + 1):
                data_sheet.cell(row=row_number, column=column_number).fill = header_fill

        # Text format keeps Excel from turning codes and dates into numbers before validation
        for row in data_sheet.iter_rows(
            min_row=settings.first_data_row,
            max_row=settings.row_limit,
            min_col=1,
            max_col=column_count,
        ):
            for cell in row:
                cell.number_format = TEXT_FORMAT

        for column_number in range(1, column_count + 1):
            lengths = [
                len(str(data_sheet.cell(row=row_number, column=column_number).value or ""))
                for row_number in (settings.name_row, settings.type_row, settings.display_name_row)
            ]
            # Option values are shown in the column once picked
            lengths.extend(
                len(str(value or ""))
                for (value,) in options_sheet.iter_rows(
                    min_row=settings.first_option_row,
                    max_row=max(options_sheet.max_row, settings.first_option_row),
                    min_col=column_number,
                    max_col=column_number,
                    values_only=True,
                )
            )
            data_sheet.column_dimensions[get_column_letter(column_number)].width = max(12, min(50, max(lengths) + 4))
