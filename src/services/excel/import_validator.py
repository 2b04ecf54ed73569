"""
Import Validator for the Excel Import/Export System.

Walks the data rows of a filled template, builds one record per non blank
row and validates each cell against its field descriptor. All-or-nothing:
a single invalid cell rejects the whole submission and the workbook comes
back with the invalid cells filled red.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from openpyxl import Workbook
from openpyxl.styles import PatternFill
from openpyxl.utils import get_column_letter

from src.core.exceptions import CellValidationError, UploadFormatError
from src.core.settings import ExcelSettings

from .cell_converter import convert_cell
from .constraints import is_blank, validate_value
from .models import CellError, FieldDescriptor, ImportOutcome
from .reference_resolver import parse_identifier
from .template_generator import template_fields
from .workbook_codec import save_workbook_bytes

logger = logging.getLogger(__name__)

NO_FILL = PatternFill(fill_type=None)


class ImportValidator:
    """Validates a filled template against an entity type"""

    def __init__(self, settings: ExcelSettings):
        self._settings = settings
        self._error_fill = PatternFill("solid", fgColor=settings.error_fill_color)

    def validate(
        self,
        workbook: Workbook,
        entity_type: Type[Any],
        discard_valid_rows: Optional[bool] = None,
    ) -> ImportOutcome:
        """
        Validate every data row of a workbook.

        The workbook is modified in place (fills, optionally deleted rows) and
        must not be shared with another validation pass.

        Args:
            workbook: Loaded template, data sheet first
            entity_type: Entity type the template was generated for
            discard_valid_rows: Remove valid rows from the annotated workbook,
                defaults to the configured behaviour

        Returns:
            ImportOutcome with the records when every row is valid, otherwise
            the errors and the annotated workbook content

        Raises:
            SchemaError: If the entity type has no usable field
            UploadFormatError: If the workbook is not a template of this
                entity type or holds data beyond the row limit
        """
        settings = self._settings
        if discard_valid_rows is None:
            discard_valid_rows = settings.discard_valid_rows

        entity_name = entity_type.__name__
        sheet = workbook.worksheets[0]
        bound_fields = self._bind_columns(sheet, template_fields(entity_type), entity_name)
        self._check_row_limit(sheet, bound_fields, entity_name)

        records: List[Any] = []
        errors: List[CellError] = []
        valid_rows: List[int] = []
        total_rows = 0
        last_row = min(sheet.max_row, settings.row_limit)

        for row_number in range(settings.first_data_row, last_row + 1):
            cells = [(field, sheet.cell(row=row_number, column=column)) for field, column in bound_fields]
            for _, cell in cells:
                cell.fill = NO_FILL

            if all(is_blank(cell.value) for _, cell in cells):
                continue
            total_rows += 1

            record, error = self._validate_row(entity_type, row_number, cells)
            if error is None:
                records.append(record)
                valid_rows.append(row_number)
            else:
                errors.append(error)
                logger.warning(
                    f"Invalid row {row_number} for {entity_name}: {error.field_name} - {error.message}",
                    extra={"entity_type": entity_name, "row": row_number, "error_type": error.error_type}
                )

        if not errors:
            logger.info(f"{entity_name} workbook valid: {len(records)} records")
            return ImportOutcome(records=records, total_rows=total_rows)

        if discard_valid_rows:
            for row_number in reversed(valid_rows):
                sheet.delete_rows(row_number)

        logger.info(f"{entity_name} workbook rejected: {len(errors)} invalid rows out of {total_rows}")
        return ImportOutcome(errors=errors, content=save_workbook_bytes(workbook), total_rows=total_rows)

    def _validate_row(
        self,
        entity_type: Type[Any],
        row_number: int,
        cells: List[Tuple[FieldDescriptor, Any]],
    ) -> Tuple[Any, Optional[CellError]]:
        """
        Build and validate one record.

        Fields are assigned in column order so conditional constraints see
        the sibling values already set on the record. Processing stops at the
        first invalid cell.
        """
        settings = self._settings
        record = entity_type()

        for field, cell in cells:
            raw = cell.value
            try:
                if field.is_foreign_key:
                    # Referential integrity is left to the persistence sink
                    value = parse_identifier(raw)
                else:
                    value = convert_cell(
                        raw,
                        field.scalar_type,
                        field.python_type,
                        true_marker=settings.boolean_true_marker,
                        day_first=settings.date_day_first,
                    )
                    validate_value(field.name, field.constraints, value, raw, record)
            except CellValidationError as exc:
                cell.fill = self._error_fill
                return None, CellError(
                    row_number=row_number,
                    column_number=cell.column,
                    field_name=field.name,
                    error_type=exc.error_code.value,
                    message=exc.message,
                    value=raw,
                )
            field.assign(record, value)

        return record, None

    def _bind_columns(self, sheet, fields: List[FieldDescriptor], entity_name: str) -> List[Tuple[FieldDescriptor, int]]:
        """Locate each field's column by its name in the hidden name row"""
        columns: Dict[str, int] = {}
        for column_number in range(1, sheet.max_column + 1):
            name = sheet.cell(row=self._settings.name_row, column=column_number).value
            if isinstance(name, str) and name.strip() and name.strip() not in columns:
                columns[name.strip()] = column_number

        bound = []
        for field in fields:
            column_number = columns.get(field.name)
            if column_number is None:
                logger.warning(f"Column for {entity_name}.{field.name} not found in workbook, field skipped")
                continue
            bound.append((field, column_number))

        if not bound:
            raise UploadFormatError(f"The workbook is not a {entity_name} template")
        return bound

    def _check_row_limit(self, sheet, bound_fields: List[Tuple[FieldDescriptor, int]], entity_name: str) -> None:
        limit = self._settings.row_limit
        if sheet.max_row <= limit:
            return
        for row_number in range(limit + 1, sheet.max_row + 1):
            for _, column in bound_fields:
                if not is_blank(sheet.cell(row=row_number, column=column).value):
                    raise UploadFormatError(
                        f"{entity_name} workbook has data beyond row {limit} "
                        f"(cell {get_column_letter(column)}{row_number})"
                    )
