"""
Excel Service - main orchestration service.

Coordinates template export and the import workflow:
1. Check the upload (extension, content)
2. Decode the workbook
3. Validate every row (all-or-nothing)
4. Persist the records, or send back the annotated workbook
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Type

from src.core.exceptions import PersistenceError, UploadFormatError
from src.core.interfaces import IEntityRepository
from src.core.settings import ExcelSettings, XLSX_EXTENSION, get_excel_settings
from src.services.interfaces.excel_service_interface import IExcelService

from .import_validator import ImportValidator
from .models import ExcelFile, ImportResult
from .reference_resolver import ForeignReferenceResolver
from .template_generator import TemplateGenerator
from .workbook_codec import is_excel_upload, load_workbook_bytes

logger = logging.getLogger(__name__)


def workbook_filename(entity_type: Type[Any]) -> str:
    return f"{entity_type.__name__}{XLSX_EXTENSION}"


class ExcelService(IExcelService):
    """
    Export and import of entity types through Excel templates.

    One instance serves one request: it is bound to the repository (and
    therefore the session) of that request.
    """

    def __init__(self, repository: IEntityRepository, settings: Optional[ExcelSettings] = None):
        self._repository = repository
        self._settings = settings or get_excel_settings()
        self._generator = TemplateGenerator(ForeignReferenceResolver(repository), self._settings)
        self._validator = ImportValidator(self._settings)

    def export(self, entity_type: Type[Any]) -> ExcelFile:
        """
        Build the template of an entity type.

        Raises:
            SchemaError: If the entity type cannot be rendered
        """
        logger.info(f"Exporting template for {entity_type.__name__}")
        content = self._generator.export(entity_type)
        return ExcelFile(content=content, filename=workbook_filename(entity_type))

    def import_file(self, entity_type: Type[Any], filename: Optional[str], content: Optional[bytes]) -> ImportResult:
        """
        Import a filled template.

        Args:
            entity_type: Entity type the template was generated for
            filename: Declared name of the uploaded file
            content: Uploaded bytes

        Returns:
            ImportResult; on row errors it carries the annotated workbook and
            nothing is persisted

        Raises:
            UploadFormatError: If the upload is missing, empty or not .xlsx
            NotASpreadsheetError: If the content cannot be decoded
            PersistenceError: If the validated batch cannot be committed
        """
        entity_name = entity_type.__name__
        if not is_excel_upload(filename, content):
            raise UploadFormatError(f"A non-empty {XLSX_EXTENSION} file is required", filename)

        self._archive_upload(filename, content)

        workbook = load_workbook_bytes(content)
        outcome = self._validator.validate(workbook, entity_type)

        if not outcome.is_valid:
            return ImportResult(
                entity_type=entity_name,
                total_rows=outcome.total_rows,
                inserted_rows=0,
                errors=outcome.errors,
                error_file=ExcelFile(content=outcome.content, filename=workbook_filename(entity_type)),
            )

        inserted = self._repository.add_all(outcome.records)
        try:
            self._repository.commit()
        except PersistenceError:
            logger.error(f"Persisting {inserted} {entity_name} records failed", extra={"entity_type": entity_name})
            raise

        logger.info(f"Imported {inserted} {entity_name} records", extra={"entity_type": entity_name})
        return ImportResult(entity_type=entity_name, total_rows=outcome.total_rows, inserted_rows=inserted)

    def _archive_upload(self, filename: str, content: bytes) -> None:
        """Keep a copy of the upload when an upload directory is configured"""
        if not self._settings.upload_dir:
            return
        upload_path = Path(self._settings.upload_dir)
        upload_path.mkdir(parents=True, exist_ok=True)
        file_path = upload_path / Path(filename).name
        file_path.write_bytes(content)
        logger.debug(f"Upload archived to {file_path}")
