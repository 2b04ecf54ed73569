"""
Spreadsheet codec: xlsx bytes to openpyxl workbooks and back.
"""
from __future__ import annotations

import zipfile
from io import BytesIO
from pathlib import Path
from typing import Optional

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from src.core.exceptions import NotASpreadsheetError
from src.core.settings import XLSX_EXTENSION


def is_excel_upload(filename: Optional[str], content: Optional[bytes]) -> bool:
    """An upload is usable when it has content and the xlsx extension"""
    if not filename or not content:
        return False
    return Path(filename).suffix.lower() == XLSX_EXTENSION


def load_workbook_bytes(content: bytes) -> Workbook:
    """
    Decode xlsx content.

    The returned workbook belongs to the caller's validation pass only: the
    import validator rewrites its cells in place.

    Raises:
        NotASpreadsheetError: If the content is empty or not a valid workbook
    """
    if not content:
        raise NotASpreadsheetError("Spreadsheet content is empty")
    try:
        return load_workbook(filename=BytesIO(content))
    except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as exc:
        raise NotASpreadsheetError(f"Invalid workbook: {exc}", {"error": str(exc)}) from exc


def save_workbook_bytes(workbook: Workbook) -> bytes:
    """Serialize a workbook to xlsx content"""
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
