"""
Interface for the Excel Service
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Type

if TYPE_CHECKING:
    from src.services.excel.models import ExcelFile, ImportResult


class IExcelService(ABC):
    """Interface for the Excel template export/import service"""

    @abstractmethod
    def export(self, entity_type: Type[Any]) -> ExcelFile:
        """Build the fillable template of an entity type"""
        pass

    @abstractmethod
    def import_file(self, entity_type: Type[Any], filename: Optional[str], content: Optional[bytes]) -> ImportResult:
        """Validate a filled template and persist its records when every row is valid"""
        pass
