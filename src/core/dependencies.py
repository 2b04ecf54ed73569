"""
FastAPI dependencies
"""
from typing import Annotated, Any, Type
from fastapi import Depends, Path
from sqlalchemy.orm import Session
from src.database import get_db
from src.core.container_config import get_configured_container
from src.core.exceptions import NotFoundException
from src.services.excel.annotations import entity_registry
from src.services.interfaces.excel_service_interface import IExcelService

# Type aliases for common dependencies
db_dependency = Annotated[Session, Depends(get_db)]


def get_excel_service(db: db_dependency) -> IExcelService:
    """Dependency injection for the Excel Service"""
    return get_configured_container().resolve_with_session(IExcelService, db)


def get_entity_type(entity_name: str = Path(..., description="Registered entity type name")) -> Type[Any]:
    """Resolve a registered entity type from the path"""
    entity_type = entity_registry.get(entity_name)
    if entity_type is None:
        raise NotFoundException("Entity type", entity_name)
    return entity_type
