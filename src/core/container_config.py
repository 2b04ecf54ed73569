"""
Dependency injection container configuration
"""
from src.core.container import container
from src.core.interfaces import IEntityRepository
from src.core.base_repository import EntityRepository
from src.core.settings import ExcelSettings, get_excel_settings
from src.services.interfaces.excel_service_interface import IExcelService
from src.services.excel.excel_service import ExcelService

_configured = False


def configure_container():
    """Register every service and repository"""
    container.register_transient(IEntityRepository, EntityRepository)
    container.register_transient(IExcelService, ExcelService)
    container.register_instance(ExcelSettings, get_excel_settings())


def get_configured_container():
    """Return the container, configuring it on first use"""
    global _configured
    if not _configured:
        configure_container()
        _configured = True
    return container
