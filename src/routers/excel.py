"""
Excel Router

Template download and filled template upload for every registered entity type.
"""
import logging
from typing import Any, Type

from fastapi import APIRouter, Depends, UploadFile, File, Request, status
from fastapi.responses import RedirectResponse, Response

from src.core.dependencies import get_entity_type, get_excel_service
from src.schemas.excel_schema import AllEntitiesResponseSchema, EntitySchema, FieldSchema, ImportSummarySchema
from src.services.excel.annotations import entity_registry, get_identifier_field
from src.services.excel.models import ExcelFile
from src.services.excel.schema_introspector import describe_fields, exportable_fields
from src.services.interfaces.excel_service_interface import IExcelService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/excel",
    tags=["Excel"]
)


def _download(excel_file: ExcelFile, extra_headers: dict = None) -> Response:
    headers = {"Content-Disposition": f"attachment; filename={excel_file.filename}"}
    if extra_headers:
        headers.update(extra_headers)
    return Response(content=excel_file.content, media_type=excel_file.media_type, headers=headers)


@router.get(
    "/entities",
    status_code=status.HTTP_200_OK,
    response_model=AllEntitiesResponseSchema
)
async def get_entities():
    """
    List the entity types that can be exported and imported, with the
    columns of their template.
    """
    entities = []
    for entity_type in entity_registry.all():
        name = entity_type.__name__
        entities.append(EntitySchema(
            name=name,
            identifier=get_identifier_field(entity_type),
            fields=[FieldSchema(**field.to_dict()) for field in exportable_fields(describe_fields(entity_type))],
            export_url=f"{router.prefix}/{name}/export",
            import_url=f"{router.prefix}/{name}/import",
        ))
    return AllEntitiesResponseSchema(entities=entities, total=len(entities))


@router.get(
    "/{entity_name}/export",
    status_code=status.HTTP_200_OK,
    response_description="Excel template downloaded"
)
async def export_template(
    entity_type: Type[Any] = Depends(get_entity_type),
    excel_service: IExcelService = Depends(get_excel_service)
):
    """
    Download the fillable template of an entity type.

    Foreign key columns and enumerated columns come with a pick-list built
    from the current data.
    """
    return _download(excel_service.export(entity_type))


@router.post(
    "/{entity_name}/import",
    status_code=status.HTTP_200_OK,
    response_description="Excel import completed",
    response_model=ImportSummarySchema,
    responses={
        200: {"description": "Rows imported, or the annotated workbook when rows were rejected"},
        303: {"description": "Rows imported, redirected to the referring page"},
    }
)
async def import_template(
    request: Request,
    file: UploadFile = File(..., description="Filled template (.xlsx)"),
    entity_type: Type[Any] = Depends(get_entity_type),
    excel_service: IExcelService = Depends(get_excel_service)
):
    """
    Import a filled template.

    **Validation**:
    - All-or-nothing: if any row fails validation, no rows are imported
    - The uploaded workbook comes back with the invalid cells filled red,
      the number of rejected rows is in the `X-Import-Errors` header

    **Success**: redirects to the referring page when there is one,
    otherwise returns the import summary.
    """
    content = await file.read()
    result = excel_service.import_file(entity_type, file.filename, content)

    if not result.is_valid:
        return _download(result.error_file, {"X-Import-Errors": str(len(result.errors))})

    referer = request.headers.get("referer")
    if referer:
        return RedirectResponse(url=referer, status_code=status.HTTP_303_SEE_OTHER)
    return result.to_dict()
