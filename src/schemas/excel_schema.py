from typing import List, Optional
from pydantic import BaseModel, Field


class FieldSchema(BaseModel):
    """
        Schema of one template column.

        Attributes:
        - name (str): Attribute name, written in the hidden first row of the template.
        - kind (str): primary_key, foreign_key or scalar.
        - scalar_type (str): Cell type (text, integer, boolean, date).
        - display_name (str): Label shown to the person filling the sheet.
        - required (bool): Whether the column is flagged with the required marker.
        - options (List[str]): Enumerated values offered as a pick-list.
    """
    name: str
    kind: str
    scalar_type: Optional[str] = None
    display_name: str
    required: bool = False
    options: List[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class EntitySchema(BaseModel):
    name: str
    identifier: Optional[str] = None
    fields: List[FieldSchema]
    export_url: str
    import_url: str


class AllEntitiesResponseSchema(BaseModel):
    entities: List[EntitySchema]
    total: int


class CellErrorSchema(BaseModel):
    row: int
    column: int
    field: str
    type: str
    message: str
    value: Optional[str] = None


class ImportSummarySchema(BaseModel):
    """Outcome of an import: inserted rows on success, rejected cells otherwise"""
    entity_type: str
    total_rows: int
    inserted_rows: int
    errors_count: int = 0
    errors: List[CellErrorSchema] = Field(default_factory=list)
