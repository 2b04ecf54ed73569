"""
Unit tests for the template workbook layout
"""
from types import SimpleNamespace
from typing import Any, List, Type

import pytest
from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base

from src.core.exceptions import SchemaError
from src.core.interfaces import IReferenceDataSource
from src.models.customer import Customer
from src.models.order import Order
from src.services.excel.reference_resolver import ForeignReferenceResolver
from src.services.excel.template_generator import (
    TemplateGenerator, data_sheet_title, options_sheet_title, template_fields,
)
from tests.helpers.workbooks import open_workbook

LocalBase = declarative_base()


class Warehouse(LocalBase):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True)


class Shipment(LocalBase):
    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True)
    label = Column(String(20))
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"))


class StaticSource(IReferenceDataSource):

    def __init__(self, instances: List[Any]):
        self.instances = instances

    def get_all(self, entity_type: Type[Any]) -> List[Any]:
        return self.instances


@pytest.fixture
def generator(excel_settings):
    source = StaticSource([SimpleNamespace(id=1, last_name="SMITH"), SimpleNamespace(id=2, last_name="DOE")])
    return TemplateGenerator(ForeignReferenceResolver(source), excel_settings)


def test_sheet_titles_fit_excel_limit():
    assert data_sheet_title(Customer) == "Import - Customer"
    assert options_sheet_title(Order) == "Options - Order"

    long_type = type("A" * 40, (), {})
    assert len(data_sheet_title(long_type)) == 31


def test_header_rows(generator):
    sheet = generator.build(Customer).worksheets[0]

    assert [sheet.cell(row=1, column=c).value for c in range(1, 8)] == [
        "first_name", "last_name", "postal_code", "referral", "birth_date", "is_minor", "age",
    ]
    assert [sheet.cell(row=2, column=c).value for c in range(1, 8)] == [
        "Text", "Text", "Text", "Text", "Date (dd/mm/yyyy)", "O/N", "Integer",
    ]
    assert sheet.cell(row=3, column=1).value == "First name *"
    assert sheet.cell(row=3, column=7).value == "Age"
    assert sheet.cell(row=1, column=8).value is None


def test_presentation(generator, excel_settings):
    workbook = generator.build(Customer)
    data_sheet, options_sheet = workbook.worksheets

    assert data_sheet.title == "Import - Customer"
    assert options_sheet.title == "Options - Customer"
    assert options_sheet.sheet_state == "hidden"
    assert data_sheet.row_dimensions[excel_settings.name_row].hidden is True
    assert data_sheet.freeze_panes == "A4"
    assert data_sheet.cell(row=4, column=1).number_format == "@"
    assert data_sheet.cell(row=excel_settings.row_limit, column=7).number_format == "@"
    assert str(data_sheet.cell(row=3, column=1).fill.fgColor.rgb).endswith("D3D3D3")


def test_enumerated_field_gets_pick_list(generator):
    workbook = generator.build(Customer)
    data_sheet, options_sheet = workbook.worksheets

    # referral is the fourth column: options live in column D of the options sheet
    assert [options_sheet.cell(row=r, column=4).value for r in range(1, 4)] == ["Friend", "Advertising", "Website"]

    validations = data_sheet.data_validations.dataValidation
    assert len(validations) == 1
    assert validations[0].type == "list"
    assert validations[0].formula1 == "'Options - Customer'!$D$1:$D$3"
    assert str(validations[0].sqref) == "D4:D500"


def test_foreign_key_pick_list_lists_identifiers(generator):
    workbook = generator.build(Order)
    data_sheet, options_sheet = workbook.worksheets

    assert data_sheet.cell(row=1, column=2).value == "customer_id"
    assert data_sheet.cell(row=3, column=2).value == "Customer *"
    assert [options_sheet.cell(row=r, column=2).value for r in range(1, 3)] == ["1 - SMITH", "2 - DOE"]
    assert data_sheet.data_validations.dataValidation[0].formula1 == "'Options - Order'!$B$1:$B$2"


def test_column_width_fits_option_values(excel_settings):
    label = "SOME VERY LONG CUSTOMER LABEL"
    generator = TemplateGenerator(
        ForeignReferenceResolver(StaticSource([SimpleNamespace(id=12, last_name=label)])), excel_settings
    )
    data_sheet = generator.build(Order).worksheets[0]

    assert data_sheet.column_dimensions["B"].width == len(f"12 - {label}") + 4


def test_column_width_is_capped(excel_settings):
    generator = TemplateGenerator(
        ForeignReferenceResolver(StaticSource([SimpleNamespace(id=1, last_name="X" * 80)])), excel_settings
    )
    data_sheet = generator.build(Order).worksheets[0]

    assert data_sheet.column_dimensions["B"].width == 50


def test_foreign_key_without_references_has_no_pick_list(excel_settings):
    generator = TemplateGenerator(ForeignReferenceResolver(StaticSource([])), excel_settings)
    data_sheet = generator.build(Order).worksheets[0]

    assert data_sheet.data_validations.dataValidation == []


def test_foreign_key_without_navigation_field(generator):
    with pytest.raises(SchemaError) as exc_info:
        generator.build(Shipment)
    assert exc_info.value.details["field_name"] == "warehouse_id"


def test_entity_without_exportable_field(generator):
    with pytest.raises(SchemaError):
        template_fields(Warehouse)
    with pytest.raises(SchemaError):
        generator.build(Warehouse)


def test_export_returns_loadable_workbook(generator):
    workbook = open_workbook(generator.export(Customer))

    assert workbook.sheetnames == ["Import - Customer", "Options - Customer"]
    assert workbook["Options - Customer"].sheet_state == "hidden"
    assert workbook["Import - Customer"].cell(row=1, column=1).value == "first_name"


def test_custom_layout(excel_settings):
    settings = excel_settings.model_copy(update={"first_data_row": 6, "row_limit": 50, "required_marker": " (required)"})
    generator = TemplateGenerator(ForeignReferenceResolver(StaticSource([])), settings)

    data_sheet = generator.build(Customer).worksheets[0]

    assert data_sheet.cell(row=3, column=1).value == "First name (required)"
    assert data_sheet.freeze_panes == "A6"
    assert str(data_sheet.data_validations.dataValidation[0].sqref) == "D6:D50"
