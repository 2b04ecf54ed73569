"""
Unit tests for row validation of filled templates
"""
from datetime import date, datetime
from typing import Any, List, Type

import pytest
from openpyxl import Workbook
from openpyxl.styles import PatternFill
from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base

from src.core.exceptions import ErrorCode, UploadFormatError
from src.core.interfaces import IReferenceDataSource
from src.models.customer import Customer
from src.models.order import Order
from src.services.excel.annotations import excel_field
from src.services.excel.import_validator import ImportValidator
from src.services.excel.reference_resolver import ForeignReferenceResolver
from src.services.excel.template_generator import TemplateGenerator
from tests.factories.customer_factory import customer_row
from tests.factories.order_factory import order_row
from tests.helpers.workbooks import fill_row, is_marked, marked_cells, open_workbook, to_bytes

LocalBase = declarative_base()


class Appointment(LocalBase):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    starts_at = Column(DateTime, nullable=False, info=excel_field(value_range=(date(2000, 1, 1), None)))


class NoReferences(IReferenceDataSource):

    def get_all(self, entity_type: Type[Any]) -> List[Any]:
        return []


@pytest.fixture
def validator(excel_settings):
    return ImportValidator(excel_settings)


@pytest.fixture
def template(excel_settings):
    generator = TemplateGenerator(ForeignReferenceResolver(NoReferences()), excel_settings)

    def _template(entity_type, rows=()):
        workbook = generator.build(entity_type)
        sheet = workbook.worksheets[0]
        for offset, values in enumerate(rows):
            fill_row(sheet, 4 + offset, values)
        return workbook

    return _template


def test_valid_rows_become_records(validator, template):
    workbook = template(Customer, [
        customer_row(),
        customer_row(first_name=" jane ", last_name="doe", is_minor="o", age="12", referral="website"),
    ])

    outcome = validator.validate(workbook, Customer)

    assert outcome.is_valid
    assert outcome.total_rows == 2
    assert outcome.content is None
    john, jane = outcome.records
    assert isinstance(john, Customer)
    assert john.first_name == "JOHN"
    assert john.last_name == "SMITH"
    assert john.postal_code == "75001"
    assert john.birth_date == date(1990, 3, 15)
    assert john.is_minor is False
    assert john.age == 0
    assert john.id is None
    assert jane.first_name == "JANE"
    assert jane.is_minor is True
    assert jane.age == 12
    assert jane.referral == "WEBSITE"


def test_blank_rows_are_skipped(validator, template):
    workbook = template(Customer, [customer_row()])
    fill_row(workbook.worksheets[0], 6, customer_row(last_name="doe"))

    outcome = validator.validate(workbook, Customer)

    assert outcome.is_valid
    assert outcome.total_rows == 2
    assert [record.last_name for record in outcome.records] == ["SMITH", "DOE"]


def test_empty_template_has_no_records(validator, template):
    outcome = validator.validate(template(Customer), Customer)

    assert outcome.is_valid
    assert outcome.records == []
    assert outcome.total_rows == 0


def test_required_integer_like_cell_left_blank_is_flagged(validator, template):
    workbook = template(Customer, [customer_row(is_minor="o", age="")])

    outcome = validator.validate(workbook, Customer)

    assert not outcome.is_valid
    error = outcome.errors[0]
    assert (error.row_number, error.column_number, error.field_name) == (4, 7, "age")
    assert error.error_type == ErrorCode.CONSTRAINT_VIOLATION.value


def test_one_marked_cell_per_invalid_row(validator, template):
    workbook = template(Customer, [
        customer_row(),
        customer_row(first_name="", birth_date="31/02/2020"),
        customer_row(birth_date="31/02/2020", postal_code="123"),
        customer_row(last_name="doe"),
    ])

    outcome = validator.validate(workbook, Customer)

    assert not outcome.is_valid
    assert outcome.records == []
    assert outcome.total_rows == 4
    assert [(error.row_number, error.field_name) for error in outcome.errors] == [
        (5, "first_name"),
        (6, "postal_code"),
    ]
    assert marked_cells(open_workbook(outcome.content).worksheets[0]) == ["A5", "C6"]


def test_conversion_error_is_reported(validator, template):
    workbook = template(Customer, [customer_row(birth_date="31/02/2020")])

    outcome = validator.validate(workbook, Customer)

    error = outcome.errors[0]
    assert error.field_name == "birth_date"
    assert error.error_type == ErrorCode.CELL_CONVERSION_ERROR.value
    assert error.value == "31/02/2020"


def test_enumerated_value_outside_the_list(validator, template):
    workbook = template(Customer, [customer_row(referral="Radio")])

    outcome = validator.validate(workbook, Customer)

    assert outcome.errors[0].field_name == "referral"


def test_malformed_reference(validator, template):
    workbook = template(Order, [order_row(customer="abc - Smith")])

    outcome = validator.validate(workbook, Order)

    error = outcome.errors[0]
    assert error.field_name == "customer_id"
    assert error.error_type == ErrorCode.MALFORMED_REFERENCE.value
    assert error.column_number == 2


def test_empty_reference_is_malformed(validator, template):
    workbook = template(Order, [order_row(customer=None)])

    outcome = validator.validate(workbook, Order)

    assert outcome.errors[0].error_type == ErrorCode.MALFORMED_REFERENCE.value


def test_reference_key_is_assigned(validator, template):
    workbook = template(Order, [order_row(customer="7 - Smith")])

    outcome = validator.validate(workbook, Order)

    assert outcome.is_valid
    assert outcome.records[0].customer_id == 7
    assert outcome.records[0].reference == "ORD-001"


def test_stale_fills_are_cleared(validator, template):
    workbook = template(Customer, [customer_row(), customer_row(first_name="")])
    sheet = workbook.worksheets[0]
    sheet["B4"].fill = PatternFill("solid", fgColor="FF0000")

    outcome = validator.validate(workbook, Customer)

    annotated = open_workbook(outcome.content).worksheets[0]
    assert not is_marked(annotated["B4"])
    assert marked_cells(annotated) == ["A5"]


def test_resubmitted_corrected_workbook_is_valid(validator, template):
    workbook = template(Customer, [customer_row(first_name="")])
    outcome = validator.validate(workbook, Customer)

    corrected = open_workbook(outcome.content)
    corrected.worksheets[0]["A4"] = "john"
    second = validator.validate(corrected, Customer)

    assert second.is_valid
    assert marked_cells(corrected.worksheets[0]) == []


def test_discard_valid_rows(validator, template):
    workbook = template(Customer, [
        customer_row(last_name="valid"),
        customer_row(first_name="", last_name="invalid"),
        customer_row(last_name="valid too"),
    ])

    outcome = validator.validate(workbook, Customer, discard_valid_rows=True)

    annotated = open_workbook(outcome.content).worksheets[0]
    assert annotated["B4"].value == "invalid"
    assert annotated["B5"].value is None
    assert annotated["B6"].value is None
    assert outcome.total_rows == 3
    assert len(outcome.errors) == 1


def test_valid_rows_are_kept_by_default(validator, template):
    workbook = template(Customer, [customer_row(last_name="valid"), customer_row(first_name="", last_name="invalid")])

    outcome = validator.validate(workbook, Customer)

    annotated = open_workbook(outcome.content).worksheets[0]
    assert annotated["B4"].value == "valid"
    assert annotated["B5"].value == "invalid"


def test_missing_column_is_skipped(validator, template):
    workbook = template(Customer, [customer_row()])
    sheet = workbook.worksheets[0]
    sheet.cell(row=1, column=7).value = None
    sheet.cell(row=4, column=7, value="not a number")

    outcome = validator.validate(workbook, Customer)

    assert outcome.is_valid
    assert outcome.records[0].age is None


def test_workbook_of_another_entity_is_rejected(validator, template):
    workbook = template(Order, [order_row()])

    with pytest.raises(UploadFormatError):
        validator.validate(workbook, Customer)


def test_workbook_without_name_row_is_rejected(validator):
    workbook = Workbook()
    workbook.active["A4"] = "john"

    with pytest.raises(UploadFormatError):
        validator.validate(workbook, Customer)


def test_data_beyond_row_limit_is_rejected(validator, template):
    workbook = template(Customer, [customer_row()])
    workbook.worksheets[0].cell(row=501, column=2, value="smith")

    with pytest.raises(UploadFormatError) as exc_info:
        validator.validate(workbook, Customer)
    assert "B501" in exc_info.value.message


def test_formatting_beyond_row_limit_is_ignored(validator, template):
    workbook = template(Customer, [customer_row()])
    workbook.worksheets[0].cell(row=600, column=2).number_format = "@"

    outcome = validator.validate(workbook, Customer)

    assert outcome.is_valid


def test_untouched_template_round_trip(validator, template):
    workbook = open_workbook(to_bytes(template(Order)))

    outcome = validator.validate(workbook, Order)

    assert outcome.is_valid
    assert outcome.records == []
    assert outcome.errors == []


def test_column_order_does_not_matter(validator, template):
    workbook = template(Customer, [customer_row(first_name="john", last_name="smith")])
    sheet = workbook.worksheets[0]
    for row_number in (1, 4):
        first, second = sheet.cell(row=row_number, column=1).value, sheet.cell(row=row_number, column=2).value
        sheet.cell(row=row_number, column=1, value=second)
        sheet.cell(row=row_number, column=2, value=first)

    outcome = validator.validate(workbook, Customer)

    assert outcome.is_valid
    assert (outcome.records[0].first_name, outcome.records[0].last_name) == ("JOHN", "SMITH")


def test_date_bound_on_datetime_column(validator, template):
    workbook = template(Appointment, [{"starts_at": "01/02/2020"}, {"starts_at": "31/12/1999"}])

    outcome = validator.validate(workbook, Appointment)

    assert not outcome.is_valid
    error = outcome.errors[0]
    assert (error.row_number, error.field_name) == (5, "starts_at")
    assert error.error_type == ErrorCode.CONSTRAINT_VIOLATION.value


def test_datetime_column_within_date_bound(validator, template):
    outcome = validator.validate(template(Appointment, [{"starts_at": "01/02/2020"}]), Appointment)

    assert outcome.is_valid
    assert outcome.records[0].starts_at == datetime(2020, 2, 1)


def test_reference_typed_as_number_is_accepted(validator, template):
    workbook = template(Order, [order_row(customer=None)])
    workbook.worksheets[0]["B4"] = 7.0

    outcome = validator.validate(workbook, Order)

    assert outcome.is_valid
    assert outcome.records[0].customer_id == 7
