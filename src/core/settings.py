"""
Configuration settings for the spreadsheet import/export service
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class ExcelSettings(BaseSettings):
    """Template layout and import behaviour"""

    # Data sheet layout (1-based row numbers)
    name_row: int = Field(default=1, ge=1)
    type_row: int = Field(default=2, ge=1)
    display_name_row: int = Field(default=3, ge=1)
    first_data_row: int = Field(default=4, ge=1)
    row_limit: int = Field(default=500, ge=1)

    # Options sheet layout
    first_option_row: int = Field(default=1, ge=1)

    # Cell conversion
    boolean_true_marker: str = Field(default="O", min_length=1)
    date_day_first: bool = True

    # Import behaviour
    discard_valid_rows: bool = False
    upload_dir: Optional[str] = None  # uploads are archived here when set

    # Presentation
    header_fill_color: str = "D3D3D3"  # light gray
    error_fill_color: str = "FF0000"
    required_marker: str = " *"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="EXCEL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_excel_settings() -> ExcelSettings:
    """Get cached excel settings instance"""
    return ExcelSettings()


# Type labels written in the second row of the data sheet
TYPE_LABELS = {
    "text": "Text",
    "integer": "Integer",
    "boolean": "O/N",
    "date": "Date (dd/mm/yyyy)",
}

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLSX_EXTENSION = ".xlsx"
