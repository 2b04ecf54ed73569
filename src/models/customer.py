from sqlalchemy import Integer, Column, String, Boolean, Date
from sqlalchemy.orm import relationship

from src.database import Base
from src.services.excel.annotations import excel_entity, excel_field


@excel_entity(identifier="last_name")
class Customer(Base):
    """
        SQLAlchemy model for the 'customers' table.

        Exported as a fillable Excel template; referenced by orders through
        identifiers such as "7 - SMITH".

        Attributes:
            __tablename__ (str): Table name in the database.
            id (Column): Primary key, never part of the template.
            first_name, last_name (Column): Required names, up to 30 characters.
            postal_code (Column): Five digit postal code.
            referral (Column): How the customer heard of us, picked from a fixed list.
            birth_date (Column): Required birth date.
            is_minor (Column): Required yes/no flag.
            age (Column): Required only for minors, between 0 and 150.
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(30), nullable=False, info=excel_field(display_name="First name"))
    last_name = Column(String(30), nullable=False, info=excel_field(display_name="Last name"))
    postal_code = Column(String(5), nullable=False, info=excel_field(
        display_name="Postal code", min_length=5, pattern=r"[0-9]{5}"
    ))
    referral = Column(String(50), nullable=False, info=excel_field(
        display_name="Referral", options=["Friend", "Advertising", "Website"]
    ))
    birth_date = Column(Date, nullable=False, info=excel_field(display_name="Birth date"))
    is_minor = Column(Boolean, nullable=False, info=excel_field(display_name="Minor"))
    age = Column(Integer, nullable=True, info=excel_field(
        display_name="Age", required_if=("is_minor", True), value_range=(0, 150)
    ))

    orders = relationship("Order", back_populates="customer")
