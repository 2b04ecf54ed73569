from sqlalchemy import Integer, Column, String, ForeignKey
from sqlalchemy.orm import relationship

from src.database import Base
from src.services.excel.annotations import excel_entity, excel_field


@excel_entity(identifier="reference")
class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String(50), nullable=False, info=excel_field(display_name="Reference", min_length=1))
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, info=excel_field(display_name="Customer"))

    customer = relationship("Customer", back_populates="orders")
