"""
MedStock Medication Model
Lot-tracked medication registry
"""
from sqlalchemy import Column, String, Integer, Date, DateTime, CheckConstraint, Index
from sqlalchemy.sql import func

from medstock.core.database import Base


class MedicationRec(Base):
    """
    Medication Record

    Names may repeat across lots; the lot number is unique across the table.
    """
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, autoincrement=True, doc="Medication ID")
    name = Column(String(120), nullable=False, doc="Medication name")
    lot = Column(String(60), unique=True, nullable=False, doc="Lot / batch number")
    quantity = Column(Integer, nullable=False, default=0, doc="Quantity on hand")
    expiration_date = Column(Date, nullable=False, doc="Expiration date")
    minimum_stock = Column(Integer, nullable=False, default=0, doc="Low-stock threshold")

    entry_timestamp = Column(
        DateTime(timezone=True), server_default=func.current_timestamp(),
        nullable=False, doc="Record creation timestamp"
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("minimum_stock >= 0", name="minimum_stock_non_negative"),
        Index("ix_medications_name", "name"),
        Index("ix_medications_expiration_date", "expiration_date"),
    )

    def __repr__(self):
        return f"<MedicationRec(name='{self.name}', lot='{self.lot}', quantity={self.quantity})>"
