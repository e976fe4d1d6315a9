"""
MedStock Stock Models
SQLAlchemy models for the principal and secondary stock locations
"""
from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func

from medstock.core.database import Base


class StockRecordMixin:
    """
    Shared shape of a location's stock table

    One row per product name; the quantity is a running counter merged on
    every add with the same name.
    """

    id = Column(Integer, primary_key=True, autoincrement=True, doc="Stock record ID")
    name = Column(String(120), unique=True, nullable=False, doc="Product name")
    quantity = Column(Integer, nullable=False, default=0, doc="Quantity on hand")
    category = Column(String(60), nullable=True, doc="Product category")

    # Audit Trail
    entry_timestamp = Column(
        DateTime(timezone=True), server_default=func.current_timestamp(),
        nullable=False, doc="Record creation timestamp"
    )
    updated_timestamp = Column(
        DateTime(timezone=True), server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(), nullable=False, doc="Last mutation timestamp"
    )

    @declared_attr
    def __table_args__(cls):
        return (
            CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        )

    location = ""

    def __repr__(self):
        return f"<{self.__class__.__name__}(name='{self.name}', quantity={self.quantity})>"


class PrincipalStockRec(StockRecordMixin, Base):
    """Stock held at the principal location"""
    __tablename__ = "storage_principal"

    location = "principal"


class SecondaryStockRec(StockRecordMixin, Base):
    """Stock held at the secondary location"""
    __tablename__ = "storage_secondary"

    location = "secondary"


STOCK_MODELS = {
    "principal": PrincipalStockRec,
    "secondary": SecondaryStockRec,
}
