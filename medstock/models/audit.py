"""
Audit Trail Models
Append-only history of transfers and medication withdrawals
"""
from sqlalchemy import Column, String, Integer, DateTime, Text, CheckConstraint
from sqlalchemy.sql import func

from medstock.core.database import Base


class TransferRec(Base):
    """Principal -> secondary transfer, one row per successful transfer"""
    __tablename__ = "transfers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_name = Column(String(120), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    category = Column(String(60), nullable=True)
    transfer_timestamp = Column(
        DateTime(timezone=True), server_default=func.current_timestamp(),
        nullable=False, index=True
    )
    request_key = Column(String(64), unique=True, nullable=True, doc="Caller-supplied idempotency key")
    created_by = Column(String(30), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
    )


class WithdrawalRec(Base):
    """
    Medication withdrawal

    medication_id is a plain back-reference with no foreign key; name and lot
    are copied at withdrawal time so the row outlives edits and deletes.
    """
    __tablename__ = "medication_withdrawals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    medication_id = Column(Integer, nullable=False, index=True)
    medication_name = Column(String(120), nullable=False)
    lot = Column(String(60), nullable=False)
    quantity_withdrawn = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)
    withdrawal_timestamp = Column(
        DateTime(timezone=True), server_default=func.current_timestamp(),
        nullable=False, index=True
    )
    request_key = Column(String(64), unique=True, nullable=True, doc="Caller-supplied idempotency key")
    created_by = Column(String(30), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity_withdrawn > 0", name="quantity_withdrawn_positive"),
    )
