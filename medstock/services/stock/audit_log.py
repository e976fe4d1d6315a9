"""
Audit Log Service
Append and read transfer and withdrawal history
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from medstock.models.audit import TransferRec, WithdrawalRec


class AuditLogService:
    """
    Append-only audit rows

    The append methods only add to the session; the caller's transaction
    decides whether the row becomes visible.
    """

    def __init__(self, db: Session):
        self.db = db

    def append_transfer(
        self,
        product_name: str,
        quantity: int,
        category: Optional[str],
        request_key: Optional[str] = None,
        created_by: Optional[str] = None
    ) -> TransferRec:
        entry = TransferRec(
            product_name=product_name,
            quantity=quantity,
            category=category,
            request_key=request_key,
            created_by=created_by,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def append_withdrawal(
        self,
        medication_id: int,
        medication_name: str,
        lot: str,
        quantity_withdrawn: int,
        note: Optional[str] = None,
        request_key: Optional[str] = None,
        created_by: Optional[str] = None
    ) -> WithdrawalRec:
        entry = WithdrawalRec(
            medication_id=medication_id,
            medication_name=medication_name,
            lot=lot,
            quantity_withdrawn=quantity_withdrawn,
            note=note,
            request_key=request_key,
            created_by=created_by,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_transfers(self) -> List[TransferRec]:
        return (
            self.db.query(TransferRec)
            .order_by(TransferRec.transfer_timestamp.desc(), TransferRec.id.desc())
            .all()
        )

    def list_withdrawals(self) -> List[WithdrawalRec]:
        return (
            self.db.query(WithdrawalRec)
            .order_by(WithdrawalRec.withdrawal_timestamp.desc(), WithdrawalRec.id.desc())
            .all()
        )

    def find_transfer_by_key(self, request_key: str) -> Optional[TransferRec]:
        return self.db.query(TransferRec).filter(TransferRec.request_key == request_key).first()

    def find_withdrawal_by_key(self, request_key: str) -> Optional[WithdrawalRec]:
        return self.db.query(WithdrawalRec).filter(WithdrawalRec.request_key == request_key).first()
