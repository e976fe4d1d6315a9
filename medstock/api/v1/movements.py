"""
Movement history API endpoints
Withdrawals (list and create) and transfer history
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from medstock.api.deps import get_db, get_current_user, get_movement_service
from medstock.schemas.medication import (
    WithdrawalRequest, WithdrawalResponse, WithdrawalRecordResponse
)
from medstock.schemas.stock import TransferRecordResponse
from medstock.services.stock.audit_log import AuditLogService
from medstock.services.stock.movements import MovementService

withdrawals_router = APIRouter(dependencies=[Depends(get_current_user)])
transfers_router = APIRouter(dependencies=[Depends(get_current_user)])


@withdrawals_router.get("", response_model=List[WithdrawalRecordResponse])
def list_withdrawals(db: Session = Depends(get_db)):
    return AuditLogService(db).list_withdrawals()


@withdrawals_router.post("", response_model=WithdrawalResponse, status_code=status.HTTP_201_CREATED)
def withdraw_medication(
    withdrawal_in: WithdrawalRequest,
    service: MovementService = Depends(get_movement_service)
):
    """
    Record consumption of a medication lot.
    """
    result = service.withdraw_medication(
        withdrawal_in.medication_id,
        withdrawal_in.quantity_withdrawn,
        note=withdrawal_in.note,
        request_key=withdrawal_in.request_key,
    )
    return {
        "message": "Withdrawal already applied" if result.replayed else "Withdrawal recorded",
        "medication": result.medication,
        "withdrawal": result.withdrawal,
        "replayed": result.replayed,
    }


@transfers_router.get("", response_model=List[TransferRecordResponse])
def list_transfers(db: Session = Depends(get_db)):
    return AuditLogService(db).list_transfers()
