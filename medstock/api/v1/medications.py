"""
Medication API endpoints
"""

from datetime import date
from typing import List
from fastapi import APIRouter, Depends, status

from medstock.api.deps import get_current_user, get_medication_service
from medstock.core.config import settings
from medstock.schemas.medication import (
    MedicationCreate, MedicationUpdate, MedicationResponse, AlertResponse
)
from medstock.services.stock.alerts import evaluate_alerts
from medstock.services.stock.ledger_store import MedicationLedgerService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[MedicationResponse])
def list_medications(service: MedicationLedgerService = Depends(get_medication_service)):
    return service.list_medications()


@router.post("", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
def create_medication(
    medication_in: MedicationCreate,
    service: MedicationLedgerService = Depends(get_medication_service)
):
    """
    Register a medication lot. The lot number must be unused.
    """
    return service.create_medication(**medication_in.model_dump())


@router.get("/alerts", response_model=List[AlertResponse])
def list_alerts(service: MedicationLedgerService = Depends(get_medication_service)):
    """
    Expired, expiring-soon and low-stock medications as of today.
    """
    return list(evaluate_alerts(
        service.list_medications(),
        today=date.today(),
        window_days=settings.EXPIRY_WARNING_DAYS,
    ))


@router.put("/{medication_id}", response_model=MedicationResponse)
def update_medication(
    medication_id: int,
    medication_in: MedicationUpdate,
    service: MedicationLedgerService = Depends(get_medication_service)
):
    return service.update_medication(medication_id, **medication_in.model_dump())


@router.delete("/{medication_id}")
def delete_medication(
    medication_id: int,
    service: MedicationLedgerService = Depends(get_medication_service)
):
    service.delete_medication(medication_id)
    return {"message": "Medication deleted"}
