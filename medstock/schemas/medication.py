"""Medication, withdrawal and alert schemas"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import date, datetime

from medstock.services.stock.alerts import AlertKind


class MedicationBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    lot: str = Field(..., min_length=1, max_length=60)
    expiration_date: date
    minimum_stock: int = Field(default=0, ge=0)

    @field_validator("name", "lot")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class MedicationCreate(MedicationBase):
    quantity: int = Field(..., ge=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Amoxicillin 500mg",
                "lot": "AMX-2024-001",
                "quantity": 120,
                "expiration_date": "2026-03-31",
                "minimum_stock": 20
            }
        }
    }


class MedicationUpdate(MedicationBase):
    quantity: int = Field(..., ge=0)


class MedicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    lot: str
    quantity: int
    expiration_date: date
    minimum_stock: int
    entry_timestamp: datetime


class WithdrawalRequest(BaseModel):
    medication_id: int = Field(..., ge=1)
    quantity_withdrawn: int = Field(..., ge=1)
    note: Optional[str] = Field(None, max_length=500)
    request_key: Optional[str] = Field(None, min_length=1, max_length=64)


class WithdrawalRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    medication_id: int
    medication_name: str
    lot: str
    quantity_withdrawn: int
    note: Optional[str] = None
    withdrawal_timestamp: datetime
    request_key: Optional[str] = None


class WithdrawalResponse(BaseModel):
    message: str
    medication: Optional[MedicationResponse] = None
    withdrawal: WithdrawalRecordResponse
    replayed: bool = False


class AlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: AlertKind
    medication_id: int
    name: str
    lot: str
    expiration_date: date
    quantity: int
    minimum_stock: int
    message: str
