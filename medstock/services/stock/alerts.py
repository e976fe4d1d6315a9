"""
Medication Alert Evaluation
Expiry and low-stock alerts computed from the current medication records
"""
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Iterator, Optional

DEFAULT_WARNING_DAYS = 30


class AlertKind(str, Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    LOW_STOCK = "low_stock"


@dataclass(frozen=True)
class MedicationAlert:
    kind: AlertKind
    medication_id: int
    name: str
    lot: str
    expiration_date: date
    quantity: int
    minimum_stock: int
    message: str


def classify_medication(medication, today: date, window_days: int = DEFAULT_WARNING_DAYS) -> Optional[AlertKind]:
    """
    Classify one medication record

    Expiry outranks low stock: a record that is both expired and under its
    minimum is reported as expired only.
    """
    if medication.expiration_date < today:
        return AlertKind.EXPIRED
    if medication.expiration_date <= today + timedelta(days=window_days):
        return AlertKind.EXPIRING_SOON
    if medication.quantity < (medication.minimum_stock or 0):
        return AlertKind.LOW_STOCK
    return None


def _message(kind: AlertKind, medication) -> str:
    if kind is AlertKind.EXPIRED:
        return f"Medication {medication.name} lot {medication.lot} has expired."
    if kind is AlertKind.EXPIRING_SOON:
        return (
            f"Medication {medication.name} lot {medication.lot} expires soon "
            f"({medication.expiration_date.isoformat()})."
        )
    return (
        f"Low stock of {medication.name}: {medication.quantity} left, "
        f"minimum is {medication.minimum_stock}."
    )


def evaluate_alerts(
    medications: Iterable,
    today: date,
    window_days: int = DEFAULT_WARNING_DAYS
) -> Iterator[MedicationAlert]:
    """
    Yield alerts for the given medication records

    Args:
        medications: records exposing id, name, lot, quantity,
            expiration_date and minimum_stock
        today: reference date
        window_days: look-ahead for the expiring-soon classification

    Yields alerts in input order; records without a condition are skipped.
    """
    for medication in medications:
        kind = classify_medication(medication, today, window_days)
        if kind is None:
            continue
        yield MedicationAlert(
            kind=kind,
            medication_id=medication.id,
            name=medication.name,
            lot=medication.lot,
            expiration_date=medication.expiration_date,
            quantity=medication.quantity,
            minimum_stock=medication.minimum_stock or 0,
            message=_message(kind, medication),
        )
