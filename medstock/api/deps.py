"""
API Dependencies
Common dependencies for API endpoints
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from medstock.core.database import get_db
from medstock.core.security import get_current_user
from medstock.models.auth import User
from medstock.services.stock.ledger_store import StockLedgerService, MedicationLedgerService
from medstock.services.stock.movements import MovementService


def get_stock_service(db: Session = Depends(get_db)) -> StockLedgerService:
    return StockLedgerService(db)


def get_medication_service(db: Session = Depends(get_db)) -> MedicationLedgerService:
    return MedicationLedgerService(db)


def get_movement_service(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> MovementService:
    """Movement service bound to the request session and caller"""
    return MovementService(db, current_user=current_user)


__all__ = [
    "get_db",
    "get_current_user",
    "get_stock_service",
    "get_medication_service",
    "get_movement_service",
]
