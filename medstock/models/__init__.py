"""
MedStock SQLAlchemy Models
"""

# Import all models to ensure they are registered with SQLAlchemy
from .auth import User
from .stock import PrincipalStockRec, SecondaryStockRec, STOCK_MODELS
from .medication import MedicationRec
from .audit import TransferRec, WithdrawalRec

__all__ = [
    "User",
    "PrincipalStockRec",
    "SecondaryStockRec",
    "STOCK_MODELS",
    "MedicationRec",
    "TransferRec",
    "WithdrawalRec",
]
