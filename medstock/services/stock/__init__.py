"""Stock Control Services - ledger store, movements, audit log and alerts"""

from .ledger_store import StockLedgerService, MedicationLedgerService
from .movements import MovementService, TransferResult, WithdrawalResult
from .audit_log import AuditLogService
from .alerts import AlertKind, MedicationAlert, evaluate_alerts

__all__ = [
    "StockLedgerService",
    "MedicationLedgerService",
    "MovementService",
    "TransferResult",
    "WithdrawalResult",
    "AuditLogService",
    "AlertKind",
    "MedicationAlert",
    "evaluate_alerts",
]
