"""
Stock Movement Service
Principal -> secondary transfers and medication withdrawals
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from medstock.core.config import settings, ZeroStockPolicy
from medstock.core.exceptions import (
    NotFoundError, InsufficientQuantityError, ValidationError,
    RequestKeyConflictError, StorageFailureError
)
from medstock.core.logging import get_logger
from medstock.models.audit import TransferRec, WithdrawalRec
from medstock.models.auth import User
from medstock.models.medication import MedicationRec
from medstock.models.stock import StockRecordMixin
from medstock.services.stock.audit_log import AuditLogService
from medstock.services.stock.ledger_store import (
    StockLedgerService, MedicationLedgerService, atomic
)

logger = get_logger("business")


class RequestKeyTaken(StorageFailureError):
    """A concurrent movement committed the same request_key first"""

    def __init__(self, request_key: str):
        super().__init__(f"request_key {request_key} was taken concurrently", request_key=request_key)
        self.request_key = request_key


@dataclass
class TransferResult:
    principal: Optional[StockRecordMixin]
    secondary: StockRecordMixin
    transfer: TransferRec
    principal_removed: bool = False
    replayed: bool = False


@dataclass
class WithdrawalResult:
    medication: Optional[MedicationRec]
    withdrawal: WithdrawalRec
    replayed: bool = False


class MovementService:
    """
    Atomic stock movements

    Each movement locks the source row, checks the available quantity,
    mutates, and appends exactly one audit row inside a single transaction.
    A failure at any step rolls the whole movement back.

    A movement may carry a request_key. Repeating the same movement with
    the same key returns the stored result; reusing the key for a
    different movement is rejected with RequestKeyConflictError.
    """

    def __init__(
        self,
        db: Session,
        current_user: Optional[User] = None,
        zero_stock_policy: Optional[ZeroStockPolicy] = None
    ):
        self.db = db
        self.current_user = current_user
        self.zero_stock_policy = ZeroStockPolicy(
            zero_stock_policy or settings.TRANSFER_ZERO_STOCK_POLICY
        )
        self.stock = StockLedgerService(db)
        self.medications = MedicationLedgerService(db)
        self.audit = AuditLogService(db)

    @property
    def _actor(self) -> Optional[str]:
        return self.current_user.username if self.current_user else None

    def transfer_to_secondary(
        self,
        stock_record_id: int,
        quantity: int,
        request_key: Optional[str] = None
    ) -> TransferResult:
        """
        Move ``quantity`` from a principal record to the secondary location

        Raises:
            NotFoundError: the principal record does not exist
            InsufficientQuantityError: quantity exceeds the principal stock
            RequestKeyConflictError: request_key belongs to a different transfer
        """
        if quantity <= 0:
            raise ValidationError("Transfer quantity must be positive")

        if request_key:
            previous = self.audit.find_transfer_by_key(request_key)
            if previous is not None:
                return self._replayed_transfer(previous, stock_record_id, quantity)

        try:
            return self._apply_transfer(stock_record_id, quantity, request_key)
        except RequestKeyTaken:
            previous = self.audit.find_transfer_by_key(request_key)
            if previous is None:
                raise
            return self._replayed_transfer(previous, stock_record_id, quantity)

    def withdraw_medication(
        self,
        medication_id: int,
        quantity_withdrawn: int,
        note: Optional[str] = None,
        request_key: Optional[str] = None
    ) -> WithdrawalResult:
        """
        Consume ``quantity_withdrawn`` units of a medication lot

        Raises:
            NotFoundError: the medication does not exist
            InsufficientQuantityError: quantity exceeds the lot's stock
            RequestKeyConflictError: request_key belongs to a different withdrawal
        """
        if quantity_withdrawn <= 0:
            raise ValidationError("Withdrawal quantity must be positive")

        if request_key:
            previous = self.audit.find_withdrawal_by_key(request_key)
            if previous is not None:
                return self._replayed_withdrawal(previous, medication_id, quantity_withdrawn)

        try:
            return self._apply_withdrawal(medication_id, quantity_withdrawn, note, request_key)
        except RequestKeyTaken:
            previous = self.audit.find_withdrawal_by_key(request_key)
            if previous is None:
                raise
            return self._replayed_withdrawal(previous, medication_id, quantity_withdrawn)

    def _apply_transfer(
        self,
        stock_record_id: int,
        quantity: int,
        request_key: Optional[str]
    ) -> TransferResult:
        on_conflict = (lambda: RequestKeyTaken(request_key)) if request_key else None

        principal_removed = False
        with atomic(self.db, "transfer", on_conflict=on_conflict):
            principal = self.stock.get_record("principal", stock_record_id, lock=True)
            if principal is None:
                raise NotFoundError(f"Product {stock_record_id} not found", location="principal")

            if quantity > principal.quantity:
                logger.warning(
                    f"Transfer of {quantity} {principal.name} rejected: "
                    f"{principal.quantity} available"
                )
                raise InsufficientQuantityError(quantity, principal.quantity, principal.name)

            name, category = principal.name, principal.category
            principal.quantity -= quantity
            if principal.quantity == 0 and self.zero_stock_policy is ZeroStockPolicy.DELETE:
                self.db.delete(principal)
                principal_removed = True
            self.db.flush()

            secondary = self.stock.merge_quantity("secondary", name, quantity, category)
            transfer = self.audit.append_transfer(
                product_name=name,
                quantity=quantity,
                category=category,
                request_key=request_key,
                created_by=self._actor,
            )

        if not principal_removed:
            self.db.refresh(principal)
        self.db.refresh(secondary)
        self.db.refresh(transfer)

        logger.info(
            f"Transferred {quantity} {name} to secondary "
            f"(principal {'removed' if principal_removed else principal.quantity}, "
            f"secondary {secondary.quantity})"
        )
        return TransferResult(
            principal=None if principal_removed else principal,
            secondary=secondary,
            transfer=transfer,
            principal_removed=principal_removed,
        )

    def _apply_withdrawal(
        self,
        medication_id: int,
        quantity_withdrawn: int,
        note: Optional[str],
        request_key: Optional[str]
    ) -> WithdrawalResult:
        on_conflict = (lambda: RequestKeyTaken(request_key)) if request_key else None

        with atomic(self.db, "withdrawal", on_conflict=on_conflict):
            medication = self.medications.get_medication(medication_id, lock=True)
            if medication is None:
                raise NotFoundError(f"Medication {medication_id} not found")

            if quantity_withdrawn > medication.quantity:
                logger.warning(
                    f"Withdrawal of {quantity_withdrawn} {medication.name} lot {medication.lot} "
                    f"rejected: {medication.quantity} available"
                )
                raise InsufficientQuantityError(quantity_withdrawn, medication.quantity, medication.name)

            medication.quantity = medication.quantity - quantity_withdrawn
            self.db.flush()

            withdrawal = self.audit.append_withdrawal(
                medication_id=medication.id,
                medication_name=medication.name,
                lot=medication.lot,
                quantity_withdrawn=quantity_withdrawn,
                note=note,
                request_key=request_key,
                created_by=self._actor,
            )

        self.db.refresh(medication)
        self.db.refresh(withdrawal)

        logger.info(
            f"Withdrew {quantity_withdrawn} {medication.name} lot {medication.lot} "
            f"({medication.quantity} left)"
        )
        return WithdrawalResult(medication=medication, withdrawal=withdrawal)

    def _replayed_transfer(
        self,
        previous: TransferRec,
        stock_record_id: int,
        quantity: int
    ) -> TransferResult:
        # a drained and deleted principal can only be matched on quantity
        principal = self.stock.get_record("principal", stock_record_id)
        if previous.quantity != quantity or (
            principal is not None and principal.name != previous.product_name
        ):
            logger.warning(
                f"request_key {previous.request_key} reused: stored transfer of "
                f"{previous.quantity} {previous.product_name}, got {quantity} of record {stock_record_id}"
            )
            raise RequestKeyConflictError(previous.request_key, "transfer")

        secondary = self.stock.get_record_by_name("secondary", previous.product_name)
        if secondary is None:
            raise NotFoundError(f"Product {previous.product_name} not found", location="secondary")

        logger.info(f"Transfer {previous.request_key} already applied, returning stored result")
        return TransferResult(
            principal=principal,
            secondary=secondary,
            transfer=previous,
            principal_removed=principal is None,
            replayed=True,
        )

    def _replayed_withdrawal(
        self,
        previous: WithdrawalRec,
        medication_id: int,
        quantity_withdrawn: int
    ) -> WithdrawalResult:
        if previous.medication_id != medication_id or previous.quantity_withdrawn != quantity_withdrawn:
            logger.warning(
                f"request_key {previous.request_key} reused: stored withdrawal of "
                f"{previous.quantity_withdrawn} from medication {previous.medication_id}, "
                f"got {quantity_withdrawn} from {medication_id}"
            )
            raise RequestKeyConflictError(previous.request_key, "withdrawal")

        # None once the medication has been deleted; the withdrawal row survives it
        medication = self.medications.get_medication(previous.medication_id)

        logger.info(f"Withdrawal {previous.request_key} already applied, returning stored result")
        return WithdrawalResult(medication=medication, withdrawal=previous, replayed=True)
