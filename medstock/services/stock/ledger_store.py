"""
Ledger Store
Table-backed storage for location stock records and medication records
"""
from contextlib import contextmanager
from datetime import date
from typing import Callable, List, Optional, Tuple, Type

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from medstock.core.exceptions import (
    InventoryException, NotFoundError, StorageFailureError,
    DuplicateLotError, DuplicateNameError, ValidationError
)
from medstock.core.logging import get_logger
from medstock.models.medication import MedicationRec
from medstock.models.stock import STOCK_MODELS, StockRecordMixin

logger = get_logger("business")

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@contextmanager
def atomic(db: Session, operation: str, on_conflict: Optional[Callable[[], Exception]] = None):
    """
    Commit the enclosed work as one transaction

    Business errors roll back and propagate unchanged. A unique-constraint
    violation is converted with ``on_conflict`` when given; any other storage
    error rolls back and surfaces as StorageFailureError.
    """
    try:
        yield
        db.commit()
    except InventoryException:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        if on_conflict is not None:
            raise on_conflict() from e
        logger.error(f"{operation} violated a constraint: {e.orig}")
        raise StorageFailureError(f"{operation} failed") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{operation} failed: {e}")
        raise StorageFailureError(f"{operation} failed") from e
    except BaseException:
        db.rollback()
        raise


def stock_model(location: str) -> Type[StockRecordMixin]:
    try:
        return STOCK_MODELS[location]
    except KeyError:
        raise ValidationError(f"Unknown stock location: {location}")


class StockLedgerService:
    """Principal and secondary location stock"""

    def __init__(self, db: Session):
        self.db = db

    def list_records(self, location: str, order_by_name: bool = False) -> List[StockRecordMixin]:
        """List a location's records, newest entries first unless ordered by name"""
        model = stock_model(location)
        query = self.db.query(model)
        if order_by_name:
            query = query.order_by(model.name.asc())
        else:
            query = query.order_by(model.entry_timestamp.desc(), model.id.desc())
        return query.all()

    def get_record(self, location: str, record_id: int, lock: bool = False) -> Optional[StockRecordMixin]:
        model = stock_model(location)
        query = self.db.query(model).filter(model.id == record_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    def get_record_by_name(self, location: str, name: str) -> Optional[StockRecordMixin]:
        model = stock_model(location)
        return self.db.query(model).filter(model.name == name).first()

    def merge_quantity(
        self,
        location: str,
        name: str,
        quantity: int,
        category: Optional[str] = None
    ) -> StockRecordMixin:
        """
        Create ``name`` with ``quantity`` or add ``quantity`` to the existing row

        Issued as one INSERT ... ON CONFLICT (name) DO UPDATE statement. The
        existing category is kept on merge. Does not commit.
        """
        model = stock_model(location)
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise StorageFailureError(f"Stock upsert is not supported on {dialect}")

        stmt = insert(model).values(name=name, quantity=quantity, category=category)
        stmt = stmt.on_conflict_do_update(
            index_elements=[model.name],
            set_={
                "quantity": model.quantity + stmt.excluded.quantity,
                "updated_timestamp": func.current_timestamp(),
            },
        ).returning(model.id)

        record_id = self.db.execute(stmt).scalar_one()
        return self.db.get(model, record_id, populate_existing=True)

    def add_stock(
        self,
        location: str,
        name: str,
        quantity: int,
        category: Optional[str] = None
    ) -> Tuple[StockRecordMixin, bool]:
        """
        Add stock to a location, merging on name

        Returns (record, created). The created flag is informational only;
        the write itself does not depend on it.
        """
        with atomic(self.db, f"add stock to {location}"):
            created = self.get_record_by_name(location, name) is None
            record = self.merge_quantity(location, name, quantity, category)

        logger.info(
            f"{'Created' if created else 'Merged'} {location} stock {name}: "
            f"+{quantity} -> {record.quantity}"
        )
        return record, created

    def update_record(
        self,
        location: str,
        record_id: int,
        name: str,
        quantity: int,
        category: Optional[str] = None
    ) -> StockRecordMixin:
        """Replace a record's name, quantity and category"""
        with atomic(self.db, f"update {location} stock",
                    on_conflict=lambda: DuplicateNameError(name, location)):
            record = self.get_record(location, record_id, lock=True)
            if record is None:
                raise NotFoundError(f"Product {record_id} not found", location=location)
            record.name = name
            record.quantity = quantity
            record.category = category
            self.db.flush()

        self.db.refresh(record)
        return record

    def delete_record(self, location: str, record_id: int) -> None:
        with atomic(self.db, f"delete {location} stock"):
            record = self.get_record(location, record_id)
            if record is None:
                raise NotFoundError(f"Product {record_id} not found", location=location)
            self.db.delete(record)

        logger.info(f"Deleted {location} stock record {record_id}")


class MedicationLedgerService:
    """Lot-tracked medication registry"""

    def __init__(self, db: Session):
        self.db = db

    def list_medications(self) -> List[MedicationRec]:
        return (
            self.db.query(MedicationRec)
            .order_by(MedicationRec.entry_timestamp.desc(), MedicationRec.id.desc())
            .all()
        )

    def get_medication(self, medication_id: int, lock: bool = False) -> Optional[MedicationRec]:
        query = self.db.query(MedicationRec).filter(MedicationRec.id == medication_id)
        if lock:
            query = query.with_for_update()
        return query.first()

    def create_medication(
        self,
        name: str,
        lot: str,
        quantity: int,
        expiration_date: date,
        minimum_stock: int = 0
    ) -> MedicationRec:
        """Insert a medication; an existing lot fails with DuplicateLotError"""
        medication = MedicationRec(
            name=name,
            lot=lot,
            quantity=quantity,
            expiration_date=expiration_date,
            minimum_stock=minimum_stock,
        )
        with atomic(self.db, "create medication", on_conflict=lambda: DuplicateLotError(lot)):
            self.db.add(medication)
            self.db.flush()

        self.db.refresh(medication)
        logger.info(f"Created medication {name} lot {lot} ({quantity})")
        return medication

    def update_medication(
        self,
        medication_id: int,
        name: str,
        lot: str,
        quantity: int,
        expiration_date: date,
        minimum_stock: int = 0
    ) -> MedicationRec:
        with atomic(self.db, "update medication", on_conflict=lambda: DuplicateLotError(lot)):
            medication = self.get_medication(medication_id, lock=True)
            if medication is None:
                raise NotFoundError(f"Medication {medication_id} not found")
            medication.name = name
            medication.lot = lot
            medication.quantity = quantity
            medication.expiration_date = expiration_date
            medication.minimum_stock = minimum_stock
            self.db.flush()

        self.db.refresh(medication)
        return medication

    def delete_medication(self, medication_id: int) -> None:
        """Delete a medication; withdrawal history that references it is kept"""
        with atomic(self.db, "delete medication"):
            medication = self.get_medication(medication_id)
            if medication is None:
                raise NotFoundError(f"Medication {medication_id} not found")
            self.db.delete(medication)

        logger.info(f"Deleted medication {medication_id}")
