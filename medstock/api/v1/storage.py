"""
Stock Location API endpoints
Principal and secondary storage, plus principal -> secondary transfers
"""

from typing import List
from fastapi import APIRouter, Depends, Response, status

from medstock.api.deps import get_current_user, get_stock_service, get_movement_service
from medstock.schemas.stock import (
    StockRecordAdd, StockRecordUpdate, StockRecordResponse, StockAddResponse,
    TransferRequest, TransferResponse
)
from medstock.services.stock.ledger_store import StockLedgerService
from medstock.services.stock.movements import MovementService


def build_location_router(location: str) -> APIRouter:
    """List/add/edit/delete endpoints for one stock location"""
    router = APIRouter(dependencies=[Depends(get_current_user)])

    @router.get("", response_model=List[StockRecordResponse])
    def list_stock(service: StockLedgerService = Depends(get_stock_service)):
        """
        List the location's stock, newest entries first.
        """
        return service.list_records(location)

    @router.post("", response_model=StockAddResponse)
    def add_stock(
        item: StockRecordAdd,
        response: Response,
        service: StockLedgerService = Depends(get_stock_service)
    ):
        """
        Add stock. An existing product with the same name has the quantity added to it.
        """
        record, created = service.add_stock(location, item.name, item.quantity, item.category)
        response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return {
            "message": "Product added" if created else "Quantity updated",
            "created": created,
            "data": record,
        }

    @router.put("/{record_id}", response_model=StockRecordResponse)
    def update_stock(
        record_id: int,
        item: StockRecordUpdate,
        service: StockLedgerService = Depends(get_stock_service)
    ):
        return service.update_record(location, record_id, item.name, item.quantity, item.category)

    @router.delete("/{record_id}")
    def delete_stock(
        record_id: int,
        service: StockLedgerService = Depends(get_stock_service)
    ):
        service.delete_record(location, record_id)
        return {"message": "Product deleted"}

    return router


principal_router = build_location_router("principal")
secondary_router = build_location_router("secondary")


@principal_router.post("/transfer", response_model=TransferResponse, status_code=status.HTTP_201_CREATED)
def transfer_to_secondary(
    transfer_in: TransferRequest,
    service: MovementService = Depends(get_movement_service)
):
    """
    Move quantity from a principal record to the secondary location.
    """
    result = service.transfer_to_secondary(
        transfer_in.stock_record_id,
        transfer_in.quantity,
        request_key=transfer_in.request_key,
    )
    return {
        "message": "Transfer already applied" if result.replayed else "Transfer completed",
        "principal": result.principal,
        "principal_removed": result.principal_removed,
        "secondary": result.secondary,
        "transfer": result.transfer,
        "replayed": result.replayed,
    }
