"""
CSV export endpoints
"""

from fastapi import APIRouter, Depends, Response

from medstock.api.deps import get_current_user, get_stock_service
from medstock.services.export_service import export_stock_csv
from medstock.services.stock.ledger_store import StockLedgerService

router = APIRouter(dependencies=[Depends(get_current_user)])


def _csv_response(service: StockLedgerService, location: str) -> Response:
    content = export_stock_csv(service.list_records(location, order_by_name=True))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={location}.csv"},
    )


@router.get("/principal")
def export_principal(service: StockLedgerService = Depends(get_stock_service)):
    return _csv_response(service, "principal")


@router.get("/secondary")
def export_secondary(service: StockLedgerService = Depends(get_stock_service)):
    return _csv_response(service, "secondary")
