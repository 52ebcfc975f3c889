from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from vaxstock.core.entities import ReconciliationReason
from vaxstock.core.exceptions import InventoryError
from vaxstock.dependencies import get_inventory_service
from vaxstock.schemas.reconciliation import (
    NoAdjustmentResponse,
    ReconciliationCreate,
    ReconciliationResponse,
)
from vaxstock.services.inventory import InventoryService
from vaxstock.utils.http_errors import to_http_exception
from vaxstock.utils.serialization import entity_dict

router = APIRouter(prefix="/conciliaciones", tags=["Conciliaciones"])


def _record_response(record) -> dict:
    data = entity_dict(record)
    data["reason_name"] = ReconciliationReason.display_name(record.reason)
    return data


@router.post(
    "/",
    response_model=ReconciliationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": NoAdjustmentResponse}},
)
async def reconcile_lot(
    data: ReconciliationCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    """Aplica el conteo físico a un lote.
    - Si el conteo coincide con el sistema no se guarda nada y se responde 200.
    - Si hay diferencia se guarda el registro de auditoría y se corrige el lote (201).
    """
    try:
        record = await service.reconcile_lot(
            data.lot_id, data.physical_count, data.reason, data.notes
        )
    except InventoryError as e:
        raise to_http_exception(e)

    if record is None:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=NoAdjustmentResponse(
                lot_id=data.lot_id,
                mensaje="Las cantidades coinciden; no se necesita ajuste.",
            ).model_dump(),
        )
    return _record_response(record)


@router.get("/", response_model=List[ReconciliationResponse])
async def get_reconciliations(
    lot_id: Optional[int] = Query(None, gt=0),
    service: InventoryService = Depends(get_inventory_service),
):
    """Historial de conciliaciones, opcionalmente de un solo lote."""
    try:
        records = await service.reconciliation_history(lot_id)
    except InventoryError as e:
        raise to_http_exception(e)
    return [_record_response(record) for record in records]
