import datetime
from typing import Any, List, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from vaxstock.core.exceptions import InventoryError
from vaxstock.dependencies import get_inventory_service
from vaxstock.schemas.lot import (
    InventorySummaryResponse,
    LotCreate,
    LotImportResponse,
    LotListResponse,
    LotResponse,
)
from vaxstock.services.inventory import InventoryService
from vaxstock.utils.http_errors import to_http_exception
from vaxstock.utils.serialization import entity_dict

router = APIRouter(prefix="/lotes", tags=["Lotes"])


def _issue_dict(issue) -> dict:
    return {
        "lot_id": issue.lot_id,
        "lot_number": issue.lot_number,
        "vaccine_id": issue.vaccine_id,
        "reason": issue.reason,
    }


@router.get("/", response_model=LotListResponse)
async def get_lots(service: InventoryService = Depends(get_inventory_service)):
    """Lista todos los lotes con las referencias a vacunas ya reparadas.
    - `repairs`: reparaciones aplicadas en esta lectura.
    - `issues`: lotes cuya vacuna no se pudo determinar.
    """
    try:
        result = await service.resolve_lots()
    except InventoryError as e:
        raise to_http_exception(e)

    return {
        "data": [entity_dict(lot) for lot in result.repaired_lots],
        "total": len(result.repaired_lots),
        "repairs": [entity_dict(repair) for repair in result.repairs],
        "issues": [_issue_dict(issue) for issue in result.issues],
    }


@router.get("/disponibles", response_model=List[LotResponse])
async def get_available_lots(
    fecha: Optional[datetime.date] = Query(None, description="Fecha de referencia (hoy por defecto)"),
    service: InventoryService = Depends(get_inventory_service),
):
    """Lotes aptos para administrar: con vacuna válida, con dosis y sin caducar."""
    try:
        lots = await service.available_lots(fecha)
    except InventoryError as e:
        raise to_http_exception(e)
    return [entity_dict(lot) for lot in lots]


@router.get("/resumen", response_model=InventorySummaryResponse)
async def get_summary(
    fecha: Optional[datetime.date] = Query(None),
    service: InventoryService = Depends(get_inventory_service),
):
    """Cifras del panel: dosis disponibles, recibidas, administradas y alertas."""
    try:
        summary = await service.summary(fecha)
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(summary)


@router.get("/{id}", response_model=LotResponse)
async def get_lot(id: int, service: InventoryService = Depends(get_inventory_service)):
    try:
        lot = await service.get_lot(id)
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(lot)


@router.post("/", response_model=LotResponse, status_code=status.HTTP_201_CREATED)
async def create_lot(
    lot_data: LotCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    """Registra la recepción de un lote nuevo."""
    try:
        lot = await service.receive_lot(lot_data.model_dump())
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(lot)


@router.post("/importar", response_model=LotImportResponse)
async def import_lots(
    records: List[dict[str, Any]] = Body(..., description="Registros en bruto del almacén de listas"),
    service: InventoryService = Depends(get_inventory_service),
):
    """Importa lotes en bruto (camelCase, snake_case u objetos de búsqueda).
    - Los registros que no se pueden interpretar se devuelven en `rejected`.
    """
    if not records:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No se ha enviado ningún registro.",
        )
    try:
        result = await service.import_lots(records)
    except InventoryError as e:
        raise to_http_exception(e)

    return {
        "created": [entity_dict(lot) for lot in result.created],
        "rejected": result.rejected,
        "repairs": [entity_dict(repair) for repair in result.resolution.repairs],
        "issues": [_issue_dict(issue) for issue in result.resolution.issues],
    }
