from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from vaxstock.core.exceptions import InventoryError
from vaxstock.dependencies import get_inventory_service
from vaxstock.schemas.administration import AdministrationCreate, AdministrationResponse
from vaxstock.services.inventory import InventoryService
from vaxstock.utils.http_errors import to_http_exception
from vaxstock.utils.serialization import entity_dict

router = APIRouter(prefix="/administraciones", tags=["Administraciones"])


@router.post("/", response_model=AdministrationResponse, status_code=status.HTTP_201_CREATED)
async def create_administration(
    data: AdministrationCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    """Registra dosis administradas y las descuenta del lote."""
    try:
        record = await service.record_administration(
            data.lot_id, data.doses_administered, data.administered_by, data.age_group
        )
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(record)


@router.get("/", response_model=List[AdministrationResponse])
async def get_administrations(
    lot_id: Optional[int] = Query(None, gt=0),
    service: InventoryService = Depends(get_inventory_service),
):
    try:
        records = await service.administration_history(lot_id)
    except InventoryError as e:
        raise to_http_exception(e)
    return [entity_dict(record) for record in records]
