from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from vaxstock.core.exceptions import InventoryError
from vaxstock.dependencies import get_inventory_service
from vaxstock.schemas.threshold import ThresholdCreate, ThresholdResponse, ThresholdUpdate
from vaxstock.services.inventory import InventoryService
from vaxstock.utils.http_errors import to_http_exception
from vaxstock.utils.serialization import entity_dict

router = APIRouter(prefix="/umbrales", tags=["Umbrales"])


@router.get("/", response_model=List[ThresholdResponse])
async def get_thresholds(service: InventoryService = Depends(get_inventory_service)):
    try:
        thresholds = await service.list_thresholds()
    except InventoryError as e:
        raise to_http_exception(e)
    return [entity_dict(threshold) for threshold in thresholds]


@router.post("/", response_model=ThresholdResponse, status_code=status.HTTP_201_CREATED)
async def create_threshold(
    threshold_data: ThresholdCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    """Configura un umbral de alerta para una vacuna.
    - Si ya existe uno del mismo tipo, el motor sigue usando el primero.
    """
    try:
        threshold = await service.create_threshold(threshold_data.model_dump())
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(threshold)


@router.put("/{id}", response_model=ThresholdResponse)
async def update_threshold(
    id: int,
    threshold_data: ThresholdUpdate,
    service: InventoryService = Depends(get_inventory_service),
):
    patch = threshold_data.model_dump(exclude_unset=True)
    if not patch:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No se ha enviado ningún campo para actualizar.",
        )
    try:
        threshold = await service.update_threshold(id, patch)
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(threshold)


@router.delete("/{id}", status_code=status.HTTP_200_OK)
async def delete_threshold(id: int, service: InventoryService = Depends(get_inventory_service)):
    try:
        await service.delete_threshold(id)
    except InventoryError as e:
        raise to_http_exception(e)
    return {"message": "Umbral eliminado correctamente"}
