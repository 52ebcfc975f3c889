from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from vaxstock.core.exceptions import InventoryError
from vaxstock.dependencies import get_inventory_service
from vaxstock.schemas.vaccine import VaccineCreate, VaccineResponse, VaccineUpdate
from vaxstock.services.inventory import InventoryService
from vaxstock.utils.http_errors import to_http_exception
from vaxstock.utils.serialization import entity_dict

router = APIRouter(prefix="/vacunas", tags=["Vacunas"])


@router.get("/", response_model=List[VaccineResponse])
async def get_vaccines(service: InventoryService = Depends(get_inventory_service)):
    """Lista el catálogo de vacunas ordenado por id."""
    try:
        vaccines = await service.list_vaccines()
    except InventoryError as e:
        raise to_http_exception(e)
    return [entity_dict(vaccine) for vaccine in vaccines]


@router.get("/{id}", response_model=VaccineResponse)
async def get_vaccine(id: int, service: InventoryService = Depends(get_inventory_service)):
    try:
        vaccine = await service.get_vaccine(id)
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(vaccine)


@router.post("/", response_model=VaccineResponse, status_code=status.HTTP_201_CREATED)
async def create_vaccine(
    vaccine_data: VaccineCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    try:
        vaccine = await service.create_vaccine(vaccine_data.model_dump())
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(vaccine)


@router.put("/{id}", response_model=VaccineResponse)
async def update_vaccine(
    id: int,
    vaccine_data: VaccineUpdate,
    service: InventoryService = Depends(get_inventory_service),
):
    """Actualiza sólo los campos enviados."""
    patch = vaccine_data.model_dump(exclude_unset=True)
    if not patch:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No se ha enviado ningún campo para actualizar.",
        )
    try:
        vaccine = await service.update_vaccine(id, patch)
    except InventoryError as e:
        raise to_http_exception(e)
    return entity_dict(vaccine)


@router.delete("/{id}", status_code=status.HTTP_200_OK)
async def delete_vaccine(id: int, service: InventoryService = Depends(get_inventory_service)):
    """Elimina una vacuna. Sus lotes se reasignarán en la siguiente lectura."""
    try:
        vaccine = await service.delete_vaccine(id)
    except InventoryError as e:
        raise to_http_exception(e)
    return {"message": f"Vacuna '{vaccine.name}' eliminada correctamente"}
