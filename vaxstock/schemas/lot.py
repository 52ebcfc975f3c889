import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class LotBase(BaseModel):
    """
    Esquema base de un lote de vacuna.
    - `lot_number`: mínimo 3 caracteres, letras, números y guiones.
    - `passed_inspection` + `failed_inspection` debe ser igual a `quantity_received`.
    """

    lot_number: str = Field(..., min_length=3, max_length=50, pattern="^[A-Za-z0-9-]+$")
    expiration_date: datetime.date = Field(..., description="Fecha de caducidad")
    quantity_received: int = Field(..., ge=0)
    date_received: Optional[datetime.date] = None
    discrepancy_reason: Optional[str] = Field(None, max_length=500)


class LotCreate(LotBase):
    """
    Esquema para la recepción de un lote.
    - Si no se indican `quantity_on_hand` ni la inspección, se aprueban todas las dosis.
    """

    vaccine_id: int = Field(..., gt=0)
    quantity_on_hand: Optional[int] = Field(None, ge=0)
    passed_inspection: Optional[int] = Field(None, ge=0)
    failed_inspection: Optional[int] = Field(None, ge=0)


class LotResponse(LotBase):
    id: int
    # Puede quedar vacía o huérfana si la referencia no se pudo reparar
    vaccine_id: Optional[Any] = None
    lot_number: str
    quantity_on_hand: int
    passed_inspection: int
    failed_inspection: int
    version: int

    class Config:
        from_attributes = True


class ReferenceRepairResponse(BaseModel):
    lot_id: int
    lot_number: str
    previous_vaccine_id: Optional[Any] = None
    vaccine_id: int
    rule: str = Field(
        ...,
        description="'normalized', 'manufacturer-lot-pattern', 'preferred-family' o 'first-vaccine'",
    )


class ReferenceIssueResponse(BaseModel):
    lot_id: Optional[int] = None
    lot_number: Optional[str] = None
    vaccine_id: Optional[Any] = None
    reason: str


class LotListResponse(BaseModel):
    data: List[LotResponse]
    total: int
    repairs: List[ReferenceRepairResponse]
    issues: List[ReferenceIssueResponse]


class LotImportResponse(BaseModel):
    created: List[LotResponse]
    rejected: List[dict]
    repairs: List[ReferenceRepairResponse]
    issues: List[ReferenceIssueResponse]


class InventorySummaryResponse(BaseModel):
    """Cifras del panel de inventario."""

    total_on_hand: int = Field(..., ge=0, description="Dosis disponibles en total")
    total_received: int = Field(..., ge=0)
    total_administered: int = Field(..., ge=0)
    lots: int
    available_lots: int
    unresolved_lots: int
    alerts: dict[str, int]
