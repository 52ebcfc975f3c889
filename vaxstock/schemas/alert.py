from typing import List, Optional
from pydantic import BaseModel, Field


class AlertResponse(BaseModel):
    """Alerta calculada en el momento de la consulta (no se guarda)."""

    id: str = Field(..., description="'<tipo>-<id de lote>'")
    type: str = Field(..., description="'expired', 'expiring' o 'low-stock'")
    severity: str = Field(..., description="'critical' o 'warning'")
    lot_id: int
    vaccine_name: str
    lot_number: str
    quantity: int = Field(..., description="Dosis disponibles del lote")
    days: Optional[int] = Field(
        None, description="Días caducado o hasta caducar; vacío en stock bajo"
    )
    message: str

    class Config:
        from_attributes = True


class AlertListResponse(BaseModel):
    data: List[AlertResponse]
    total: int
    critical: int
    warning: int
