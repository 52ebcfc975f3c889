import datetime
from typing import Optional, Union
from pydantic import BaseModel, Field, StrictInt


class ReconciliationCreate(BaseModel):
    """
    Conteo físico de un lote.
    - `physical_count`: entero o texto numérico (no booleanos ni decimales).
    - `reason`: 'physical-count', 'damaged-doses', 'expired-doses',
      'administration-error', 'transfer-error' u 'other'.
    """

    lot_id: int = Field(..., gt=0)
    physical_count: Union[StrictInt, str]
    reason: str
    notes: Optional[str] = Field("", max_length=1000)


class ReconciliationResponse(BaseModel):
    id: Optional[int] = None
    lot_id: int
    previous_quantity: int
    adjusted_quantity: int
    adjustment: int = Field(..., description="Conteo físico - cantidad del sistema")
    reason: str
    reason_name: str = Field("", description="Nombre legible del motivo")
    notes: str = ""
    reconciled_at: datetime.datetime

    class Config:
        from_attributes = True


class NoAdjustmentResponse(BaseModel):
    ajustado: bool = False
    lot_id: int
    mensaje: str
