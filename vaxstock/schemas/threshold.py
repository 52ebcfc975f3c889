from typing import Literal, Optional
from pydantic import BaseModel, Field


class ThresholdBase(BaseModel):
    """
    Umbral de alerta de una vacuna.
    - `low_stock`: dosis por debajo de las cuales se avisa.
    - `expiration`: días antes de la caducidad en los que se avisa.
    """

    vaccine_id: int = Field(..., gt=0, description="Vacuna a la que aplica el umbral")
    threshold_type: Literal["low_stock", "expiration"]
    threshold_value: float = Field(..., gt=0, description="Dosis o días según el tipo")


class ThresholdCreate(ThresholdBase):
    pass


class ThresholdUpdate(BaseModel):
    vaccine_id: Optional[int] = Field(None, gt=0)
    threshold_type: Optional[Literal["low_stock", "expiration"]] = None
    threshold_value: Optional[float] = Field(None, gt=0)


class ThresholdResponse(ThresholdBase):
    id: int
    # Los valores guardados pueden no ser positivos; el motor usa entonces el valor por defecto
    threshold_type: str
    threshold_value: float

    class Config:
        from_attributes = True
