import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AdministrationCreate(BaseModel):
    lot_id: int = Field(..., gt=0)
    doses_administered: int = Field(..., ge=1, description="Dosis administradas (mínimo 1)")
    administered_by: str = Field(default="", max_length=100)
    age_group: Optional[str] = Field(None, max_length=50)


class AdministrationResponse(AdministrationCreate):
    id: Optional[int] = None
    administered_at: datetime.datetime

    class Config:
        from_attributes = True
