from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field


class Administration(SQLModel, table=True):
    __tablename__ = "administracion"

    id: int = Field(default=None, primary_key=True, nullable=False)
    lot_id: int = Field(foreign_key="lote_vacuna.id", nullable=False, index=True)
    doses_administered: int = Field(nullable=False, ge=1)  # Siempre mayor a 0
    administered_by: str = Field(default="")
    age_group: Optional[str] = Field(default=None)
    administered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
