from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class Reconciliation(SQLModel, table=True):
    """Registro de auditoría de una conciliación. Sólo se inserta."""

    __tablename__ = "conciliacion"

    id: int = Field(default=None, primary_key=True, nullable=False)
    lot_id: int = Field(foreign_key="lote_vacuna.id", nullable=False, index=True)
    previous_quantity: int = Field(nullable=False, ge=0)
    adjusted_quantity: int = Field(nullable=False, ge=0)
    adjustment: int = Field(nullable=False)
    reason: str = Field(nullable=False)
    notes: str = Field(default="")
    reconciled_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
