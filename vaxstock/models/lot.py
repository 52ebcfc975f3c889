import datetime
from typing import Optional
from sqlmodel import SQLModel, Field


class VaccineLot(SQLModel, table=True):
    """Modelo SQLModel para los lotes de vacuna recibidos."""

    __tablename__ = "lote_vacuna"

    id: int = Field(default=None, primary_key=True, nullable=False)
    # Sin foreign key: una vacuna borrada deja lotes huérfanos que repara el resolvedor
    vaccine_id: Optional[int] = Field(
        default=None, index=True, description="Vacuna del lote (puede quedar huérfana)"
    )
    lot_number: str = Field(nullable=False, max_length=50, index=True)
    expiration_date: datetime.date = Field(nullable=False, description="Fecha de caducidad")
    quantity_received: int = Field(nullable=False, ge=0)
    quantity_on_hand: int = Field(
        nullable=False, ge=0, description="Dosis disponibles (mínimo 0)"
    )
    date_received: Optional[datetime.date] = Field(default=None)
    passed_inspection: int = Field(default=0, ge=0)
    failed_inspection: int = Field(default=0, ge=0)
    discrepancy_reason: Optional[str] = Field(default=None, max_length=500)
    version: int = Field(
        default=1, nullable=False, description="Token de concurrencia optimista"
    )
