from sqlmodel import SQLModel, Field


class AlertThreshold(SQLModel, table=True):
    __tablename__ = "umbral_alerta"

    id: int = Field(default=None, primary_key=True, nullable=False)
    vaccine_id: int = Field(foreign_key="vacuna.id", nullable=False, index=True)
    threshold_type: str = Field(
        nullable=False
    )  # 'low_stock' o 'expiration', la restricción la ponemos en el esquema
    threshold_value: float = Field(nullable=False)
