from typing import Optional
from sqlmodel import SQLModel, Field


class Vaccine(SQLModel, table=True):
    """Modelo SQLModel para las vacunas del catálogo."""

    __tablename__ = "vacuna"

    id: int = Field(default=None, primary_key=True, nullable=False)
    name: str = Field(nullable=False, index=True, description="Nombre comercial")
    abbreviation: str = Field(default="", max_length=20, description="Código corto")
    family: str = Field(default="", index=True, description="Familia o categoría")
    manufacturer: str = Field(default="", description="Fabricante")
    doses_per_vial: int = Field(default=1, ge=1)
    min_stock: int = Field(default=0, ge=0, description="Stock mínimo objetivo")
    storage_temp: Optional[str] = Field(default="", description="Temperatura de conservación")
