from typing import Optional
from pydantic import BaseModel, Field


class VaccineBase(BaseModel):
    """
    Esquema base para vacunas del catálogo.
    - `family` agrupa vacunas equivalentes (se usa para reparar lotes huérfanos).
    - `manufacturer` se compara con los patrones de número de lote.
    """

    name: str = Field(..., min_length=2, max_length=100)
    abbreviation: str = Field(default="", max_length=20)
    family: str = Field(default="", max_length=50)
    manufacturer: str = Field(default="", max_length=100)
    doses_per_vial: int = Field(default=1, ge=1)
    min_stock: int = Field(default=0, ge=0)
    storage_temp: str = Field(default="", max_length=50)


class VaccineCreate(VaccineBase):
    pass


class VaccineUpdate(BaseModel):
    """Todos los campos son opcionales; sólo se modifican los enviados."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    abbreviation: Optional[str] = Field(None, max_length=20)
    family: Optional[str] = Field(None, max_length=50)
    manufacturer: Optional[str] = Field(None, max_length=100)
    doses_per_vial: Optional[int] = Field(None, ge=1)
    min_stock: Optional[int] = Field(None, ge=0)
    storage_temp: Optional[str] = Field(None, max_length=50)


class VaccineResponse(VaccineBase):
    id: int

    class Config:
        from_attributes = True
