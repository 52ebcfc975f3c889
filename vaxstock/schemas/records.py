"""
Normalización de registros en bruto del almacén de listas.

Los registros importados pueden venir con nombres en camelCase, snake_case o
PascalCase, y las referencias como objetos de búsqueda (`{"Id": 3, ...}`).
Se normalizan aquí, una sola vez, antes de entrar en el núcleo.
"""

import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from vaxstock.utils.dates import to_date
from vaxstock.utils.validation import normalize_lot_number, parse_positive_int

LOOKUP_ID_KEYS = ("Id", "id", "ID", "LookupId", "lookupId")


def lookup_id(value: Any) -> Optional[int]:
    """Extrae el id de una referencia (entero, texto numérico u objeto de búsqueda)."""
    if isinstance(value, dict):
        for key in LOOKUP_ID_KEYS:
            if key in value:
                return parse_positive_int(value[key])
        return None
    return parse_positive_int(value)


class RawLotRecord(BaseModel):
    """Lote tal y como llega de una importación."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    vaccine_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices(
            "vaccine_id", "vaccineId", "VaccineId", "VaccineLookupId", "vaccine", "Vaccine"
        ),
    )
    lot_number: str = Field(
        ...,
        min_length=1,
        max_length=50,
        validation_alias=AliasChoices("lot_number", "lotNumber", "LotNumber", "Title"),
    )
    expiration_date: datetime.date = Field(
        ...,
        validation_alias=AliasChoices("expiration_date", "expirationDate", "ExpirationDate"),
    )
    quantity_received: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("quantity_received", "quantityReceived", "QuantityReceived"),
    )
    quantity_on_hand: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("quantity_on_hand", "quantityOnHand", "QuantityOnHand"),
    )
    date_received: Optional[datetime.date] = Field(
        None, validation_alias=AliasChoices("date_received", "dateReceived", "DateReceived")
    )
    passed_inspection: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("passed_inspection", "passedInspection", "PassedInspection"),
    )
    failed_inspection: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("failed_inspection", "failedInspection", "FailedInspection"),
    )
    discrepancy_reason: Optional[str] = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices(
            "discrepancy_reason", "discrepancyReason", "DiscrepancyReason"
        ),
    )

    @field_validator("vaccine_id", mode="before")
    @classmethod
    def _vaccine_reference(cls, value: Any) -> Optional[int]:
        # Una referencia ilegible se deja vacía: el resolvedor la reparará
        return lookup_id(value)

    @field_validator("lot_number", mode="before")
    @classmethod
    def _lot_number(cls, value: Any) -> str:
        return normalize_lot_number(str(value)) if value is not None else ""

    @field_validator("expiration_date", "date_received", mode="before")
    @classmethod
    def _dates(cls, value: Any) -> Optional[datetime.date]:
        return to_date(value)

    def to_lot_data(self) -> dict[str, Any]:
        """Datos del lote para el almacén, completando los contadores que falten."""
        failed = self.failed_inspection or 0
        passed = (
            self.passed_inspection
            if self.passed_inspection is not None
            else max(self.quantity_received - failed, 0)
        )
        on_hand = self.quantity_on_hand if self.quantity_on_hand is not None else passed
        return {
            "vaccine_id": self.vaccine_id,
            "lot_number": self.lot_number,
            "expiration_date": self.expiration_date,
            "quantity_received": self.quantity_received,
            "quantity_on_hand": on_hand,
            "date_received": self.date_received,
            "passed_inspection": passed,
            "failed_inspection": failed,
            "discrepancy_reason": self.discrepancy_reason,
        }
