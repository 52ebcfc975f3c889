"""Entidades del núcleo de inventario de vacunas."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Union


class ThresholdType(str, Enum):
    """Tipo de umbral configurable por vacuna."""
    LOW_STOCK = "low_stock"    # dosis
    EXPIRATION = "expiration"  # días


class AlertType(str, Enum):
    EXPIRED = "expired"
    EXPIRING = "expiring"
    LOW_STOCK = "low-stock"


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class ReconciliationReason(str, Enum):
    """Motivos admitidos para un ajuste de inventario."""
    PHYSICAL_COUNT = "physical-count"
    DAMAGED_DOSES = "damaged-doses"
    EXPIRED_DOSES = "expired-doses"
    ADMINISTRATION_ERROR = "administration-error"
    TRANSFER_ERROR = "transfer-error"
    OTHER = "other"

    @classmethod
    def display_name(cls, reason: "ReconciliationReason | str") -> str:
        display_names = {
            cls.PHYSICAL_COUNT: "Discrepancia en conteo físico",
            cls.DAMAGED_DOSES: "Dosis dañadas",
            cls.EXPIRED_DOSES: "Dosis caducadas",
            cls.ADMINISTRATION_ERROR: "Error de registro de administración",
            cls.TRANSFER_ERROR: "Error de transferencia",
            cls.OTHER: "Otro",
        }
        if isinstance(reason, str) and not isinstance(reason, cls):
            try:
                reason = cls(reason)
            except ValueError:
                return reason
        return display_names.get(reason, reason.value)


@dataclass(frozen=True)
class Vaccine:
    """Definición de vacuna del catálogo."""
    id: int
    name: str
    abbreviation: str = ""
    family: str = ""
    manufacturer: str = ""
    doses_per_vial: int = 1
    min_stock: int = 0
    storage_temp: str = ""


@dataclass(frozen=True)
class Lot:
    """Lote recibido de una vacuna.

    `vaccine_id` puede llegar como texto o `None` desde el almacén; el
    resolvedor de referencias lo deja siempre como entero válido o lo reporta.
    """
    id: int
    vaccine_id: Union[int, str, None]
    lot_number: str
    expiration_date: Optional[date]
    quantity_received: int
    quantity_on_hand: int
    date_received: Optional[date] = None
    passed_inspection: int = 0
    failed_inspection: int = 0
    discrepancy_reason: Optional[str] = None
    version: int = 1


@dataclass(frozen=True)
class AlertThreshold:
    id: int
    vaccine_id: int
    threshold_type: ThresholdType
    threshold_value: float


@dataclass(frozen=True)
class Alert:
    """Alerta derivada; se recalcula en cada lectura y nunca se guarda."""
    id: str
    type: AlertType
    severity: AlertSeverity
    lot_id: int
    vaccine_name: str
    lot_number: str
    quantity: int
    days: Optional[int] = None
    message: str = ""


@dataclass(frozen=True)
class ReconciliationRecord:
    """Registro de auditoría de un ajuste; sólo se añade, nunca se modifica."""
    lot_id: int
    previous_quantity: int
    adjusted_quantity: int
    adjustment: int
    reason: ReconciliationReason
    notes: str = ""
    reconciled_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[int] = None


@dataclass(frozen=True)
class AdministrationRecord:
    lot_id: int
    doses_administered: int
    administered_by: str = ""
    age_group: Optional[str] = None
    administered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[int] = None
