"""Errores del motor de inventario.

- `LotReferenceError` se devuelve como dato (lista de incidencias) y nunca se
  lanza durante la resolución de referencias.
- El resto se lanza al llamador inmediato; el núcleo no reintenta nada.
"""

from typing import Any, Optional


class InventoryError(Exception):
    """Base de todos los errores del inventario."""


class LotReferenceError(InventoryError):
    """La referencia a vacuna de un lote falta o es inválida y no se pudo reparar."""

    def __init__(
        self,
        lot_id: Optional[int],
        lot_number: Optional[str],
        vaccine_id: Any,
        reason: str,
    ):
        self.lot_id = lot_id
        self.lot_number = lot_number
        self.vaccine_id = vaccine_id
        self.reason = reason
        super().__init__(
            f"Lote {lot_id} ({lot_number}): referencia a vacuna {vaccine_id!r} "
            f"sin resolver ({reason})"
        )

    def __eq__(self, other):
        if not isinstance(other, LotReferenceError):
            return NotImplemented
        return (self.lot_id, self.lot_number, self.vaccine_id, self.reason) == (
            other.lot_id,
            other.lot_number,
            other.vaccine_id,
            other.reason,
        )

    def __hash__(self):
        return hash((self.lot_id, self.lot_number, str(self.vaccine_id), self.reason))


class ValidationError(InventoryError):
    """Entrada mal formada (conteo no numérico, motivo desconocido, cantidad negativa...)."""


class NotFoundError(InventoryError):
    """La entidad referenciada no existe en el almacén de datos."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} no encontrado")


class ConflictError(InventoryError):
    """El lote cambió desde que se leyó (versión distinta)."""

    def __init__(self, lot_id: int, expected_version: int, actual_version: Optional[int]):
        self.lot_id = lot_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Lote {lot_id} modificado concurrentemente "
            f"(versión esperada {expected_version}, actual {actual_version})"
        )


class PersistenceError(InventoryError):
    """Fallo de la llamada subyacente al almacén (red / transporte / base de datos)."""


class PartialWriteError(InventoryError):
    """Una secuencia de dos escrituras quedó a medias."""

    def __init__(self, message: str, record: Any = None, lot_id: Optional[int] = None, cause: Optional[BaseException] = None):
        self.record = record
        self.lot_id = lot_id
        self.cause = cause
        super().__init__(message)


class PartialReconciliationError(PartialWriteError):
    """Se guardó el registro de conciliación pero no se actualizó el lote."""


class PartialAdministrationError(PartialWriteError):
    """Se guardó la administración pero no se descontaron las dosis del lote."""
