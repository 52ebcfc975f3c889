"""Conciliación de inventario: aplica un conteo físico a un lote."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional, Union

import anyio

from vaxstock.core.entities import Lot, ReconciliationReason, ReconciliationRecord
from vaxstock.core.exceptions import (
    ConflictError,
    PartialReconciliationError,
    ValidationError,
)
from vaxstock.stores.base import LotStore, ReconciliationStore

logger = logging.getLogger(__name__)


def parse_physical_count(value: Any) -> int:
    """El conteo físico debe ser un entero no negativo (se admite texto numérico)."""
    if isinstance(value, bool):
        raise ValidationError(f"Conteo físico no numérico: {value!r}")
    if isinstance(value, str):
        stripped = value.strip()
        if not re.fullmatch(r"-?\d+", stripped):
            raise ValidationError(f"Conteo físico no numérico: {value!r}")
        value = int(stripped)
    if not isinstance(value, int):
        raise ValidationError(f"Conteo físico no numérico: {value!r}")
    if value < 0:
        raise ValidationError(f"El conteo físico no puede ser negativo: {value}")
    return value


def parse_reason(value: Union[ReconciliationReason, str]) -> ReconciliationReason:
    try:
        return ReconciliationReason(value)
    except ValueError:
        allowed = ", ".join(r.value for r in ReconciliationReason)
        raise ValidationError(f"Motivo de ajuste desconocido: {value!r} (admitidos: {allowed})")


class ReconciliationProcessor:
    """Registra la discrepancia y corrige las existencias del lote.

    El registro de auditoría y la actualización del lote son lógicamente una
    transacción: si la segunda escritura falla se lanza
    `PartialReconciliationError` con el registro ya guardado.
    """

    def __init__(self, lots: LotStore, reconciliations: ReconciliationStore):
        self.lots = lots
        self.reconciliations = reconciliations

    async def reconcile(
        self,
        lot: Lot,
        physical_count: Any,
        reason: Union[ReconciliationReason, str],
        notes: Optional[str] = "",
    ) -> Optional[ReconciliationRecord]:
        physical_count = parse_physical_count(physical_count)
        reason = parse_reason(reason)

        # El lote no debe haber cambiado desde que el llamador lo leyó
        current = await self.lots.get(lot.id)
        if current.version != lot.version:
            raise ConflictError(lot.id, lot.version, current.version)

        previous_quantity = current.quantity_on_hand
        adjustment = physical_count - previous_quantity
        if adjustment == 0:
            logger.info("Lote %s: sin ajuste, las cantidades coinciden (%s)", lot.id, physical_count)
            return None

        # Registro y actualización del lote no se interrumpen a medias
        with anyio.CancelScope(shield=True):
            record = await self.reconciliations.create(
                ReconciliationRecord(
                    lot_id=lot.id,
                    previous_quantity=previous_quantity,
                    adjusted_quantity=physical_count,
                    adjustment=adjustment,
                    reason=reason,
                    notes=notes or "",
                    reconciled_at=datetime.now(timezone.utc),
                )
            )

            try:
                await self.lots.update(
                    lot.id, {"quantity_on_hand": physical_count}, expected_version=lot.version
                )
            except (Exception, anyio.get_cancelled_exc_class()) as exc:
                logger.error(
                    "Conciliación %s guardada pero el lote %s no se actualizó: %r",
                    record.id,
                    lot.id,
                    exc,
                )
                raise PartialReconciliationError(
                    f"Conciliación {record.id} registrada pero el lote {lot.id} no se actualizó: {exc!r}",
                    record=record,
                    lot_id=lot.id,
                    cause=exc,
                ) from exc

        logger.info(
            "Lote %s ajustado en %+d dosis (%s -> %s, motivo %s)",
            lot.id,
            adjustment,
            previous_quantity,
            physical_count,
            reason.value,
        )
        return record
