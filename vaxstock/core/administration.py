import logging
from datetime import datetime, timezone
from typing import Optional

import anyio

from vaxstock.core.entities import AdministrationRecord, Lot
from vaxstock.core.exceptions import (
    ConflictError,
    PartialAdministrationError,
    ValidationError,
)
from vaxstock.stores.base import AdministrationStore, LotStore

logger = logging.getLogger(__name__)


class AdministrationProcessor:
    """Registra dosis administradas y las descuenta de las existencias del lote."""

    def __init__(self, lots: LotStore, administrations: AdministrationStore):
        self.lots = lots
        self.administrations = administrations

    async def administer(
        self,
        lot: Lot,
        doses: int,
        administered_by: str = "",
        age_group: Optional[str] = None,
    ) -> AdministrationRecord:
        if isinstance(doses, bool) or not isinstance(doses, int) or doses < 1:
            raise ValidationError(f"Las dosis administradas deben ser un entero positivo: {doses!r}")
        if doses > lot.quantity_on_hand:
            raise ValidationError(
                f"Las dosis ({doses}) superan las disponibles en el lote "
                f"{lot.lot_number} ({lot.quantity_on_hand})"
            )

        current = await self.lots.get(lot.id)
        if current.version != lot.version:
            raise ConflictError(lot.id, lot.version, current.version)

        with anyio.CancelScope(shield=True):
            record = await self.administrations.create(
                AdministrationRecord(
                    lot_id=lot.id,
                    doses_administered=doses,
                    administered_by=administered_by or "",
                    age_group=age_group,
                    administered_at=datetime.now(timezone.utc),
                )
            )

            try:
                await self.lots.update(
                    lot.id,
                    {"quantity_on_hand": current.quantity_on_hand - doses},
                    expected_version=lot.version,
                )
            except (Exception, anyio.get_cancelled_exc_class()) as exc:
                logger.error(
                    "Administración %s guardada pero el lote %s no se descontó: %r",
                    record.id,
                    lot.id,
                    exc,
                )
                raise PartialAdministrationError(
                    f"Administración {record.id} registrada pero el lote {lot.id} no se actualizó: {exc!r}",
                    record=record,
                    lot_id=lot.id,
                    cause=exc,
                ) from exc

        logger.info("Lote %s: %s dosis administradas", lot.id, doses)
        return record
