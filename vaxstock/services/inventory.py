"""Fachada del motor de inventario.

Orquesta los almacenes inyectados y los componentes del núcleo: el resolvedor
se ejecuta en cada lectura y su salida alimenta las alertas, la conciliación
y la administración de dosis.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.engine import Engine

from vaxstock.core.administration import AdministrationProcessor
from vaxstock.core.alerts import compute_alerts, count_by_severity
from vaxstock.core.catalog import VaccineCatalog
from vaxstock.core.entities import (
    AdministrationRecord,
    Alert,
    AlertThreshold,
    Lot,
    ReconciliationRecord,
    Vaccine,
)
from vaxstock.core.exceptions import InventoryError, NotFoundError, ValidationError
from vaxstock.core.receiving import validate_receipt
from vaxstock.core.reconciliation import ReconciliationProcessor
from vaxstock.core.resolver import ReferenceResolver, ResolutionResult
from vaxstock.core.thresholds import ThresholdStore
from vaxstock.schemas.records import RawLotRecord
from vaxstock.stores.base import (
    AdministrationStore,
    AlertThresholdStore,
    LotStore,
    ReconciliationStore,
    VaccineStore,
)
from vaxstock.utils.dates import today
from vaxstock.utils.validation import parse_positive_int

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    created: list[Lot] = field(default_factory=list)
    rejected: list[dict[str, Any]] = field(default_factory=list)
    resolution: ResolutionResult = field(default_factory=ResolutionResult)


@dataclass
class InventorySummary:
    total_on_hand: int
    total_received: int
    total_administered: int
    lots: int
    available_lots: int
    unresolved_lots: int
    alerts: dict[str, int]


class InventoryService:
    def __init__(
        self,
        vaccines: VaccineStore,
        lots: LotStore,
        thresholds: AlertThresholdStore,
        reconciliations: ReconciliationStore,
        administrations: AdministrationStore,
        resolver: Optional[ReferenceResolver] = None,
    ):
        self.vaccines = vaccines
        self.lots = lots
        self.thresholds = thresholds
        self.reconciliations = reconciliations
        self.administrations = administrations
        self.resolver = resolver or ReferenceResolver()
        self.reconciler = ReconciliationProcessor(lots, reconciliations)
        self.administrator = AdministrationProcessor(lots, administrations)

    @classmethod
    def from_engine(cls, engine: Engine, **kwargs) -> "InventoryService":
        """Servicio con los almacenes SQL sobre el motor dado."""
        from vaxstock.stores.sql import (
            SQLAdministrationStore,
            SQLLotStore,
            SQLReconciliationStore,
            SQLThresholdStore,
            SQLVaccineStore,
        )

        return cls(
            vaccines=SQLVaccineStore(engine),
            lots=SQLLotStore(engine),
            thresholds=SQLThresholdStore(engine),
            reconciliations=SQLReconciliationStore(engine),
            administrations=SQLAdministrationStore(engine),
            **kwargs,
        )

    # ---------------------------------------------------------------- lotes

    async def resolve_lots(self) -> ResolutionResult:
        """Lee lotes y catálogo, repara referencias y guarda las reparaciones.

        Un fallo al guardar una reparación se registra pero no impide la
        lectura: la reparación se vuelve a calcular en la siguiente.
        """
        catalog = VaccineCatalog(await self.vaccines.get_all())
        lots = await self.lots.get_all()
        result = self.resolver.validate(lots, catalog)
        if not result.repairs:
            return result

        originals = {lot.id: lot for lot in lots}
        repaired_ids = {repair.lot_id: repair.vaccine_id for repair in result.repairs}
        persisted: dict[int, Lot] = {}
        for lot_id, vaccine_id in repaired_ids.items():
            try:
                persisted[lot_id] = await self.lots.update(
                    lot_id,
                    {"vaccine_id": vaccine_id},
                    expected_version=originals[lot_id].version,
                )
            except InventoryError as e:
                logger.warning("No se pudo guardar la reparación del lote %s: %s", lot_id, e)

        result.repaired_lots = [persisted.get(lot.id, lot) for lot in result.repaired_lots]
        return result

    async def get_lot(self, lot_id: int) -> Lot:
        result = await self.resolve_lots()
        for lot in result.repaired_lots:
            if lot.id == lot_id:
                return lot
        raise NotFoundError("Lote", lot_id)

    async def available_lots(self, as_of: Optional[datetime.date] = None) -> list[Lot]:
        result = await self.resolve_lots()
        return result.available_lots(as_of or today())

    async def receive_lot(
        self, data: dict[str, Any], as_of: Optional[datetime.date] = None
    ) -> Lot:
        """Da de alta un lote recibido tras validarlo."""
        lot_data = validate_receipt(data, as_of)
        vaccine_id = parse_positive_int(lot_data["vaccine_id"])
        if vaccine_id is None:
            raise ValidationError("La vacuna del lote es obligatoria")
        try:
            await self.vaccines.get(vaccine_id)
        except NotFoundError:
            raise ValidationError(f"La vacuna {vaccine_id} no existe")
        lot_data["vaccine_id"] = vaccine_id
        lot = await self.lots.create(lot_data)
        logger.info("Lote %s (%s) recibido: %s dosis", lot.id, lot.lot_number, lot.quantity_on_hand)
        return lot

    async def import_lots(self, raw_records: Iterable[dict[str, Any]]) -> ImportResult:
        """Importa registros en bruto y repara sus referencias a vacunas.

        Los registros que no se pueden normalizar se devuelven en `rejected`
        con su posición; el resto se guarda tal cual y pasa por el resolvedor.
        """
        result = ImportResult()
        for index, raw in enumerate(raw_records):
            try:
                record = RawLotRecord.model_validate(raw)
            except SchemaValidationError as e:
                errors = "; ".join(
                    f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
                )
                result.rejected.append({"index": index, "error": errors})
                continue
            lot_data = record.to_lot_data()
            if (
                lot_data["passed_inspection"] + lot_data["failed_inspection"]
                != lot_data["quantity_received"]
            ):
                result.rejected.append(
                    {
                        "index": index,
                        "error": "passed_inspection + failed_inspection debe ser igual a quantity_received",
                    }
                )
                continue
            if lot_data["quantity_on_hand"] > lot_data["quantity_received"]:
                result.rejected.append(
                    {"index": index, "error": "quantity_on_hand supera quantity_received"}
                )
                continue
            result.created.append(await self.lots.create(lot_data))

        if result.rejected:
            logger.warning("Importación: %s registros rechazados", len(result.rejected))
        resolution = await self.resolve_lots()
        created_ids = {lot.id for lot in result.created}
        result.resolution = ResolutionResult(
            repaired_lots=[lot for lot in resolution.repaired_lots if lot.id in created_ids],
            repairs=[r for r in resolution.repairs if r.lot_id in created_ids],
            issues=[i for i in resolution.issues if i.lot_id in created_ids],
        )
        result.created = result.resolution.repaired_lots
        logger.info(
            "Importación: %s lotes creados, %s reparados",
            len(result.created),
            len(result.resolution.repairs),
        )
        return result

    # -------------------------------------------------------------- alertas

    async def list_alerts(self, as_of: Optional[datetime.date] = None) -> list[Alert]:
        result = await self.resolve_lots()
        catalog = VaccineCatalog(await self.vaccines.get_all())
        thresholds = ThresholdStore(await self.thresholds.get_all())
        # Los lotes sin vacuna resuelta no generan alertas
        return compute_alerts(result.resolved_lots(), catalog, thresholds, as_of or today())

    async def summary(self, as_of: Optional[datetime.date] = None) -> InventorySummary:
        as_of = as_of or today()
        result = await self.resolve_lots()
        thresholds = ThresholdStore(await self.thresholds.get_all())
        catalog = VaccineCatalog(await self.vaccines.get_all())
        alerts = compute_alerts(result.resolved_lots(), catalog, thresholds, as_of)
        administrations = await self.administrations.list()
        return InventorySummary(
            total_on_hand=sum(lot.quantity_on_hand for lot in result.repaired_lots),
            total_received=sum(lot.quantity_received for lot in result.repaired_lots),
            total_administered=sum(a.doses_administered for a in administrations),
            lots=len(result.repaired_lots),
            available_lots=len(result.available_lots(as_of)),
            unresolved_lots=len(result.issues),
            alerts=count_by_severity(alerts),
        )

    # --------------------------------------------------------- conciliación

    async def reconcile_lot(
        self, lot_id: int, physical_count: Any, reason: str, notes: Optional[str] = ""
    ) -> Optional[ReconciliationRecord]:
        """Ajusta un lote a su conteo físico. Devuelve None si no hubo ajuste."""
        result = await self.resolve_lots()
        lot = next((lot for lot in result.repaired_lots if lot.id == lot_id), None)
        if lot is None:
            raise NotFoundError("Lote", lot_id)
        if lot_id in result.unresolved_lot_ids:
            logger.warning("Conciliando el lote %s con referencia a vacuna sin resolver", lot_id)
        return await self.reconciler.reconcile(lot, physical_count, reason, notes)

    async def reconciliation_history(self, lot_id: Optional[int] = None) -> list[ReconciliationRecord]:
        return await self.reconciliations.list(lot_id)

    # -------------------------------------------------------- administración

    async def record_administration(
        self,
        lot_id: int,
        doses: int,
        administered_by: str = "",
        age_group: Optional[str] = None,
        as_of: Optional[datetime.date] = None,
    ) -> AdministrationRecord:
        result = await self.resolve_lots()
        lot = next((lot for lot in result.repaired_lots if lot.id == lot_id), None)
        if lot is None:
            raise NotFoundError("Lote", lot_id)
        if lot not in result.available_lots(as_of or today()):
            raise ValidationError(
                f"El lote {lot.lot_number} no está disponible (sin vacuna, sin dosis o caducado)"
            )
        return await self.administrator.administer(lot, doses, administered_by, age_group)

    async def administration_history(self, lot_id: Optional[int] = None) -> list[AdministrationRecord]:
        return await self.administrations.list(lot_id)

    # ---------------------------------------------------- catálogo y umbrales

    async def list_vaccines(self) -> list[Vaccine]:
        return await self.vaccines.get_all()

    async def get_vaccine(self, vaccine_id: int) -> Vaccine:
        return await self.vaccines.get(vaccine_id)

    async def create_vaccine(self, data: dict[str, Any]) -> Vaccine:
        return await self.vaccines.create(data)

    async def update_vaccine(self, vaccine_id: int, patch: dict[str, Any]) -> Vaccine:
        return await self.vaccines.update(vaccine_id, patch)

    async def delete_vaccine(self, vaccine_id: int) -> Vaccine:
        # Los lotes que la referencian se repararán en la siguiente lectura
        return await self.vaccines.delete(vaccine_id)

    async def list_thresholds(self) -> list[AlertThreshold]:
        return await self.thresholds.get_all()

    async def create_threshold(self, data: dict[str, Any]) -> AlertThreshold:
        return await self.thresholds.create(data)

    async def update_threshold(self, threshold_id: int, patch: dict[str, Any]) -> AlertThreshold:
        return await self.thresholds.update(threshold_id, patch)

    async def delete_threshold(self, threshold_id: int) -> AlertThreshold:
        return await self.thresholds.delete(threshold_id)
