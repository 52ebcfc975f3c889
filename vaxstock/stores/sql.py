"""Almacenes respaldados por SQLModel.

Las sesiones de SQLModel son bloqueantes: cada operación se ejecuta en un
hilo de trabajo con `anyio.to_thread.run_sync` para no bloquear el event loop.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

import anyio
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from vaxstock.core import entities
from vaxstock.core.exceptions import (
    ConflictError,
    InventoryError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from vaxstock.core.thresholds import parse_threshold_type
from vaxstock.models.administration import Administration
from vaxstock.models.alert_threshold import AlertThreshold
from vaxstock.models.lot import VaccineLot
from vaxstock.models.reconciliation import Reconciliation
from vaxstock.models.vaccine import Vaccine

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOT_FIELDS = {
    "vaccine_id",
    "lot_number",
    "expiration_date",
    "quantity_received",
    "quantity_on_hand",
    "date_received",
    "passed_inspection",
    "failed_inspection",
    "discrepancy_reason",
}
VACCINE_FIELDS = {
    "name",
    "abbreviation",
    "family",
    "manufacturer",
    "doses_per_vial",
    "min_stock",
    "storage_temp",
}
THRESHOLD_FIELDS = {"vaccine_id", "threshold_type", "threshold_value"}


def vaccine_to_entity(row: Vaccine) -> entities.Vaccine:
    return entities.Vaccine(
        id=row.id,
        name=row.name,
        abbreviation=row.abbreviation or "",
        family=row.family or "",
        manufacturer=row.manufacturer or "",
        doses_per_vial=row.doses_per_vial,
        min_stock=row.min_stock,
        storage_temp=row.storage_temp or "",
    )


def lot_to_entity(row: VaccineLot) -> entities.Lot:
    return entities.Lot(
        id=row.id,
        vaccine_id=row.vaccine_id,
        lot_number=row.lot_number,
        expiration_date=row.expiration_date,
        quantity_received=row.quantity_received,
        quantity_on_hand=row.quantity_on_hand,
        date_received=row.date_received,
        passed_inspection=row.passed_inspection,
        failed_inspection=row.failed_inspection,
        discrepancy_reason=row.discrepancy_reason,
        version=row.version,
    )


def threshold_to_entity(row: AlertThreshold) -> entities.AlertThreshold:
    return entities.AlertThreshold(
        id=row.id,
        vaccine_id=row.vaccine_id,
        threshold_type=entities.ThresholdType(row.threshold_type),
        threshold_value=row.threshold_value,
    )


def reconciliation_to_entity(row: Reconciliation) -> entities.ReconciliationRecord:
    return entities.ReconciliationRecord(
        id=row.id,
        lot_id=row.lot_id,
        previous_quantity=row.previous_quantity,
        adjusted_quantity=row.adjusted_quantity,
        adjustment=row.adjustment,
        reason=entities.ReconciliationReason(row.reason),
        notes=row.notes,
        reconciled_at=row.reconciled_at,
    )


def administration_to_entity(row: Administration) -> entities.AdministrationRecord:
    return entities.AdministrationRecord(
        id=row.id,
        lot_id=row.lot_id,
        doses_administered=row.doses_administered,
        administered_by=row.administered_by,
        age_group=row.age_group,
        administered_at=row.administered_at,
    )


def _check_fields(data: dict[str, Any], allowed: set[str], entity: str) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise ValidationError(f"Campos desconocidos para {entity}: {sorted(unknown)}")


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _check_threshold_type(data: dict[str, Any]) -> None:
    if "threshold_type" in data:
        parse_threshold_type(data["threshold_type"])


class SQLStore:
    """Base común: ejecuta una función con sesión en un hilo y traduce errores."""

    def __init__(self, engine: Engine):
        self.engine = engine

    async def _run(self, work: Callable[[Session], T]) -> T:
        return await anyio.to_thread.run_sync(self._in_session, work)

    def _in_session(self, work: Callable[[Session], T]) -> T:
        with Session(self.engine) as session:
            try:
                return work(session)
            except IntegrityError as e:
                session.rollback()
                msg_error = (str(e.orig) if hasattr(e, "orig") else str(e)).split("\n")[0]
                raise ValidationError(f"Error de integridad: {msg_error}") from e
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Error de base de datos: %s", e)
                raise PersistenceError("Error de conexión con la base de datos") from e
            except InventoryError:
                session.rollback()
                raise


class SQLVaccineStore(SQLStore):
    async def get_all(self) -> list[entities.Vaccine]:
        def work(db: Session):
            rows = db.exec(select(Vaccine).order_by(Vaccine.id)).all()
            return [vaccine_to_entity(row) for row in rows]

        return await self._run(work)

    async def get(self, vaccine_id: int) -> entities.Vaccine:
        def work(db: Session):
            row = db.get(Vaccine, vaccine_id)
            if not row:
                raise NotFoundError("Vacuna", vaccine_id)
            return vaccine_to_entity(row)

        return await self._run(work)

    async def create(self, data: dict[str, Any]) -> entities.Vaccine:
        _check_fields(data, VACCINE_FIELDS, "Vacuna")

        def work(db: Session):
            row = Vaccine(**data)
            db.add(row)
            db.commit()
            db.refresh(row)
            return vaccine_to_entity(row)

        return await self._run(work)

    async def update(self, vaccine_id: int, patch: dict[str, Any]) -> entities.Vaccine:
        _check_fields(patch, VACCINE_FIELDS, "Vacuna")

        def work(db: Session):
            row = db.get(Vaccine, vaccine_id)
            if not row:
                raise NotFoundError("Vacuna", vaccine_id)
            for key, value in patch.items():
                setattr(row, key, value)
            db.add(row)
            db.commit()
            db.refresh(row)
            return vaccine_to_entity(row)

        return await self._run(work)

    async def delete(self, vaccine_id: int) -> entities.Vaccine:
        def work(db: Session):
            row = db.get(Vaccine, vaccine_id)
            if not row:
                raise NotFoundError("Vacuna", vaccine_id)
            # Los umbrales de la vacuna dejan de tener sentido; los lotes se quedan huérfanos
            for threshold in db.exec(
                select(AlertThreshold).where(AlertThreshold.vaccine_id == vaccine_id)
            ).all():
                db.delete(threshold)
            deleted = vaccine_to_entity(row)
            db.delete(row)
            db.commit()
            return deleted

        return await self._run(work)


class SQLLotStore(SQLStore):
    async def get_all(self) -> list[entities.Lot]:
        def work(db: Session):
            rows = db.exec(select(VaccineLot).order_by(VaccineLot.id)).all()
            return [lot_to_entity(row) for row in rows]

        return await self._run(work)

    async def get(self, lot_id: int) -> entities.Lot:
        def work(db: Session):
            row = db.get(VaccineLot, lot_id)
            if not row:
                raise NotFoundError("Lote", lot_id)
            return lot_to_entity(row)

        return await self._run(work)

    async def create(self, data: dict[str, Any]) -> entities.Lot:
        _check_fields(data, LOT_FIELDS, "Lote")

        def work(db: Session):
            row = VaccineLot(**data, version=1)
            db.add(row)
            db.commit()
            db.refresh(row)
            return lot_to_entity(row)

        return await self._run(work)

    async def update(
        self, lot_id: int, patch: dict[str, Any], expected_version: Optional[int] = None
    ) -> entities.Lot:
        _check_fields(patch, LOT_FIELDS, "Lote")

        def work(db: Session):
            # Bloquea la fila (en motores que lo soportan) durante la comprobación de versión
            row = db.get(VaccineLot, lot_id, with_for_update=True)
            if not row:
                raise NotFoundError("Lote", lot_id)
            if expected_version is not None and row.version != expected_version:
                raise ConflictError(lot_id, expected_version, row.version)
            for key, value in patch.items():
                setattr(row, key, value)
            row.version = row.version + 1
            db.add(row)
            db.commit()
            db.refresh(row)
            return lot_to_entity(row)

        return await self._run(work)


class SQLThresholdStore(SQLStore):
    async def get_all(self) -> list[entities.AlertThreshold]:
        def work(db: Session):
            rows = db.exec(select(AlertThreshold).order_by(AlertThreshold.id)).all()
            thresholds = []
            for row in rows:
                try:
                    thresholds.append(threshold_to_entity(row))
                except ValueError:
                    logger.warning(
                        "Umbral %s ignorado: tipo desconocido %r", row.id, row.threshold_type
                    )
            return thresholds

        return await self._run(work)

    async def create(self, data: dict[str, Any]) -> entities.AlertThreshold:
        _check_fields(data, THRESHOLD_FIELDS, "Umbral")
        _check_threshold_type(data)

        def work(db: Session):
            if not db.get(Vaccine, data.get("vaccine_id")):
                raise NotFoundError("Vacuna", data.get("vaccine_id"))
            row = AlertThreshold(**{key: _plain(value) for key, value in data.items()})
            db.add(row)
            db.commit()
            db.refresh(row)
            return threshold_to_entity(row)

        return await self._run(work)

    async def update(self, threshold_id: int, patch: dict[str, Any]) -> entities.AlertThreshold:
        _check_fields(patch, THRESHOLD_FIELDS, "Umbral")
        _check_threshold_type(patch)

        def work(db: Session):
            row = db.get(AlertThreshold, threshold_id)
            if not row:
                raise NotFoundError("Umbral", threshold_id)
            if "vaccine_id" in patch and not db.get(Vaccine, patch["vaccine_id"]):
                raise NotFoundError("Vacuna", patch["vaccine_id"])
            for key, value in patch.items():
                setattr(row, key, _plain(value))
            db.add(row)
            db.commit()
            db.refresh(row)
            return threshold_to_entity(row)

        return await self._run(work)

    async def delete(self, threshold_id: int) -> entities.AlertThreshold:
        def work(db: Session):
            row = db.get(AlertThreshold, threshold_id)
            if not row:
                raise NotFoundError("Umbral", threshold_id)
            deleted = threshold_to_entity(row)
            db.delete(row)
            db.commit()
            return deleted

        return await self._run(work)


class SQLReconciliationStore(SQLStore):
    async def create(self, record: entities.ReconciliationRecord) -> entities.ReconciliationRecord:
        def work(db: Session):
            row = Reconciliation(
                lot_id=record.lot_id,
                previous_quantity=record.previous_quantity,
                adjusted_quantity=record.adjusted_quantity,
                adjustment=record.adjustment,
                reason=_plain(record.reason),
                notes=record.notes,
                reconciled_at=record.reconciled_at,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return reconciliation_to_entity(row)

        return await self._run(work)

    async def list(self, lot_id: Optional[int] = None) -> list[entities.ReconciliationRecord]:
        def work(db: Session):
            statement = select(Reconciliation)
            if lot_id is not None:
                statement = statement.where(Reconciliation.lot_id == lot_id)
            rows = db.exec(statement.order_by(Reconciliation.id)).all()
            return [reconciliation_to_entity(row) for row in rows]

        return await self._run(work)


class SQLAdministrationStore(SQLStore):
    async def create(self, record: entities.AdministrationRecord) -> entities.AdministrationRecord:
        def work(db: Session):
            row = Administration(
                lot_id=record.lot_id,
                doses_administered=record.doses_administered,
                administered_by=record.administered_by,
                age_group=record.age_group,
                administered_at=record.administered_at,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return administration_to_entity(row)

        return await self._run(work)

    async def list(self, lot_id: Optional[int] = None) -> list[entities.AdministrationRecord]:
        def work(db: Session):
            statement = select(Administration)
            if lot_id is not None:
                statement = statement.where(Administration.lot_id == lot_id)
            rows = db.exec(statement.order_by(Administration.id)).all()
            return [administration_to_entity(row) for row in rows]

        return await self._run(work)
