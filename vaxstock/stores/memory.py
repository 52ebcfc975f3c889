"""Almacenes en memoria (pruebas, datos de demostración).

Cada instancia guarda su propio estado; no hay datos globales de módulo.
"""

from dataclasses import fields, replace
from typing import Any, Optional

from vaxstock.core.entities import (
    AdministrationRecord,
    AlertThreshold,
    Lot,
    ReconciliationRecord,
    Vaccine,
)
from vaxstock.core.exceptions import ConflictError, NotFoundError, ValidationError
from vaxstock.core.thresholds import parse_threshold_type


def _check_fields(entity_cls, data: dict[str, Any], exclude: tuple[str, ...] = ("id",)) -> None:
    allowed = {f.name for f in fields(entity_cls)} - set(exclude)
    unknown = set(data) - allowed
    if unknown:
        raise ValidationError(f"Campos desconocidos para {entity_cls.__name__}: {sorted(unknown)}")


class _Sequence:
    def __init__(self):
        self.last = 0

    def next(self) -> int:
        self.last += 1
        return self.last


class MemoryVaccineStore:
    def __init__(self, vaccines: Optional[list[Vaccine]] = None):
        self._items: dict[int, Vaccine] = {}
        self._ids = _Sequence()
        for vaccine in vaccines or []:
            self._items[vaccine.id] = vaccine
            self._ids.last = max(self._ids.last, vaccine.id)

    async def get_all(self) -> list[Vaccine]:
        return sorted(self._items.values(), key=lambda v: v.id)

    async def get(self, vaccine_id: int) -> Vaccine:
        if vaccine_id not in self._items:
            raise NotFoundError("Vacuna", vaccine_id)
        return self._items[vaccine_id]

    async def create(self, data: dict[str, Any]) -> Vaccine:
        _check_fields(Vaccine, data)
        vaccine = Vaccine(id=self._ids.next(), **data)
        self._items[vaccine.id] = vaccine
        return vaccine

    async def update(self, vaccine_id: int, patch: dict[str, Any]) -> Vaccine:
        _check_fields(Vaccine, patch)
        vaccine = replace(await self.get(vaccine_id), **patch)
        self._items[vaccine_id] = vaccine
        return vaccine

    async def delete(self, vaccine_id: int) -> Vaccine:
        vaccine = await self.get(vaccine_id)
        del self._items[vaccine_id]
        return vaccine


class MemoryLotStore:
    def __init__(self, lots: Optional[list[Lot]] = None):
        self._items: dict[int, Lot] = {}
        self._ids = _Sequence()
        for lot in lots or []:
            self._items[lot.id] = lot
            self._ids.last = max(self._ids.last, lot.id)

    async def get_all(self) -> list[Lot]:
        return sorted(self._items.values(), key=lambda lot: lot.id)

    async def get(self, lot_id: int) -> Lot:
        if lot_id not in self._items:
            raise NotFoundError("Lote", lot_id)
        return self._items[lot_id]

    async def create(self, data: dict[str, Any]) -> Lot:
        _check_fields(Lot, data, exclude=("id", "version"))
        lot = Lot(id=self._ids.next(), version=1, **data)
        self._items[lot.id] = lot
        return lot

    async def update(
        self, lot_id: int, patch: dict[str, Any], expected_version: Optional[int] = None
    ) -> Lot:
        _check_fields(Lot, patch, exclude=("id", "version"))
        lot = await self.get(lot_id)
        if expected_version is not None and lot.version != expected_version:
            raise ConflictError(lot_id, expected_version, lot.version)
        updated = replace(lot, version=lot.version + 1, **patch)
        self._items[lot_id] = updated
        return updated


class MemoryThresholdStore:
    def __init__(self, thresholds: Optional[list[AlertThreshold]] = None):
        self._items: dict[int, AlertThreshold] = {}
        self._ids = _Sequence()
        for threshold in thresholds or []:
            self._items[threshold.id] = threshold
            self._ids.last = max(self._ids.last, threshold.id)

    async def get_all(self) -> list[AlertThreshold]:
        return sorted(self._items.values(), key=lambda t: t.id)

    async def create(self, data: dict[str, Any]) -> AlertThreshold:
        _check_fields(AlertThreshold, data)
        data = {**data, "threshold_type": parse_threshold_type(data["threshold_type"])}
        threshold = AlertThreshold(id=self._ids.next(), **data)
        self._items[threshold.id] = threshold
        return threshold

    async def update(self, threshold_id: int, patch: dict[str, Any]) -> AlertThreshold:
        _check_fields(AlertThreshold, patch)
        if threshold_id not in self._items:
            raise NotFoundError("Umbral", threshold_id)
        if "threshold_type" in patch:
            patch = {**patch, "threshold_type": parse_threshold_type(patch["threshold_type"])}
        threshold = replace(self._items[threshold_id], **patch)
        self._items[threshold_id] = threshold
        return threshold

    async def delete(self, threshold_id: int) -> AlertThreshold:
        if threshold_id not in self._items:
            raise NotFoundError("Umbral", threshold_id)
        return self._items.pop(threshold_id)


class MemoryReconciliationStore:
    def __init__(self):
        self._items: list[ReconciliationRecord] = []
        self._ids = _Sequence()

    async def create(self, record: ReconciliationRecord) -> ReconciliationRecord:
        stored = replace(record, id=self._ids.next())
        self._items.append(stored)
        return stored

    async def list(self, lot_id: Optional[int] = None) -> list[ReconciliationRecord]:
        return [r for r in self._items if lot_id is None or r.lot_id == lot_id]


class MemoryAdministrationStore:
    def __init__(self):
        self._items: list[AdministrationRecord] = []
        self._ids = _Sequence()

    async def create(self, record: AdministrationRecord) -> AdministrationRecord:
        stored = replace(record, id=self._ids.next())
        self._items.append(stored)
        return stored

    async def list(self, lot_id: Optional[int] = None) -> list[AdministrationRecord]:
        return [r for r in self._items if lot_id is None or r.lot_id == lot_id]
