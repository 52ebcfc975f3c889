"""Contratos de los almacenes de datos que consume el núcleo.

Todas las operaciones son asíncronas (viaje de ida y vuelta al almacén) y
fallan con `NotFoundError`, `ValidationError` o `PersistenceError`;
`LotStore.update` además con `ConflictError` si la versión no coincide.
"""

from typing import Any, Optional, Protocol

from vaxstock.core.entities import (
    AdministrationRecord,
    AlertThreshold,
    Lot,
    ReconciliationRecord,
    Vaccine,
)


class VaccineStore(Protocol):
    async def get_all(self) -> list[Vaccine]: ...

    async def get(self, vaccine_id: int) -> Vaccine: ...

    async def create(self, data: dict[str, Any]) -> Vaccine: ...

    async def update(self, vaccine_id: int, patch: dict[str, Any]) -> Vaccine: ...

    async def delete(self, vaccine_id: int) -> Vaccine: ...


class LotStore(Protocol):
    async def get_all(self) -> list[Lot]: ...

    async def get(self, lot_id: int) -> Lot: ...

    async def create(self, data: dict[str, Any]) -> Lot: ...

    async def update(
        self, lot_id: int, patch: dict[str, Any], expected_version: Optional[int] = None
    ) -> Lot: ...


class AlertThresholdStore(Protocol):
    async def get_all(self) -> list[AlertThreshold]: ...

    async def create(self, data: dict[str, Any]) -> AlertThreshold: ...

    async def update(self, threshold_id: int, patch: dict[str, Any]) -> AlertThreshold: ...

    async def delete(self, threshold_id: int) -> AlertThreshold: ...


class ReconciliationStore(Protocol):
    async def create(self, record: ReconciliationRecord) -> ReconciliationRecord: ...

    async def list(self, lot_id: Optional[int] = None) -> list[ReconciliationRecord]: ...


class AdministrationStore(Protocol):
    async def create(self, record: AdministrationRecord) -> AdministrationRecord: ...

    async def list(self, lot_id: Optional[int] = None) -> list[AdministrationRecord]: ...


