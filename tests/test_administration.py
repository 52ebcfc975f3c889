import asyncio

import pytest

from vaxstock.core.administration import AdministrationProcessor
from vaxstock.core.exceptions import (
    ConflictError,
    PartialAdministrationError,
    PersistenceError,
    ValidationError,
)
from vaxstock.stores.memory import MemoryAdministrationStore, MemoryLotStore

from factories import make_lot


class BrokenLotStore(MemoryLotStore):
    async def update(self, lot_id, patch, expected_version=None):
        raise PersistenceError("sin conexión")


class CancelledLotStore(MemoryLotStore):
    async def update(self, lot_id, patch, expected_version=None):
        raise asyncio.CancelledError()


@pytest.mark.anyio
class TestAdministrationProcessor:
    async def test_administer_decrements_stock(self):
        lots, records = MemoryLotStore([make_lot(1, quantity=42)]), MemoryAdministrationStore()
        record = await AdministrationProcessor(lots, records).administer(
            await lots.get(1), 5, "enfermera", "adulto"
        )
        assert record.id == 1
        assert record.doses_administered == 5
        assert record.age_group == "adulto"
        assert (await lots.get(1)).quantity_on_hand == 37

    @pytest.mark.parametrize("doses", [0, -2, 43, True, "3"])
    async def test_invalid_doses(self, doses):
        lots, records = MemoryLotStore([make_lot(1, quantity=42)]), MemoryAdministrationStore()
        with pytest.raises(ValidationError):
            await AdministrationProcessor(lots, records).administer(await lots.get(1), doses)
        assert await records.list() == []

    async def test_stale_lot(self):
        lots, records = MemoryLotStore([make_lot(1, quantity=42)]), MemoryAdministrationStore()
        stale = await lots.get(1)
        await lots.update(1, {"quantity_on_hand": 10})
        with pytest.raises(ConflictError):
            await AdministrationProcessor(lots, records).administer(stale, 1)

    async def test_partial_write(self):
        lots, records = BrokenLotStore([make_lot(1, quantity=42)]), MemoryAdministrationStore()
        with pytest.raises(PartialAdministrationError) as exc_info:
            await AdministrationProcessor(lots, records).administer(await lots.get(1), 2)
        assert await records.list(1) == [exc_info.value.record]

    async def test_cancelled_update_reports_partial_write(self):
        lots, records = CancelledLotStore([make_lot(1, quantity=42)]), MemoryAdministrationStore()
        with pytest.raises(PartialAdministrationError) as exc_info:
            await AdministrationProcessor(lots, records).administer(await lots.get(1), 2)
        assert isinstance(exc_info.value.cause, asyncio.CancelledError)
        assert await records.list(1) == [exc_info.value.record]
        assert (await lots.get(1)).quantity_on_hand == 42
