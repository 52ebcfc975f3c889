import os

# Configuración de pruebas antes de importar la aplicación
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.pop("FALLBACK_VACCINE_FAMILY", None)
os.environ["REPAIR_LAST_RESORT"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from vaxstock.core.entities import Vaccine
from vaxstock.dependencies import get_inventory_service
from vaxstock.main import app
from vaxstock.models.database import create_db_and_tables
from vaxstock.services.inventory import InventoryService
from vaxstock.stores.memory import (
    MemoryAdministrationStore,
    MemoryLotStore,
    MemoryReconciliationStore,
    MemoryThresholdStore,
    MemoryVaccineStore,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def vaccines():
    return [
        Vaccine(id=1, name="Comirnaty", abbreviation="COV", family="COVID-19", manufacturer="Pfizer-BioNTech"),
        Vaccine(id=2, name="Spikevax", abbreviation="COV", family="COVID-19", manufacturer="Moderna"),
        Vaccine(id=3, name="Engerix-B", abbreviation="HepB", family="Hepatitis B", manufacturer="GSK"),
        Vaccine(id=4, name="Gardasil 9", abbreviation="VPH", family="VPH", manufacturer="Merck Sharp & Dohme"),
    ]


@pytest.fixture
def memory_stores(vaccines):
    """Almacenes en memoria con el catálogo de prueba y sin lotes."""
    return {
        "vaccines": MemoryVaccineStore(vaccines),
        "lots": MemoryLotStore(),
        "thresholds": MemoryThresholdStore(),
        "reconciliations": MemoryReconciliationStore(),
        "administrations": MemoryAdministrationStore(),
    }


@pytest.fixture
def service(memory_stores):
    return InventoryService(**memory_stores)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_inventory_service] = lambda: InventoryService.from_engine(engine)
    yield TestClient(app)
    app.dependency_overrides.clear()
