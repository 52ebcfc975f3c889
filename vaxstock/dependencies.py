from vaxstock.models.database import engine
from vaxstock.services.inventory import InventoryService


def get_inventory_service() -> InventoryService:
    """Servicio de inventario sobre la base de datos configurada."""
    return InventoryService.from_engine(engine)
