import datetime
from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from vaxstock.core.alerts import alerts_by_type, count_by_severity
from vaxstock.core.exceptions import InventoryError
from vaxstock.dependencies import get_inventory_service
from vaxstock.schemas.alert import AlertListResponse
from vaxstock.services.inventory import InventoryService
from vaxstock.utils.http_errors import to_http_exception
from vaxstock.utils.serialization import entity_dict

router = APIRouter(prefix="/alertas", tags=["Alertas"])


@router.get("/", response_model=AlertListResponse)
async def get_alerts(
    fecha: Optional[datetime.date] = Query(None, description="Fecha de referencia (hoy por defecto)"),
    tipo: Optional[Literal["expired", "expiring", "low-stock"]] = Query(None),
    severidad: Optional[Literal["critical", "warning"]] = Query(None),
    service: InventoryService = Depends(get_inventory_service),
):
    """Alertas de caducidad y stock bajo, ordenadas por prioridad.
    - Críticas primero; dentro de cada tipo, las que caducan antes.
    """
    try:
        alerts = await service.list_alerts(fecha)
    except InventoryError as e:
        raise to_http_exception(e)

    counts = count_by_severity(alerts)
    if tipo:
        alerts = alerts_by_type(alerts, tipo)
    if severidad:
        alerts = [a for a in alerts if a.severity.value == severidad]

    return {
        "data": [entity_dict(alert) for alert in alerts],
        "total": len(alerts),
        "critical": counts["critical"],
        "warning": counts["warning"],
    }
