"""Motor de alertas de stock y caducidad.

Función pura de sus entradas: no guarda nada y devuelve siempre el mismo
resultado para las mismas entradas.
"""

import datetime
from collections import Counter
from typing import Iterable, Union

from vaxstock.core.catalog import VaccineCatalog
from vaxstock.core.entities import (
    Alert,
    AlertSeverity,
    AlertThreshold,
    AlertType,
    Lot,
    Vaccine,
)
from vaxstock.core.thresholds import ThresholdStore
from vaxstock.utils.dates import days_between, to_date

SEVERITY_ORDER = {AlertSeverity.CRITICAL: 0, AlertSeverity.WARNING: 1}
TYPE_ORDER = {AlertType.EXPIRED: 0, AlertType.EXPIRING: 1, AlertType.LOW_STOCK: 2}


def _sort_key(alert: Alert):
    days = alert.days if alert.type == AlertType.EXPIRING else 0
    return (SEVERITY_ORDER[alert.severity], TYPE_ORDER[alert.type], days, alert.lot_id)


def compute_alerts(
    lots: Iterable[Lot],
    vaccines: Union[VaccineCatalog, Iterable[Vaccine]],
    thresholds: Union[ThresholdStore, Iterable[AlertThreshold]],
    as_of: Union[datetime.date, datetime.datetime, None] = None,
) -> list[Alert]:
    """Calcula las alertas ordenadas de los lotes con existencias."""
    catalog = vaccines if isinstance(vaccines, VaccineCatalog) else VaccineCatalog(vaccines)
    store = thresholds if isinstance(thresholds, ThresholdStore) else ThresholdStore(thresholds)
    reference_date = to_date(as_of) or datetime.date.today()

    alerts: list[Alert] = []
    for lot in lots:
        # Los lotes agotados son historial, no alertas
        if lot.quantity_on_hand <= 0:
            continue

        vaccine_name = catalog.name_of(lot.vaccine_id)

        if lot.expiration_date is not None:
            days_until_expiry = days_between(reference_date, lot.expiration_date)
            if days_until_expiry < 0:
                days_expired = abs(days_until_expiry)
                alerts.append(
                    Alert(
                        id=f"{AlertType.EXPIRED.value}-{lot.id}",
                        type=AlertType.EXPIRED,
                        severity=AlertSeverity.CRITICAL,
                        lot_id=lot.id,
                        vaccine_name=vaccine_name,
                        lot_number=lot.lot_number,
                        quantity=lot.quantity_on_hand,
                        days=days_expired,
                        message=f"{vaccine_name} (Lote {lot.lot_number}) caducó hace {days_expired} días",
                    )
                )
            elif days_until_expiry <= store.expiration_days(lot.vaccine_id):
                alerts.append(
                    Alert(
                        id=f"{AlertType.EXPIRING.value}-{lot.id}",
                        type=AlertType.EXPIRING,
                        severity=AlertSeverity.WARNING,
                        lot_id=lot.id,
                        vaccine_name=vaccine_name,
                        lot_number=lot.lot_number,
                        quantity=lot.quantity_on_hand,
                        days=days_until_expiry,
                        message=f"{vaccine_name} (Lote {lot.lot_number}) caduca en {days_until_expiry} días",
                    )
                )

        # Independiente de la caducidad
        if lot.quantity_on_hand <= store.low_stock(lot.vaccine_id):
            alerts.append(
                Alert(
                    id=f"{AlertType.LOW_STOCK.value}-{lot.id}",
                    type=AlertType.LOW_STOCK,
                    severity=AlertSeverity.WARNING,
                    lot_id=lot.id,
                    vaccine_name=vaccine_name,
                    lot_number=lot.lot_number,
                    quantity=lot.quantity_on_hand,
                    message=f"{vaccine_name} (Lote {lot.lot_number}) sólo tiene {lot.quantity_on_hand} dosis",
                )
            )

    return sorted(alerts, key=_sort_key)


def critical_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    return [a for a in alerts if a.severity == AlertSeverity.CRITICAL]


def warning_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    return [a for a in alerts if a.severity == AlertSeverity.WARNING]


def alerts_by_type(alerts: Iterable[Alert], alert_type: Union[AlertType, str]) -> list[Alert]:
    alert_type = AlertType(alert_type)
    return [a for a in alerts if a.type == alert_type]


def count_by_severity(alerts: Iterable[Alert]) -> dict[str, int]:
    counts = Counter(a.severity.value for a in alerts)
    return {severity.value: counts.get(severity.value, 0) for severity in AlertSeverity}
