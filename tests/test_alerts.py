import datetime

from vaxstock.core.alerts import (
    alerts_by_type,
    compute_alerts,
    count_by_severity,
    critical_alerts,
    warning_alerts,
)
from vaxstock.core.entities import AlertSeverity, AlertType
from vaxstock.core.thresholds import ThresholdStore

from factories import AS_OF, make_lot, make_threshold


def days(n):
    return AS_OF + datetime.timedelta(days=n)


def defaults(thresholds=()):
    return ThresholdStore(thresholds, default_low_stock=10, default_expiration_days=30)


class TestComputeAlerts:
    def test_sort_order_scenario(self, vaccines):
        lots = [
            make_lot(3, quantity=4, expiration=days(200)),
            make_lot(2, quantity=50, expiration=days(10)),
            make_lot(1, quantity=50, expiration=days(-12)),
        ]
        alerts = compute_alerts(lots, vaccines, defaults(), AS_OF)
        assert [a.id for a in alerts] == ["expired-1", "expiring-2", "low-stock-3"]
        assert alerts[0].severity == AlertSeverity.CRITICAL
        assert alerts[0].days == 12
        assert alerts[1].days == 10
        assert alerts[2].days is None

    def test_expiring_sorted_by_days_then_lot_id(self, vaccines):
        lots = [
            make_lot(1, quantity=50, expiration=days(20)),
            make_lot(2, quantity=50, expiration=days(5)),
            make_lot(3, quantity=50, expiration=days(5)),
        ]
        alerts = compute_alerts(lots, vaccines, defaults(), AS_OF)
        assert [a.lot_id for a in alerts] == [2, 3, 1]

    def test_expiration_boundaries(self, vaccines):
        lots = [
            make_lot(1, quantity=50, expiration=days(30)),
            make_lot(2, quantity=50, expiration=days(31)),
            make_lot(3, quantity=50, expiration=days(0)),
        ]
        alerts = compute_alerts(lots, vaccines, defaults(), AS_OF)
        # Caduca hoy: todavía no está caducado
        assert [(a.lot_id, a.type) for a in alerts] == [
            (3, AlertType.EXPIRING),
            (1, AlertType.EXPIRING),
        ]

    def test_expired_and_low_stock_are_independent(self, vaccines):
        alerts = compute_alerts([make_lot(1, quantity=3, expiration=days(-1))], vaccines, defaults(), AS_OF)
        assert [a.id for a in alerts] == ["expired-1", "low-stock-1"]
        assert "caducó hace 1 días" in alerts[0].message

    def test_empty_lots_never_alert(self, vaccines):
        lots = [make_lot(1, quantity=0, expiration=days(-100))]
        assert compute_alerts(lots, vaccines, defaults(), AS_OF) == []

    def test_threshold_override(self, vaccines):
        thresholds = defaults([make_threshold(1, 1, "low_stock", 5)])
        at_threshold = compute_alerts([make_lot(1, quantity=5)], vaccines, thresholds, AS_OF)
        above = compute_alerts([make_lot(1, quantity=6)], vaccines, thresholds, AS_OF)
        assert [a.type for a in at_threshold] == [AlertType.LOW_STOCK]
        assert above == []

    def test_expiration_threshold_per_vaccine(self, vaccines):
        thresholds = defaults([make_threshold(1, 3, "expiration", 90)])
        lots = [make_lot(1, vaccine_id=3, quantity=50, expiration=days(60)),
                make_lot(2, vaccine_id=1, quantity=50, expiration=days(60))]
        alerts = compute_alerts(lots, vaccines, thresholds, AS_OF)
        assert [a.lot_id for a in alerts] == [1]

    def test_unknown_vaccine_name(self, vaccines):
        alerts = compute_alerts([make_lot(1, vaccine_id=99, quantity=1)], vaccines, defaults(), AS_OF)
        assert alerts[0].vaccine_name == "Desconocida"

    def test_soundness(self, vaccines):
        lots = [make_lot(i, quantity=q, expiration=days(d))
                for i, (q, d) in enumerate([(0, -5), (3, -5), (20, 3), (8, 400), (100, 400)], start=1)]
        by_id = {lot.id: lot for lot in lots}
        thresholds = defaults()
        for alert in compute_alerts(lots, vaccines, thresholds, AS_OF):
            lot = by_id[alert.lot_id]
            assert lot.quantity_on_hand > 0
            if alert.type == AlertType.EXPIRED:
                assert lot.expiration_date < AS_OF
            elif alert.type == AlertType.EXPIRING:
                assert 0 <= (lot.expiration_date - AS_OF).days <= thresholds.expiration_days(lot.vaccine_id)
            else:
                assert lot.quantity_on_hand <= thresholds.low_stock(lot.vaccine_id)

    def test_accepts_datetime_reference(self, vaccines):
        moment = datetime.datetime(2025, 6, 1, 23, 59)
        alerts = compute_alerts([make_lot(1, quantity=50, expiration=days(1))], vaccines, defaults(), moment)
        assert alerts[0].days == 1


class TestAlertHelpers:
    def test_filters_and_counts(self, vaccines):
        lots = [make_lot(1, quantity=3, expiration=days(-1)), make_lot(2, quantity=50, expiration=days(3))]
        alerts = compute_alerts(lots, vaccines, defaults(), AS_OF)
        assert [a.id for a in critical_alerts(alerts)] == ["expired-1"]
        assert [a.id for a in warning_alerts(alerts)] == ["expiring-2", "low-stock-1"]
        assert [a.id for a in alerts_by_type(alerts, "low-stock")] == ["low-stock-1"]
        assert count_by_severity(alerts) == {"critical": 1, "warning": 2}
