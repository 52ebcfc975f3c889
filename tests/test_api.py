import datetime

import pytest

TODAY = datetime.date.today()


def iso(days):
    return (TODAY + datetime.timedelta(days=days)).isoformat()


@pytest.fixture
def seeded_client(client):
    for vaccine in [
        {"name": "Comirnaty", "family": "COVID-19", "manufacturer": "Pfizer-BioNTech"},
        {"name": "Engerix-B", "family": "Hepatitis B", "manufacturer": "GSK"},
    ]:
        assert client.post("/vacunas/", json=vaccine).status_code == 201
    response = client.post(
        "/lotes/",
        json={
            "vaccine_id": 1,
            "lot_number": "EW0182",
            "expiration_date": iso(200),
            "quantity_received": 42,
        },
    )
    assert response.status_code == 201
    return client


def test_root(client):
    assert client.get("/").json() == {"message": "API funcionando correctamente"}


class TestLots:
    def test_list_lots(self, seeded_client):
        body = seeded_client.get("/lotes/").json()
        assert body["total"] == 1
        assert body["data"][0]["lot_number"] == "EW0182"
        assert body["data"][0]["quantity_on_hand"] == 42
        assert body["repairs"] == [] and body["issues"] == []

    def test_get_lot(self, seeded_client):
        assert seeded_client.get("/lotes/1").json()["vaccine_id"] == 1
        response = seeded_client.get("/lotes/999")
        assert response.status_code == 404

    def test_receive_invalid_lot(self, seeded_client):
        response = seeded_client.post(
            "/lotes/",
            json={
                "vaccine_id": 1,
                "lot_number": "EW0183",
                "expiration_date": iso(10),
                "quantity_received": 10,
                "passed_inspection": 5,
            },
        )
        assert response.status_code == 400
        assert "rechazadas" in response.json()["detail"]

    def test_receive_unknown_vaccine(self, seeded_client):
        response = seeded_client.post(
            "/lotes/",
            json={"vaccine_id": 7, "lot_number": "ABC", "expiration_date": iso(10), "quantity_received": 1},
        )
        assert response.status_code == 400

    def test_import_repairs_references(self, seeded_client):
        response = seeded_client.post(
            "/lotes/importar",
            json=[
                {"LotNumber": "AC21B123AA", "ExpirationDate": iso(90), "QuantityReceived": 10},
                {"lotNumber": "ZZZ", "expirationDate": iso(90), "quantityReceived": 5, "vaccine": {"Id": 40}},
                {"lotNumber": "QQQ"},
            ],
        )
        assert response.status_code == 200
        body = response.json()
        assert [lot["vaccine_id"] for lot in body["created"]] == [2, 1]
        assert [r["rule"] for r in body["repairs"]] == ["manufacturer-lot-pattern", "preferred-family"]
        assert [r["index"] for r in body["rejected"]] == [2]

        lots = seeded_client.get("/lotes/").json()
        assert lots["repairs"] == []
        assert [lot["vaccine_id"] for lot in lots["data"]] == [1, 2, 1]

    def test_import_requires_records(self, client):
        assert client.post("/lotes/importar", json=[]).status_code == 400

    def test_available_and_summary(self, seeded_client):
        available = seeded_client.get("/lotes/disponibles").json()
        assert [lot["id"] for lot in available] == [1]
        later = seeded_client.get("/lotes/disponibles", params={"fecha": iso(300)}).json()
        assert later == []

        summary = seeded_client.get("/lotes/resumen").json()
        assert summary["total_on_hand"] == 42
        assert summary["available_lots"] == 1
        assert summary["alerts"] == {"critical": 0, "warning": 0}


class TestReconciliations:
    def test_adjustment_then_no_op(self, seeded_client):
        payload = {"lot_id": 1, "physical_count": 37, "reason": "physical-count", "notes": "conteo"}
        response = seeded_client.post("/conciliaciones/", json=payload)
        assert response.status_code == 201
        record = response.json()
        assert (record["previous_quantity"], record["adjusted_quantity"], record["adjustment"]) == (42, 37, -5)
        assert record["reason_name"] == "Discrepancia en conteo físico"

        response = seeded_client.post("/conciliaciones/", json=payload)
        assert response.status_code == 200
        assert response.json()["ajustado"] is False

        assert seeded_client.get("/lotes/1").json()["quantity_on_hand"] == 37
        history = seeded_client.get("/conciliaciones/", params={"lot_id": 1}).json()
        assert len(history) == 1

    @pytest.mark.parametrize(
        "payload, status_code",
        [
            ({"lot_id": 1, "physical_count": -3, "reason": "other"}, 400),
            ({"lot_id": 1, "physical_count": "muchas", "reason": "other"}, 400),
            ({"lot_id": 1, "physical_count": 3, "reason": "robo"}, 400),
            ({"lot_id": 1, "physical_count": True, "reason": "other"}, 422),
            ({"lot_id": 1, "physical_count": 37.0, "reason": "other"}, 422),
            ({"lot_id": 99, "physical_count": 3, "reason": "other"}, 404),
        ],
    )
    def test_errors(self, seeded_client, payload, status_code):
        assert seeded_client.post("/conciliaciones/", json=payload).status_code == status_code
        assert seeded_client.get("/conciliaciones/").json() == []


class TestAlertsAndThresholds:
    def test_alerts_with_threshold(self, seeded_client):
        seeded_client.post(
            "/lotes/",
            json={"vaccine_id": 2, "lot_number": "AC21B123AA", "expiration_date": iso(5), "quantity_received": 6},
        )
        body = seeded_client.get("/alertas/").json()
        assert [a["id"] for a in body["data"]] == ["expiring-2", "low-stock-2"]
        assert body["data"][0]["days"] == 5
        assert (body["critical"], body["warning"]) == (0, 2)

        only_low = seeded_client.get("/alertas/", params={"tipo": "low-stock"}).json()
        assert [a["id"] for a in only_low["data"]] == ["low-stock-2"]

        response = seeded_client.post(
            "/umbrales/", json={"vaccine_id": 2, "threshold_type": "low_stock", "threshold_value": 5}
        )
        assert response.status_code == 201
        body = seeded_client.get("/alertas/").json()
        assert [a["id"] for a in body["data"]] == ["expiring-2"]

    def test_alerts_on_future_date(self, seeded_client):
        body = seeded_client.get("/alertas/", params={"fecha": iso(201), "severidad": "critical"}).json()
        assert [(a["id"], a["days"]) for a in body["data"]] == [("expired-1", 1)]

    def test_threshold_crud(self, seeded_client):
        created = seeded_client.post(
            "/umbrales/", json={"vaccine_id": 1, "threshold_type": "expiration", "threshold_value": 60}
        ).json()
        updated = seeded_client.put(f"/umbrales/{created['id']}", json={"threshold_value": 90}).json()
        assert updated["threshold_value"] == 90
        assert seeded_client.put(f"/umbrales/{created['id']}", json={}).status_code == 400
        assert seeded_client.delete(f"/umbrales/{created['id']}").status_code == 200
        assert seeded_client.delete(f"/umbrales/{created['id']}").status_code == 404
        assert seeded_client.post(
            "/umbrales/", json={"vaccine_id": 1, "threshold_type": "expiration", "threshold_value": 0}
        ).status_code == 422


class TestVaccinesAndAdministrations:
    def test_delete_vaccine_repairs_lots(self, seeded_client):
        assert seeded_client.delete("/vacunas/1").status_code == 200
        lots = seeded_client.get("/lotes/").json()
        # EW0182 tiene formato Pfizer pero ya no hay vacunas de Pfizer: familia más común
        assert lots["data"][0]["vaccine_id"] == 2
        assert lots["repairs"][0]["rule"] == "preferred-family"

    def test_update_vaccine(self, seeded_client):
        response = seeded_client.put("/vacunas/2", json={"min_stock": 20})
        assert response.json()["min_stock"] == 20
        assert seeded_client.put("/vacunas/9", json={"min_stock": 1}).status_code == 404

    def test_administration(self, seeded_client):
        response = seeded_client.post(
            "/administraciones/", json={"lot_id": 1, "doses_administered": 2, "administered_by": "enf. gil"}
        )
        assert response.status_code == 201
        assert seeded_client.get("/lotes/1").json()["quantity_on_hand"] == 40
        assert len(seeded_client.get("/administraciones/", params={"lot_id": 1}).json()) == 1

        too_many = seeded_client.post("/administraciones/", json={"lot_id": 1, "doses_administered": 41})
        assert too_many.status_code == 400
