"""
Production logs, waste incidents, and the main dashboard cards/alerts.
"""

from datetime import timedelta

import pytest

from kmdash.time_utils import today


@pytest.fixture
def material(client, staff_headers):
    resp = client.post(
        "/api/inventaris",
        json={
            "nama_bahan": "Kain Katun Combed 30s",
            "kategori": "Bahan Utama",
            "stok": 300,
            "satuan": "meter",
            "harga_per_unit": 40000,
            "threshold_min": 50,
        },
        headers=staff_headers,
    )
    assert resp.status_code == 201
    return resp.json


def _log(material_id, **overrides):
    payload = {
        "material_id": material_id,
        "quantity_used": 120,
        "product_type": "Kemeja",
        "quantity_produced": 60,
        "waste_quantity": 8.5,
        "shift": "Pagi",
    }
    payload.update(overrides)
    return payload


class TestProductionLogs:

    def test_create_log_derives_waste_percentage(self, client, staff_headers, material):
        resp = client.post("/api/production/logs", json=_log(material["id"]), headers=staff_headers)
        assert resp.status_code == 201
        assert resp.json["waste_percentage"] == 7.08
        assert resp.json["production_date"] == today().isoformat()
        assert resp.json["material"] == "Kain Katun Combed 30s"

    def test_log_refreshes_material_waste_average(self, client, staff_headers, material):
        client.post("/api/production/logs", json=_log(material["id"], quantity_used=100, waste_quantity=10), headers=staff_headers)
        client.post("/api/production/logs", json=_log(material["id"], quantity_used=100, waste_quantity=20), headers=staff_headers)

        resp = client.get(f"/api/inventaris/{material['id']}", headers=staff_headers)
        assert resp.json["avg_waste_percentage"] == 15

    def test_waste_above_usage_is_422(self, client, staff_headers, material):
        resp = client.post(
            "/api/production/logs",
            json=_log(material["id"], quantity_used=10, waste_quantity=11),
            headers=staff_headers,
        )
        assert resp.status_code == 422
        assert "waste_quantity" in resp.json["errors"]

    def test_unknown_material_is_422(self, client, staff_headers, db_session):
        resp = client.post("/api/production/logs", json=_log(9999), headers=staff_headers)
        assert resp.status_code == 422
        assert "material_id" in resp.json["errors"]

    def test_zero_usage_has_zero_waste_percentage(self, client, staff_headers, material):
        resp = client.post(
            "/api/production/logs",
            json=_log(material["id"], quantity_used=0, waste_quantity=0),
            headers=staff_headers,
        )
        assert resp.status_code == 201
        assert resp.json["waste_percentage"] == 0

    def test_date_range_filter(self, client, staff_headers, material):
        old = (today() - timedelta(days=40)).isoformat()
        client.post("/api/production/logs", json=_log(material["id"], production_date=old), headers=staff_headers)
        client.post("/api/production/logs", json=_log(material["id"]), headers=staff_headers)

        since = (today() - timedelta(days=7)).isoformat()
        resp = client.get(f"/api/production/logs?from={since}", headers=staff_headers)
        assert resp.json["count"] == 1

        resp = client.get(f"/api/production/logs?to={old}", headers=staff_headers)
        assert resp.json["count"] == 1

    def test_bad_date_filter_is_422(self, client, staff_headers, db_session):
        resp = client.get("/api/production/logs?from=kemarin", headers=staff_headers)
        assert resp.status_code == 422


class TestProductionWastes:

    def test_create_waste_computes_cost(self, client, staff_headers, material):
        resp = client.post(
            "/api/production/wastes",
            json={
                "material_id": material["id"],
                "quantity": 3.5,
                "waste_category": "Cutting Error",
                "waste_reason": "Pola tidak dikunci saat memotong",
                "preventive_action": "Gunakan pemberat pola",
            },
            headers=staff_headers,
        )
        assert resp.status_code == 201
        assert resp.json["cost_impact"] == 140000
        assert resp.json["unit"] == "meter"
        assert resp.json["is_preventable"] is True
        assert resp.json["status"] == "Recorded"

    def test_invalid_category_is_422(self, client, staff_headers, material):
        resp = client.post(
            "/api/production/wastes",
            json={"material_id": material["id"], "quantity": 1, "waste_category": "Banjir", "waste_reason": "x"},
            headers=staff_headers,
        )
        assert resp.status_code == 422
        assert "waste_category" in resp.json["errors"]

    def test_unknown_log_is_422(self, client, staff_headers, material):
        resp = client.post(
            "/api/production/wastes",
            json={
                "material_id": material["id"],
                "production_log_id": 4242,
                "quantity": 1,
                "waste_category": "Other",
                "waste_reason": "Sisa potongan",
            },
            headers=staff_headers,
        )
        assert resp.status_code == 422

    def test_preventable_filter(self, client, staff_headers, material):
        for preventable in (True, False, True):
            client.post(
                "/api/production/wastes",
                json={
                    "material_id": material["id"],
                    "quantity": 1,
                    "waste_category": "Material Defect",
                    "waste_reason": "Cacat tenun",
                    "is_preventable": preventable,
                },
                headers=staff_headers,
            )

        resp = client.get("/api/production/wastes?preventable=false", headers=staff_headers)
        assert resp.json["count"] == 1
        resp = client.get("/api/production/wastes?preventable=true", headers=staff_headers)
        assert resp.json["count"] == 2


class TestDashboard:

    def test_empty_cards(self, client, manager_headers):
        resp = client.get("/api/dashboard/metrics", headers=manager_headers)
        assert resp.status_code == 200
        cards = resp.json
        assert cards["total_stock_value"]["value"] == "Rp 0"
        assert cards["material_efficiency"]["value"] == "0%"
        assert cards["supplier_reliability"]["value"] == "0.0/10"
        assert cards["knowledge_health"]["value"] == "0%"
        assert cards["knowledge_health"]["last_update"] is None

    def test_cards_with_data(self, client, manager_headers, material):
        client.post(
            "/api/production/logs",
            json=_log(material["id"], quantity_used=100, waste_quantity=5),
            headers=manager_headers,
        )
        cards = client.get("/api/dashboard/metrics", headers=manager_headers).json

        assert cards["total_stock_value"]["value"] == "Rp 12.000.000"
        assert cards["material_efficiency"]["value"] == "95%"
        assert cards["material_efficiency"]["positive"] is True

    def test_no_alerts_when_healthy(self, client, manager_headers, material):
        resp = client.get("/api/dashboard/alerts", headers=manager_headers)
        assert resp.json == {"items": [], "count": 0}

    def test_low_stock_and_high_waste_alerts(self, client, manager_headers, material):
        client.put(f"/api/inventaris/{material['id']}", json={"stok": 10}, headers=manager_headers)
        client.post(
            "/api/production/logs",
            json=_log(material["id"], quantity_used=50, waste_quantity=10),
            headers=manager_headers,
        )

        items = client.get("/api/dashboard/alerts", headers=manager_headers).json["items"]
        assert [a["type"] for a in items] == ["warning", "danger"]
        assert items[0]["message"].startswith("1 jenis bahan")

    def test_recent_knowledge_lists_published_only(self, client, manager_headers, db_session):
        base = {
            "seci_type": "Sosialisasi",
            "problem_description": "Penjahit baru kesulitan obras",
            "solution": "Sesi mentoring mingguan",
        }
        client.post("/api/lessons", json={**base, "title": "Mentoring obras"}, headers=manager_headers)
        client.post("/api/lessons", json={**base, "title": "Draf", "status": "Draft"}, headers=manager_headers)

        resp = client.get("/api/dashboard/recent-knowledge", headers=manager_headers)
        assert [item["title"] for item in resp.json["items"]] == ["Mentoring obras"]
        assert resp.json["items"][0]["author"] == "Siti Manager"
