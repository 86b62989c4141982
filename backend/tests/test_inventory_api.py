"""
Inventory (inventaris / materials) API tests.
"""

import pytest


def _material(**overrides):
    payload = {
        "nama_bahan": "Kain Katun Combed 30s",
        "kategori": "Bahan Utama",
        "stok": 250,
        "satuan": "meter",
        "harga_per_unit": 45000,
        "threshold_min": 50,
        "explicit_knowledge": "Suhu setrika maksimal 150C",
        "tacit_knowledge": "Potong searah serat agar tidak melintir",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_material(client, staff_headers):
    def _create(**overrides):
        resp = client.post("/api/inventaris", json=_material(**overrides), headers=staff_headers)
        assert resp.status_code == 201, resp.json
        return resp.json
    return _create


class TestCreateMaterial:

    def test_create_low_stock_material(self, client, staff_headers):
        resp = client.post(
            "/api/inventaris",
            json=_material(nama_bahan="Kain Drill", stok=5, threshold_min=10),
            headers=staff_headers,
        )
        assert resp.status_code == 201
        assert resp.json["status"] == "Rendah"
        assert resp.json["stok"] == 5
        assert resp.json["last_updated_by"] == "Ahmad Staff"

    def test_stock_value_and_reorder_point(self, create_material):
        material = create_material()
        assert material["nilai_stok"] == 250 * 45000
        assert material["reorder_point"] == 75
        assert material["status"] == "Optimal"
        assert material["supplier"] == "-"
        assert material["last_restocked_at"] is not None

    def test_zero_stock_is_habis(self, create_material):
        material = create_material(stok=0, threshold_min=10)
        assert material["status"] == "Habis"
        assert material["last_restocked_at"] is None

    @pytest.mark.parametrize(
        "override,field",
        [
            ({"nama_bahan": ""}, "nama_bahan"),
            ({"kategori": "Makanan"}, "kategori"),
            ({"stok": -1}, "stok"),
            ({"stok": "banyak"}, "stok"),
            ({"satuan": "x" * 21}, "satuan"),
            ({"harga_per_unit": -5}, "harga_per_unit"),
            ({"warna": "merah"}, "warna"),
        ],
    )
    def test_invalid_fields_are_422(self, client, staff_headers, override, field):
        resp = client.post("/api/inventaris", json=_material(**override), headers=staff_headers)
        assert resp.status_code == 422
        assert field in resp.json["errors"]

    def test_unknown_supplier_is_422(self, client, staff_headers):
        resp = client.post("/api/inventaris", json=_material(supplier_id=999), headers=staff_headers)
        assert resp.status_code == 422
        assert "supplier_id" in resp.json["errors"]

    def test_non_json_body_is_422(self, client, staff_headers):
        resp = client.post("/api/inventaris", data="nama_bahan=x", headers=staff_headers)
        assert resp.status_code == 422


class TestThresholdDefault:

    def test_threshold_omitted(self, client, staff_headers):
        payload = _material(stok=100)
        payload.pop("threshold_min")
        resp = client.post("/api/inventaris", json=payload, headers=staff_headers)

        assert resp.status_code == 201
        assert resp.json["threshold_min"] == 20
        assert resp.json["reorder_point"] == 30
        assert resp.json["status"] == "Optimal"


class TestReadUpdateDelete:

    def test_get_and_alias(self, client, staff_headers, create_material):
        material = create_material()
        resp = client.get(f"/api/inventaris/{material['id']}", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json["nama_bahan"] == "Kain Katun Combed 30s"

        resp = client.get(f"/api/materials/{material['id']}", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json["id"] == material["id"]

    def test_missing_material_is_404(self, client, staff_headers):
        resp = client.get("/api/inventaris/424242", headers=staff_headers)
        assert resp.status_code == 404
        assert "error" in resp.json

    def test_partial_update(self, client, staff_headers, create_material):
        material = create_material(stok=100, threshold_min=50)
        resp = client.put(
            f"/api/inventaris/{material['id']}",
            json={"stok": 40},
            headers=staff_headers,
        )
        assert resp.status_code == 200
        assert resp.json["stok"] == 40
        assert resp.json["status"] == "Rendah"
        assert resp.json["nama_bahan"] == material["nama_bahan"]

    def test_update_validates(self, client, staff_headers, create_material):
        material = create_material()
        resp = client.put(f"/api/inventaris/{material['id']}", json={"stok": -10}, headers=staff_headers)
        assert resp.status_code == 422

    def test_soft_delete(self, client, staff_headers, create_material):
        material = create_material()
        resp = client.delete(f"/api/inventaris/{material['id']}", headers=staff_headers)
        assert resp.status_code == 200

        assert client.get(f"/api/inventaris/{material['id']}", headers=staff_headers).status_code == 404
        listed = client.get("/api/inventaris", headers=staff_headers).json
        assert listed["count"] == 0

        listed = client.get("/api/inventaris?include_inactive=true", headers=staff_headers).json
        assert listed["count"] == 1

    def test_delete_twice_is_404(self, client, staff_headers, create_material):
        material = create_material()
        client.delete(f"/api/inventaris/{material['id']}", headers=staff_headers)
        resp = client.delete(f"/api/inventaris/{material['id']}", headers=staff_headers)
        assert resp.status_code == 404


class TestListMaterials:

    @pytest.fixture
    def stocked(self, create_material):
        return [
            create_material(nama_bahan="Kain Katun", stok=0, threshold_min=10),
            create_material(nama_bahan="Kain Drill", stok=8, threshold_min=10),
            create_material(nama_bahan="Benang Jahit", kategori="Bahan Pendukung", stok=15, threshold_min=10),
            create_material(nama_bahan="Kancing Kayu", kategori="Aksesoris", stok=500, threshold_min=10),
        ]

    def test_list_shape_newest_first(self, client, staff_headers, stocked):
        resp = client.get("/api/inventaris", headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 4
        assert resp.json["limit"] == 100
        assert resp.json["offset"] == 0
        assert resp.json["items"][0]["nama_bahan"] == "Kancing Kayu"

    @pytest.mark.parametrize(
        "status,expected",
        [
            ("Habis", ["Kain Katun"]),
            ("Rendah", ["Kain Drill"]),
            ("Cukup", ["Benang Jahit"]),
            ("Optimal", ["Kancing Kayu"]),
        ],
    )
    def test_status_filter(self, client, staff_headers, stocked, status, expected):
        resp = client.get(f"/api/inventaris?status={status}", headers=staff_headers)
        assert [m["nama_bahan"] for m in resp.json["items"]] == expected

    def test_bad_status_filter_is_422(self, client, staff_headers, stocked):
        resp = client.get("/api/inventaris?status=Banyak", headers=staff_headers)
        assert resp.status_code == 422

    def test_search_and_category(self, client, staff_headers, stocked):
        resp = client.get("/api/inventaris?search=kain", headers=staff_headers)
        assert resp.json["count"] == 2

        resp = client.get("/api/inventaris?kategori=Aksesoris", headers=staff_headers)
        assert [m["nama_bahan"] for m in resp.json["items"]] == ["Kancing Kayu"]

    def test_low_stock_filter(self, client, staff_headers, stocked):
        resp = client.get("/api/materials?low_stock=true", headers=staff_headers)
        assert sorted(m["nama_bahan"] for m in resp.json["items"]) == ["Kain Drill", "Kain Katun"]

    def test_pagination(self, client, staff_headers, stocked):
        resp = client.get("/api/inventaris?limit=2&offset=1", headers=staff_headers)
        assert resp.json["count"] == 4
        assert len(resp.json["items"]) == 2
        assert resp.json["limit"] == 2
