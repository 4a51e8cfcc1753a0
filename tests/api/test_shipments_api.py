"""API tests for shipment endpoints."""

GIO = {"brand": "Armani", "name": "Acqua di Gio", "size": "100ml"}


class TestShipmentsAPI:
    async def test_create_shipment(self, client):
        response = await client.post(
            "/api/shipments",
            json={
                "shipment_number": "SH-100",
                "shipping_cost": 12.5,
                "additional_costs": 7.5,
                "lots": [
                    {**GIO, "quantity": 10, "unit_cost": 5.0},
                    {"brand": "Dior", "name": "Sauvage", "size": "60ml", "quantity": 2, "unit_cost": 40.0},
                ],
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "preparing"
        assert data["total_cost"] == 150.0
        assert data["net_profit"] == -150.0
        assert data["remaining_units"] == 12
        assert [lot["remaining_inventory"] for lot in data["lots"]] == [10, 2]

    async def test_empty_lots_rejected(self, client):
        response = await client.post("/api/shipments", json={"shipment_number": "X", "lots": []})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_get_and_list(self, client, stocked):
        response = await client.get(f"/api/shipments/{stocked[0]}")
        assert response.json()["shipment_number"] == "A"

        listed = (await client.get("/api/shipments")).json()
        assert listed["total"] == 2
        assert [s["shipment_number"] for s in listed["shipments"]] == ["B", "A"]

        page = (await client.get("/api/shipments", params={"limit": 1})).json()
        assert len(page["shipments"]) == 1
        assert page["total"] == 2

    async def test_missing_shipment(self, client):
        response = await client.get("/api/shipments/999")
        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "SHIPMENT_NOT_FOUND"
        assert data["hint"]

    async def test_status_moves_forward_only(self, client, stocked):
        url = f"/api/shipments/{stocked[0]}/status"
        response = await client.patch(url, json={"status": "shipped"})
        assert response.status_code == 200
        assert response.json()["shipped_date"] is not None

        response = await client.patch(url, json={"status": "preparing"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_STATUS_TRANSITION"

        filtered = (await client.get("/api/shipments", params={"status": "shipped"})).json()
        assert [s["id"] for s in filtered["shipments"]] == [stocked[0]]

    async def test_settling_reflects_sales(self, client, stocked):
        await client.post(
            "/api/sales",
            json={"customer_name": "Ana", "lines": [{**GIO, "quantity": 4, "unit_price": 20.0}]},
        )
        response = await client.patch(f"/api/shipments/{stocked[0]}/status", json={"status": "settled"})
        data = response.json()
        assert data["total_revenue"] == 80.0
        assert data["cost_of_goods_sold"] == 20.0
        assert data["net_profit"] == 30.0

    async def test_reconcile(self, client, stocked):
        await client.post(
            "/api/sales",
            json={"customer_name": "Ana", "lines": [{**GIO, "quantity": 12, "unit_price": 20.0}]},
        )
        response = await client.post("/api/shipments/reconcile")
        data = response.json()
        assert data["drifted"] == 0
        assert len(data["shipments"]) == 2

        single = await client.post(f"/api/shipments/{stocked[1]}/reconcile")
        assert single.json()["shipments"][0]["recomputed"]["total_revenue"] == 40.0
