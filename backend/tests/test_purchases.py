"""
Purchase and dealer purchase tests.
"""

from numberflow.models import Activity, NumberRecord, PurchaseRecord


class TestAddPurchase:

    def test_purchase_stocks_a_non_rts_number(self, client, admin_headers, db_session):
        resp = client.post(
            "/api/purchases",
            json={
                "mobile": "9876543210",
                "purchased_from": "Vendor A",
                "purchase_price": 150,
                "purchase_date": "2024-05-01",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201

        assert db_session.query(PurchaseRecord).count() == 1
        number = db_session.query(NumberRecord).filter_by(mobile="9876543210").one()
        assert number.status == "Non-RTS"
        assert number.purchase_from == "Vendor A"
        assert number.purchase_price == 150
        assert number.sum == 9

        activity = db_session.query(Activity).one()
        assert activity.action == "Added Purchase"
        assert "9876543210" in activity.description

    def test_duplicate_purchase_writes_nothing(self, client, admin_headers, make_number, db_session):
        make_number("9876543210")
        before = db_session.query(Activity).count()

        resp = client.post(
            "/api/purchases",
            json={
                "mobile": "9876543210",
                "purchased_from": "Vendor A",
                "purchase_price": 150,
                "purchase_date": "2024-05-01",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 409
        assert db_session.query(PurchaseRecord).count() == 0
        assert db_session.query(Activity).count() == before

    def test_negative_price_is_rejected(self, client, admin_headers):
        resp = client.post(
            "/api/purchases",
            json={
                "mobile": "9876543210",
                "purchased_from": "Vendor A",
                "purchase_price": -1,
                "purchase_date": "2024-05-01",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert "purchase_price" in resp.json["fields"]

    def test_list_newest_first(self, client, admin_headers):
        for mobile, day in (("9876543210", "2024-05-01"), ("9123456780", "2024-06-01")):
            client.post(
                "/api/purchases",
                json={"mobile": mobile, "purchased_from": "V", "purchase_price": 1, "purchase_date": day},
                headers=admin_headers,
            )
        resp = client.get("/api/purchases", headers=admin_headers)
        assert [p["mobile"] for p in resp.json["items"]] == ["9123456780", "9876543210"]


class TestDealerPurchases:

    def test_add_and_update(self, client, admin_headers):
        resp = client.post(
            "/api/dealer-purchases",
            json={"mobile": "9876543210", "price": 500},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        record = resp.json["dealer_purchase"]
        assert record["sum"] == 9
        assert record["payment_status"] == "Pending"

        resp = client.patch(
            f"/api/dealer-purchases/{record['id']}",
            json={"payment_status": "Done", "port_out_status": "Done", "upc_status": "Generated"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json["dealer_purchase"]["port_out_status"] == "Done"

    def test_dealer_mobile_blocks_inventory_add(self, client, admin_headers):
        client.post("/api/dealer-purchases", json={"mobile": "9876543210", "price": 500}, headers=admin_headers)
        resp = client.post(
            "/api/numbers",
            json={"mobile": "9876543210", "status": "RTS", "purchase_price": 1, "purchase_date": "2024-05-01"},
            headers=admin_headers,
        )
        assert resp.status_code == 409
