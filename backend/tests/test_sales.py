"""
Sale and port-out tests.

Verifies:
- selling moves a number from inventory to sales
- payment toggle touches only the payment status
- bulk port-out moves only sales with a Generated UPC
- cancelling a sale restores the number as Unassigned
"""

from numberflow.models import Activity, NumberRecord, PortOutRecord, SaleRecord


SALE = {"sale_price": 200, "sold_to": "Buyer One", "sale_date": "2024-06-01"}


def sell(client, headers, number_id, **overrides):
    body = dict(SALE)
    body.update(overrides)
    resp = client.post(f"/api/numbers/{number_id}/sell", json=body, headers=headers)
    assert resp.status_code == 201, resp.json
    return resp.json["sale"]


class TestSellNumber:

    def test_sell_moves_number(self, client, admin_headers, make_number, db_session):
        number = make_number("9876543210", purchase_from="Vendor A")
        number_id = number.id

        sale = sell(client, admin_headers, number_id)
        assert sale["mobile"] == "9876543210"
        assert sale["sum"] == 9
        assert sale["payment_status"] == "Pending"
        assert sale["original_number_data"]["purchase_from"] == "Vendor A"

        assert db_session.get(NumberRecord, number_id) is None
        assert db_session.query(SaleRecord).count() == 1

    def test_bulk_sell(self, client, admin_headers, make_number, db_session):
        ids = [make_number(m).id for m in ("9876543210", "9123456780")]
        resp = client.post("/api/numbers/sell", json={"number_ids": ids, **SALE}, headers=admin_headers)
        assert resp.status_code == 201
        assert len(resp.json["sales"]) == 2
        assert db_session.query(NumberRecord).count() == 0

        activities = db_session.query(Activity).filter_by(action="Bulk Sold Numbers").all()
        assert len(activities) == 1

    def test_sale_requires_buyer(self, client, admin_headers, make_number):
        number = make_number("9876543210")
        resp = client.post(
            f"/api/numbers/{number.id}/sell",
            json={"sale_price": 200, "sale_date": "2024-06-01"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert "sold_to" in resp.json["fields"]


class TestSaleStatuses:

    def test_toggle_payment_twice_restores_record(self, client, admin_headers, make_number):
        sale = sell(client, admin_headers, make_number("9876543210").id)

        first = client.post(f"/api/sales/{sale['id']}/toggle-payment", headers=admin_headers).json["sale"]
        assert first["payment_status"] == "Done"
        second = client.post(f"/api/sales/{sale['id']}/toggle-payment", headers=admin_headers).json["sale"]
        assert second == sale

    def test_update_statuses(self, client, admin_headers, make_number):
        sale = sell(client, admin_headers, make_number("9876543210").id)
        resp = client.patch(
            f"/api/sales/{sale['id']}/statuses",
            json={"payment_status": "Done", "upc_status": "Generated"},
            headers=admin_headers,
        )
        assert resp.json["sale"]["payment_status"] == "Done"
        assert resp.json["sale"]["upc_status"] == "Generated"

    def test_buyers(self, client, admin_headers, make_number):
        sell(client, admin_headers, make_number("9876543210").id, sold_to="zeta")
        sell(client, admin_headers, make_number("9123456780").id, sold_to="Alpha")
        resp = client.get("/api/sales/buyers", headers=admin_headers)
        assert resp.json["items"] == ["Alpha", "zeta"]


class TestPortOut:

    def test_single_port_out(self, client, admin_headers, make_number, db_session):
        sale = sell(client, admin_headers, make_number("9876543210").id)
        resp = client.post(f"/api/sales/{sale['id']}/port-out", headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json["port_out"]["mobile"] == "9876543210"
        assert resp.json["port_out"]["port_out_date"] is not None
        assert db_session.query(SaleRecord).count() == 0

    def test_bulk_port_out_skips_pending_upc(self, client, admin_headers, make_number, db_session):
        generated = sell(client, admin_headers, make_number("9876543210").id)
        pending = sell(client, admin_headers, make_number("9123456780").id)
        client.post(
            "/api/sales/upc-status",
            json={"sale_ids": [generated["id"]], "upc_status": "Generated"},
            headers=admin_headers,
        )

        resp = client.post(
            "/api/sales/port-out",
            json={"sale_ids": [generated["id"], pending["id"]]},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert [p["mobile"] for p in resp.json["port_outs"]] == ["9876543210"]
        assert [s["mobile"] for s in resp.json["skipped"]] == ["9123456780"]

        assert db_session.query(PortOutRecord).count() == 1
        remaining = db_session.query(SaleRecord).one()
        assert remaining.mobile == "9123456780"

    def test_nothing_eligible_writes_nothing(self, client, admin_headers, make_number, db_session):
        sale = sell(client, admin_headers, make_number("9876543210").id)
        before = db_session.query(Activity).count()

        resp = client.post("/api/sales/port-out", json={"sale_ids": [sale["id"]]}, headers=admin_headers)
        assert resp.status_code == 422
        assert resp.json["notification"]["variant"] == "destructive"
        assert db_session.query(PortOutRecord).count() == 0
        assert db_session.query(Activity).count() == before

    def test_port_out_payment(self, client, admin_headers, make_number):
        sale = sell(client, admin_headers, make_number("9876543210").id)
        port_out = client.post(f"/api/sales/{sale['id']}/port-out", headers=admin_headers).json["port_out"]

        resp = client.patch(
            f"/api/port-outs/{port_out['id']}/payment",
            json={"payment_status": "Done"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json["port_out"]["payment_status"] == "Done"

        resp = client.post(
            "/api/port-outs/payment",
            json={"port_out_ids": [port_out["id"]], "payment_status": "Pending"},
            headers=admin_headers,
        )
        assert resp.json["port_outs"][0]["payment_status"] == "Pending"


class TestCancelSale:

    def test_cancel_restores_unassigned_number(self, client, admin_headers, make_number, db_session):
        sale = sell(client, admin_headers, make_number("9876543210", purchase_from="Vendor A").id)

        resp = client.post(f"/api/sales/{sale['id']}/cancel", headers=admin_headers)
        assert resp.status_code == 200
        number = resp.json["number"]
        assert number["mobile"] == "9876543210"
        assert number["assigned_to"] == "Unassigned"
        assert number["purchase_from"] == "Vendor A"
        assert number["purchase_date"].startswith("2024-05-01")

        assert db_session.query(SaleRecord).count() == 0
        assert db_session.query(NumberRecord).filter_by(mobile="9876543210").count() == 1

    def test_cancel_unknown_sale(self, client, admin_headers):
        resp = client.post("/api/sales/999/cancel", headers=admin_headers)
        assert resp.status_code == 404

    def test_cancel_without_snapshot_conflicts(self, client, admin_headers, make_number, db_session):
        sale = sell(client, admin_headers, make_number("9876543210").id)
        record = db_session.get(SaleRecord, sale["id"])
        record.original_number_data = None
        db_session.commit()

        resp = client.post(f"/api/sales/{sale['id']}/cancel", headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json["notification"]["variant"] == "destructive"
        assert db_session.query(SaleRecord).count() == 1


class TestSaleScope:
    """Employees only reach sales of numbers that were assigned to them."""

    def test_employee_cannot_see_others_sales(self, client, admin_headers, employee_headers, make_number):
        sale = sell(client, admin_headers, make_number("9876543210").id)

        resp = client.get("/api/sales", headers=employee_headers)
        assert resp.json["count"] == 0
        assert client.get("/api/sales/buyers", headers=employee_headers).json["items"] == []
        assert client.get("/api/exports/sales", headers=employee_headers).status_code == 404

        dashboard = client.get("/api/dashboard", headers=employee_headers).json
        assert dashboard["cards"]["sales"] == 0

        assert client.get("/api/sales", headers=admin_headers).json["count"] == 1
        assert client.get("/api/dashboard", headers=admin_headers).json["cards"]["sales"] == 1
        assert sale["original_number_data"]["assigned_to"] == "Admin User"

    def test_employee_cannot_change_others_sales(self, client, admin_headers, employee_headers, make_number, db_session):
        sale = sell(client, admin_headers, make_number("9876543210").id)

        assert client.post(f"/api/sales/{sale['id']}/cancel", headers=employee_headers).status_code == 404
        assert client.post(f"/api/sales/{sale['id']}/toggle-payment", headers=employee_headers).status_code == 404
        assert client.post(f"/api/sales/{sale['id']}/port-out", headers=employee_headers).status_code == 404
        resp = client.post("/api/sales/port-out", json={"sale_ids": [sale["id"]]}, headers=employee_headers)
        assert resp.status_code == 404

        remaining = db_session.query(SaleRecord).one()
        assert remaining.payment_status == "Pending"

    def test_employee_works_with_own_sales(self, client, admin_headers, employee_headers, employee_user, make_number):
        sell(client, admin_headers, make_number("9876543210").id)
        own = make_number("9123456780", user=employee_user)
        sale = sell(client, employee_headers, own.id, sold_to="Walk-in")

        resp = client.get("/api/sales", headers=employee_headers)
        assert [s["mobile"] for s in resp.json["items"]] == ["9123456780"]
        assert client.get("/api/sales/buyers", headers=employee_headers).json["items"] == ["Walk-in"]

        resp = client.post(f"/api/sales/{sale['id']}/toggle-payment", headers=employee_headers)
        assert resp.status_code == 200
        assert resp.json["sale"]["payment_status"] == "Done"

        assert client.get("/api/sales", headers=admin_headers).json["count"] == 2
