"""HTTP tests for /api/v1/ledgers."""
RICE = {"sku": "A", "name": "Rice 5kg", "available_quantity": 10, "unit_price_cents": 100, "cost_price_cents": 40}


def open_ledger(client, headers, kind="sale"):
    response = client.post("/api/v1/ledgers/", json={"kind": kind}, headers=headers)
    assert response.status_code == 201
    return response.json()


def test_root_and_health(test_client):
    assert test_client.get("/").status_code == 200
    health = test_client.get("/health").json()
    assert health == {"status": "ok", "storage": "memory"}


def test_requires_bearer_token(test_client):
    response = test_client.post("/api/v1/ledgers/", json={"kind": "sale"})
    assert response.status_code in (401, 403)

    response = test_client.get("/api/v1/ledgers/", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_discount_then_void_flow(test_client, cashier_headers):
    ledger = open_ledger(test_client, cashier_headers)

    response = test_client.post(
        f"/api/v1/ledgers/{ledger['id']}/lines",
        json={"item": RICE, "quantity": 2},
        headers=cashier_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["subtotal_cents"] == 200
    line_id = data["lines"][0]["id"]

    response = test_client.post(
        f"/api/v1/ledgers/{ledger['id']}/lines/{line_id}/discount",
        json={"percent": 10},
        headers=cashier_headers
    )
    assert response.json()["subtotal_cents"] == 180

    response = test_client.post(
        f"/api/v1/ledgers/{ledger['id']}/lines/{line_id}/void",
        json={"reason": "damaged"},
        headers=cashier_headers
    )
    data = response.json()
    assert data["subtotal_cents"] == 0
    assert data["lines"][0]["status"] == "voided"
    assert data["lines"][0]["struck_through"] is True


def test_domain_errors_map_to_status_codes(test_client, cashier_headers):
    ledger = open_ledger(test_client, cashier_headers)
    lines_url = f"/api/v1/ledgers/{ledger['id']}/lines"

    response = test_client.post(lines_url, json={"item": RICE, "quantity": 11}, headers=cashier_headers)
    assert response.status_code == 422
    assert response.json()["code"] == "InsufficientAvailability"

    response = test_client.post(lines_url, json={"item": RICE, "quantity": 0}, headers=cashier_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidQuantity"

    line_id = test_client.post(lines_url, json={"item": RICE, "quantity": 1}, headers=cashier_headers).json()["lines"][0]["id"]
    response = test_client.post(f"{lines_url}/{line_id}/void", json={}, headers=cashier_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "MissingReason"

    response = test_client.get("/api/v1/ledgers/missing", headers=cashier_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "NotFoundError"

    test_client.post(f"/api/v1/ledgers/{ledger['id']}/finalize", headers=cashier_headers)
    response = test_client.post(lines_url, json={"item": RICE, "quantity": 1}, headers=cashier_headers)
    assert response.status_code == 409
    assert response.json() == {
        "detail": f"Ledger {ledger['id']} is finalized and cannot be changed",
        "code": "LedgerFinalized"
    }


def test_quantity_update_and_remove(test_client, cashier_headers):
    ledger = open_ledger(test_client, cashier_headers, kind="posting")
    data = test_client.post(
        f"/api/v1/ledgers/{ledger['id']}/lines", json={"item": RICE, "quantity": 1}, headers=cashier_headers
    ).json()
    line_url = f"/api/v1/ledgers/{ledger['id']}/lines/{data['lines'][0]['id']}"

    assert test_client.patch(line_url, json={"quantity": 4}, headers=cashier_headers).json()["subtotal_cents"] == 400
    assert test_client.delete(line_url, headers=cashier_headers).json()["lines"] == []

    listed = test_client.get("/api/v1/ledgers/", params={"kind": "posting"}, headers=cashier_headers).json()
    assert [l["id"] for l in listed] == [ledger["id"]]


def test_complete_cash_sale(test_client, cashier_headers):
    ledger = open_ledger(test_client, cashier_headers)
    test_client.post(f"/api/v1/ledgers/{ledger['id']}/lines", json={"item": RICE, "quantity": 2}, headers=cashier_headers)
    test_client.put(f"/api/v1/ledgers/{ledger['id']}/discount", json={"amount_cents": 20}, headers=cashier_headers)

    response = test_client.post(
        f"/api/v1/ledgers/{ledger['id']}/complete",
        json={"payment_method": "cash", "amount_received_cents": 500, "reference": "till-2", "notes": "Exact change short"},
        headers=cashier_headers
    )

    assert response.status_code == 200
    transaction = response.json()
    assert transaction["total_cents"] == 180
    assert transaction["change_cents"] == 320
    assert transaction["recorded_by"] == "Chidi Okeke"
    assert transaction["reference"] == "till-2"
    assert transaction["notes"] == "Exact change short"
    assert test_client.get(f"/api/v1/ledgers/{ledger['id']}", headers=cashier_headers).json()["finalized"] is True


def test_reason_presets(test_client, cashier_headers):
    presets = test_client.get("/api/v1/ledgers/reasons", headers=cashier_headers).json()
    assert "Customer changed mind" in presets["void"]
    assert "Out of stock" in presets["cancel"]
    assert "Promotional offer" in presets["complimentary"]
