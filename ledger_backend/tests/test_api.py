"""
HTTP API tests: status codes and response envelopes.
"""

import logging

import pytest


async def create_supplier(client, **overrides):
    payload = {
        "kind": "supplier",
        "code": "SUP-100",
        "name": "Atlas Wholesale",
        "opening_balance": 500,
        "opening_sign": "credit",
        "opening_date": "2024-01-01",
    }
    payload.update(overrides)
    return await client.post("/v1/accounts", json=payload)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Correlation-ID" in response.headers


@pytest.mark.asyncio
async def test_create_and_get_account(client):
    response = await create_supplier(client)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["signed_balance"] == 500.0
    assert body["data"]["balance_sign"] == "credit"

    account_id = body["data"]["id"]
    response = await client.get(f"/v1/accounts/{account_id}")
    assert response.status_code == 200
    assert response.json()["data"]["code"] == "SUP-100"


@pytest.mark.asyncio
async def test_duplicate_account_conflict(client):
    await create_supplier(client)
    response = await create_supplier(client, name="Other")

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "DUPLICATE_ENTRY"


@pytest.mark.asyncio
async def test_record_payment_flow(client):
    account_id = (await create_supplier(client)).json()["data"]["id"]

    response = await client.post(
        f"/v1/accounts/{account_id}/payments",
        json={"amount": 200, "date": "2024-02-01", "method": "cash", "reference": "R-1"}
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["balance_after"] == 300.0
    assert data["amount"] == 200.0
    assert data["ledger_entry_id"] > 0

    ledger = (await client.get(f"/v1/accounts/{account_id}/ledger")).json()["data"]
    assert [e["type"] for e in ledger] == ["initial_balance", "payment"]
    assert ledger[-1]["debit"] == 200.0
    assert ledger[-1]["balance_after"] == 300.0

    payments = (await client.get(f"/v1/accounts/{account_id}/payments")).json()["data"]
    assert len(payments) == 1

    balance = (await client.get(f"/v1/accounts/{account_id}/balance")).json()["data"]
    assert balance == {
        "account_id": account_id,
        "balance": 300.0,
        "balance_sign": "credit",
        "stored_balance": 300.0,
        "ledger_balance": 300.0,
        "consistent": True,
        "currency": "DZD",
    }


@pytest.mark.asyncio
async def test_post_movement_and_filter(client):
    account_id = (await create_supplier(client)).json()["data"]["id"]

    response = await client.post(
        f"/v1/accounts/{account_id}/ledger",
        json={"type": "purchase", "amount": 120.5, "date": "2024-02-03", "reference": "INV-3"}
    )
    assert response.status_code == 201
    assert response.json()["data"]["balance_after"] == 620.5

    filtered = await client.get(f"/v1/accounts/{account_id}/ledger", params={"q": "inv"})
    assert [e["reference"] for e in filtered.json()["data"]] == ["INV-3"]

    dated = await client.get(f"/v1/accounts/{account_id}/ledger", params={"date_to": "2024-01-31"})
    assert [e["type"] for e in dated.json()["data"]] == ["initial_balance"]


@pytest.mark.asyncio
async def test_movement_for_wrong_kind(client):
    account_id = (await create_supplier(client)).json()["data"]["id"]
    response = await client.post(
        f"/v1/accounts/{account_id}/ledger",
        json={"type": "sale", "amount": 10, "date": "2024-02-03"}
    )
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -50])
async def test_payment_with_bad_amount(client, amount):
    account_id = (await create_supplier(client)).json()["data"]["id"]
    response = await client.post(
        f"/v1/accounts/{account_id}/payments",
        json={"amount": amount, "date": "2024-02-01", "method": "cash"}
    )
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]["errors"][0]["loc"] == ["body", "amount"]

    payments = (await client.get(f"/v1/accounts/{account_id}/payments")).json()["data"]
    assert payments == []


@pytest.mark.asyncio
async def test_unknown_account_not_found(client):
    response = await client.post(
        "/v1/accounts/9999/payments",
        json={"amount": 10, "date": "2024-02-01", "method": "cash"}
    )
    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "NOT_FOUND"
    assert body["details"] == {"resource": "Account", "id": 9999}

    response = await client.get("/v1/accounts/9999/balance")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_and_delete_accounts(client):
    supplier_id = (await create_supplier(client)).json()["data"]["id"]
    await client.post("/v1/accounts", json={"kind": "client", "code": "CLI-1", "name": "Boutique"})

    clients = (await client.get("/v1/accounts", params={"kind": "client"})).json()["data"]
    assert [c["code"] for c in clients] == ["CLI-1"]

    response = await client.delete(f"/v1/accounts/{supplier_id}")
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = await client.get(f"/v1/accounts/{supplier_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/v1/nowhere")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_huge_payment_rejected_as_invalid_input(client):
    account_id = (await create_supplier(client)).json()["data"]["id"]
    response = await client.post(
        f"/v1/accounts/{account_id}/payments",
        json={"amount": 1e30, "date": "2024-02-01", "method": "cash"}
    )
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_accounts_summary(client):
    await create_supplier(client)
    await client.post("/v1/accounts", json={
        "kind": "client", "code": "CLI-1", "name": "Boutique",
        "opening_balance": 120, "opening_sign": "debit", "opening_date": "2024-01-01"
    })

    response = await client.get("/v1/accounts/summary")
    assert response.status_code == 200
    assert response.json()["data"] == {
        "client_count": 1,
        "supplier_count": 1,
        "client_debt": 120.0,
        "supplier_debt": 500.0,
        "currency": "DZD",
    }


@pytest.mark.asyncio
async def test_request_log_carries_account_id(client, caplog):
    account_id = (await create_supplier(client)).json()["data"]["id"]

    with caplog.at_level(logging.INFO, logger="commerce_ledger"):
        response = await client.get(
            f"/v1/accounts/{account_id}/balance", headers={"X-Correlation-ID": "trace-42"}
        )

    assert response.headers["X-Correlation-ID"] == "trace-42"
    records = [r for r in caplog.records if getattr(r, "correlation_id", None) == "trace-42"]
    assert len(records) == 1
    assert records[0].account_id == str(account_id)
    assert records[0].status_code == 200


@pytest.mark.asyncio
async def test_error_envelope_documented(client):
    schema = (await client.get("/openapi.json")).json()
    assert "ErrorEnvelope" in schema["components"]["schemas"]
    responses = schema["paths"]["/v1/accounts/{account_id}/payments"]["post"]["responses"]
    assert responses["404"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorEnvelope")
