"""HTTP surface"""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from wholesale.core.config import settings
from wholesale.core.deps import get_db
from wholesale.main import app
from wholesale.services.account_locks import get_account_locks

API = settings.API_V1_STR
ADMIN = {"X-Admin-Token": settings.ADMIN_TOKEN}


@pytest.fixture
async def client(session_factory, locks):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_account_locks] = lambda: locks
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def as_account(account):
    return {"X-Account-Id": str(account.id)}


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestAccess:
    async def test_missing_identity(self, client):
        response = await client.get(f"{API}/orders/my-orders")
        assert response.status_code == 401

    async def test_unapproved_account(self, client, make_account):
        account = await make_account(status="pending")
        response = await client.get(f"{API}/orders/my-orders", headers=as_account(account))
        assert response.status_code == 403

    async def test_other_accounts_order_is_hidden(self, client, make_account, make_product):
        owner = await make_account()
        other = await make_account()
        product = await make_product()
        created = await client.post(
            f"{API}/orders/", headers=as_account(owner),
            json={"items": [{"product_id": product.id, "quantity": 1}]},
        )
        response = await client.get(f"{API}/orders/{created.json()['order_id']}", headers=as_account(other))
        assert response.status_code == 403


class TestPlaceOrder:
    async def test_place_and_read_back(self, client, make_account, make_product):
        account = await make_account()
        product = await make_product(base_price="10.00", tiers=[(10, 49, "9.00"), (50, None, "8.00")])

        response = await client.post(
            f"{API}/orders/", headers=as_account(account),
            json={
                "items": [{"product_id": product.id, "quantity": 10}],
                "payment_terms": "credit_net_30",
                "notes": "deliver before noon",
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["order_number"].startswith("ORD-")
        assert body["total_amount"] == 90.0

        detail = await client.get(f"{API}/orders/{body['order_id']}", headers=as_account(account))
        assert detail.status_code == 200
        order = detail.json()
        assert order["status"] == "pending"
        assert order["payment_terms"] == "credit_net_30"
        assert order["item_count"] == 1
        assert order["items"][0]["unit_price"] == 9.0
        assert order["items"][0]["tier_applied"] == product.tiers[0].id
        assert order["status_changes"][0]["to_status"] == "pending"

        summary = await client.get(f"{API}/credit/summary", headers=as_account(account))
        assert summary.json() == {"credit_limit": 1000.0, "credit_balance": 90.0, "available_credit": 910.0}

    async def test_credit_rejection_carries_diagnostics(self, client, make_account, make_product, add_ledger_entry):
        account = await make_account(credit_limit="1000.00")
        await add_ledger_entry(account.id, "credit_purchase", "800.00", "800.00")
        await add_ledger_entry(account.id, "payment", "200.00", "600.00")
        product = await make_product(base_price="100.00")

        response = await client.post(
            f"{API}/orders/", headers=as_account(account),
            json={"items": [{"product_id": product.id, "quantity": 5}], "payment_terms": "credit_net_60"},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["kind"] == "policy_violation"
        assert body["reason"] == "credit_exceeded"
        assert Decimal(body["available_credit"]) == Decimal("400")
        assert Decimal(body["order_total"]) == Decimal("500")

        orders = await client.get(f"{API}/orders/my-orders", headers=as_account(account))
        assert orders.json()["total"] == 0

    async def test_below_moq(self, client, make_account, make_product):
        account = await make_account()
        product = await make_product(moq=12)

        response = await client.post(
            f"{API}/orders/", headers=as_account(account),
            json={"items": [{"product_id": product.id, "quantity": 11}]},
        )

        assert response.status_code == 422
        assert response.json()["reason"] == "below_moq"
        assert response.json()["sku"] == product.sku

    async def test_unknown_product(self, client, make_account):
        account = await make_account()
        response = await client.post(
            f"{API}/orders/", headers=as_account(account),
            json={"items": [{"product_id": 777, "quantity": 1}]},
        )
        assert response.status_code == 404
        assert response.json()["product_id"] == 777

    @pytest.mark.parametrize("payload", [{}, {"items": []}, {"items": [{"product_id": 1}]}, {"items": "tea"}])
    async def test_malformed_cart(self, client, make_account, payload):
        account = await make_account()
        response = await client.post(f"{API}/orders/", headers=as_account(account), json=payload)
        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"


class TestOrderQueries:
    async def test_my_orders_and_reorder(self, client, make_account, make_product):
        account = await make_account()
        tea = await make_product(base_price="3.00")
        cups = await make_product(base_price="0.50", moq=50)
        headers = as_account(account)

        await client.post(f"{API}/orders/", headers=headers, json={"items": [{"product_id": tea.id, "quantity": 2}]})
        await client.post(f"{API}/orders/", headers=headers, json={"items": [
            {"product_id": tea.id, "quantity": 6},
            {"product_id": cups.id, "quantity": 50},
        ]})

        listing = (await client.get(f"{API}/orders/my-orders", headers=headers)).json()
        assert listing["total"] == 2
        assert [row["item_count"] for row in listing["data"]] == [2, 1]

        reorder = (await client.get(f"{API}/orders/reorder/last", headers=headers)).json()
        assert [(line["product_id"], line["quantity"]) for line in reorder] == [(tea.id, 6), (cups.id, 50)]
        assert reorder[1]["moq"] == 50

    async def test_reorder_without_history(self, client, make_account):
        account = await make_account()
        response = await client.get(f"{API}/orders/reorder/last", headers=as_account(account))
        assert response.status_code == 404


class TestAdminActions:
    async def test_status_change_requires_admin(self, client, make_account, make_product):
        account = await make_account()
        product = await make_product()
        created = (await client.post(
            f"{API}/orders/", headers=as_account(account),
            json={"items": [{"product_id": product.id, "quantity": 1}]},
        )).json()

        response = await client.patch(f"{API}/orders/{created['order_id']}/status", json={"status": "approved"})
        assert response.status_code == 403

        response = await client.patch(
            f"{API}/orders/{created['order_id']}/status", headers=ADMIN, json={"status": "approved"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert [c["to_status"] for c in response.json()["status_changes"]] == ["pending", "approved"]

        response = await client.patch(
            f"{API}/orders/{created['order_id']}/status", headers=ADMIN, json={"status": "delivered"}
        )
        assert response.status_code == 422
        assert response.json()["reason"] == "invalid_transition"

    async def test_record_payment(self, client, make_account, add_ledger_entry):
        account = await make_account(credit_limit="500.00")
        await add_ledger_entry(account.id, "credit_purchase", "320.00", "320.00")

        response = await client.post(
            f"{API}/credit/accounts/{account.id}/payments", headers=ADMIN,
            json={"amount": "120.00", "description": "bank transfer"},
        )
        assert response.status_code == 201
        assert response.json()["balance_after"] == 200.0

        ledger = (await client.get(f"{API}/credit/ledger", headers=as_account(account))).json()["data"]
        assert [entry["transaction_type"] for entry in ledger] == ["payment", "credit_purchase"]

    async def test_payment_for_unknown_account(self, client):
        response = await client.post(f"{API}/credit/accounts/999/payments", headers=ADMIN, json={"amount": 10})
        assert response.status_code == 404


class TestPricingPreview:
    async def test_calculate(self, client, make_account, make_product):
        account = await make_account()
        product = await make_product(base_price="10.00", tiers=[(10, 49, "9.00"), (50, None, "8.00")])

        response = await client.post(
            f"{API}/pricing/calculate", headers=as_account(account),
            json={"product_id": product.id, "quantity": 60},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["unit_price"] == 8.0
        assert body["subtotal"] == 480.0
        assert body["moq_met"] is True

    async def test_cart_total_reports_errors(self, client, make_account, make_product):
        account = await make_account()
        good = await make_product(base_price="2.50")
        bulky = await make_product(moq=10)

        response = await client.post(
            f"{API}/pricing/cart-total", headers=as_account(account),
            json={"items": [{"product_id": good.id, "quantity": 4}, {"product_id": bulky.id, "quantity": 1}]},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["subtotal"] == 10.0
        assert body["errors"][0]["reason"] == "below_moq"

        orders = await client.get(f"{API}/orders/my-orders", headers=as_account(account))
        assert orders.json()["total"] == 0

    async def test_cart_total(self, client, make_account, make_product):
        account = await make_account()
        product = await make_product(base_price="1.25")

        response = await client.post(
            f"{API}/pricing/cart-total", headers=as_account(account),
            json={"items": [{"product_id": product.id, "quantity": 8}]},
        )

        assert response.status_code == 200
        assert response.json()["total"] == 10.0
        assert response.json()["tax_amount"] == 0


class TestAdminOrderViews:
    @pytest.fixture
    async def two_orders(self, client, make_account, make_product):
        first = await make_account()
        second = await make_account()
        tea = await make_product(base_price="3.00")
        cups = await make_product(base_price="0.50")
        await client.post(f"{API}/orders/", headers=as_account(first), json={"items": [
            {"product_id": tea.id, "quantity": 2},
            {"product_id": cups.id, "quantity": 10},
        ]})
        created = await client.post(
            f"{API}/orders/", headers=as_account(second),
            json={"items": [{"product_id": tea.id, "quantity": 1}]},
        )
        return first, second, created.json()["order_id"]

    async def test_list_all_orders(self, client, two_orders):
        first, second, _ = two_orders

        response = await client.get(f"{API}/orders/", headers=ADMIN)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        rows = [(row["account_id"], row["business_name"], row["email"], row["item_count"]) for row in body["data"]]
        assert rows == [
            (second.id, second.business_name, second.email, 1),
            (first.id, first.business_name, first.email, 2),
        ]

    async def test_list_all_orders_by_status(self, client, two_orders):
        _, _, order_id = two_orders
        await client.patch(f"{API}/orders/{order_id}/status", headers=ADMIN, json={"status": "approved"})

        approved = (await client.get(f"{API}/orders/", headers=ADMIN, params={"status": "approved"})).json()
        assert [row["id"] for row in approved["data"]] == [order_id]
        assert approved["total"] == 1

        response = await client.get(f"{API}/orders/", headers=ADMIN, params={"status": "lost"})
        assert response.status_code == 400

    async def test_list_all_orders_requires_admin(self, client, two_orders):
        first, _, _ = two_orders
        response = await client.get(f"{API}/orders/", headers=as_account(first))
        assert response.status_code == 403

    async def test_admin_reads_any_order_with_its_account(self, client, two_orders):
        _, second, order_id = two_orders

        response = await client.get(f"{API}/orders/{order_id}", headers=ADMIN)

        assert response.status_code == 200
        account = response.json()["account"]
        assert account["id"] == second.id
        assert account["business_name"] == second.business_name
        assert account["email"] == second.email
        assert account["credit_limit"] == 1000.0

    async def test_owner_view_has_no_account_block(self, client, two_orders):
        _, second, order_id = two_orders
        response = await client.get(f"{API}/orders/{order_id}", headers=as_account(second))
        assert response.status_code == 200
        assert response.json()["account"] is None

    async def test_wrong_admin_token(self, client, two_orders):
        _, second, order_id = two_orders
        headers = {**as_account(second), "X-Admin-Token": "guess"}
        response = await client.get(f"{API}/orders/{order_id}", headers=headers)
        assert response.status_code == 403


async def test_oversized_quantity_is_a_validation_error(client, make_account, make_product):
    account = await make_account()
    product = await make_product()

    response = await client.post(
        f"{API}/orders/", headers=as_account(account),
        json={"items": [{"product_id": product.id, "quantity": settings.MAX_LINE_QUANTITY + 1}]},
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"
    assert response.json()["max_quantity"] == settings.MAX_LINE_QUANTITY
