from __future__ import annotations

from datetime import date
from decimal import Decimal

from finance_api.models import Employee, MonthlyBudget, Wallet, WalletTransaction, WalletTransfer
from finance_api.seed.seed_data import seed

HEADERS = {"X-Brand-Id": "brand-a", "X-User-Id": "user-admin"}
OTHER_BRAND = {"X-Brand-Id": "brand-b", "X-User-Id": "user-other"}


def create_wallet(client, name, opening_balance=0, **extra) -> dict:
    payload = {"name": name, "type": "cash", "opening_balance": opening_balance, **extra}
    response = client.post("/wallets", json=payload, headers=HEADERS)
    assert response.status_code == 201
    return response.json()


def test_opening_balance_is_booked_as_a_transaction(client):
    wallet = create_wallet(client, "Safe", opening_balance=1500)

    assert wallet["current_balance"] == 1500
    history = client.get(f"/wallets/{wallet['id']}/transactions", headers=HEADERS).json()
    assert [(tx["transaction_type"], tx["amount"]) for tx in history] == [("add", 1500.0)]


def test_only_one_basic_wallet_per_brand(client):
    first = create_wallet(client, "Old main", is_basic=True)
    second = create_wallet(client, "New main", is_basic=True)

    wallets = {w["id"]: w for w in client.get("/wallets", headers=HEADERS).json()}
    assert wallets[first["id"]]["is_basic"] is False
    assert wallets[second["id"]]["is_basic"] is True
    assert client.get("/wallets", headers=OTHER_BRAND).json() == []


def test_add_and_deduct_update_balance(client):
    wallet = create_wallet(client, "Safe", opening_balance=1000)
    url = f"/wallets/{wallet['id']}/transactions"

    added = client.post(
        url, json={"amount": 250, "transaction_type": "add", "transaction_date": "2025-03-01"}, headers=HEADERS
    )
    deducted = client.post(
        url,
        json={"amount": 400, "transaction_type": "deduct", "transaction_date": "2025-03-02", "description": "Fuel"},
        headers=HEADERS,
    )

    assert added.status_code == 201
    assert added.json()["current_balance"] == 1250
    assert deducted.json()["current_balance"] == 850
    history = client.get(url, headers=HEADERS).json()
    # newest first; the opening balance is booked today
    assert [(tx["description"], tx["transaction_type"]) for tx in history] == [
        ("Opening balance", "add"),
        ("Fuel", "deduct"),
        ("Add", "add"),
    ]


def test_transactions_on_unknown_wallet(client):
    response = client.post(
        "/wallets/missing/transactions",
        json={"amount": 10, "transaction_type": "add", "transaction_date": "2025-03-01"},
        headers=HEADERS,
    )

    assert response.status_code == 404
    assert response.json()["code"] == "WALLET_NOT_FOUND"
    assert client.get("/wallets/missing/transactions", headers=HEADERS).status_code == 404


def test_transfer_moves_funds(client, session):
    source = create_wallet(client, "Bank", opening_balance=5000)
    target = create_wallet(client, "Petty", opening_balance=100)

    response = client.post(
        "/wallets/transfers",
        json={
            "from_wallet_id": source["id"],
            "to_wallet_id": target["id"],
            "amount": 1200,
            "transfer_date": "2025-03-05",
        },
        headers=HEADERS,
    )

    assert response.status_code == 201
    body = response.json()
    assert (body["from_balance"], body["to_balance"]) == (3800, 1300)
    transfer = session.get(WalletTransfer, body["transfer_id"])
    assert transfer.amount == Decimal("1200")
    legs = (
        session.query(WalletTransaction)
        .filter(WalletTransaction.reference_id == body["transfer_id"])
        .all()
    )
    assert sorted(tx.transaction_type for tx in legs) == ["transfer_in", "transfer_out"]


def test_transfer_rejections(client, session):
    source = create_wallet(client, "Bank", opening_balance=50)
    target = create_wallet(client, "Petty")

    def transfer(from_id, to_id, amount):
        return client.post(
            "/wallets/transfers",
            json={"from_wallet_id": from_id, "to_wallet_id": to_id, "amount": amount, "transfer_date": "2025-03-05"},
            headers=HEADERS,
        )

    short = transfer(source["id"], target["id"], 75)
    same = transfer(source["id"], source["id"], 10)
    unknown = transfer(source["id"], "missing", 10)

    assert short.status_code == 400
    assert short.json()["code"] == "INSUFFICIENT_FUNDS"
    assert same.status_code == 400
    assert unknown.status_code == 404
    assert session.query(WalletTransfer).count() == 0
    assert session.get(Wallet, source["id"]).current_balance == Decimal("50")


def test_monthly_budget_upsert(client):
    first = client.post("/monthly-budgets", json={"month": "2025-03", "budget_limit": 1000}, headers=HEADERS)
    second = client.post("/monthly-budgets", json={"month": "2025-03", "budget_limit": 1800}, headers=HEADERS)
    bad = client.post("/monthly-budgets", json={"month": "March", "budget_limit": 10}, headers=HEADERS)

    assert first.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert bad.status_code == 422
    budgets = client.get("/monthly-budgets", params={"month": "2025-03"}, headers=HEADERS).json()
    assert budgets == [{"id": first.json()["id"], "month": "2025-03", "budget_limit": 1800.0}]


def test_notifications_read_and_delete(client):
    employee = client.post(
        "/employees", json={"name": "Salma", "monthly_salary": 3000, "start_date": "2024-05-01"}, headers=HEADERS
    ).json()
    client.post(
        "/salary-payments",
        json={"employee_id": employee["id"], "amount": 3000, "payment_date": "2025-03-28", "period_month": "March"},
        headers=HEADERS,
    )
    notification = client.get("/notifications", headers=HEADERS).json()[0]
    assert notification["read"] is False
    assert notification["action_url"] == "/costs"

    url = f"/notifications/{notification['id']}"
    assert client.patch(url, json={"read": True}, headers=OTHER_BRAND).status_code == 404
    assert client.patch(url, json={"read": True}, headers=HEADERS).json()["read"] is True
    assert client.delete(url, headers=OTHER_BRAND).status_code == 404
    assert client.delete(url, headers=HEADERS).status_code == 204
    assert client.get("/notifications", headers=HEADERS).json() == []


def test_seed_populates_demo_brand(session):
    seed(session, brand_id="demo")

    assert session.query(Employee).filter(Employee.brand_id == "demo").count() == 2
    wallets = {w.name: w for w in session.query(Wallet).filter(Wallet.brand_id == "demo").all()}
    assert wallets["Main bank account"].is_basic is True
    assert wallets["Main bank account"].current_balance == Decimal("100000")
    assert wallets["Petty cash"].current_balance == Decimal("2500")
    assert session.query(WalletTransaction).filter(WalletTransaction.brand_id == "demo").count() == 2
    budget = session.query(MonthlyBudget).filter(MonthlyBudget.brand_id == "demo").one()
    assert budget.month == date.today().strftime("%Y-%m")


def test_patch_wallet_redesignates_basic_and_renames(client):
    old = create_wallet(client, "Old main", is_basic=True)
    reserve = create_wallet(client, "Reserve")

    response = client.patch(f"/wallets/{reserve['id']}", json={"is_basic": True, "name": " Main "}, headers=HEADERS)
    deactivated = client.patch(f"/wallets/{old['id']}", json={"is_active": False}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["name"] == "Main"
    assert response.json()["is_basic"] is True
    assert deactivated.json()["is_active"] is False
    assert deactivated.json()["is_basic"] is False
    assert client.patch(f"/wallets/{old['id']}", json={"name": "x"}, headers=OTHER_BRAND).status_code == 404


def test_patch_wallet_balance_goes_through_ledger(client):
    wallet = create_wallet(client, "Safe", opening_balance=1000)

    response = client.patch(f"/wallets/{wallet['id']}", json={"current_balance": 700}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["current_balance"] == 700
    history = client.get(f"/wallets/{wallet['id']}/transactions", headers=HEADERS).json()
    adjustments = [tx for tx in history if tx["description"] == "Balance adjustment"]
    assert [(tx["transaction_type"], tx["amount"]) for tx in adjustments] == [("deduct", 300.0)]


def test_delete_wallet(client, session):
    unused = create_wallet(client, "Spare")
    used = create_wallet(client, "Safe", opening_balance=10)

    assert client.delete(f"/wallets/{unused['id']}", headers=OTHER_BRAND).status_code == 404
    assert client.delete(f"/wallets/{unused['id']}", headers=HEADERS).status_code == 204
    refused = client.delete(f"/wallets/{used['id']}", headers=HEADERS)

    assert refused.status_code == 400
    assert refused.json()["code"] == "INVALID_ARGUMENT"
    assert session.get(Wallet, unused["id"]) is None
    assert session.get(Wallet, used["id"]) is not None
