from __future__ import annotations

from finance_api.models import CashTransaction, Cost, PendingCost, SalaryPayment, WalletTransaction

HEADERS = {"X-Brand-Id": "brand-a", "X-User-Id": "user-admin"}
OTHER_BRAND = {"X-Brand-Id": "brand-b", "X-User-Id": "user-other"}


def create_employee(client, name="Mona Adel") -> str:
    response = client.post(
        "/employees",
        json={"name": name, "monthly_salary": 5000, "start_date": "2024-01-01"},
        headers=HEADERS,
    )
    assert response.status_code == 201
    return response.json()["id"]


def create_basic_wallet(client, opening_balance=20000, monthly_budget=None) -> str:
    payload = {"name": "Main", "type": "bank", "opening_balance": opening_balance, "is_basic": True}
    if monthly_budget is not None:
        payload["monthly_budget"] = monthly_budget
    response = client.post("/wallets", json=payload, headers=HEADERS)
    assert response.status_code == 201
    return response.json()["id"]


def submit_payment(client, employee_id, amount=5000, payment_date="2025-03-15") -> dict:
    response = client.post(
        "/salary-payments",
        json={
            "employee_id": employee_id,
            "amount": amount,
            "payment_date": payment_date,
            "period_month": "March 2025",
        },
        headers=HEADERS,
    )
    assert response.status_code == 201
    return response.json()


def decide(client, pending_cost_id, action, headers=HEADERS):
    return client.patch(f"/pending-costs/{pending_cost_id}", json={"action": action}, headers=headers)


def wallet_balance(client, wallet_id) -> float:
    wallets = client.get("/wallets", headers=HEADERS).json()
    return next(w["current_balance"] for w in wallets if w["id"] == wallet_id)


def test_requests_without_tenant_are_rejected(client):
    assert client.get("/pending-costs").status_code == 401
    assert client.get("/pending-costs", headers={"X-User-Id": "u"}).status_code == 400


def test_submission_queues_pending_cost_and_notifies(client):
    employee_id = create_employee(client)

    submitted = submit_payment(client, employee_id)

    pending = client.get("/pending-costs", headers=HEADERS).json()
    assert [p["id"] for p in pending] == [submitted["pending_cost_id"]]
    assert pending[0]["category"] == "salaries"
    assert pending[0]["employee_name"] == "Mona Adel"
    assert pending[0]["description"] == "Salary payment for Mona Adel - March 2025"

    notifications = client.get("/notifications", headers=HEADERS).json()
    assert [n["title"] for n in notifications] == ["Pending Salary Payment"]
    assert client.get("/pending-costs", headers=OTHER_BRAND).json() == []


def test_submission_for_unknown_employee_is_404(client):
    response = client.post(
        "/salary-payments",
        json={"employee_id": "nobody", "amount": 10, "payment_date": "2025-03-01", "period_month": "March"},
        headers=HEADERS,
    )

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_approval_scenario_books_every_ledger_row(client, session):
    employee_id = create_employee(client)
    wallet_id = create_basic_wallet(client, opening_balance=20000, monthly_budget=6000)

    warmup = submit_payment(client, employee_id, amount=500, payment_date="2025-03-02")
    first = decide(client, warmup["pending_cost_id"], "approve")
    assert first.status_code == 200
    assert first.json()["notifications"] == 0

    submitted = submit_payment(client, employee_id, amount=5000, payment_date="2025-03-15")
    response = decide(client, submitted["pending_cost_id"], "approve")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["action"] == "approved"
    assert body["notifications"] == 1
    assert wallet_balance(client, wallet_id) == 14500

    payment = session.get(SalaryPayment, submitted["salary_payment_id"])
    assert payment.cash_transaction_id == body["cash_transaction_id"]
    cash_tx = session.get(CashTransaction, body["cash_transaction_id"])
    assert float(cash_tx.amount) == -5000
    assert (cash_tx.section, cash_tx.category) == ("operating", "salaries")
    assert cash_tx.reference_id == submitted["salary_payment_id"]

    cost = session.get(Cost, body["cost_id"])
    assert float(cost.amount) == 5000
    assert cost.category == "operational"

    deductions = (
        session.query(WalletTransaction)
        .filter(WalletTransaction.transaction_type == "cost_deduction")
        .order_by(WalletTransaction.transaction_date.asc())
        .all()
    )
    assert [float(tx.amount) for tx in deductions] == [500, 5000]

    pending = session.get(PendingCost, submitted["pending_cost_id"])
    assert pending.status == "approved"
    assert pending.approved_by == "user-admin"

    titles = [n["title"] for n in client.get("/notifications", headers=HEADERS).json()]
    assert "Monthly Budget Low Warning" in titles


def test_reprocessing_is_conflict_without_new_rows(client, session):
    employee_id = create_employee(client)
    create_basic_wallet(client)
    submitted = submit_payment(client, employee_id)
    assert decide(client, submitted["pending_cost_id"], "approve").status_code == 200

    again = decide(client, submitted["pending_cost_id"], "decline")

    assert again.status_code == 409
    assert again.json()["code"] == "ALREADY_PROCESSED"
    assert session.query(Cost).count() == 1
    assert session.query(CashTransaction).count() == 1
    assert session.query(WalletTransaction).filter(WalletTransaction.transaction_type == "cost_deduction").count() == 1


def test_decline_deletes_payment(client, session):
    employee_id = create_employee(client)
    wallet_id = create_basic_wallet(client)
    submitted = submit_payment(client, employee_id)

    response = decide(client, submitted["pending_cost_id"], "decline")

    assert response.status_code == 200
    assert response.json()["action"] == "declined"
    assert session.get(SalaryPayment, submitted["salary_payment_id"]) is None
    assert session.get(PendingCost, submitted["pending_cost_id"]).status == "declined"
    assert session.query(Cost).count() == 0
    assert session.query(CashTransaction).count() == 0
    assert wallet_balance(client, wallet_id) == 20000
    assert client.get("/pending-costs", headers=HEADERS).json() == []


def test_approval_without_basic_wallet(client, session):
    employee_id = create_employee(client)
    submitted = submit_payment(client, employee_id, amount=700)

    response = decide(client, submitted["pending_cost_id"], "approve")

    assert response.status_code == 200
    assert session.query(Cost).count() == 1
    assert session.query(CashTransaction).count() == 1
    assert session.query(WalletTransaction).count() == 0


def test_bad_action_and_foreign_tenant(client):
    employee_id = create_employee(client)
    submitted = submit_payment(client, employee_id)

    bad = decide(client, submitted["pending_cost_id"], "archive")
    foreign = decide(client, submitted["pending_cost_id"], "approve", headers=OTHER_BRAND)
    missing = decide(client, "does-not-exist", "approve")

    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid action"
    assert foreign.status_code == 404
    assert missing.status_code == 404


def test_brand_budget_alert(client):
    employee_id = create_employee(client)
    assert client.post(
        "/monthly-budgets", json={"month": "2025-03", "budget_limit": 1000}, headers=HEADERS
    ).status_code == 200

    first = submit_payment(client, employee_id, amount=900)
    assert decide(client, first["pending_cost_id"], "approve").json()["notifications"] == 0
    second = submit_payment(client, employee_id, amount=150)
    assert decide(client, second["pending_cost_id"], "approve").json()["notifications"] == 1

    titles = [n["title"] for n in client.get("/notifications", headers=HEADERS).json()]
    assert titles.count("Monthly Budget Exceeded") == 1


def test_cash_flow_report_sums_salaries(client):
    employee_id = create_employee(client)
    for amount in (1000, 2500):
        submitted = submit_payment(client, employee_id, amount=amount)
        decide(client, submitted["pending_cost_id"], "approve")

    report = client.get("/reports/cash-flow", params={"month": "2025-03"}, headers=HEADERS).json()

    assert report["lines"] == [{"section": "operating", "category": "salaries", "amount": -3500.0}]
    assert report["sections"]["operating"] == -3500.0
    assert report["net_cash_flow"] == -3500.0
    assert client.get("/reports/cash-flow", params={"month": "2025-13"}, headers=HEADERS).status_code == 400


def test_pending_payment_can_be_revised(client, session):
    employee_id = create_employee(client)
    submitted = submit_payment(client, employee_id, amount=5000)

    response = client.put(
        f"/salary-payments/{submitted['salary_payment_id']}",
        json={"amount": 5200, "payment_date": "2025-03-30", "period_month": "March 2025 (final)"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["amount"] == 5200
    pending = client.get("/pending-costs", headers=HEADERS).json()[0]
    assert pending["amount"] == 5200
    assert pending["payment_date"] == "2025-03-30"
    assert pending["description"] == "Salary payment for Mona Adel - March 2025 (final)"
    assert float(session.get(SalaryPayment, submitted["salary_payment_id"]).amount) == 5200


def test_pending_payment_can_be_withdrawn(client, session):
    employee_id = create_employee(client)
    submitted = submit_payment(client, employee_id)

    response = client.delete(f"/salary-payments/{submitted['salary_payment_id']}", headers=HEADERS)

    assert response.status_code == 204
    assert session.get(SalaryPayment, submitted["salary_payment_id"]) is None
    assert session.get(PendingCost, submitted["pending_cost_id"]).status == "declined"
    assert client.get("/pending-costs", headers=HEADERS).json() == []
    assert decide(client, submitted["pending_cost_id"], "approve").status_code == 409


def test_processed_payment_is_frozen(client, session):
    employee_id = create_employee(client)
    submitted = submit_payment(client, employee_id)
    decide(client, submitted["pending_cost_id"], "approve")
    url = f"/salary-payments/{submitted['salary_payment_id']}"

    revised = client.put(
        url, json={"amount": 1, "payment_date": "2025-03-15", "period_month": "March"}, headers=HEADERS
    )
    withdrawn = client.delete(url, headers=HEADERS)

    assert revised.status_code == 409
    assert withdrawn.status_code == 409
    assert float(session.get(SalaryPayment, submitted["salary_payment_id"]).amount) == 5000
    assert client.delete("/salary-payments/missing", headers=HEADERS).status_code == 404


def test_deactivated_basic_wallet_is_not_debited(client, session):
    employee_id = create_employee(client)
    wallet_id = create_basic_wallet(client)
    assert client.patch(f"/wallets/{wallet_id}", json={"is_active": False}, headers=HEADERS).status_code == 200
    submitted = submit_payment(client, employee_id, amount=800)

    assert decide(client, submitted["pending_cost_id"], "approve").status_code == 200

    assert wallet_balance(client, wallet_id) == 20000
    assert session.query(WalletTransaction).filter(WalletTransaction.transaction_type == "cost_deduction").count() == 0
    assert session.query(CashTransaction).count() == 1
