# tests/test_api_categories_budgets.py
from datetime import date

from conftest import expense_category_id, new_account, signup


def test_defaults_come_first_and_duplicates_conflict(client):
    signup(client)
    r = client.post("/categories", json={"name": "Kids", "type": "EXPENSE"})
    assert r.status_code == 201
    kids = r.json()
    assert kids["isDefault"] is False

    listed = client.get("/categories", params={"type": "EXPENSE"}).json()
    assert listed[-1]["id"] == kids["id"]
    assert all(c["isDefault"] for c in listed if c["id"] != kids["id"])

    dup = client.post("/categories", json={"name": "kids", "type": "EXPENSE"})
    assert dup.status_code == 400
    default_dup = client.post("/categories", json={"name": "Groceries", "type": "EXPENSE"})
    assert default_dup.status_code == 400
    # same name, other type is fine
    assert client.post("/categories", json={"name": "Kids", "type": "INCOME"}).status_code == 201


def test_default_categories_cannot_be_changed(client):
    signup(client)
    groceries = expense_category_id(client)
    assert client.patch(f"/categories/{groceries}", json={"name": "Food"}).status_code == 404
    assert client.delete(f"/categories/{groceries}").status_code == 404


def test_category_in_use_cannot_be_deleted(client):
    signup(client)
    account = new_account(client)
    pets = client.post("/categories", json={"name": "Vet", "type": "EXPENSE"}).json()
    client.post(
        "/transactions",
        json={
            "description": "Checkup",
            "amount": "90",
            "type": "EXPENSE",
            "categoryId": pets["id"],
            "bankAccountId": account["id"],
        },
    )
    r = client.delete(f"/categories/{pets['id']}")
    assert r.status_code == 400

    spare = client.post("/categories", json={"name": "Spare", "type": "EXPENSE"}).json()
    assert client.delete(f"/categories/{spare['id']}").status_code == 200


def test_budget_spent_counts_paid_expenses_of_the_month(client):
    signup(client)
    account = new_account(client)
    groceries = expense_category_id(client)
    today = date.today()

    r = client.post(
        "/budgets",
        json={
            "categoryId": groceries,
            "amount": "400",
            "month": today.month,
            "year": today.year,
        },
    )
    assert r.status_code == 201, r.text
    budget = r.json()

    def spend(amount, paid):
        client.post(
            "/transactions",
            json={
                "description": "Market",
                "amount": amount,
                "type": "EXPENSE",
                "date": today.isoformat(),
                "categoryId": groceries,
                "bankAccountId": account["id"],
                "isPaid": paid,
            },
        )

    spend("100", True)
    spend("50", True)
    spend("999", False)

    got = client.get(f"/budgets/{budget['id']}").json()
    assert float(got["spent"]) == 150
    assert float(got["remaining"]) == 250
    assert got["percentageUsed"] == 37.5
    assert got["category"]["id"] == groceries

    listed = client.get("/budgets", params={"month": today.month, "year": today.year}).json()
    assert [b["id"] for b in listed] == [budget["id"]]


def test_budget_rules(client):
    signup(client)
    groceries = expense_category_id(client)
    salary = next(
        c["id"]
        for c in client.get("/categories", params={"type": "INCOME"}).json()
        if c["name"] == "Salary"
    )
    body = {"categoryId": groceries, "amount": "100", "month": 5, "year": 2025}

    assert client.post("/budgets", json={**body, "month": 13}).status_code == 400
    assert client.post("/budgets", json={**body, "amount": "0"}).status_code == 400
    assert client.post("/budgets", json={**body, "categoryId": salary}).status_code == 404

    first = client.post("/budgets", json=body)
    assert first.status_code == 201
    assert client.post("/budgets", json=body).status_code == 400

    budget_id = first.json()["id"]
    r = client.patch(f"/budgets/{budget_id}", json={"amount": "250"})
    assert float(r.json()["amount"]) == 250
    assert client.delete(f"/budgets/{budget_id}").status_code == 200
    assert client.get(f"/budgets/{budget_id}").status_code == 404
