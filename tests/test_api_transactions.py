# tests/test_api_transactions.py
from conftest import expense_category_id, new_account, signup


def _purchase(client, account_id, category_id, **extra):
    body = {
        "description": "Sofa",
        "amount": "300",
        "type": "EXPENSE",
        "date": "2025-01-10",
        "categoryId": category_id,
        "bankAccountId": account_id,
    }
    body.update(extra)
    return client.post("/transactions", json=body)


def _balance(client, account_id) -> float:
    return float(client.get(f"/bank-accounts/{account_id}").json()["currentBalance"])


def test_installment_series_over_http(client):
    signup(client)
    account = new_account(client)
    category = expense_category_id(client, "Housing")

    r = _purchase(client, account["id"], category, installments=3, isPaid=True)
    assert r.status_code == 201, r.text
    series = r.json()
    assert series["parent"]["currentInstallment"] == 0
    assert series["parent"]["description"] == "Sofa (3x)"
    assert [t["currentInstallment"] for t in series["installments"]] == [1, 2, 3]
    assert [t["date"] for t in series["installments"]] == [
        "2025-01-10",
        "2025-02-10",
        "2025-03-10",
    ]
    assert [t["isPaid"] for t in series["installments"]] == [True, False, False]
    assert _balance(client, account["id"]) == 900

    page = client.get("/transactions").json()
    assert page["pagination"] == {"total": 3, "page": 1, "limit": 50, "totalPages": 1}
    assert series["parent"]["id"] not in [t["id"] for t in page["transactions"]]

    detail = client.get(f"/transactions/{series['parent']['id']}").json()
    assert [c["currentInstallment"] for c in detail["childTransactions"]] == [1, 2, 3]

    first_id = series["installments"][0]["id"]
    one = client.delete(f"/transactions/{first_id}")
    assert one.json()["deletedCount"] == 1
    assert _balance(client, account["id"]) == 1000

    second_id = series["installments"][1]["id"]
    rest = client.delete(f"/transactions/{second_id}", params={"deleteAll": "true"})
    assert rest.status_code == 200
    assert rest.json()["deletedCount"] == 2
    assert client.get("/transactions").json()["pagination"]["total"] == 0
    assert client.get(f"/transactions/{series['parent']['id']}").status_code == 404


def test_toggle_paid_over_http(client):
    signup(client)
    account = new_account(client, initial="200")
    category = expense_category_id(client)
    txn = _purchase(client, account["id"], category, amount="45.50").json()

    r = client.patch(f"/transactions/{txn['id']}", json={"isPaid": True})
    assert r.status_code == 200
    assert r.json()["isPaid"] is True
    assert _balance(client, account["id"]) == 154.5

    client.patch(f"/transactions/{txn['id']}", json={"isPaid": False})
    assert _balance(client, account["id"]) == 200


def test_filters_and_pagination(client):
    signup(client)
    account = new_account(client)
    groceries = expense_category_id(client)
    for day in ("2025-03-01", "2025-03-02", "2025-03-03"):
        _purchase(client, account["id"], groceries, date=day, amount="10")
    _purchase(client, account["id"], groceries, date="2025-04-01", amount="10", isPaid=True)

    page = client.get("/transactions", params={"limit": 2, "page": 2}).json()
    assert page["pagination"]["totalPages"] == 2
    assert len(page["transactions"]) == 2

    march = client.get(
        "/transactions", params={"startDate": "2025-03-01", "endDate": "2025-03-31"}
    ).json()
    assert [t["date"] for t in march["transactions"]] == [
        "2025-03-03",
        "2025-03-02",
        "2025-03-01",
    ]
    paid = client.get("/transactions", params={"isPaid": "true"}).json()
    assert paid["pagination"]["total"] == 1

    assert client.get("/transactions", params={"limit": 500}).status_code == 400
    assert client.get("/transactions", params={"page": 0}).status_code == 400


def test_create_validation(client):
    signup(client)
    account = new_account(client)
    groceries = expense_category_id(client)

    no_target = client.post(
        "/transactions",
        json={"description": "X", "amount": "5", "type": "EXPENSE", "categoryId": groceries},
    )
    assert no_target.status_code == 400
    assert "bank account or a card" in no_target.json()["error"]

    assert _purchase(client, account["id"], groceries, amount="0").status_code == 400
    assert _purchase(client, account["id"], groceries, installments=61).status_code == 400
    assert _purchase(client, account["id"], 99999).status_code == 404


def test_transactions_are_private(make_client):
    ana = make_client()
    signup(ana)
    account = new_account(ana)
    txn = _purchase(ana, account["id"], expense_category_id(ana)).json()

    caio = make_client()
    signup(caio, name="Caio", email="caio@home.net")
    assert caio.get(f"/transactions/{txn['id']}").status_code == 404
    assert caio.get("/transactions").json()["pagination"]["total"] == 0
    assert caio.patch(f"/transactions/{txn['id']}", json={"isPaid": True}).status_code == 404


def test_amounts_finer_than_a_cent_are_refused(client):
    signup(client)
    account = new_account(client)
    groceries = expense_category_id(client)

    assert _purchase(client, account["id"], groceries, amount="0.004").status_code == 400
    tiny_series = _purchase(client, account["id"], groceries, amount="0.10", installments=60)
    assert tiny_series.status_code == 400
    assert "installments" in tiny_series.json()["error"]
    assert client.get("/transactions").json()["pagination"]["total"] == 0
