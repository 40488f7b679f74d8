"""HTTP tests for /transactions and /categories."""

import uuid

import pytest


@pytest.fixture
def alice(client, make_user):
    user, headers = make_user()
    categories = client.get("/categories", headers=headers).json()["categories"]
    by_name = {c["name"]: c["id"] for c in categories}
    return user, headers, by_name


def post_txn(client, headers, category_id, **overrides):
    body = {
        "category_id": category_id,
        "direction": "EXPENSE",
        "amount": "12.50",
        "txn_date": "2026-01-03",
        "description": "Lunch",
    }
    body.update(overrides)
    return client.post("/transactions", json=body, headers=headers)


class TestCategories:
    def test_ordered_by_type_then_name(self, client, alice) -> None:
        _, headers, _ = alice

        categories = client.get("/categories", headers=headers).json()["categories"]

        assert [(c["type"], c["name"]) for c in categories] == [
            ("EXPENSE", "Bills"),
            ("EXPENSE", "Food"),
            ("EXPENSE", "Shopping"),
            ("EXPENSE", "Transport"),
            ("INCOME", "Bonus"),
            ("INCOME", "Salary"),
        ]


class TestCreate:
    def test_created(self, client, alice) -> None:
        _, headers, cats = alice

        res = post_txn(client, headers, cats["Food"])

        assert res.status_code == 201
        body = res.json()
        assert body["amount"] == "12.50"
        assert body["txn_date"] == "2026-01-03"
        assert body["direction"] == "EXPENSE"
        assert body["category"] == {"id": cats["Food"], "name": "Food", "type": "EXPENSE"}

    @pytest.mark.parametrize("amount", ["0", "-5", -5, 0])
    def test_non_positive_amount(self, client, alice, amount) -> None:
        _, headers, cats = alice

        res = post_txn(client, headers, cats["Food"], amount=amount)

        assert res.status_code == 400
        assert res.json()["field"] == "amount"
        assert client.get("/transactions", headers=headers).json()["transactions"] == []

    @pytest.mark.parametrize("amount", [[1], {"value": 1}, True, False])
    def test_non_scalar_or_boolean_amount_names_amount(self, client, alice, amount) -> None:
        """Lists, objects and booleans are rejected on the amount field, never coerced."""
        _, headers, cats = alice

        res = post_txn(client, headers, cats["Food"], amount=amount)

        assert res.status_code == 400
        assert res.json()["field"] == "amount"
        assert client.get("/transactions", headers=headers).json()["transactions"] == []

    @pytest.mark.parametrize("amount", ["99999999999999999.99", "1000000000000", 10**15])
    def test_amount_above_maximum(self, client, alice, amount) -> None:
        _, headers, cats = alice

        res = post_txn(client, headers, cats["Food"], amount=amount)

        assert res.status_code == 400
        assert res.json()["field"] == "amount"

    def test_largest_amount_is_stored_exactly(self, client, alice) -> None:
        _, headers, cats = alice

        res = post_txn(client, headers, cats["Food"], amount="999999999999.99")

        assert res.status_code == 201
        assert client.get(f"/transactions/{res.json()['id']}", headers=headers).json()["amount"] == "999999999999.99"

    def test_missing_category(self, client, alice) -> None:
        _, headers, _ = alice

        res = post_txn(client, headers, str(uuid.uuid4()))

        assert res.status_code == 400
        assert res.json() == {"error": "Category not found", "field": "category_id"}

    def test_someone_elses_category(self, client, alice, make_user) -> None:
        _, headers, _ = alice
        _, bob_headers = make_user(email="bob@example.com")
        bob_food = next(
            c["id"]
            for c in client.get("/categories", headers=bob_headers).json()["categories"]
            if c["name"] == "Food"
        )

        res = post_txn(client, headers, bob_food)

        assert res.status_code == 400
        assert res.json()["field"] == "category_id"


class TestReadUpdateDelete:
    def test_get_patch_delete(self, client, alice) -> None:
        _, headers, cats = alice
        created = post_txn(client, headers, cats["Food"]).json()
        url = f"/transactions/{created['id']}"

        assert client.get(url, headers=headers).json()["amount"] == "12.50"

        patched = client.patch(url, json={"amount": "20", "description": "Dinner"}, headers=headers)
        assert patched.status_code == 200
        assert patched.json()["amount"] == "20.00"
        assert patched.json()["description"] == "Dinner"
        assert patched.json()["txn_date"] == "2026-01-03"

        assert client.delete(url, headers=headers).status_code == 204
        missing = client.get(url, headers=headers)
        assert missing.status_code == 404
        assert missing.json() == {"error": "Transaction not found", "field": None}

    def test_empty_patch(self, client, alice) -> None:
        _, headers, cats = alice
        created = post_txn(client, headers, cats["Food"]).json()

        res = client.patch(f"/transactions/{created['id']}", json={}, headers=headers)

        assert res.status_code == 400
        assert res.json()["error"] == "No fields to update"

    def test_other_user_sees_404(self, client, alice, make_user) -> None:
        _, headers, cats = alice
        _, bob_headers = make_user(email="bob@example.com")
        created = post_txn(client, headers, cats["Food"]).json()
        url = f"/transactions/{created['id']}"

        assert client.get(url, headers=bob_headers).status_code == 404
        assert client.patch(url, json={"amount": "1"}, headers=bob_headers).status_code == 404
        assert client.delete(url, headers=bob_headers).status_code == 404
        assert client.get(url, headers=headers).json()["amount"] == "12.50"

    def test_malformed_id(self, client, alice) -> None:
        _, headers, _ = alice

        res = client.get("/transactions/not-a-uuid", headers=headers)

        assert res.status_code == 400
        assert res.json()["field"] == "transaction_id"


class TestPaging:
    def test_walks_every_row_once(self, client, alice) -> None:
        _, headers, cats = alice
        for day in ["2026-01-01", "2026-01-02", "2026-01-02", "2026-01-03", "2026-01-05"]:
            post_txn(client, headers, cats["Food"], txn_date=day)

        seen = []
        params = {"take": 2}
        while True:
            body = client.get("/transactions", params=params, headers=headers).json()
            seen.extend(t["id"] for t in body["transactions"])
            info = body["page_info"]
            if not info["has_next_page"]:
                assert info["next_cursor"] is None
                break
            params = {"take": 2, "cursor": info["next_cursor"]}

        assert len(seen) == len(set(seen)) == 5

    def test_newest_first(self, client, alice) -> None:
        _, headers, cats = alice
        for day in ["2026-01-02", "2026-01-05", "2026-01-01"]:
            post_txn(client, headers, cats["Food"], txn_date=day)

        body = client.get("/transactions", headers=headers).json()

        assert [t["txn_date"] for t in body["transactions"]] == ["2026-01-05", "2026-01-02", "2026-01-01"]
        assert body["page_info"] == {"take": 20, "next_cursor": None, "has_next_page": False}

    def test_bad_cursor(self, client, alice) -> None:
        _, headers, _ = alice

        res = client.get("/transactions", params={"cursor": "nope"}, headers=headers)

        assert res.status_code == 400
        assert res.json()["field"] == "cursor"


class TestSummary:
    def test_summary_with_inclusive_to(self, client, alice) -> None:
        _, headers, cats = alice
        post_txn(client, headers, cats["Salary"], direction="INCOME", amount="1000.00", txn_date="2026-01-01")
        post_txn(client, headers, cats["Food"], amount="12.50", txn_date="2026-01-03")
        post_txn(client, headers, cats["Transport"], amount="2.20", txn_date="2026-01-03")
        post_txn(client, headers, cats["Food"], amount="99.00", txn_date="2026-01-04")

        res = client.get(
            "/transactions/summary",
            params={"from": "2026-01-01", "to": "2026-01-03"},
            headers=headers,
        )

        assert res.status_code == 200
        body = res.json()
        assert body["direction"] == "EXPENSE"
        assert body["range"] == {"from": "2026-01-01", "to": "2026-01-03"}
        assert [(i["category_name"], i["total"]) for i in body["items"]] == [("Food", "12.50"), ("Transport", "2.20")]
        assert body["grand_total"] == "14.70"

    def test_income_direction(self, client, alice) -> None:
        _, headers, cats = alice
        post_txn(client, headers, cats["Salary"], direction="INCOME", amount="1000.00")

        body = client.get("/transactions/summary", params={"direction": "INCOME"}, headers=headers).json()

        assert body["grand_total"] == "1000.00"
        assert body["items"][0]["category_type"] == "INCOME"

    @pytest.mark.parametrize(
        "params,field",
        [({"from": "2026/01/01"}, "from"), ({"to": "x"}, "to"), ({"direction": "SIDEWAYS"}, "direction")],
    )
    def test_bad_query(self, client, alice, params, field) -> None:
        _, headers, _ = alice

        res = client.get("/transactions/summary", params=params, headers=headers)

        assert res.status_code == 400
        assert res.json()["field"] == field
