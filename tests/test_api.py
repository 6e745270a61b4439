"""
End-to-end tests for the Flask REST API.
"""

import pytest

from privfinos import __version__

pytestmark = pytest.mark.integration

MISSING_ID = "00000000-0000-4000-8000-000000000000"


def create(client, path, payload):
    response = client.post(path, json=payload)
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    assert body["success"] is True
    return body["data"]


class TestMeta:
    """API root and health check."""

    def test_api_root(self, client):
        response = client.get("/api")
        assert response.status_code == 200
        assert response.get_json() == {
            "name": "PrivFinOS API",
            "version": __version__,
            "status": "running",
        }

    def test_health(self, client):
        body = client.get("/api/health").get_json()
        assert body["status"] == "ok"
        assert body["version"] == __version__
        assert body["timestamp"]

    def test_cors_headers(self, client):
        response = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    def test_services_registered(self, app):
        assert set(app.extensions["privfinos"]) == {"categories", "accounts", "transactions"}

    def test_no_static_route(self, app):
        assert app.static_folder is None
        assert [rule.rule for rule in app.url_map.iter_rules() if not rule.rule.startswith("/api")] == []


class TestCategoryFlow:
    """Create, read, soft delete, hard delete over HTTP."""

    def test_rent_lifecycle(self, client):
        rent = create(client, "/api/categories", {"name": "Rent", "type": "EXPENSE"})
        assert rent["id"]
        assert rent["sortOrder"] == 0
        assert rent["isActive"] is True
        assert rent["parentId"] is None

        fetched = client.get(f"/api/categories/{rent['id']}").get_json()
        assert fetched == {"success": True, "data": rent}

        soft = client.delete(f"/api/categories/{rent['id']}").get_json()
        assert soft["data"]["isActive"] is False

        hard = client.delete(f"/api/categories/{rent['id']}/hard")
        assert hard.status_code == 200
        assert hard.get_json()["data"] == {
            "success": True,
            "message": "Category permanently deleted",
        }

        missing = client.get(f"/api/categories/{rent['id']}")
        assert missing.status_code == 404
        assert missing.get_json() == {
            "success": False,
            "error": {"message": "Category not found", "code": "CATEGORY_NOT_FOUND"},
        }

    def test_update_category(self, client):
        food = create(client, "/api/categories", {"name": "Food", "type": "EXPENSE"})

        response = client.put(f"/api/categories/{food['id']}", json={"name": "Food & Dining", "color": "#84cc16"})
        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["name"] == "Food & Dining"
        assert data["color"] == "#84cc16"

    def test_own_parent_rejected(self, client):
        loop = create(client, "/api/categories", {"name": "Loop", "type": "EXPENSE"})

        response = client.put(f"/api/categories/{loop['id']}", json={"parentId": loop["id"]})
        assert response.status_code == 400
        assert response.get_json()["error"] == {
            "message": "Category cannot be its own parent",
            "code": "INVALID_PARENT",
        }

    def test_list_filters(self, client):
        housing = create(client, "/api/categories", {"name": "Housing", "type": "EXPENSE"})
        create(client, "/api/categories", {"name": "Rent", "type": "EXPENSE", "parentId": housing["id"]})
        create(client, "/api/categories", {"name": "Salary", "type": "INCOME"})

        roots = client.get("/api/categories?parentId=null").get_json()["data"]
        assert sorted(c["name"] for c in roots) == ["Housing", "Salary"]

        income = client.get("/api/categories?type=INCOME").get_json()["data"]
        assert [c["name"] for c in income] == ["Salary"]

        children = client.get(f"/api/categories?parentId={housing['id']}").get_json()["data"]
        assert [c["name"] for c in children] == ["Rent"]


class TestAccounts:
    """Account endpoints and balances."""

    def test_total_balance(self, client):
        for name, type_, balance in [
            ("Checking", "CHECKING", 5000),
            ("Savings", "SAVINGS", 10000),
            ("Credit Card", "CREDIT_CARD", -500),
            ("Cash", "CASH", 200),
        ]:
            create(client, "/api/accounts", {"name": name, "type": type_, "balance": balance})

        body = client.get("/api/accounts/balance/total").get_json()
        assert body == {
            "success": True,
            "data": {"total": 14700.0, "currency": "USD", "accountCount": 4},
        }

    def test_account_balance_and_serialization(self, client):
        account = create(client, "/api/accounts", {"name": "Checking", "type": "CHECKING", "balance": "1234.5"})
        assert account["balance"] == "1234.50"
        assert account["currency"] == "USD"

        body = client.get(f"/api/accounts/{account['id']}/balance").get_json()
        assert body["data"] == {"accountId": account["id"], "balance": 1234.5, "currency": "USD"}

    def test_hard_delete_removes_transactions(self, client):
        account = create(client, "/api/accounts", {"name": "Checking", "type": "CHECKING"})
        txn = create(client, "/api/transactions", {
            "accountId": account["id"],
            "type": "EXPENSE",
            "amount": 12.5,
            "description": "Coffee",
            "date": "2026-01-15T08:30:00Z",
        })

        response = client.delete(f"/api/accounts/{account['id']}/hard")
        assert response.get_json()["data"]["message"] == "Account permanently deleted"
        assert client.get(f"/api/transactions/{txn['id']}").status_code == 404


class TestTransactions:
    """Transaction endpoints."""

    def test_create_list_and_filter(self, client):
        checking = create(client, "/api/accounts", {"name": "Checking", "type": "CHECKING"})
        savings = create(client, "/api/accounts", {"name": "Savings", "type": "SAVINGS"})
        create(client, "/api/transactions", {
            "accountId": checking["id"],
            "toAccountId": savings["id"],
            "type": "TRANSFER",
            "amount": "300",
            "description": "Monthly Savings",
            "date": "2026-01-16T09:00:00Z",
            "tags": ["savings"],
        })
        create(client, "/api/transactions", {
            "accountId": checking["id"],
            "type": "EXPENSE",
            "amount": "9.99",
            "description": "Streaming",
            "date": "2026-01-05T09:00:00Z",
        })

        all_rows = client.get("/api/transactions").get_json()["data"]
        assert [t["description"] for t in all_rows] == ["Monthly Savings", "Streaming"]
        assert all_rows[0]["amount"] == "300.00"
        assert all_rows[0]["tags"] == ["savings"]

        transfers = client.get("/api/transactions?type=TRANSFER&limit=10").get_json()["data"]
        assert len(transfers) == 1

    def test_invalid_transfer(self, client):
        checking = create(client, "/api/accounts", {"name": "Checking", "type": "CHECKING"})
        response = client.post("/api/transactions", json={
            "accountId": checking["id"],
            "toAccountId": checking["id"],
            "type": "TRANSFER",
            "amount": 1,
            "description": "Loop",
            "date": "2026-01-16T09:00:00Z",
        })
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_TRANSFER"

    def test_limit_out_of_range(self, client):
        response = client.get("/api/transactions?limit=500")
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"


class TestErrors:
    """Error envelopes."""

    def test_validation_error_envelope(self, client):
        response = client.post("/api/categories", json={"name": "", "type": "SOMETHING"})
        assert response.status_code == 400

        error = response.get_json()["error"]
        assert error["message"] == "Validation error"
        assert error["code"] == "VALIDATION_ERROR"
        fields = {tuple(detail["loc"]) for detail in error["details"]}
        assert ("name",) in fields
        assert ("type",) in fields

    def test_invalid_color(self, client):
        response = client.post("/api/categories", json={"name": "Rent", "type": "EXPENSE", "color": "red"})
        assert response.status_code == 400

    def test_invalid_uuid_path(self, client):
        response = client.get("/api/accounts/not-a-uuid")
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"

    def test_malformed_json(self, client):
        response = client.post("/api/categories", data="{not json", content_type="application/json")
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_JSON"

    def test_missing_resource(self, client):
        response = client.get(f"/api/accounts/{MISSING_ID}")
        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "ACCOUNT_NOT_FOUND"

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.get_json() == {
            "success": False,
            "error": {"message": "Not found", "code": "NOT_FOUND"},
        }

    def test_method_not_allowed(self, client):
        response = client.patch("/api/categories")
        assert response.status_code == 405
        assert response.get_json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_unexpected_error(self, app, client, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(app.extensions["privfinos"]["accounts"], "get_total_balance", explode)

        response = client.get("/api/accounts/balance/total")
        assert response.status_code == 500
        assert response.get_json()["error"] == {
            "message": "Internal server error",
            "code": "INTERNAL_ERROR",
        }


class TestStaticFiles:
    """Production serving of the built web front end."""

    def test_spa_fallback(self, tmp_path, db):
        from privfinos.api import create_app
        from privfinos.config import Settings

        dist = tmp_path / "dist"
        dist.mkdir()
        (dist / "index.html").write_text("<html>PrivFinOS</html>")
        (dist / "app.js").write_text("console.log('hi')")

        settings = Settings(app_env="production", database_url="sqlite:///:memory:", web_dist_path=dist)
        client = create_app(settings, db).test_client()

        assert client.get("/app.js").data == b"console.log('hi')"
        assert b"PrivFinOS" in client.get("/dashboard/accounts").data
        assert client.get("/api/unknown").status_code == 404
        assert client.get("/missing.js").data == b"<html>PrivFinOS</html>"

        response = client.post("/api/unknown")
        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "NOT_FOUND"
        assert client.get("/api/health").get_json()["status"] == "ok"
