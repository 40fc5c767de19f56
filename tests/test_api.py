"""
HTTP tests through FastAPI's TestClient.

Every test gets an empty in-memory database, a fresh read cache and the
offline LLM double.
"""
from datetime import date, timedelta

BEEF = {
    "id": "beef",
    "name": "Seasoned Beef",
    "category": "protein",
    "unit": "lb",
    "onHand": 40,
    "parLevel": 100,
    "reorderPoint": 50,
    "costPerUnit": 3.5,
    "vendor": "Sherwood Meats",
    "leadTimeDays": 2,
}

BURRITO = {
    "id": "burrito",
    "name": "Burrito",
    "category": "Burritos",
    "sellPrice": 10,
    "ingredients": [{"ingredientId": "beef", "qty": 0.25}],
}


def create_beef(client, **overrides):
    response = client.post("/api/ingredients", json={**BEEF, **overrides})
    assert response.status_code == 201
    return response.json()


def create_burrito(client):
    response = client.post("/api/recipes", json=BURRITO)
    assert response.status_code == 201
    return response.json()


# ────────────────────────────────────────────
# SERVICE
# ────────────────────────────────────────────


class TestService:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_status_reports_features(self, client):
        body = client.get("/status").json()
        assert body["features"]["llm"] is False
        assert "entries" in body["cache"]

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

    def test_unknown_route_error_body(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert "error" in response.json()


# ────────────────────────────────────────────
# INGREDIENTS & WASTE
# ────────────────────────────────────────────


class TestIngredients:
    def test_create_and_list(self, client):
        created = create_beef(client)
        assert created["onHand"] == 40
        assert created["costPerUnit"] == 3.5

        listed = client.get("/api/ingredients").json()
        assert [i["id"] for i in listed] == ["beef"]
        assert len(listed[0]["dailyUsage"]) == 14
        assert listed[0]["metrics"]["urgency"] == "ok"
        assert listed[0]["metrics"]["suggestedOrderQty"] == 60

    def test_detail_has_chart_series(self, client):
        create_beef(client)
        body = client.get("/api/ingredients/beef").json()
        assert len(body["burndown"]) == 7
        assert len(body["weeklyUsage"]) == 7

    def test_unknown_ingredient(self, client):
        response = client.get("/api/ingredients/ghost")
        assert response.status_code == 404
        assert response.json() == {"error": "Ingredient 'ghost' not found"}

    def test_negative_stock_rejected(self, client):
        response = client.post("/api/ingredients", json={**BEEF, "onHand": -1})
        assert response.status_code == 422
        assert response.json()["error"].startswith("Invalid request")

    def test_partial_update(self, client):
        create_beef(client)
        response = client.patch("/api/ingredients", json={"id": "beef", "onHand": 12})
        assert response.status_code == 200
        body = response.json()
        assert body["onHand"] == 12
        assert body["parLevel"] == 100

    def test_update_unknown(self, client):
        response = client.patch("/api/ingredients", json={"id": "ghost", "onHand": 3})
        assert response.status_code == 404
        assert "ghost" in response.json()["error"]

    def test_update_visible_despite_cache(self, client):
        create_beef(client)
        client.get("/api/ingredients")
        client.patch("/api/ingredients", json={"id": "beef", "onHand": 5})
        assert client.get("/api/ingredients").json()[0]["onHand"] == 5

    def test_expiry_alert(self, client):
        create_beef(client, expiryDate=(date.today() + timedelta(days=1)).isoformat())
        body = client.get("/api/alerts").json()
        assert body["count"] >= 1
        assert any(a["type"] == "expiring" and a["severity"] == "critical" for a in body["alerts"])


class TestWaste:
    def test_cost_derived_from_unit_cost(self, client):
        create_beef(client)
        response = client.post("/api/waste", json={"ingredientId": "beef", "qty": 2, "reason": "expired"})
        assert response.status_code == 201
        body = response.json()
        assert body["costLost"] == 7.0
        assert body["date"] == date.today().isoformat()

    def test_new_entry_visible_after_cached_read(self, client):
        create_beef(client)
        assert client.get("/api/waste").json() == []
        client.post("/api/waste", json={"ingredientId": "beef", "qty": 1})
        assert len(client.get("/api/waste").json()) == 1

    def test_unknown_ingredient(self, client):
        response = client.post("/api/waste", json={"ingredientId": "ghost", "qty": 1})
        assert response.status_code == 404

    def test_bad_reason(self, client):
        create_beef(client)
        response = client.post("/api/waste", json={"ingredientId": "beef", "qty": 1, "reason": "stolen"})
        assert response.status_code == 422


# ────────────────────────────────────────────
# RECIPES & SALES
# ────────────────────────────────────────────


class TestRecipes:
    def test_costing(self, client):
        create_beef(client)
        create_burrito(client)
        recipes = client.get("/api/recipes").json()
        assert recipes[0]["plateCost"] == 0.88
        assert recipes[0]["foodCostPercent"] == 9
        assert recipes[0]["ingredients"] == [{"ingredientId": "beef", "qty": 0.25, "unit": None}]

    def test_record_sale_and_summary(self, client):
        create_burrito(client)
        response = client.post("/api/sales", json={"recipeId": "burrito", "quantity": 3})
        assert response.status_code == 201
        assert response.json()["quantity"] == 3

        data = client.get("/api/sales", params={"recipeId": "burrito"}).json()["data"]
        assert data["totalSalesEvents"] == 1
        assert data["salesByRecipe"] == {"burrito": 3}
        assert len(data["recentSalesForRecipe"]) == 1

    def test_sale_updates_cached_recipes(self, client):
        create_burrito(client)
        assert sum(client.get("/api/recipes").json()[0]["dailySales"]) == 0
        client.post("/api/sales", json={"recipeId": "burrito", "quantity": 4})
        assert sum(client.get("/api/recipes").json()[0]["dailySales"]) == 4

    def test_sale_for_unknown_recipe(self, client):
        response = client.post("/api/sales", json={"recipeId": "ghost", "quantity": 1})
        assert response.status_code == 404


# ────────────────────────────────────────────
# ORDERS
# ────────────────────────────────────────────


ORDER = {
    "vendor": "Sherwood Meats",
    "items": [{"ingredientId": "beef", "qty": 10, "unitCost": 3.49}],
}


class TestOrders:
    def test_lifecycle(self, client):
        created = client.post("/api/orders", json=ORDER)
        assert created.status_code == 201
        order = created.json()
        assert order["status"] == "pending"
        assert order["totalCost"] == 34.9

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "confirmed"})
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        confirmed = client.get("/api/orders", params={"status": "confirmed"}).json()["orders"]
        assert [o["id"] for o in confirmed] == [order["id"]]

    def test_skipping_a_step_conflicts(self, client):
        order = client.post("/api/orders", json=ORDER).json()
        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "delivered"})
        assert response.status_code == 409
        assert "error" in response.json()

    def test_unknown_order(self, client):
        response = client.patch("/api/orders/po-missing/status", json={"status": "confirmed"})
        assert response.status_code == 404

    def test_empty_order_rejected(self, client):
        response = client.post("/api/orders", json={"vendor": "Sherwood Meats", "items": []})
        assert response.status_code == 422

    def test_suggested_orders(self, client):
        create_beef(client)
        orders = client.get("/api/orders/suggested").json()["orders"]
        assert orders[0]["vendor"] == "Sherwood Meats"
        assert orders[0]["status"] == "suggested"
        assert orders[0]["items"][0]["qty"] == 60


# ────────────────────────────────────────────
# FORECASTS, REPORTS & CHAT
# ────────────────────────────────────────────


class TestForecastEndpoints:
    def test_unknown_recipe(self, client):
        response = client.post("/api/forecast", json={"recipeId": "ghost"})
        assert response.status_code == 404

    def test_generate_and_read_back(self, client):
        create_burrito(client)
        body = client.post("/api/forecast", json={"recipeId": "burrito", "forecastDays": 3}).json()
        assert body["success"] is True
        assert len(body["forecast"]) == 3

        stored = client.get("/api/forecast", params={"recipeId": "burrito"}).json()["forecasts"]
        assert len(stored) == 3

    def test_inventory_forecast(self, client):
        create_beef(client)
        summary = client.post("/api/inventory-forecast").json()
        assert summary["forecastsGenerated"] == 1
        assert summary["okCount"] == 1

        body = client.get("/api/inventory-forecast").json()
        assert body["count"] == 1
        assert body["forecasts"][0]["ingredientId"] == "beef"


class TestReports:
    def test_dashboard(self, client):
        create_beef(client)
        create_burrito(client)
        body = client.get("/api/dashboard").json()
        assert body["lowStockCount"] == 0
        assert body["avgFoodCost"] == 9
        assert len(body["salesTrend"]) == 14

    def test_insights_snapshot(self, client):
        create_beef(client)
        create_burrito(client)
        client.post("/api/forecast", json={"recipeId": "burrito", "forecastDays": 2})
        body = client.get("/api/insights").json()
        assert body["success"] is True
        assert [r["id"] for r in body["recipes"]] == ["burrito"]
        assert len(body["forecasts"]) == 2

    def test_insights_summary_without_sales(self, client):
        create_burrito(client)
        body = client.get("/api/insights/summary").json()
        assert body["weekOverWeek"]["changePercent"] == 0

    def test_wrapped(self, client):
        create_burrito(client)
        client.post("/api/sales", json={"recipeId": "burrito", "quantity": 3})
        body = client.get("/api/wrapped").json()
        assert body["totalDishesServed"] == 3
        assert body["topDish"]["id"] == "burrito"


class TestChat:
    def test_unavailable_without_key(self, client):
        assert client.get("/api/chat/status").json()["available"] is False
        response = client.post("/api/chat", json={"message": "What should I order?"})
        assert response.status_code == 503
        assert "ANTHROPIC_API_KEY" in response.json()["error"]

    def test_answer(self, client, offline_llm):
        offline_llm.available = True
        response = client.post("/api/chat", json={"message": "What should I order?"})
        assert response.status_code == 200
        assert response.json()["response"] == "Order more beef."

    def test_failed_answer(self, client, offline_llm):
        offline_llm.available = True
        offline_llm.answer = None
        assert client.post("/api/chat", json={"message": "Hi"}).status_code == 502

    def test_empty_message(self, client):
        assert client.post("/api/chat", json={"message": ""}).status_code == 422
