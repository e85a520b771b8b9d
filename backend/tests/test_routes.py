"""
Smart Pantry Backend: API Route Tests (End-to-End)
===================================================

What:  HTTP-level tests through the full middleware chain.
How:   httpx AsyncClient + ASGITransport against the real app and a
       temporary SQLite database. Gemini is always mocked.

What we test:
    ✅ Sign-up / login / logout / refresh / verify-token contracts
    ✅ Food item CRUD, envelopes, X-Total-Count, per-user isolation
    ✅ Recipe suggestions: empty pantry, success, model failure
    ✅ Health endpoint shape
"""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from conftest import TEST_PASSWORD, register_and_login
from smart_pantry.exceptions import LLMServiceError
from smart_pantry.schemas.food_item import utc_today
from smart_pantry.services.recipe_service import EMPTY_PANTRY_MESSAGE


def item_body(title="Milk", quantity=1, days=3):
    return {
        "title": title,
        "quantity": quantity,
        "expiry_date": (utc_today() + timedelta(days=days)).isoformat(),
    }


class TestAuthRoutes:

    @pytest.mark.asyncio
    async def test_signup_returns_user_without_password(self, test_client, csrf_headers):
        response = await test_client.post(
            "/signup",
            json={"email": "New.User@Example.com", "password": TEST_PASSWORD},
            headers=csrf_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new.user@example.com"
        assert "password" not in body
        assert isinstance(body["id"], int)

    @pytest.mark.asyncio
    async def test_duplicate_signup_conflicts(self, test_client, csrf_headers):
        payload = {"email": "dup@example.com", "password": TEST_PASSWORD}
        await test_client.post("/signup", json=payload, headers=csrf_headers)

        response = await test_client.post("/signup", json=payload, headers=csrf_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_signup_rejects_bad_email_and_long_password(self, test_client, csrf_headers):
        bad_email = await test_client.post(
            "/signup", json={"email": "not-an-email", "password": "pw"}, headers=csrf_headers
        )
        long_password = await test_client.post(
            "/signup", json={"email": "x@example.com", "password": "a" * 73}, headers=csrf_headers
        )

        assert bad_email.status_code == 422
        assert long_password.status_code == 422

    @pytest.mark.asyncio
    async def test_login_sets_cookies_and_returns_tokens(self, test_client, csrf_headers):
        creds = {"email": "carol@example.com", "password": TEST_PASSWORD}
        await test_client.post("/signup", json=creds, headers=csrf_headers)

        response = await test_client.post("/login", json=creds, headers=csrf_headers)

        assert response.status_code == 200
        tokens = response.json()["data"]
        assert tokens["tokenType"] == "bearer"
        assert tokens["expiresIn"] > 0
        assert tokens["accessToken"] and tokens["refreshToken"]
        assert "expiresAt" in tokens
        set_cookie = " ".join(response.headers.get_list("set-cookie"))
        assert "token=" in set_cookie
        assert "refresh_token=" in set_cookie
        assert "HttpOnly" in set_cookie

    @pytest.mark.asyncio
    async def test_login_failures_share_one_message(self, test_client, csrf_headers):
        await test_client.post(
            "/signup", json={"email": "dave@example.com", "password": TEST_PASSWORD}, headers=csrf_headers
        )

        wrong_password = await test_client.post(
            "/login", json={"email": "dave@example.com", "password": "wrong"}, headers=csrf_headers
        )
        unknown_email = await test_client.post(
            "/login", json={"email": "ghost@example.com", "password": "wrong"}, headers=csrf_headers
        )

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json()["message"] == unknown_email.json()["message"]
        assert wrong_password.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_verify_token(self, test_client, auth_headers):
        response = await test_client.get(
            "/verify-token", headers={"Authorization": auth_headers["Authorization"]}
        )

        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_cookie_authenticates_without_header(self, test_client, auth_headers):
        # The login in auth_headers left the access-token cookie in the jar.
        response = await test_client.get("/verify-token")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_logout_clears_cookie_session(self, test_client, auth_headers):
        response = await test_client.post("/logout", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Successfully logged out"

        response = await test_client.get("/verify-token")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_refresh_token_rotation(self, test_client, csrf_headers):
        creds = {"email": "erin@example.com", "password": TEST_PASSWORD}
        await test_client.post("/signup", json=creds, headers=csrf_headers)
        login = (await test_client.post("/login", json=creds, headers=csrf_headers)).json()["data"]

        response = await test_client.post(
            "/refresh-token",
            json={"refreshToken": login["refreshToken"]},
            headers=csrf_headers,
        )

        assert response.status_code == 200
        refreshed = response.json()["data"]
        verify = await test_client.get(
            "/verify-token", headers={"Authorization": f"Bearer {refreshed['accessToken']}"}
        )
        assert verify.status_code == 200

    @pytest.mark.asyncio
    async def test_refresh_token_read_from_cookie(self, test_client, csrf_headers):
        creds = {"email": "gina@example.com", "password": TEST_PASSWORD}
        await test_client.post("/signup", json=creds, headers=csrf_headers)
        await test_client.post("/login", json=creds, headers=csrf_headers)

        response = await test_client.post("/refresh-token", headers=csrf_headers)

        assert response.status_code == 200
        assert response.json()["data"]["accessToken"]
        set_cookie = " ".join(response.headers.get_list("set-cookie"))
        assert "token=" in set_cookie
        assert "refresh_token=" in set_cookie

    @pytest.mark.asyncio
    async def test_refresh_without_token_is_unauthorized(self, test_client, csrf_headers):
        creds = {"email": "hank@example.com", "password": TEST_PASSWORD}
        await test_client.post("/signup", json=creds, headers=csrf_headers)
        await test_client.post("/login", json=creds, headers=csrf_headers)
        test_client.cookies.delete("token")
        test_client.cookies.delete("refresh_token")

        response = await test_client.post("/refresh-token", headers=csrf_headers)

        assert response.status_code == 401
        assert response.json()["message"] == "Refresh token required"

    @pytest.mark.asyncio
    async def test_access_token_cannot_refresh(self, test_client, auth_headers):
        access = auth_headers["Authorization"].split(" ", 1)[1]

        response = await test_client.post(
            "/refresh-token", json={"refresh_token": access}, headers=auth_headers
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_token_rejected_as_access_token(self, test_client, csrf_headers):
        creds = {"email": "frank@example.com", "password": TEST_PASSWORD}
        await test_client.post("/signup", json=creds, headers=csrf_headers)
        login = (await test_client.post("/login", json=creds, headers=csrf_headers)).json()["data"]

        response = await test_client.get(
            "/api/food-items", headers={"Authorization": f"Bearer {login['refreshToken']}"}
        )

        assert response.status_code == 401


class TestFoodItemRoutes:

    @pytest.mark.asyncio
    async def test_requires_authentication(self, test_client):
        response = await test_client.get("/api/food-items")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_crud_flow(self, test_client, auth_headers):
        created = await test_client.post("/api/food-items", json=item_body(days=3), headers=auth_headers)
        assert created.status_code == 201
        body = created.json()
        assert body["message"] == "Food item created successfully"
        item = body["data"]
        assert item["days_until_expiry"] == 3
        assert item["is_expired"] is False

        fetched = await test_client.get(f"/api/food-items/{item['id']}", headers=auth_headers)
        assert fetched.status_code == 200
        assert fetched.json()["data"]["title"] == "Milk"

        updated = await test_client.put(
            f"/api/food-items/{item['id']}",
            json=item_body(title="Oat milk", quantity=2, days=-1),
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["message"] == "Food item updated successfully"
        assert updated.json()["data"]["is_expired"] is True

        deleted = await test_client.delete(f"/api/food-items/{item['id']}", headers=auth_headers)
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Food item deleted successfully"}

        missing = await test_client.get(f"/api/food-items/{item['id']}", headers=auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_list_order_count_and_filter(self, test_client, auth_headers):
        for title, days in [("Rice", 60), ("Milk", 1), ("Eggs", 5), ("Bread", -2)]:
            await test_client.post("/api/food-items", json=item_body(title=title, days=days), headers=auth_headers)

        everything = await test_client.get("/api/food-items", headers=auth_headers)
        assert everything.status_code == 200
        assert [i["title"] for i in everything.json()["data"]] == ["Bread", "Milk", "Eggs", "Rice"]
        assert everything.headers["X-Total-Count"] == "4"

        soon = await test_client.get(
            "/api/food-items", params={"expiring_within_days": 5}, headers=auth_headers
        )
        assert [i["title"] for i in soon.json()["data"]] == ["Milk", "Eggs"]
        assert soon.headers["X-Total-Count"] == "2"

    @pytest.mark.asyncio
    async def test_validation_errors(self, test_client, auth_headers):
        blank_title = await test_client.post(
            "/api/food-items", json=item_body(title="   "), headers=auth_headers
        )
        negative = await test_client.post(
            "/api/food-items", json=item_body(quantity=-1), headers=auth_headers
        )
        bad_date = await test_client.post(
            "/api/food-items",
            json={"title": "Milk", "quantity": 1, "expiry_date": "next tuesday"},
            headers=auth_headers,
        )

        assert blank_title.status_code == 422
        assert negative.status_code == 422
        assert bad_date.status_code == 422

    @pytest.mark.asyncio
    async def test_items_are_private_to_their_owner(self, test_client, auth_headers):
        created = await test_client.post("/api/food-items", json=item_body(), headers=auth_headers)
        item_id = created.json()["data"]["id"]

        mallory = await register_and_login(test_client, "mallory@example.com")

        assert (await test_client.get(f"/api/food-items/{item_id}", headers=mallory)).status_code == 404
        assert (await test_client.put(
            f"/api/food-items/{item_id}", json=item_body(title="Stolen"), headers=mallory
        )).status_code == 404
        assert (await test_client.delete(f"/api/food-items/{item_id}", headers=mallory)).status_code == 404
        assert (await test_client.get("/api/food-items", headers=mallory)).json()["data"] == []

        still_there = await test_client.get(f"/api/food-items/{item_id}", headers=auth_headers)
        assert still_there.json()["data"]["title"] == "Milk"

    @pytest.mark.asyncio
    async def test_user_id_in_body_is_ignored(self, test_client, auth_headers):
        body = {**item_body(), "user_id": 999}
        created = await test_client.post("/api/food-items", json=body, headers=auth_headers)
        assert created.status_code == 201

        listed = await test_client.get("/api/food-items", headers=auth_headers)
        assert listed.headers["X-Total-Count"] == "1"


class TestRecipeRoutes:

    @pytest.mark.asyncio
    async def test_empty_pantry_message(self, test_client, auth_headers):
        with patch("smart_pantry.services.recipe_service.gemini_service") as mock_gemini:
            mock_gemini.generate_recipe = AsyncMock()

            response = await test_client.get("/api/recipes/suggestions", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == [EMPTY_PANTRY_MESSAGE]
        mock_gemini.generate_recipe.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_returns_recipe_in_array(self, test_client, auth_headers):
        await test_client.post("/api/food-items", json=item_body(title="Spinach"), headers=auth_headers)

        with patch("smart_pantry.services.recipe_service.gemini_service") as mock_gemini:
            mock_gemini.generate_recipe = AsyncMock(return_value="Spinach omelette")

            response = await test_client.get("/api/recipes/suggestions", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == ["Spinach omelette"]
        items = mock_gemini.generate_recipe.await_args.args[0]
        assert [item.title for item in items] == ["Spinach"]

    @pytest.mark.asyncio
    async def test_model_failure_is_503(self, test_client, auth_headers):
        await test_client.post("/api/food-items", json=item_body(), headers=auth_headers)

        with patch("smart_pantry.services.recipe_service.gemini_service") as mock_gemini:
            mock_gemini.generate_recipe = AsyncMock(side_effect=LLMServiceError(retry_after=60))

            response = await test_client.get("/api/recipes/suggestions", headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["error"] == "llm_service_error"
        assert response.headers["Retry-After"] == "60"


class TestHealthRoute:

    @pytest.mark.asyncio
    async def test_health_reports_dependencies(self, test_client):
        with patch("smart_pantry.routes.health.gemini_service") as mock_gemini:
            mock_gemini.circuit_breaker.state = "closed"
            mock_gemini.circuit_breaker.OPEN = "open"
            mock_gemini.health_check = AsyncMock(return_value=True)

            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["gemini"] == "available"

    @pytest.mark.asyncio
    async def test_health_degraded_when_gemini_down(self, test_client):
        with patch("smart_pantry.routes.health.gemini_service") as mock_gemini:
            mock_gemini.circuit_breaker.state = "closed"
            mock_gemini.circuit_breaker.OPEN = "open"
            mock_gemini.health_check = AsyncMock(return_value=False)

            response = await test_client.get("/health")

        assert response.json()["status"] == "degraded"
        assert response.json()["gemini"] == "unavailable"
