"""
Tuiter Backend — HTTP Route Tests
===================================

What:  End-to-end tests of the API surface through create_app().
How:   HTTPX AsyncClient over ASGITransport against a temporary SQLite
       database; the client keeps the session cookie between requests.

What we test:
    ✅ Signup starts a session; passwords are always masked
    ✅ Duplicate username and bad credentials answer 403
    ✅ Session-only endpoints answer 403 without a session
    ✅ Toggle endpoints flip membership and listings carry the viewer flags
    ✅ "me" without a session, or a failed lookup, answers 403 on listings
    ✅ Toggle on a missing tuit answers 404
    ✅ Deleting the account cascades and ends the session
    ✅ Request IDs reach headers, error bodies and the access log
"""

import logging
import uuid

import pytest

from tuiter.exceptions import StoreError
from tuiter.schemas.user import MASKED_PASSWORD


async def signup(client, username="alice", password="s3cret"):
    response = await client.post(
        "/api/auth/signup",
        json={"username": username, "password": password, "email": f"{username}@example.com"},
    )
    assert response.status_code == 200, response.text
    return response.json()


async def post_tuit(client, text="hello tuiter", uid="me"):
    response = await client.post(f"/api/users/{uid}/tuits", json={"tuit": text})
    assert response.status_code == 200, response.text
    return response.json()


class TestAuthRoutes:

    @pytest.mark.asyncio
    async def test_signup_returns_masked_profile(self, test_client):
        profile = await signup(test_client)

        assert profile["username"] == "alice"
        assert profile["password"] == MASKED_PASSWORD
        assert "firstName" in profile

    @pytest.mark.asyncio
    async def test_profile_follows_session(self, test_client):
        created = await signup(test_client)

        response = await test_client.post("/api/auth/profile")

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_duplicate_signup_is_forbidden(self, test_client):
        await signup(test_client)

        response = await test_client.post(
            "/api/auth/signup", json={"username": "alice", "password": "other"}
        )

        assert response.status_code == 403
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_duplicate_register_is_forbidden(self, test_client):
        body = {"username": "bob", "password": "pw"}
        assert (await test_client.post("/api/register", json=body)).status_code == 200

        response = await test_client.post("/api/register", json=body)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_login_with_wrong_password_is_forbidden(self, test_client):
        await signup(test_client, password="right")
        await test_client.post("/api/auth/logout")

        response = await test_client.post(
            "/api/auth/login", json={"username": "alice", "password": "wrong"}
        )

        assert response.status_code == 403
        assert response.json()["error"] == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_login_then_profile(self, test_client):
        await signup(test_client, password="right")
        await test_client.post("/api/auth/logout")

        login = await test_client.post(
            "/api/auth/login", json={"username": "alice", "password": "right"}
        )
        profile = await test_client.post("/api/auth/profile")

        assert login.status_code == 200
        assert login.json()["password"] == MASKED_PASSWORD
        assert profile.status_code == 200

    @pytest.mark.asyncio
    async def test_profile_without_session_is_forbidden(self, test_client):
        response = await test_client.post("/api/auth/profile")

        assert response.status_code == 403
        assert response.json()["error"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_logout_ends_session(self, test_client):
        await signup(test_client)

        assert (await test_client.post("/api/auth/logout")).status_code == 200
        assert (await test_client.post("/api/auth/profile")).status_code == 403

    @pytest.mark.asyncio
    async def test_delete_account_cascades(self, test_client):
        await signup(test_client)
        tuit = await post_tuit(test_client)
        await test_client.put(f"/api/users/me/likes/{tuit['id']}")

        response = await test_client.delete("/api/auth/delete")

        assert response.status_code == 200
        assert response.json() == {"deletedCount": 1}
        assert (await test_client.get("/api/tuits")).json() == []
        assert (await test_client.get("/api/likes")).json() == []
        assert (await test_client.post("/api/auth/profile")).status_code == 403


class TestRelationRoutes:

    @pytest.mark.asyncio
    async def test_bookmark_toggle_and_listing(self, test_client):
        await signup(test_client)
        tuit = await post_tuit(test_client)

        toggled = await test_client.put(f"/api/users/me/bookmarks/{tuit['id']}")
        listing = await test_client.get("/api/users/me/bookmarks")

        assert toggled.status_code == 200
        assert toggled.json() == {"state": "present"}
        assert listing.status_code == 200
        (item,) = listing.json()
        assert item["id"] == tuit["id"]
        assert item["bookmarkedByMe"] is True
        assert item["ownedByMe"] is True
        assert item["likedByMe"] is False
        assert item["dislikedByMe"] is False

    @pytest.mark.asyncio
    async def test_second_toggle_removes_bookmark(self, test_client):
        await signup(test_client)
        tuit = await post_tuit(test_client)

        await test_client.put(f"/api/users/me/bookmarks/{tuit['id']}")
        toggled = await test_client.put(f"/api/users/me/bookmarks/{tuit['id']}")

        assert toggled.json() == {"state": "absent"}
        assert (await test_client.get("/api/users/me/bookmarks")).json() == []

    @pytest.mark.asyncio
    async def test_like_and_dislike_flags_in_feed(self, test_client):
        await signup(test_client, username="author")
        tuit = await post_tuit(test_client, "liked and disliked")
        await test_client.post("/api/auth/logout")
        await signup(test_client, username="reader")

        await test_client.put(f"/api/users/me/likes/{tuit['id']}")
        await test_client.put(f"/api/users/me/dislikes/{tuit['id']}")
        (item,) = (await test_client.get("/api/tuits")).json()

        assert item["likedByMe"] is True
        assert item["dislikedByMe"] is True
        assert item["bookmarkedByMe"] is False
        assert item["ownedByMe"] is False
        assert item["postedBy"]["username"] == "author"
        assert item["postedBy"]["password"] == MASKED_PASSWORD

    @pytest.mark.asyncio
    async def test_anonymous_feed_has_no_flags(self, test_client):
        await signup(test_client)
        tuit = await post_tuit(test_client)
        await test_client.put(f"/api/users/me/likes/{tuit['id']}")
        await test_client.post("/api/auth/logout")

        (item,) = (await test_client.get("/api/tuits")).json()

        assert item["likedByMe"] is False
        assert item["ownedByMe"] is False

    @pytest.mark.asyncio
    async def test_me_listing_without_session_is_forbidden(self, test_client):
        response = await test_client.get("/api/users/me/likes")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_listing_lookup_failure_is_forbidden(self, app, test_client, monkeypatch):
        await signup(test_client)
        tuit = await post_tuit(test_client)
        await test_client.put(f"/api/users/me/likes/{tuit['id']}")

        async def unavailable(user_id, tuit_id):
            raise StoreError(context={"operation": "dislikes.find_by_pair"})

        monkeypatch.setattr(app.state.stores.dislikes, "find_by_pair", unavailable)

        listing = await test_client.get("/api/users/me/likes")
        feed = await test_client.get("/api/tuits")

        assert listing.status_code == 403
        assert listing.json()["error"] == "forbidden"
        assert "dislikes" in listing.json()["message"]
        assert feed.status_code == 500
        assert feed.json()["error"] == "server_error"

    @pytest.mark.asyncio
    async def test_toggle_missing_tuit_is_not_found(self, test_client):
        await signup(test_client)

        response = await test_client.put(f"/api/users/me/likes/{uuid.uuid4()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_toggle_without_session_is_not_found(self, test_client):
        response = await test_client.put(f"/api/users/me/dislikes/{uuid.uuid4()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_records_by_tuit(self, test_client):
        await signup(test_client)
        tuit = await post_tuit(test_client)
        await test_client.put(f"/api/users/me/likes/{tuit['id']}")

        response = await test_client.get(f"/api/tuits/{tuit['id']}/likes")

        assert response.status_code == 200
        (record,) = response.json()
        assert record["tuitId"] == tuit["id"]
        assert record["user"]["username"] == "alice"


class TestUserAndTuitRoutes:

    @pytest.mark.asyncio
    async def test_unknown_user_is_not_found(self, test_client):
        response = await test_client.get(f"/api/users/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_update_user_keeps_password_masked(self, test_client):
        created = await signup(test_client)

        response = await test_client.put(
            f"/api/users/{created['id']}", json={"firstName": "Alice", "password": "new"}
        )

        assert response.status_code == 200
        assert response.json()["firstName"] == "Alice"
        assert response.json()["password"] == MASKED_PASSWORD

    @pytest.mark.asyncio
    async def test_delete_tuit(self, test_client):
        await signup(test_client)
        tuit = await post_tuit(test_client)

        response = await test_client.delete(f"/api/tuits/{tuit['id']}")

        assert response.json() == {"deletedCount": 1}
        assert (await test_client.get(f"/api/tuits/{tuit['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestRequestTracing:

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/users", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"

    @pytest.mark.asyncio
    async def test_oversized_request_id_is_replaced(self, test_client):
        response = await test_client.get("/api/users", headers={"X-Request-ID": "x" * 200})

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get(
            "/api/users/me/likes", headers={"X-Request-ID": "trace-403"}
        )

        assert response.status_code == 403
        assert response.json()["request_id"] == "trace-403"

    @pytest.mark.asyncio
    async def test_access_log_names_session_viewer(self, test_client, caplog):
        created = await signup(test_client)

        with caplog.at_level(logging.INFO, logger="tuiter.access"):
            await test_client.get("/api/tuits")
            await test_client.post("/api/auth/logout")
            await test_client.get("/api/tuits")

        lines = [r.getMessage() for r in caplog.records if r.name == "tuiter.access"]
        assert any(f"viewer={created['id']}" in line for line in lines)
        assert lines[-1].startswith("GET /api/tuits 200")
        assert lines[-1].endswith("viewer=anonymous")


class TestAppFactory:

    def test_app_state_is_bound_to_given_engine(self, app, engine):
        assert app.state.engine is engine
        assert app.state.session_factory.kw["bind"] is engine
        assert app.state.annotator is not None

    @pytest.mark.asyncio
    async def test_lifespan_runs_against_bound_engine(self, app, test_client):
        async with app.router.lifespan_context(app):
            response = await test_client.get("/health")

        assert response.status_code == 200
        # Disposal only empties the pool; the engine reconnects on demand
        assert (await test_client.get("/health")).status_code == 200
