"""HTTP surface tests through the ASGI app with an in-memory store."""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx
from pymongo.errors import ServerSelectionTimeoutError

from conftest import GITHUB_API, repo_payload
from devboard.api.points import get_points_service
from devboard.config import settings
from devboard.main import app
from devboard.services.points_service import PointsService


@pytest.fixture
def scan_service(db, sleeper):
    app.dependency_overrides[get_points_service] = lambda: PointsService(
        db, sleep=sleeper, timeout=0
    )
    yield
    app.dependency_overrides.pop(get_points_service, None)


def _mock_full_scan(username="octocat"):
    respx.get(f"{GITHUB_API}/users/{username}/repos").mock(
        return_value=httpx.Response(
            200, json=[repo_payload(username, f"r{i}") for i in range(8)]
        )
    )
    respx.get(url__regex=rf"{GITHUB_API}/repos/{username}/r0/commits.*").mock(
        return_value=httpx.Response(200, json=[{"sha": str(i)} for i in range(12)])
    )
    respx.get(url__regex=rf"{GITHUB_API}/repos/{username}/r[1-7]/commits.*").mock(
        return_value=httpx.Response(200, json=[])
    )


@pytest.mark.asyncio
async def test_root(api_client):
    response = await api_client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert "running" in body["message"]
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_health_reports_database(api_client):
    response = await api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["database"] == "ok"


@pytest.mark.asyncio
@respx.mock
async def test_full_scan_endpoint_scores_and_merges(api_client, db, scan_service):
    db.users.docs["octocat"] = {
        "_id": "octocat",
        "github_id": "1",
        "display_name": "Octo",
        "access_token": "gho_user",
        "points": 1,
        "daily_check_ins": 3,
    }
    _mock_full_scan()

    response = await api_client.get("/api/points/octocat")

    assert response.status_code == 200
    assert response.json() == {
        "username": "octocat",
        "repoCount": 8,
        "commitCount": 12,
        "points": 116,
        "message": "Full scan complete: 8 repositories, 12 commits",
    }
    stored = db.users.docs["octocat"]
    assert stored["points"] == 116
    assert stored["daily_check_ins"] == 3
    assert stored["access_token"] == "gho_user"
    # the stored OAuth token is used for the user's own scan
    first_call = respx.calls[0].request
    assert first_call.headers["authorization"] == "Bearer gho_user"


@pytest.mark.asyncio
@respx.mock
async def test_full_scan_for_unknown_user_creates_record(api_client, db, scan_service):
    _mock_full_scan("stranger")

    response = await api_client.get("/api/points/stranger")

    assert response.status_code == 200
    assert db.users.docs["stranger"]["points"] == 116
    assert "github_id" not in db.users.docs["stranger"]


@pytest.mark.asyncio
@respx.mock
async def test_full_scan_listing_failure_is_server_error(api_client, db, scan_service):
    respx.get(f"{GITHUB_API}/users/ghost/repos").mock(
        return_value=httpx.Response(404, json={"message": "Not Found"})
    )

    response = await api_client.get("/api/points/ghost")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "404" in body["error"]
    assert body["code"] == "UPSTREAM_ERROR"
    assert "ghost" not in db.users.docs


@pytest.mark.asyncio
@respx.mock
async def test_quick_scan_does_not_persist(api_client, db, scan_service):
    respx.get(f"{GITHUB_API}/users/octocat/repos").mock(
        return_value=httpx.Response(200, json=[repo_payload("octocat", f"r{i}") for i in range(8)])
    )
    respx.get(f"{GITHUB_API}/users/octocat/events/public").mock(
        return_value=httpx.Response(200, json=[{"type": "PushEvent"}, {"type": "ForkEvent"}])
    )

    response = await api_client.get("/api/quick-scan/octocat")

    assert response.status_code == 200
    body = response.json()
    assert body["repoCount"] == 8
    assert body["commitCount"] == 1
    assert body["points"] == 42
    assert db.users.docs == {}


@pytest.mark.asyncio
async def test_invalid_username_rejected(api_client):
    response = await api_client.get("/api/points/bad_name!")

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_check_in_success(api_client, db):
    db.users.docs["octocat"] = {"_id": "octocat", "points": 10, "daily_check_ins": 0}

    response = await api_client.post("/api/checkin/octocat")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Daily check-in successful! +1 point",
        "newPoints": 11,
    }
    assert db.users.docs["octocat"]["daily_check_ins"] == 1


@pytest.mark.asyncio
async def test_check_in_unknown_user_is_404(api_client, db):
    response = await api_client.post("/api/checkin/ghost")

    assert response.status_code == 404
    assert response.json()["error"] == "User not found. Please login with GitHub first."
    assert db.users.docs == {}


@pytest.mark.asyncio
async def test_leaderboard_sorted_without_tokens(api_client, db):
    db.users.docs["a"] = {"_id": "a", "display_name": "A", "points": 5, "access_token": "secret"}
    db.users.docs["b"] = {"_id": "b", "points": 90, "access_token": "secret"}
    db.users.docs["c"] = {"_id": "c", "points": 3}

    response = await api_client.get("/api/leaderboard")

    assert response.status_code == 200
    entries = response.json()
    assert [entry["username"] for entry in entries] == ["b", "a", "c"]
    assert entries[0]["id"] == "b"
    assert entries[0]["displayName"] == "b"
    assert entries[1]["displayName"] == "A"
    assert all("accessToken" not in entry for entry in entries)
    assert "secret" not in response.text


@pytest.mark.asyncio
async def test_leaderboard_limit(api_client, db):
    for i in range(4):
        db.users.docs[f"u{i}"] = {"_id": f"u{i}", "points": i}

    response = await api_client.get("/api/leaderboard", params={"limit": 2})

    assert [entry["points"] for entry in response.json()] == [3, 2]


@pytest.mark.asyncio
async def test_debug_route_disabled_by_default(api_client, db):
    db.users.docs["octocat"] = {"_id": "octocat", "points": 1}

    response = await api_client.get("/api/debug/user/octocat")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_debug_route_when_enabled(api_client, db):
    db.users.docs["octocat"] = {"_id": "octocat", "points": 1}

    with patch("devboard.api.debug.settings.ENABLE_DEBUG_ROUTES", True):
        found = await api_client.get("/api/debug/user/octocat")
        missing = await api_client.get("/api/debug/user/ghost")

    assert found.status_code == 200
    assert found.json() == {"exists": True, "data": {"_id": "octocat", "points": 1}}
    assert missing.json() == {"exists": False, "message": "User not found in database"}


@pytest.mark.asyncio
async def test_store_failure_on_check_in_is_server_error(api_client, db):
    db.users.docs["octocat"] = {"_id": "octocat", "points": 10}
    db.users.find_one_and_update = AsyncMock(side_effect=ServerSelectionTimeoutError("store down"))

    response = await api_client.post("/api/checkin/octocat")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "DATABASE_ERROR"
    assert body["error"] == "store down"
    assert db.users.docs["octocat"] == {"_id": "octocat", "points": 10}


@pytest.mark.asyncio
@respx.mock
async def test_store_failure_on_merge_leaves_record_untouched(api_client, db, scan_service):
    original = {"_id": "octocat", "github_id": "1", "points": 7, "daily_check_ins": 2}
    db.users.docs["octocat"] = dict(original)
    db.users.update_one = AsyncMock(side_effect=ServerSelectionTimeoutError("store down"))
    _mock_full_scan()

    response = await api_client.get("/api/points/octocat")

    assert response.status_code == 500
    assert response.json()["code"] == "DATABASE_ERROR"
    assert db.users.docs["octocat"] == original


@pytest.mark.asyncio
@respx.mock
async def test_full_scan_over_time_bound_is_gateway_timeout(api_client, db):
    async def slow_sleep(seconds):
        await asyncio.sleep(1)

    app.dependency_overrides[get_points_service] = lambda: PointsService(
        db, sleep=slow_sleep, timeout=0.1
    )
    _mock_full_scan("octo")

    response = await api_client.get("/api/points/octo")

    assert response.status_code == 504
    body = response.json()
    assert body["code"] == "TIMEOUT"
    assert "octo" in body["error"]
    assert db.users.docs == {}


@pytest.mark.asyncio
@respx.mock
async def test_rejected_stored_token_is_cleared(api_client, db, scan_service):
    db.users.docs["octocat"] = {
        "_id": "octocat",
        "github_id": "1",
        "access_token": "revoked",
        "points": 3,
    }

    def _repos(request):
        if "authorization" in request.headers:
            return httpx.Response(401, json={"message": "Bad credentials"})
        return httpx.Response(200, json=[])

    respx.get(f"{GITHUB_API}/users/octocat/repos").mock(side_effect=_repos)

    with patch.object(settings, "GITHUB_TOKEN", None):
        rejected = await api_client.get("/api/points/octocat")
        assert rejected.status_code == 500
        assert rejected.json()["code"] == "UPSTREAM_ERROR"
        assert db.users.docs["octocat"]["access_token"] is None
        assert db.users.docs["octocat"]["points"] == 3

        retried = await api_client.get("/api/points/octocat")

    assert retried.status_code == 200
    assert retried.json()["points"] == 0
