import pytest
from unittest.mock import patch
from sketchrelay.core.config import settings

ADMIN_TOKEN = "test-admin-token"


async def _player(client, discord_user_id: str, name: str) -> str:
    response = await client.post("/api/v1/players", json={"discord_user_id": discord_user_id, "name": name})
    assert response.status_code == 200
    return response.json()["id"]

@pytest.mark.asyncio
async def test_player_get_or_create(client):
    first = await client.post("/api/v1/players", json={"discord_user_id": "42", "name": "alice"})
    second = await client.post("/api/v1/players", json={"discord_user_id": "42", "name": "alice2"})

    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert second.json()["name"] == "alice2"

@pytest.mark.asyncio
async def test_season_flow_over_http(client):
    creator = await _player(client, "1", "creator")
    p1 = await _player(client, "2", "p1")
    p2 = await _player(client, "3", "p2")

    created = await client.post("/api/v1/seasons", json={
        "creator_player_id": creator, "min_players": 2, "max_players": 2, "channel_id": "c1",
    })
    assert created.status_code == 201
    body = created.json()
    assert body["type"] == "success"
    season_id = body["data"]["seasonId"]

    joined = await client.post(f"/api/v1/seasons/{season_id}/join", json={"player_id": p1})
    assert joined.status_code == 200
    assert joined.json()["key"] == "season_join_success"

    activated = await client.post(f"/api/v1/seasons/{season_id}/join", json={"player_id": p2})
    assert activated.status_code == 200
    assert activated.json()["key"] == "season_activate_success"

    late = await client.post(f"/api/v1/seasons/{season_id}/join", json={"player_id": creator})
    assert late.status_code == 409
    assert late.json()["error_kind"] == "INVALID_STATE"

    detail = await client.get(f"/api/v1/seasons/{season_id}")
    assert detail.json()["data"]["season"]["status"] == "ACTIVE"

    listed = await client.get("/api/v1/seasons", params={"status": "ACTIVE"})
    assert listed.json()["data"]["count"] == 1

    not_ready = await client.post(f"/api/v1/seasons/{season_id}/completion")
    assert not_ready.status_code == 200
    assert not_ready.json()["type"] == "info"

    results = await client.get(f"/api/v1/seasons/{season_id}/results")
    assert results.status_code == 404

    announcement = await client.get(f"/api/v1/seasons/{season_id}/announcement")
    assert announcement.status_code == 404

@pytest.mark.asyncio
async def test_create_season_validation_error(client):
    creator = await _player(client, "1", "creator")
    response = await client.post("/api/v1/seasons", json={
        "creator_player_id": creator, "min_players": 4, "max_players": 2,
    })
    assert response.status_code == 400
    assert response.json()["key"] == "season_create_error_min_max_players"

@pytest.mark.asyncio
async def test_unknown_season_is_404(client):
    response = await client.get("/api/v1/seasons/does-not-exist")
    assert response.status_code == 404
    assert response.json()["key"] == "season_not_found"

@pytest.mark.asyncio
async def test_admin_routes_require_token(client):
    creator = await _player(client, "1", "creator")
    season_id = (await client.post("/api/v1/seasons", json={"creator_player_id": creator})).json()["data"]["seasonId"]

    with patch.object(settings, "ADMIN_TOKEN", ADMIN_TOKEN):
        denied = await client.post(f"/api/v1/seasons/{season_id}/terminate")
        assert denied.status_code == 403

        wrong = await client.post(f"/api/v1/seasons/{season_id}/terminate", headers={"X-Admin-Token": "nope"})
        assert wrong.status_code == 403

        ok = await client.post(f"/api/v1/seasons/{season_id}/terminate", headers={"X-Admin-Token": ADMIN_TOKEN})
        assert ok.status_code == 200
        assert ok.json()["key"] == "season_terminate_success"

        again = await client.post(f"/api/v1/seasons/{season_id}/terminate", headers={"X-Admin-Token": ADMIN_TOKEN})
        assert again.status_code == 409
        assert again.json()["key"] == "season_terminate_error_already_terminated"

@pytest.mark.asyncio
async def test_admin_activation(client):
    creator = await _player(client, "1", "creator")
    season_id = (await client.post("/api/v1/seasons", json={"creator_player_id": creator, "min_players": 1})).json()["data"]["seasonId"]
    await client.post(f"/api/v1/seasons/{season_id}/join", json={"player_id": creator})

    with patch.object(settings, "ADMIN_TOKEN", ADMIN_TOKEN):
        headers = {"X-Admin-Token": ADMIN_TOKEN}
        first = await client.post(f"/api/v1/seasons/{season_id}/activate", headers=headers)
        second = await client.post(f"/api/v1/seasons/{season_id}/activate", headers=headers)

    assert first.status_code == 200
    assert first.json()["data"]["trigger"] == "admin"
    # 이미 활성화된 시즌은 실패가 아닌 info
    assert second.status_code == 200
    assert second.json()["type"] == "info"

@pytest.mark.asyncio
async def test_admin_routes_disabled_without_configured_token(client):
    with patch.object(settings, "ADMIN_TOKEN", ""):
        response = await client.post("/api/v1/seasons/any/terminate", headers={"X-Admin-Token": ""})
    assert response.status_code == 403
