import pytest
from unittest.mock import patch, AsyncMock
from fastapi.testclient import TestClient
from sketchrelay.app.main import app
from sketchrelay.core.notify import send_ntfy_notification
from sketchrelay.core.discord import send_discord_webhook
from sketchrelay.core.config import settings
from sketchrelay.services.season_service import ACTIVATION_COUNTER

client = TestClient(app)

@pytest.mark.asyncio
async def test_ntfy_notification_enabled():
    """
    ntfy 설정이 켜져 있을 때 httpx.post가 올바르게 호출되는지 테스트
    """
    with patch.object(settings, 'NTFY_ENABLED', True), \
         patch.object(settings, 'NTFY_URL', 'https://ntfy.sh'), \
         patch.object(settings, 'NTFY_TOPIC', 'test_topic'):

        with patch('httpx.AsyncClient.post', new_callable=AsyncMock) as mock_post:
            await send_ntfy_notification(
                message="Season stuck",
                title="Test Title",
                priority="high"
            )

            mock_post.assert_called_once()
            args, kwargs = mock_post.call_args

            assert args[0] == "https://ntfy.sh/test_topic"
            assert kwargs['headers']['Title'] == "Test Title"
            assert kwargs['headers']['Priority'] == "high"
            assert kwargs['data'] == b"Season stuck"

@pytest.mark.asyncio
async def test_ntfy_notification_disabled():
    """
    ntfy 설정이 꺼져 있을 때 호출되지 않는지 테스트
    """
    with patch.object(settings, 'NTFY_ENABLED', False):
        with patch('httpx.AsyncClient.post', new_callable=AsyncMock) as mock_post:
            await send_ntfy_notification("Should not send")
            mock_post.assert_not_called()

@pytest.mark.asyncio
async def test_discord_webhook_without_url_is_noop():
    with patch.object(settings, 'DISCORD_ALERTS_WEBHOOK_URL', ''):
        with patch('httpx.AsyncClient.post', new_callable=AsyncMock) as mock_post:
            assert await send_discord_webhook("hello") is False
            mock_post.assert_not_called()

@pytest.mark.asyncio
async def test_discord_webhook_failure_returns_false():
    with patch.object(settings, 'DISCORD_ALERTS_WEBHOOK_URL', 'https://discord.test/hook'):
        with patch('httpx.AsyncClient.post', new_callable=AsyncMock, side_effect=RuntimeError("timeout")):
            assert await send_discord_webhook("hello") is False

def test_prometheus_metrics_endpoint():
    """
    /metrics 엔드포인트가 200 OK를 반환하고,
    커스텀 메트릭(sketchrelay_season_activations_total)이 포함되어 있는지 테스트
    """
    ACTIVATION_COUNTER.labels("admin", "activated")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "python_info" in response.text
    assert "sketchrelay_season_activations_total" in response.text
