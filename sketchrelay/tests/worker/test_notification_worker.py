import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from sketchrelay.core.enums import InstructionType
from sketchrelay.schemas.instruction import MessageInstruction, InstructionFormatting, InstructionContext
from sketchrelay.worker.notification_worker import (
    _handle_season_event,
    _handle_turn_event,
    render_completion_announcement,
)


@pytest.mark.asyncio
async def test_season_activated_uses_template(dummy_redis):
    event = {"type": "season_activated", "season_id": "S1", "player_count": 3, "games_created": 3}
    with patch("sketchrelay.worker.notification_worker.send_discord_webhook", new_callable=AsyncMock) as mock_send:
        await _handle_season_event(event, dummy_redis, MagicMock())

    mock_send.assert_awaited_once()
    message = mock_send.call_args[0][0]
    assert "S1" in message
    assert "3" in message

@pytest.mark.asyncio
async def test_template_override_from_redis(dummy_redis):
    dummy_redis.data["config:msg_template:season_cancelled"] = "cancelled {season_id} ({player_count}/{min_players})"
    event = {"type": "season_cancelled", "season_id": "S2", "player_count": 1, "min_players": 4}
    with patch("sketchrelay.worker.notification_worker.send_discord_webhook", new_callable=AsyncMock) as mock_send:
        await _handle_season_event(event, dummy_redis, MagicMock())

    mock_send.assert_awaited_once_with("cancelled S2 (1/4)")

@pytest.mark.asyncio
async def test_activation_failure_pages_operator(dummy_redis):
    event = {"type": "season_activation_failed", "season_id": "S3", "reason": "boom"}
    with patch("sketchrelay.worker.notification_worker.send_discord_webhook", new_callable=AsyncMock) as mock_send, \
         patch("sketchrelay.worker.notification_worker.send_ntfy_notification", new_callable=AsyncMock) as mock_ntfy:
        await _handle_season_event(event, dummy_redis, MagicMock())

    mock_send.assert_awaited_once()
    mock_ntfy.assert_awaited_once()
    assert mock_ntfy.call_args.kwargs["priority"] == "high"
    assert "boom" in mock_ntfy.call_args[0][0]

@pytest.mark.asyncio
async def test_season_completed_delivers_announcement(dummy_redis):
    instruction = MessageInstruction.success(
        "season_completion_announcement",
        seasonId="S4", daysElapsed=3, progressBar="█░", completionPercentage=50,
        totalGames=2, totalPlayers=2, totalTurns=4, completedTurns=2, gameResults="**Game 1**",
    )
    instruction.formatting = InstructionFormatting(dm=True)
    instruction.context = InstructionContext(recipients=["111", "222"])
    season_service = MagicMock()
    season_service.deliver_season_completion_announcement = AsyncMock(return_value=instruction)

    with patch("sketchrelay.worker.notification_worker.send_discord_webhook", new_callable=AsyncMock) as mock_send:
        await _handle_season_event({"type": "season_completed", "season_id": "S4"}, dummy_redis, season_service)

    season_service.deliver_season_completion_announcement.assert_awaited_once_with("S4")
    message = mock_send.call_args[0][0]
    assert message.startswith("<@111> <@222>")
    assert "**S4** COMPLETED" in message
    assert "Day 3 █░ 50%" in message

@pytest.mark.asyncio
async def test_season_completed_without_announcement_is_skipped(dummy_redis):
    season_service = MagicMock()
    season_service.deliver_season_completion_announcement = AsyncMock(return_value=None)

    with patch("sketchrelay.worker.notification_worker.send_discord_webhook", new_callable=AsyncMock) as mock_send:
        await _handle_season_event({"type": "season_completed", "season_id": "S5"}, dummy_redis, season_service)

    mock_send.assert_not_awaited()

@pytest.mark.asyncio
async def test_handler_errors_are_logged_not_raised(dummy_redis):
    with patch("sketchrelay.worker.notification_worker.send_discord_webhook", new_callable=AsyncMock, side_effect=RuntimeError("webhook down")):
        await _handle_season_event({"type": "season_terminated", "season_id": "S6"}, dummy_redis, MagicMock())
        await _handle_turn_event({"type": "turn_offered", "discord_user_id": "9"}, dummy_redis)

@pytest.mark.asyncio
async def test_turn_offered_mentions_player(dummy_redis):
    event = {"type": "turn_offered", "discord_user_id": "777", "game_id": "G1", "turn_type": "WRITING"}
    with patch("sketchrelay.worker.notification_worker.send_discord_webhook", new_callable=AsyncMock) as mock_send:
        await _handle_turn_event(event, dummy_redis)

    assert "<@777>" in mock_send.call_args[0][0]

def test_render_announcement_for_channel_has_no_mentions():
    instruction = MessageInstruction(
        type=InstructionType.SUCCESS,
        key="season_completion_announcement",
        data={"seasonId": "S7", "daysElapsed": 1, "progressBar": "", "completionPercentage": 0},
        formatting=InstructionFormatting(channel="c1"),
    )
    message = render_completion_announcement("{season_id} {game_results}|", instruction)
    assert message == "S7 |"
