from __future__ import annotations

from types import SimpleNamespace

import pytest
from telegram.error import BadRequest, RetryAfter

from aimod.core.error_handler import ErrorHandler, is_ignorable, send_with_retry
from aimod.core.i18n import t

from fakes import GROUP_ID, make_message, make_update


def _context(bot, error):
    return SimpleNamespace(bot=bot, error=error, bot_data={})


@pytest.mark.asyncio
async def test_unexpected_error_gets_generic_reply(bot) -> None:
    update = make_update(make_message(bot, text="/rules"))
    await ErrorHandler.handle_error(update, _context(bot, RuntimeError("boom")))
    assert bot.calls == [("send_message", {"chat_id": GROUP_ID, "text": t("en", "errors.generic")})]


@pytest.mark.asyncio
async def test_known_api_errors_are_ignored(bot) -> None:
    update = make_update(make_message(bot, text="/report"))
    await ErrorHandler.handle_error(update, _context(bot, BadRequest("Message can't be deleted")))
    assert bot.calls == []


@pytest.mark.asyncio
async def test_error_without_update_is_only_logged(bot) -> None:
    await ErrorHandler.handle_error(None, _context(bot, RuntimeError("boom")))
    assert bot.calls == []


@pytest.mark.asyncio
async def test_send_with_retry_honours_flood_control(monkeypatch) -> None:
    waits = []

    async def fake_sleep(seconds):
        waits.append(seconds)

    monkeypatch.setattr("aimod.core.error_handler.asyncio.sleep", fake_sleep)
    attempts = []

    async def send(**kwargs):
        attempts.append(kwargs)
        if len(attempts) == 1:
            raise RetryAfter(3)
        return "sent"

    result = await send_with_retry(send, chat_id=1, text="hi")
    assert result == "sent"
    assert len(attempts) == 2
    assert waits == [4]


@pytest.mark.asyncio
async def test_send_with_retry_gives_up_on_api_error() -> None:
    attempts = []

    async def send(**kwargs):
        attempts.append(kwargs)
        raise BadRequest("Chat not found")

    assert await send_with_retry(send, chat_id=1, text="hi") is None
    assert len(attempts) == 1


def test_only_known_api_errors_are_ignorable() -> None:
    assert is_ignorable(BadRequest("Not enough rights to restrict/unrestrict chat member"))
    assert not is_ignorable(BadRequest("Wrong file identifier"))
    assert not is_ignorable(RuntimeError("Message is not modified"))
