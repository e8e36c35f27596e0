from __future__ import annotations

import pytest
from telegram.error import NetworkError

from aimod.core.permissions import ANONYMOUS_SENDER_IDS, is_exempt

from fakes import GROUP_ID


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", sorted(ANONYMOUS_SENDER_IDS))
async def test_anonymous_senders_exempt_without_lookup(bot, user_id) -> None:
    assert await is_exempt(bot, GROUP_ID, user_id)
    assert bot.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, expected",
    [
        ("administrator", True),
        ("creator", True),
        ("member", False),
        ("restricted", False),
        ("left", False),
    ],
)
async def test_membership_status(bot, status, expected) -> None:
    bot.statuses[42] = status
    assert await is_exempt(bot, GROUP_ID, 42) is expected


@pytest.mark.asyncio
async def test_lookup_error_is_not_exempt(bot) -> None:
    bot.member_error = NetworkError("timed out")
    assert not await is_exempt(bot, GROUP_ID, 42)
