from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Optional

from telegram import Chat, Update
from telegram.constants import ChatMemberStatus, ChatType
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from .i18n import t
from .services import pick_lang

log = logging.getLogger(__name__)

# Telegram shows messages sent "as the group" (GroupAnonymousBot) or by a
# linked channel (Channel_Bot) under these shared user ids.
ANONYMOUS_SENDER_IDS = frozenset({1087968824, 136817688})

EXEMPT_STATUSES = (ChatMemberStatus.ADMINISTRATOR, ChatMemberStatus.OWNER)


def is_moderated_chat(chat: Optional[Chat]) -> bool:
    return bool(chat and chat.type == ChatType.SUPERGROUP)


async def is_exempt(bot: Any, chat_id: int, user_id: int) -> bool:
    """True for anonymous group senders, admins and the creator.

    A failed membership lookup counts as not exempt.
    """
    if user_id in ANONYMOUS_SENDER_IDS:
        return True
    try:
        member = await bot.get_chat_member(chat_id, user_id)
    except TelegramError as e:
        log.warning("get_chat_member failed chat=%s uid=%s: %s", chat_id, user_id, e)
        return False
    return member.status in EXEMPT_STATUSES


def require_group(func: Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]):
    """Reply with a notice instead of running the command outside supergroups."""
    @functools.wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        msg = update.effective_message
        if not msg:
            return
        if not is_moderated_chat(update.effective_chat):
            lang = pick_lang(update, context)
            await msg.reply_text(t(lang, "errors.group_only"))
            return
        return await func(update, context)
    return wrapper
