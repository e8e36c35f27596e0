from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from ...core.i18n import t
from ...core.permissions import is_exempt, require_group
from ...core.services import pick_lang
from ...core.utils import UNMUTED_PERMISSIONS, user_label

log = logging.getLogger(__name__)

USER_ID_RE = re.compile(r"-?[0-9]+")


def parse_user_id(args: Sequence[str]) -> Optional[int]:
    if not args:
        return None
    raw = args[0].strip()
    if not USER_ID_RE.fullmatch(raw):
        return None
    return int(raw)


@require_group
async def unmute(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    lang = pick_lang(update, context)
    msg = update.effective_message
    gid = update.effective_chat.id
    target_id = parse_user_id(context.args or [])
    if target_id is None:
        return await msg.reply_text(t(lang, "unmute.usage"))

    uid = update.effective_user.id if update.effective_user else 0
    if not await is_exempt(context.bot, gid, uid):
        return await msg.reply_text(t(lang, "unmute.admins_only"))

    try:
        await context.bot.restrict_chat_member(gid, target_id, permissions=UNMUTED_PERMISSIONS)
    except TelegramError as e:
        log.exception("unmute failed gid=%s uid=%s: %s", gid, target_id, e)
        return await msg.reply_text(t(lang, "unmute.failed", user_id=target_id))

    display = t(lang, "user.id_only", user_id=target_id)
    try:
        member = await context.bot.get_chat_member(gid, target_id)
        if member.user.username or member.user.first_name:
            display = user_label(lang, member.user, target_id)
    except TelegramError as e:
        log.debug("unmute member lookup failed gid=%s uid=%s: %s", gid, target_id, e)
    log.info("unmuted gid=%s uid=%s by=%s", gid, target_id, uid)
    await msg.reply_text(t(lang, "unmute.ok", user=display))
