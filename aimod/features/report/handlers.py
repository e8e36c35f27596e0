from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import ContextTypes

from ...core.services import get_services, pick_lang
from .workflow import ReportWorkflow

log = logging.getLogger(__name__)


async def report(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    msg = update.effective_message
    if not msg:
        return
    services = get_services(context)
    lang = pick_lang(update, context)
    result = await ReportWorkflow(context.bot, services, lang).run(update.effective_chat, msg)
    log.debug(
        "report finished chat=%s state=%s enforced=%s",
        msg.chat_id, result.state.value, result.enforced,
    )
