from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from telegram import Update
from telegram.ext import ContextTypes

from ...core.i18n import t
from ...core.permissions import is_exempt, require_group
from ...core.services import get_services, pick_lang
from ...infra.rules_repo import MIN_RULES_LENGTH

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowRules:
    pass


@dataclass(frozen=True)
class SetRules:
    text: str


@dataclass(frozen=True)
class ResetRules:
    pass


@dataclass(frozen=True)
class InvalidRules:
    subcommand: str


RulesCommand = Union[ShowRules, SetRules, ResetRules, InvalidRules]


def text_after_subcommand(text: Optional[str]) -> str:
    """Everything after `/rules set`, line breaks and spacing kept."""
    parts = (text or "").split(None, 2)
    return parts[2].strip() if len(parts) > 2 else ""


def parse_rules_args(args: Sequence[str], text: Optional[str] = None) -> RulesCommand:
    """Classify `/rules` arguments. The raw message text, when given, supplies the rules for `set`."""
    if not args:
        return ShowRules()
    sub = args[0].lower()
    if sub == "show":
        return ShowRules()
    if sub == "set":
        if text is not None:
            return SetRules(text_after_subcommand(text))
        return SetRules(" ".join(args[1:]).strip())
    if sub == "reset":
        return ResetRules()
    return InvalidRules(sub)


@require_group
async def rules(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    lang = pick_lang(update, context)
    msg = update.effective_message
    gid = update.effective_chat.id
    repo = get_services(context).rules
    cmd = parse_rules_args(context.args or [], msg.text)

    if isinstance(cmd, ShowRules):
        text = (await repo.get_text(gid)).value
        if not text:
            return await msg.reply_text(t(lang, "rules.none"))
        return await msg.reply_text(t(lang, "rules.current", rules=text))

    if isinstance(cmd, InvalidRules):
        return await msg.reply_text(t(lang, "rules.invalid"))

    uid = update.effective_user.id if update.effective_user else 0
    if not await is_exempt(context.bot, gid, uid):
        return await msg.reply_text(t(lang, "rules.admins_only"))

    if isinstance(cmd, SetRules):
        if not cmd.text:
            return await msg.reply_text(t(lang, "rules.set.usage"))
        result = await repo.set_rules(gid, cmd.text)
        if not result.ok:
            log.info("rules set rejected gid=%s uid=%s error=%s", gid, uid, result.error)
            return await msg.reply_text(t(lang, "rules.set.failed", min_length=MIN_RULES_LENGTH))
        return await msg.reply_text(t(lang, "rules.set.ok", rules=cmd.text))

    result = await repo.reset_rules(gid)
    await msg.reply_text(t(lang, "rules.reset.ok" if result.ok else "rules.reset.failed"))
