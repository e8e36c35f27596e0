"""Report workflow: check a replied-to message against the group rules and enforce.

States run ``Start -> Validated -> RulesChecked -> Analyzing -> Decided`` and end
in one of the :class:`ReportState` terminals. Every Bot API call is guarded at
its call site; the model call itself never raises (see ``VLMClient.analyze``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from typing import Any, Optional, Tuple

from telegram import Chat, Message
from telegram.error import TelegramError

from ...core.i18n import t
from ...core.permissions import is_exempt, is_moderated_chat
from ...core.prompt import build_prompt
from ...core.services import Services
from ...core.utils import MUTED_PERMISSIONS, button_labels, user_label
from ...infra.vlm_client import InlineImage, UserContent, Verdict, build_user_content

log = logging.getLogger(__name__)

PHOTO_MIME_TYPE = "image/jpeg"


class ReportState(str, Enum):
    ABORTED = "aborted"
    ACTION_SKIPPED = "action_skipped"
    CLEARED = "cleared"
    ACTION_TAKEN = "action_taken"


@dataclass(frozen=True)
class ImageRef:
    file_id: str
    mime_type: str = PHOTO_MIME_TYPE


@dataclass(frozen=True)
class ReportRequest:
    chat_id: int
    message_id: int
    user_id: int
    user_display: str
    text: str
    sent_at: int
    buttons: Tuple[str, ...] = ()
    image: Optional[ImageRef] = None


@dataclass(frozen=True)
class ReportResult:
    state: ReportState
    verdict: Optional[Verdict] = None
    enforced: bool = False
    request: Optional[ReportRequest] = field(default=None, compare=False)


def find_image(message: Message) -> Optional[ImageRef]:
    if message.photo:
        # Sizes are sorted ascending; the last one is the original
        return ImageRef(message.photo[-1].file_id, PHOTO_MIME_TYPE)
    doc = message.document
    if doc and doc.mime_type and doc.mime_type.startswith("image/"):
        return ImageRef(doc.file_id, doc.mime_type)
    return None


def capture_request(message: Message, lang: str) -> Optional[ReportRequest]:
    """Snapshot the reported message, or None when it has nothing to analyze."""
    text = message.text or message.caption or ""
    image = find_image(message)
    if not text and image is None:
        return None
    user = message.from_user
    return ReportRequest(
        chat_id=message.chat_id,
        message_id=message.message_id,
        user_id=user.id,
        user_display=user_label(lang, user),
        text=text,
        sent_at=int(message.date.timestamp()),
        buttons=tuple(button_labels(message.reply_markup)),
        image=image,
    )


def describe_request(request: ReportRequest) -> str:
    """Instruction text sent as the user turn of the model request."""
    markup = ""
    if request.buttons:
        quoted = '", "'.join(request.buttons)
        markup = f' The message includes inline keyboard buttons with the following texts: "{quoted}".'
    analysis = f'Analyze this message for rule violations: "{request.text}"{markup}'
    if request.image is None:
        return analysis
    if request.text:
        return f"{analysis} (The text is the image caption.)"
    return f"Analyze this image for rule violations.{markup}"


class ReportWorkflow:
    def __init__(self, bot: Any, services: Services, lang: str = "en") -> None:
        self.bot = bot
        self.services = services
        self.lang = lang

    async def run(self, chat: Optional[Chat], command: Message) -> ReportResult:
        if not is_moderated_chat(chat):
            await self._say(command.chat_id, t(self.lang, "errors.group_only"))
            return ReportResult(ReportState.ABORTED)
        chat_id = chat.id

        replied = command.reply_to_message
        if replied is None or replied.from_user is None:
            await self._say(chat_id, t(self.lang, "report.usage"))
            return ReportResult(ReportState.ABORTED)

        request = capture_request(replied, self.lang)
        if request is None:
            await self._say(chat_id, t(self.lang, "report.no_content"))
            return ReportResult(ReportState.ABORTED)

        if await is_exempt(self.bot, chat_id, request.user_id):
            await self._say(chat_id, t(self.lang, "report.exempt", user=request.user_display))
            return ReportResult(ReportState.ACTION_SKIPPED, request=request)

        status = await self._say(chat_id, t(self.lang, "report.analyzing"))
        if status is None:
            return ReportResult(ReportState.ABORTED, request=request)
        status_id = status.message_id

        try:
            rules = (await self.services.rules.get_text(chat_id)).value
            if not rules:
                await self._edit(chat_id, status_id, t(self.lang, "report.no_rules"))
                return ReportResult(ReportState.ABORTED, request=request)

            created_at = (await self.services.rules.get_created_at(chat_id)).value
            if created_at is not None and request.sent_at < created_at:
                await self._edit(chat_id, status_id, t(self.lang, "report.predates_rules"))
                return ReportResult(ReportState.ABORTED, request=request)

            content = await self._user_content(request)
            verdict = await self.services.vlm.analyze(build_prompt(rules), content)
        except Exception as e:
            log.exception("report analysis failed chat=%s mid=%s: %s", chat_id, request.message_id, e)
            await self._edit(chat_id, status_id, t(self.lang, "report.failed"))
            return ReportResult(ReportState.ABORTED, request=request)

        log.info(
            "report verdict chat=%s mid=%s uid=%s violates=%s",
            chat_id, request.message_id, request.user_id, verdict.violates,
        )
        key = "report.violation" if verdict.violates else "report.clear"
        await self._edit(chat_id, status_id, t(self.lang, key, reason=verdict.reason))

        if not verdict.violates:
            return ReportResult(ReportState.CLEARED, verdict=verdict, request=request)

        enforced = await self._enforce(request)
        if enforced:
            text = t(
                self.lang, "report.muted",
                user=request.user_display, reason=verdict.reason, user_id=request.user_id,
            )
        else:
            text = t(self.lang, "report.action_failed", user=request.user_display, reason=verdict.reason)
        await self._say(chat_id, text)
        return ReportResult(ReportState.ACTION_TAKEN, verdict=verdict, enforced=enforced, request=request)

    async def _user_content(self, request: ReportRequest) -> UserContent:
        text = describe_request(request)
        if request.image is None:
            return build_user_content(text)
        # Only the bytes leave this process; the Telegram file URL embeds the bot token
        data = await self._download(request.image.file_id)
        return build_user_content(text, InlineImage(data, request.image.mime_type))

    async def _download(self, file_id: str) -> bytes:
        file = await self.bot.get_file(file_id)
        buf = BytesIO()
        await file.download_to_memory(buf)
        return buf.getvalue()

    async def _enforce(self, request: ReportRequest) -> bool:
        try:
            await self.bot.delete_message(request.chat_id, request.message_id)
            # No until_date: the restriction never expires
            await self.bot.restrict_chat_member(
                request.chat_id, request.user_id, permissions=MUTED_PERMISSIONS
            )
        except TelegramError as e:
            log.warning(
                "report enforcement failed chat=%s uid=%s mid=%s: %s",
                request.chat_id, request.user_id, request.message_id, e,
            )
            return False
        log.info("muted chat=%s uid=%s for reported mid=%s", request.chat_id, request.user_id, request.message_id)
        return True

    async def _say(self, chat_id: int, text: str) -> Optional[Message]:
        try:
            return await self.bot.send_message(chat_id=chat_id, text=text)
        except TelegramError as e:
            log.error("send_message failed chat=%s: %s", chat_id, e)
            return None

    async def _edit(self, chat_id: int, message_id: int, text: str) -> None:
        try:
            await self.bot.edit_message_text(text, chat_id=chat_id, message_id=message_id)
        except TelegramError as e:
            log.error("edit_message_text failed chat=%s mid=%s: %s", chat_id, message_id, e)
