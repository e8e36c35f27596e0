"""Application-level error handler for exceptions that escape a command."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar

from telegram import Update
from telegram.error import RetryAfter, TelegramError, TimedOut
from telegram.ext import Application, ContextTypes

from .i18n import t
from .services import pick_lang

log = logging.getLogger(__name__)

# Bot API failures that moderation races produce routinely (message already
# deleted by another admin, target promoted meanwhile, ...)
IGNORE_ERRORS = (
    "Message is not modified",
    "Message to delete not found",
    "Message can't be deleted",
    "Chat not found",
    "Not enough rights",
    "User is an administrator of the chat",
    "Can't restrict self",
)

T = TypeVar("T")


def is_ignorable(error: BaseException) -> bool:
    return isinstance(error, TelegramError) and any(s in str(error) for s in IGNORE_ERRORS)


def _retry_delay(error: RetryAfter) -> float:
    delay = error.retry_after
    if isinstance(delay, timedelta):
        delay = delay.total_seconds()
    return float(delay) + 1


async def send_with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    label: str = "send_message",
    attempts: int = 3,
    **kwargs: Any,
) -> T | None:
    """Call a Bot API method, waiting out flood control and timeouts.

    Gives up (returning None) on any other Telegram error or after ``attempts`` tries.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await func(*args, **kwargs)
        except RetryAfter as e:
            delay = _retry_delay(e)
            log.warning("%s hit flood control, retry %s/%s in %.0fs", label, attempt, attempts, delay)
        except TimedOut:
            delay = 2 ** attempt
            log.warning("%s timed out, retry %s/%s in %ss", label, attempt, attempts, delay)
        except TelegramError as e:
            log.error("%s failed: %s", label, e)
            return None
        if attempt < attempts:
            await asyncio.sleep(delay)
    return None


class ErrorHandler:

    @staticmethod
    async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        error = context.error
        if error is None:
            return
        if is_ignorable(error):
            log.debug("Ignoring Bot API error: %s", error)
            return

        chat = update.effective_chat if isinstance(update, Update) else None
        user = update.effective_user if isinstance(update, Update) else None
        log.error(
            "Unhandled error chat=%s uid=%s",
            chat.id if chat else None,
            user.id if user else None,
            exc_info=error,
        )
        if chat is None:
            return
        await send_with_retry(
            context.bot.send_message,
            chat_id=chat.id,
            text=t(pick_lang(update, context), "errors.generic"),
            label="error_reply",
        )


def setup_error_handlers(application: Application) -> None:
    application.add_error_handler(ErrorHandler.handle_error)
    log.info("Error handler registered")
