from __future__ import annotations

import logging
import sys
from typing import List

from pydantic import ValidationError
from telegram import BotCommand, Update
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
)

from .core.config import Settings, get_settings
from .core.error_handler import setup_error_handlers
from .core.i18n import I18N, t
from .core.logging_config import get_logger, setup_logging
from .core.services import SERVICES_KEY, Services, install, pick_lang
from .features.moderation import register as register_moderation
from .features.report import register as register_report
from .features.rules import register as register_rules
from .infra.rules_repo import RulesRepo
from .infra.store import create_redis
from .infra.vlm_client import VLMClient, make_openai_client

log = get_logger(__name__)


async def set_bot_commands(app: Application) -> None:
    cmds: List[BotCommand] = [
        BotCommand("help", "Show help"),
        BotCommand("rules", "Show, set or reset group rules"),
        BotCommand("report", "Reply to a message to check it against the rules"),
        BotCommand("unmute", "Unmute a user by id (admins)"),
    ]
    try:
        await app.bot.set_my_commands(cmds)
    except TelegramError as e:
        log.warning("set_my_commands failed: %s", e)


async def on_shutdown(app: Application) -> None:
    services: Services | None = app.bot_data.get(SERVICES_KEY)
    if services is not None:
        await services.aclose()


def build_services(settings: Settings) -> Services:
    redis_client = create_redis(settings.REDIS_URL, timeout=settings.STORE_TIMEOUT)
    vlm = VLMClient(
        make_openai_client(settings.HF_TOKEN, settings.VLM_BASE_URL, settings.VLM_TIMEOUT),
        model=settings.VLM_MODEL,
        max_tokens=settings.VLM_MAX_TOKENS,
        timeout=settings.VLM_TIMEOUT,
    )
    return Services(rules=RulesRepo(redis_client), vlm=vlm, default_lang=settings.DEFAULT_LANG)


def make_app(settings: Settings, services: Services) -> Application:
    I18N.load_locales()

    timeout = settings.TELEGRAM_TIMEOUT
    app = (
        ApplicationBuilder()
        .token(settings.BOT_TOKEN)
        .connect_timeout(timeout)
        .read_timeout(timeout)
        .write_timeout(timeout)
        .pool_timeout(timeout)
        .get_updates_read_timeout(timeout)
        .concurrent_updates(True)
        .post_init(set_bot_commands)
        .post_shutdown(on_shutdown)
        .build()
    )
    install(app, services)

    app.add_handler(CommandHandler(["help", "bot", "start"], help_))

    register_rules(app)
    register_moderation(app)
    register_report(app)

    setup_error_handlers(app)

    return app


async def help_(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.effective_message.reply_text(t(pick_lang(update, context), "help.text"))


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR)
        log.error("Invalid configuration, refusing to start:\n%s", e)
        sys.exit(1)

    setup_logging(
        debug=settings.DEBUG,
        log_dir=settings.LOG_DIR,
        secrets=(settings.BOT_TOKEN, settings.HF_TOKEN),
    )
    log.info("Bot starting in %s mode (model=%s)", settings.RUN_MODE, settings.VLM_MODEL)

    services = build_services(settings)
    app = make_app(settings, services)

    if settings.RUN_MODE == "polling":
        app.run_polling(allowed_updates=["message"], drop_pending_updates=True)
        return

    import uvicorn

    from .web import create_api

    api = create_api(app, settings.WEBHOOK_URL, on_startup=set_bot_commands, on_shutdown=on_shutdown)
    uvicorn.run(api, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
