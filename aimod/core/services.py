from __future__ import annotations

from dataclasses import dataclass

from telegram import Update
from telegram.ext import Application, ContextTypes

from ..infra.rules_repo import RulesRepo
from ..infra.store import close_redis
from ..infra.vlm_client import VLMClient
from .i18n import I18N

SERVICES_KEY = "services"


@dataclass
class Services:
    """Long-lived collaborators built once at startup and shared by all handlers."""

    rules: RulesRepo
    vlm: VLMClient
    default_lang: str = "en"

    async def aclose(self) -> None:
        await close_redis(self.rules.r)
        await self.vlm.client.close()


def install(app: Application, services: Services) -> None:
    app.bot_data[SERVICES_KEY] = services


def get_services(context: ContextTypes.DEFAULT_TYPE) -> Services:
    return context.bot_data[SERVICES_KEY]


def pick_lang(update: Update, context: ContextTypes.DEFAULT_TYPE) -> str:
    """User language, else the configured default language."""
    services = (context.bot_data or {}).get(SERVICES_KEY)
    return I18N.pick_lang(update, fallback=services.default_lang if services else "en")

