from __future__ import annotations

from telegram.ext import Application, CommandHandler

from .handlers import unmute


def register(app: Application) -> None:
    app.add_handler(CommandHandler("unmute", unmute))
