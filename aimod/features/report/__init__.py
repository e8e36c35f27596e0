from __future__ import annotations

from telegram.ext import Application, CommandHandler

from .handlers import report


def register(app: Application) -> None:
    app.add_handler(CommandHandler("report", report))
