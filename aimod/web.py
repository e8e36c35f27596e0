"""HTTP entry point: webhook registration, update delivery and liveness."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from telegram import Update
from telegram.error import TelegramError
from telegram.ext import Application

log = logging.getLogger(__name__)

Hook = Callable[[Application], Awaitable[None]]

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_api(
    application: Application,
    webhook_url: str,
    on_startup: Optional[Hook] = None,
    on_shutdown: Optional[Hook] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI):
        async with application:
            await application.start()
            if on_startup:
                await on_startup(application)
            try:
                yield
            finally:
                await application.stop()
                if on_shutdown:
                    await on_shutdown(application)

    api = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

    @api.api_route("/{path:path}", methods=ALL_METHODS)
    async def dispatch(request: Request, path: str) -> Response:
        if request.query_params.get("set_webhook"):
            try:
                await application.bot.set_webhook(webhook_url)
            except TelegramError as e:
                log.error("set_webhook failed url=%s: %s", webhook_url, e)
                return JSONResponse({"error": "Failed to set webhook"}, status_code=500)
            log.info("Webhook set to %s", webhook_url)
            return JSONResponse({"message": "Webhook set"})

        if request.method == "POST":
            try:
                payload = await request.json()
                update = Update.de_json(payload, application.bot)
                await application.process_update(update)
            except Exception as e:
                log.exception("Update handling failed: %s", e)
                return JSONResponse({"error": "Update handling failed"}, status_code=500)
            return JSONResponse({"ok": True})

        if request.method == "GET" and path == "":
            return PlainTextResponse("Bot is alive")

        return JSONResponse({"error": "Not found"}, status_code=404)

    return api
