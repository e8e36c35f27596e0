from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..core.prompt import build_prompt

log = logging.getLogger(__name__)

MIN_RULES_LENGTH = 20

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StoreResult[T]":
        return cls(True, value)

    @classmethod
    def failure(cls, error: str) -> "StoreResult[T]":
        return cls(False, None, error)


def rules_key(chat_id: int) -> str:
    return f"group_simple_rules:{chat_id}"


def created_key(chat_id: int) -> str:
    return f"group_rules_created:{chat_id}"


class RulesRepo:
    """Per-chat rule text and its creation time, kept as two Redis string keys."""

    def __init__(self, client: Redis) -> None:
        self.r = client

    async def get_text(self, chat_id: int) -> StoreResult[str]:
        try:
            text = await self.r.get(rules_key(chat_id))
        except RedisError as e:
            log.warning("rules get failed chat=%s: %s", chat_id, e)
            return StoreResult.failure("store_error")
        return StoreResult.success(text or None)

    async def get_created_at(self, chat_id: int) -> StoreResult[int]:
        try:
            raw = await self.r.get(created_key(chat_id))
        except RedisError as e:
            log.warning("rules created_at get failed chat=%s: %s", chat_id, e)
            return StoreResult.failure("store_error")
        if not raw:
            return StoreResult.success(None)
        try:
            return StoreResult.success(int(raw, 10))
        except (TypeError, ValueError):
            log.warning("rules created_at not an integer chat=%s value=%r", chat_id, raw)
            return StoreResult.success(None)

    async def set_rules(self, chat_id: int, text: str) -> StoreResult[str]:
        """Store trimmed rules with the current time; the value is the full system prompt."""
        rules = text.strip()
        if len(rules) < MIN_RULES_LENGTH:
            return StoreResult.failure("too_short")
        now = int(time.time())
        try:
            # MSET writes both keys atomically
            await self.r.mset({rules_key(chat_id): rules, created_key(chat_id): str(now)})
        except RedisError as e:
            log.warning("rules set failed chat=%s: %s", chat_id, e)
            return StoreResult.failure("store_error")
        log.info("rules set chat=%s len=%s created=%s", chat_id, len(rules), now)
        return StoreResult.success(build_prompt(rules))

    async def reset_rules(self, chat_id: int) -> StoreResult[None]:
        try:
            await self.r.delete(rules_key(chat_id), created_key(chat_id))
        except RedisError as e:
            log.warning("rules reset failed chat=%s: %s", chat_id, e)
            return StoreResult.failure("store_error")
        log.info("rules reset chat=%s", chat_id)
        return StoreResult.success()
