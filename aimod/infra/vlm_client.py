"""Vision/language model client for rule-violation checks."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import openai
from openai import AsyncOpenAI

from ..core.config import DEFAULT_VLM_MODEL, HF_ROUTER_URL

log = logging.getLogger(__name__)

UserContent = Union[str, List[Dict[str, Any]]]

NO_RESPONSE_REASON = "No analysis response"
UNAVAILABLE_REASON = "Analysis unavailable"
UNSPECIFIED_REASON = "Unspecified"


@dataclass(frozen=True)
class Verdict:
    violates: bool
    reason: str


@dataclass(frozen=True)
class InlineImage:
    data: bytes
    mime_type: str = "image/jpeg"


def encode_image(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def build_user_content(text: str, image: Optional[InlineImage] = None) -> UserContent:
    """User message content: plain text, or text plus an inline base64 image part."""
    if image is None:
        return text
    return [
        {"type": "text", "text": text},
        {
            "type": "image_url",
            "image_url": {"url": f"data:{image.mime_type};base64,{encode_image(image.data)}"},
        },
    ]


def parse_verdict(content: Optional[str]) -> Verdict:
    """Interpret a ``YES``/``NO`` first line followed by a reason."""
    parts = [line.strip() for line in (content or "").split("\n") if line.strip()]
    if not parts:
        return Verdict(False, NO_RESPONSE_REASON)
    decision = parts[0].upper()
    reason = " ".join(parts[1:]) or UNSPECIFIED_REASON
    return Verdict(decision == "YES", reason)


def make_openai_client(api_key: str, base_url: str = HF_ROUTER_URL, timeout: float = 10.0) -> AsyncOpenAI:
    if not api_key:
        raise ValueError("HF_TOKEN is not set")
    return AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)


class VLMClient:
    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = DEFAULT_VLM_MODEL,
        max_tokens: int = 150,
        timeout: float = 10.0,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def analyze(self, system_prompt: str, user_content: UserContent) -> Verdict:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=0,
                timeout=self.timeout,
            )
        except openai.APITimeoutError:
            log.warning("VLM request timed out after %ss", self.timeout)
            return Verdict(False, UNAVAILABLE_REASON)
        except openai.APIStatusError as e:
            log.error("VLM API error status=%s: %s", e.status_code, e)
            return Verdict(False, UNAVAILABLE_REASON)
        except openai.OpenAIError as e:
            log.error("VLM request failed: %s", e)
            return Verdict(False, UNAVAILABLE_REASON)

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices and choices[0].message else None
        verdict = parse_verdict(content)
        log.debug("VLM verdict violates=%s reason=%r", verdict.violates, verdict.reason)
        return verdict
