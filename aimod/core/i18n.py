from __future__ import annotations

import json
import logging
from typing import Any, Dict
from importlib import resources

from telegram import Update


log = logging.getLogger(__name__)

LANGUAGES = ("en",)


class I18N:
    _messages: Dict[str, Dict[str, str]] = {}

    @classmethod
    def load_locales(cls) -> None:
        # Load packaged locale files
        for lang in LANGUAGES:
            try:
                data = resources.files("aimod.locales").joinpath(f"{lang}.json").read_text(encoding="utf-8")
                cls._messages[lang] = json.loads(data)
            except (OSError, ValueError) as e:  # pragma: no cover
                log.warning("Failed to load locale %s: %s", lang, e)

    @staticmethod
    def pick_lang(update: Update, fallback: str = "en") -> str:
        lc = (update.effective_user and update.effective_user.language_code) or None
        if lc:
            lc = lc.split("-")[0]
            if lc in I18N._messages:
                return lc
        return fallback if fallback in I18N._messages else "en"


def t(lang: str, key: str, **kwargs: Any) -> str:
    if not I18N._messages:
        I18N.load_locales()
    msg = I18N._messages.get(lang, {}).get(key)
    if msg is None:
        # fallback to English
        msg = I18N._messages.get("en", {}).get(key, key)
    try:
        return msg.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return msg
