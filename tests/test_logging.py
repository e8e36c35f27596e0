from __future__ import annotations

import logging
import sys

from aimod.core.logging_config import RedactSecrets


def _record(msg, *args) -> logging.LogRecord:
    return logging.LogRecord("httpx", logging.INFO, __file__, 1, msg, args, None)


def test_tokens_are_masked() -> None:
    record = _record("POST https://api.telegram.org/bot%s/getMe", "123:secret")
    assert RedactSecrets(["123:secret", "hf_abc"]).filter(record)
    assert record.getMessage() == "POST https://api.telegram.org/bot***/getMe"


def test_clean_records_are_untouched() -> None:
    record = _record("chat=%s uid=%s", -100, 42)
    RedactSecrets(["123:secret", ""]).filter(record)
    assert record.args == (-100, 42)
    assert record.getMessage() == "chat=-100 uid=42"


def test_traceback_is_masked() -> None:
    try:
        raise RuntimeError("GET https://api.telegram.org/bot123:secret/getFile failed")
    except RuntimeError:
        record = logging.LogRecord("aimod", logging.ERROR, __file__, 1, "download failed", (), sys.exc_info())

    RedactSecrets(["123:secret"]).filter(record)
    rendered = logging.Formatter().format(record)

    assert "123:secret" not in rendered
    assert "bot***/getFile" in rendered
