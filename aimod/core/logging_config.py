"""Logging setup: colored console, daily rotating file, secret redaction."""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

APP_LOGGER = "aimod"

# Third-party loggers kept above INFO; httpx logs every Bot API URL, token included
LIBRARY_LEVELS = {
    "telegram": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "openai": logging.WARNING,
    "redis": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "asyncio": logging.ERROR,
}

CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d) - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints the level name."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno)
        if not color:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


class RedactSecrets(logging.Filter):
    """Replace configured secrets (bot token, HF token) in messages and tracebacks."""

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        self.secrets = tuple(s for s in secrets if s)

    def scrub(self, text: str) -> str:
        for secret in self.secrets:
            text = text.replace(secret, "***")
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = self.scrub(message)
        if redacted != message:
            record.msg, record.args = redacted, None
        # Formatters reuse a cached exc_text, so render it here first
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.scrub(record.exc_text)
        if record.stack_info:
            record.stack_info = self.scrub(record.stack_info)
        return True


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / f"aimod_{datetime.now():%Y%m%d}.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    debug: bool = False,
    log_dir: Optional[str] = "logs",
    secrets: Iterable[str] = (),
) -> None:
    """Configure root logging once at startup. An empty ``log_dir`` keeps logs on the console only."""
    level = logging.DEBUG if debug else logging.INFO
    redact = RedactSecrets(secrets)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    handlers = [console]
    if log_dir:
        handlers.append(_file_handler(Path(log_dir)))
    for handler in handlers:
        handler.addFilter(redact)
        root.addHandler(handler)

    logging.getLogger(APP_LOGGER).setLevel(level)
    for name, lib_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(lib_level)

    logging.getLogger(__name__).info(
        "Logging configured (level=%s, file=%s)", logging.getLevelName(level), log_dir or "disabled"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
