"""Logging for the bot.

Records emitted while a preview runs carry the channel, the nick that posted
the link and the link itself, taken from context variables. The preview
task inherits them from the router, so messages never need the URL in
their text.
"""
import os
import re
import logging
import logging.config
import contextvars
from contextlib import contextmanager

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

channel_var = contextvars.ContextVar("channel", default="-")
nick_var = contextvars.ContextVar("nick", default="-")
url_var = contextvars.ContextVar("url", default="-")

# IRC bold, colour (with optional fg,bg numbers) and reset codes
_CONTROL_CODES = re.compile(r"\x03(?:\d{1,2}(?:,\d{1,2})?)?|[\x02\x0f]")


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple filter
        record.channel = channel_var.get()
        record.nick = nick_var.get()
        record.url = url_var.get()
        return True


class PlainTextFormatter(logging.Formatter):
    """Formatter that drops chat formatting codes from rendered replies."""

    def format(self, record: logging.LogRecord) -> str:
        return _CONTROL_CODES.sub("", super().format(record))


def setup_logging() -> None:
    """Configure console and rotating file logging, plus Sentry if configured.

    ``LOG_LEVEL`` sets the root level; ``PREVIEW_LOG_LEVEL`` overrides it for
    the ``linkpreview`` loggers (e.g. ``DEBUG`` to trace preview states
    without aiohttp's own debug output).
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    preview_level = os.getenv("PREVIEW_LOG_LEVEL", log_level).upper()
    log_dir = os.getenv("LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": PlainTextFormatter,
                "fmt": "%(asctime)s [%(levelname)s] %(name)s [channel=%(channel)s nick=%(nick)s url=%(url)s]: %(message)s",
            }
        },
        "filters": {
            "context": {"()": ContextFilter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["context"],
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "default",
                "filters": ["context"],
                "filename": os.path.join(log_dir, "app.log"),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 5,
            },
        },
        "loggers": {
            "linkpreview": {"level": preview_level},
            "aiohttp": {"level": "WARNING"},
        },
        "root": {"handlers": ["console", "file"], "level": log_level},
    }

    logging.config.dictConfig(config)

    dsn = os.getenv("SENTRY_DSN")
    if dsn:
        logging_integration = LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
        sentry_sdk.init(dsn=dsn, integrations=[logging_integration])


@contextmanager
def logging_context(channel=None, nick=None, url=None):
    tokens = []
    if channel is not None:
        tokens.append((channel_var, channel_var.set(channel)))
    if nick is not None:
        tokens.append((nick_var, nick_var.set(nick)))
    if url is not None:
        tokens.append((url_var, url_var.set(url)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
