"""Logging setup for svcgen, with API credentials redacted from every record."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Set

_ROOT = "svcgen"
_CONSOLE_FORMAT = "[svcgen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_secrets: Set[str] = set()
_secrets_lock = threading.Lock()


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``svcgen.<name>``, or the package logger when no name is given."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def register_secret(value: str) -> None:
    """Redact ``value`` from any svcgen log output from now on."""
    if value:
        with _secrets_lock:
            _secrets.add(value)


class CredentialRedactor(logging.Filter):
    """Replaces registered secrets in the fully formatted message."""

    def filter(self, record: logging.LogRecord) -> bool:
        with _secrets_lock:
            secrets = sorted(_secrets, key=len, reverse=True)
        if not secrets:
            return True
        message = record.getMessage()
        for secret in secrets:
            message = message.replace(secret, f"{secret[:4]}***")
        record.msg = message
        record.args = None
        return True


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optional file) handlers to the svcgen logger.

    Calling this again replaces the handlers instead of stacking them.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    redactor = CredentialRedactor()
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    console.addFilter(redactor)
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        # The file always records debug detail.
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        sink.addFilter(redactor)
        logger.addHandler(sink)
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["CredentialRedactor", "configure_logging", "get_logger", "register_secret"]
