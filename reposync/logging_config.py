"""Logging setup for RepoSync, including credential masking at the handler boundary."""

import logging
import re
from typing import Iterable, Optional

# Matches the userinfo part of a URL: scheme://user:token@ or scheme://token@
_CREDENTIALS_PATTERN = re.compile(r"//[^/\s@]+@")

MASKED_CREDENTIALS = "//***:***@"

REPOSYNC_LOGGERS = [
    'reposync.init',
    'reposync.config',
    'reposync.git_sync',
    'reposync.error_handler',
    'reposync.server',
    'reposync.scheduler',
]


def mask_credentials(text: str) -> str:
    """Replace any credentials embedded in URLs within ``text`` by placeholders."""
    if not text:
        return text
    return _CREDENTIALS_PATTERN.sub(MASKED_CREDENTIALS, text)


class CredentialMaskingFilter(logging.Filter):
    """
    Mask URL credentials in every record passing through a handler.

    The record's message is rendered once with its args and the masked
    result replaces both, so handlers further down never see the secret.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)
        masked = mask_credentials(message)
        if masked != message or record.args:
            record.msg = masked
            record.args = None
        return True


class StructuredFormatter(logging.Formatter):
    """Prefix messages with the structured ``operation`` field when present."""

    def format(self, record):
        if hasattr(record, 'operation'):
            record.msg = f"[{record.operation}] {record.msg}"
        return super().format(record)


def install_masking_filter(handlers: Iterable[logging.Handler]) -> None:
    """Attach a CredentialMaskingFilter to each handler (once)."""
    for handler in handlers:
        if not any(isinstance(f, CredentialMaskingFilter) for f in handler.filters):
            handler.addFilter(CredentialMaskingFilter())


def setup_logging(log_level: str = "INFO", logger_names: Optional[Iterable[str]] = None) -> None:
    """Configure the RepoSync loggers with structured, credential-masked output."""
    level = getattr(logging, log_level.upper())

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    install_masking_filter(logging.getLogger().handlers)

    formatter = StructuredFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    for logger_name in logger_names or REPOSYNC_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

        # Add console handler if not already present
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.propagate = False
        install_masking_filter(logger.handlers)
