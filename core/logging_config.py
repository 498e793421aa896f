"""
Logging Configuration Module.

Rotating file log plus console output, both masking credentials that pass
through the auth flow (passwords, access/refresh tokens, the anon key,
bearer headers, JWTs) and partially masking email addresses.
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
import sys


# --- Constants ---
LOG_FILENAME = "hr_portal.log"
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn", "uvicorn.access", "uvicorn.error", "watchfiles")

# --- Sensitive Data Patterns ---
SENSITIVE_PATTERNS = [
    # Key-value pairs with sensitive keys (password=xxx, "refresh_token": "xxx")
    (
        re.compile(
            r"(password|secret|token|access_token|refresh_token|anon_key|api_key|apikey|"
            r"authorization|cookie|hr_session)(['\"]?\s*[:=]\s*)['\"]?([^'\"\s&,}]+)['\"]?",
            re.IGNORECASE
        ),
        r"\1=***"
    ),
    # Bearer tokens in headers (including full JWT with dots)
    (
        re.compile(r"(Bearer\s+)([A-Za-z0-9\-_\.]+)", re.IGNORECASE),
        r"\1***"
    ),
    # JWT tokens standalone (anon key and access tokens are JWTs)
    (
        re.compile(r"\b(eyJ[A-Za-z0-9\-_]+\.eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+)\b"),
        r"[JWT:***]"
    ),
    # URL query parameters with sensitive names
    (
        re.compile(
            r"([?&])(token|key|apikey|api_key|access_token|refresh_token)=([^&\s]+)",
            re.IGNORECASE
        ),
        r"\1\2=***"
    ),
    # Email addresses (first 2 chars + *** + @domain)
    (
        re.compile(r"\b([a-zA-Z0-9._%+-]{2})([a-zA-Z0-9._%+-]*)(@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b"),
        r"\1***\3"
    ),
]


class SensitiveDataFormatter(logging.Formatter):
    """Log formatter that masks credentials and email addresses."""

    def format(self, record: logging.LogRecord) -> str:
        masked_msg = super().format(record)
        for pattern, replacement in SENSITIVE_PATTERNS:
            masked_msg = pattern.sub(replacement, masked_msg)
        return masked_msg


def get_log_path(logs_dir: Optional[Path] = None) -> Path:
    """Path of the log file; the directory is created when missing."""
    if logs_dir is None:
        logs_dir = Path(__file__).resolve().parent.parent / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir / LOG_FILENAME


def parse_log_level(name: str, default: int = logging.INFO) -> int:
    """Map APP_LOG_LEVEL ("DEBUG", "info", ...) to a logging level."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


def setup_logging(log_level: int = logging.INFO, logs_dir: Optional[Path] = None) -> Path:
    """
    Configure application logging with rotation.

    Args:
        log_level: The logging level (default: logging.INFO).
        logs_dir: Directory for the log file (default: <project>/logs).

    Returns:
        Path of the log file.
    """
    log_file_path = get_log_path(logs_dir)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    formatter = SensitiveDataFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # --- File Handler (Rotating) ---
    file_handler = RotatingFileHandler(
        filename=str(log_file_path),
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.info(f"Logging initialized. Log file: {log_file_path}")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file_path
