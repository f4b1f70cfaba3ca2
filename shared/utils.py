import logging
import re
import time

from shared.config import config

GOOGLE_SLIDES_URL_PATTERN = re.compile(r"/presentation/d/([a-zA-Z0-9_-]+)")
BARE_PRESENTATION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def setup_logging(service_name: str, log_level: str | None = None) -> logging.Logger:
    """Setup logging configuration for a service"""
    logger = logging.getLogger(service_name)
    level = log_level or config.get("log_level", "INFO")
    logger.setLevel(getattr(logging, level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(f"%(asctime)s - {service_name} - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def validate_text_length(text: str, max_length: int = 10000) -> str:
    """Validate and truncate text if necessary"""
    if len(text) > max_length:
        return text[:max_length]
    return text


def extract_google_slides_id(value: str) -> str | None:
    """Return the presentation id from a Google Slides URL or a bare id.

    ``https://docs.google.com/presentation/d/ABC123/edit`` yields ``ABC123``;
    a bare id made of letters, digits, ``-`` and ``_`` is returned unchanged.
    Anything else yields ``None``.
    """
    candidate = (value or "").strip()
    if not candidate:
        return None

    match = GOOGLE_SLIDES_URL_PATTERN.search(candidate)
    if match:
        return match.group(1)

    if BARE_PRESENTATION_ID_PATTERN.match(candidate):
        return candidate
    return None
