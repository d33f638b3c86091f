# config.py
import os
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using {default}")
        return default


CREDENTIALS_FILE = os.getenv("GMAIL_CREDENTIALS_FILE", "credentials.json")
TOKEN_PICKLE = os.getenv("GMAIL_TOKEN_FILE", "token.pickle")

HTML_CONVERSION_TIMEOUT_MS = _int_env("HTML_CONVERSION_TIMEOUT_MS", 500)
HTML_TEXT_WIDTH = _int_env("HTML_TEXT_WIDTH", 80)
FETCH_CONCURRENCY = _int_env("FETCH_CONCURRENCY", 8)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_sink_id = None


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Route loguru output to stderr at the given level. Safe to call repeatedly."""
    global _sink_id
    if _sink_id is not None:
        return
    logger.remove()
    _sink_id = logger.add(sys.stderr, format=LOG_FORMAT, level=level)
