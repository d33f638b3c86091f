# url_remover.py
import re

URL_PATTERN = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
WHITESPACE_RUN = re.compile(r"\s+")


def remove_urls(text: str) -> str:
    """Strip http(s):// and www. locators, leaving the surrounding text untouched."""
    return URL_PATTERN.sub("", text)


def clean_text(text: str) -> str:
    """Remove URLs, collapse whitespace and drop blank lines.

    Idempotent: clean_text(clean_text(x)) == clean_text(x).
    """
    collapsed = WHITESPACE_RUN.sub(" ", remove_urls(text))
    lines = [line for line in collapsed.splitlines() if line.strip()]
    return "\n".join(lines).strip()
