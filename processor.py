# processor.py
from typing import Iterable, Optional

from loguru import logger as default_logger

from models import GmailMessage, MessagePart

PLAIN_TEXT = "text/plain"


def _decode(data: Optional[bytes], log=default_logger) -> Optional[str]:
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        log.warning(f"Failed to decode body payload as UTF-8: {e}")
        return None


def find_plain_text(parts: Iterable[MessagePart], log=default_logger) -> Optional[str]:
    """Depth-first, left-to-right search for the first decodable text/plain part.

    A part's own payload is checked before its children are visited.
    """
    for part in parts:
        if part.mime_type == PLAIN_TEXT:
            txt = _decode(part.data, log)
            if txt is not None:
                return txt
        if part.parts:
            txt = find_plain_text(part.parts, log)
            if txt is not None:
                return txt
    return None


def extract_body(msg: GmailMessage, log=default_logger) -> str:
    """Return the message body: the top-level payload if it decodes, else the first
    text/plain part found in the tree, else an empty string."""
    payload = msg.payload
    if payload is None:
        log.warning(f"Message {msg.id} has no payload")
        return ""

    txt = _decode(payload.data, log)
    if txt is not None:
        log.debug(f"Extracted top-level body for {msg.id} ({len(txt)} chars)")
        return txt

    txt = find_plain_text(payload.parts, log)
    if txt is not None:
        log.debug(f"Extracted text/plain part for {msg.id} ({len(txt)} chars)")
        return txt

    log.warning(f"No body content found in message {msg.id}")
    return ""
