# fetcher.py
import asyncio
from typing import Dict, List, Optional, Protocol

from loguru import logger as default_logger

import config
from gmail_client import PermissionDeniedError
from html_converter import HtmlConverter, looks_like_html
from models import EmailResponse, EmailSummary, GmailMessage
from processor import extract_body
from url_remover import clean_text
from utils import chunks

MAX_RESULTS_CAP = 500
DEFAULT_MAX_RESULTS = 10


class MailProvider(Protocol):
    def list_inbox_message_ids(self, limit: int) -> List[str]: ...

    def get_message_detail(self, message_id: str) -> GmailMessage: ...


def effective_limit(max_results: int, log=default_logger) -> int:
    """Gmail returns at most 500 ids per list call; 0 means "use the default"."""
    if max_results > MAX_RESULTS_CAP:
        log.error(f"Requested {max_results} messages, capping at {MAX_RESULTS_CAP}")
        return MAX_RESULTS_CAP
    if max_results == 0:
        log.error(f"Requested 0 messages, defaulting to {DEFAULT_MAX_RESULTS}")
        return DEFAULT_MAX_RESULTS
    return max_results


class _AuthAbort(Exception):
    pass


class EmailFetcher:
    def __init__(
        self,
        client: MailProvider,
        converter: Optional[HtmlConverter] = None,
        concurrency: int = config.FETCH_CONCURRENCY,
        log=default_logger,
    ):
        self.client = client
        self.log = log
        self.converter = converter or HtmlConverter(log=log)
        self.concurrency = max(1, concurrency)

    async def fetch(self, max_results: int) -> EmailResponse:
        limit = effective_limit(max_results, self.log)
        self.log.info(f"Listing up to {limit} inbox messages")
        ids = await asyncio.to_thread(self.client.list_inbox_message_ids, limit)
        if not ids:
            self.log.warning("No messages found in inbox")
            return EmailResponse.empty()
        self.log.info(f"Retrieved {len(ids)} message ids")

        summaries: List[EmailSummary] = []
        try:
            for window in chunks(ids, self.concurrency):
                fetched = await self._fetch_window(window)
                for message_id in window:
                    msg = fetched.get(message_id)
                    if msg is not None:
                        summaries.append(await self.summarize(msg))
        except _AuthAbort:
            self.log.error("Permission denied. Please ensure you have granted the necessary permissions.")
            self.log.error(f"Try deleting {config.TOKEN_PICKLE} and running again.")
            return EmailResponse.empty()

        self.log.info(f"Processed {len(summaries)} of {len(ids)} messages")
        return EmailResponse(summaries)

    async def _fetch_window(self, ids: List[str]) -> Dict[str, GmailMessage]:
        """Fetch details concurrently. Failed ids are missing from the result;
        a permission failure abandons the rest of the window and raises _AuthAbort."""
        tasks = {
            asyncio.ensure_future(asyncio.to_thread(self.client.get_message_detail, mid)): mid
            for mid in ids
        }
        results: Dict[str, GmailMessage] = {}
        pending = set(tasks)
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                mid = tasks[task]
                try:
                    results[mid] = task.result()
                except PermissionDeniedError:
                    for other in pending:
                        other.cancel()
                    # worker threads keep running; only their tasks are released
                    await asyncio.gather(*pending, return_exceptions=True)
                    raise _AuthAbort() from None
                except Exception as e:
                    self.log.error(f"Failed to fetch message {mid}: {e!r}")
        return results

    async def summarize(self, msg: GmailMessage) -> EmailSummary:
        subject = msg.header("Subject")
        sender = msg.header("From")
        body = extract_body(msg, self.log)
        if looks_like_html(body):
            body = await self.converter.convert(body)
        else:
            self.log.debug(f"Body of {msg.id} is not HTML, skipping conversion")
        return EmailSummary(
            id=msg.id,
            sender=sender if sender is not None else "Unknown Sender",
            subject=subject if subject is not None else "No Subject",
            snippet=msg.snippet or "",
            body_raw=clean_text(body),
        )
