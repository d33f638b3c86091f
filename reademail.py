# reademail.py
import asyncio
from typing import Optional

from loguru import logger

import config
from fetcher import EmailFetcher, MailProvider
from gmail_client import GmailClient


async def fetch_and_normalize(max_results: int, client: Optional[MailProvider] = None) -> str:
    """Fetch up to `max_results` inbox messages and return them as pretty-printed JSON."""
    fetcher = EmailFetcher(client or GmailClient())
    response = await fetcher.fetch(max_results)
    return response.to_json()


def read_emails(max_results: int = 10) -> str:
    config.configure_logging()
    logger.info(f"Reading up to {max_results} emails")
    return asyncio.run(fetch_and_normalize(max_results))
