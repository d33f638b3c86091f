# gmail_client.py
import base64
import binascii
import json
import os
import pickle
from typing import List, Dict, Any, Optional

import google_auth_httplib2
import httplib2
from google.auth.exceptions import RefreshError
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from loguru import logger as default_logger

import config
from models import GmailMessage, MessageHeader, MessagePart

SCOPES = [
    'https://www.googleapis.com/auth/gmail.readonly'
]
AUTH_FAILURE_STATUSES = {401, 403}


class GmailClientError(Exception):
    """Base class for errors raised by GmailClient."""


class PermissionDeniedError(GmailClientError):
    """The credentials may not read this message; re-authentication is required."""

    def __init__(self, message_id: str, cause: Optional[HttpError] = None):
        super().__init__(f"Permission denied fetching message {message_id}")
        self.message_id = message_id
        self.cause = cause


def is_permission_denied(error: HttpError) -> bool:
    """True for 401/403 responses or a PERMISSION_DENIED status in the error body."""
    status = getattr(error.resp, "status", None)
    try:
        status = int(status)
    except (TypeError, ValueError):
        status = None
    if status in AUTH_FAILURE_STATUSES:
        return True
    try:
        body = json.loads(error.content)
    except (TypeError, ValueError):
        return False
    if not isinstance(body, dict):
        return False
    err = body.get("error")
    return isinstance(err, dict) and err.get("status") == "PERMISSION_DENIED"


def decode_body_data(data: Optional[str]) -> Optional[bytes]:
    """Gmail sends part bodies as unpadded base64url."""
    if not data:
        return None
    try:
        return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
    except (binascii.Error, ValueError):
        return None


def part_from_api(part: Dict[str, Any]) -> MessagePart:
    return MessagePart(
        mime_type=part.get("mimeType"),
        data=decode_body_data((part.get("body") or {}).get("data")),
        parts=tuple(part_from_api(p) for p in part.get("parts", []) or []),
    )


def message_from_api(msg: Dict[str, Any]) -> GmailMessage:
    """Map a users.messages.get(format='full') response onto GmailMessage."""
    payload = msg.get("payload")
    headers = ()
    if payload:
        headers = tuple(
            MessageHeader(h.get("name") or "", h.get("value"))
            for h in payload.get("headers", []) or []
        )
    return GmailMessage(
        id=msg.get("id", ""),
        headers=headers,
        payload=part_from_api(payload) if payload else None,
        snippet=msg.get("snippet"),
    )


def load_credentials(credentials_file: str = config.CREDENTIALS_FILE,
                     token_file: str = config.TOKEN_PICKLE):
    creds = None
    if os.path.exists(token_file):
        with open(token_file, "rb") as f:
            creds = pickle.load(f)
    if creds and creds.expired and creds.refresh_token:
        try:
            creds.refresh(google_auth_httplib2.Request(httplib2.Http()))
        except RefreshError as e:
            default_logger.warning(f"Token refresh failed, re-running authorization: {e}")
            creds = None
        else:
            with open(token_file, "wb") as f:
                pickle.dump(creds, f)
    if not creds or not creds.valid:
        flow = InstalledAppFlow.from_client_secrets_file(credentials_file, SCOPES)
        creds = flow.run_local_server(port=0)
        with open(token_file, "wb") as f:
            pickle.dump(creds, f)
    return creds


class GmailClient:
    def __init__(self, creds=None, service=None, log=default_logger):
        self.creds = creds if creds is not None or service is not None else load_credentials()
        self.service = service or build("gmail", "v1", credentials=self.creds, cache_discovery=False)
        self.log = log

    def _http(self):
        # httplib2.Http is not thread-safe, so every request gets its own
        if self.creds is None:
            return None
        return google_auth_httplib2.AuthorizedHttp(self.creds, http=httplib2.Http())

    def list_inbox_message_ids(self, limit: int) -> List[str]:
        """Return up to `limit` inbox message ids in provider order. HttpError propagates."""
        msgs: List[str] = []
        page_token = None
        while len(msgs) < limit:
            response = self.service.users().messages().list(
                userId='me', q='in:inbox', maxResults=limit - len(msgs), pageToken=page_token
            ).execute(http=self._http())
            for m in response.get("messages", []):
                if m.get("id"):
                    msgs.append(m["id"])
                else:
                    self.log.warning("Listed message has no id, skipping")
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        return msgs[:limit]

    def get_message_detail(self, message_id: str) -> GmailMessage:
        """Fetch a full message. Raises PermissionDeniedError for auth failures."""
        try:
            msg = self.service.users().messages().get(
                userId='me', id=message_id, format='full'
            ).execute(http=self._http())
        except HttpError as error:
            if is_permission_denied(error):
                raise PermissionDeniedError(message_id, error) from error
            raise
        return message_from_api(msg)
