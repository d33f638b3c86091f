# models.py
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class MessagePart:
    """One node of a message's MIME tree. `data` is already base64url-decoded."""
    mime_type: Optional[str] = None
    data: Optional[bytes] = None
    parts: Tuple["MessagePart", ...] = ()


@dataclass(frozen=True)
class MessageHeader:
    name: str
    value: Optional[str]


@dataclass(frozen=True)
class GmailMessage:
    id: str
    headers: Tuple[MessageHeader, ...] = ()
    payload: Optional[MessagePart] = None
    snippet: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup; the first header with that name wins,
        even when it carries no value."""
        wanted = name.lower()
        for h in self.headers:
            if h.name.lower() == wanted:
                return h.value
        return None


@dataclass(frozen=True)
class EmailSummary:
    id: str
    sender: str
    subject: str
    snippet: str
    body_raw: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "from": self.sender,
            "subject": self.subject,
            "snippet": self.snippet,
            "body_raw": self.body_raw,
        }


@dataclass(frozen=True)
class EmailResponse:
    emails: Sequence[EmailSummary] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "emails", tuple(self.emails))

    @property
    def count(self) -> int:
        return len(self.emails)

    @classmethod
    def empty(cls) -> "EmailResponse":
        return cls(())

    def to_dict(self) -> Dict[str, Any]:
        return {"emails": [e.to_dict() for e in self.emails], "count": self.count}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
