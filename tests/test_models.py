import json

from models import EmailResponse, EmailSummary, GmailMessage, MessageHeader


def _summary(i: int) -> EmailSummary:
    return EmailSummary(id=f"id{i}", sender="a@b.c", subject=f"s{i}", snippet="", body_raw="body")


class TestGmailMessageHeader:
    def test_case_insensitive(self):
        msg = GmailMessage(id="x", headers=(MessageHeader("subject", "hello"),))
        assert msg.header("Subject") == "hello"
        assert msg.header("SUBJECT") == "hello"

    def test_first_duplicate_wins(self):
        msg = GmailMessage(
            id="x",
            headers=(MessageHeader("From", "first"), MessageHeader("from", "second")),
        )
        assert msg.header("From") == "first"

    def test_missing(self):
        assert GmailMessage(id="x").header("From") is None

    def test_first_match_without_value(self):
        msg = GmailMessage(
            id="x",
            headers=(MessageHeader("Subject", None), MessageHeader("Subject", "later")),
        )
        assert msg.header("Subject") is None


class TestEmailResponse:
    def test_count_tracks_emails(self):
        for n in (0, 1, 5):
            response = EmailResponse([_summary(i) for i in range(n)])
            assert response.count == len(response.emails) == n

    def test_empty(self):
        assert EmailResponse.empty().count == 0
        assert EmailResponse.empty().emails == ()

    def test_json_shape(self):
        response = EmailResponse([_summary(1)])
        text = response.to_json()
        data = json.loads(text)

        assert list(data) == ["emails", "count"]
        assert data["count"] == 1
        assert list(data["emails"][0]) == ["id", "from", "subject", "snippet", "body_raw"]
        assert data["emails"][0]["from"] == "a@b.c"
        assert "\n  " in text

    def test_non_ascii_kept(self):
        response = EmailResponse([EmailSummary("i", "Zoë", "Grüße", "", "ünïcode")])
        assert "Grüße" in response.to_json()

    def test_emails_in_json_keep_order(self):
        response = EmailResponse([_summary(1), _summary(2)])
        data = json.loads(response.to_json())
        assert [e["id"] for e in data["emails"]] == ["id1", "id2"]
        assert data["count"] == 2
