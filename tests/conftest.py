"""Shared fixtures: raw Gmail payloads and normalized emails."""

import base64
from datetime import datetime, timezone

import pytest

from email_agent.gmail.models import Email, EmailAddress, generate_reference_id


def encode(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode()).decode()


@pytest.fixture
def raw_message():
    """Factory for Gmail API messages in ``format=full``."""

    def _make(
        msg_id="msg123",
        body_text="Hello world",
        mime_type="text/plain",
        label_ids=("INBOX", "UNREAD"),
        headers=None,
        parts=None,
    ):
        if headers is None:
            headers = [
                {"name": "From", "value": "Alice <alice@example.com>"},
                {"name": "To", "value": "bob@example.com, Carol <carol@example.com>"},
                {"name": "Subject", "value": "Test Subject"},
                {"name": "Date", "value": "Mon, 1 Jan 2024 12:00:00 +0000"},
                {"name": "Message-ID", "value": "<abc@mail.example.com>"},
            ]
        payload = {"mimeType": mime_type, "headers": headers}
        if parts is not None:
            payload["parts"] = parts
            payload["body"] = {"size": 0}
        else:
            payload["body"] = {"data": encode(body_text)}
        return {
            "id": msg_id,
            "threadId": f"thread-{msg_id}",
            "labelIds": list(label_ids),
            "snippet": "Hello &amp; welcome",
            "internalDate": "1704110400000",
            "payload": payload,
        }

    return _make


@pytest.fixture
def make_email():
    """Factory for normalized :class:`Email` records."""

    def _make(index=0, msg_id=None, unread=True, subject=None, body_plain="Body text",
              body_html=None, sender="alice@example.com", date=None):
        return Email(
            id=msg_id or f"gmail-{index}",
            thread_id=f"thread-{index}",
            reference_id=generate_reference_id(index),
            sender=EmailAddress(name="Alice", address=sender),
            subject=subject if subject is not None else f"Subject {index}",
            snippet=f"Snippet {index}",
            body_plain=body_plain,
            body_html=body_html,
            date=date or datetime(2024, 1, 15, 9, index, tzinfo=timezone.utc),
            is_unread=unread,
        )

    return _make
