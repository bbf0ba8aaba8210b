"""Tests for Gmail parser."""

import base64
from datetime import datetime, timezone

from email_agent.gmail.models import (
    Email,
    EmailAddress,
    generate_reference_id,
    parse_address_list,
    parse_email_address,
)
from email_agent.gmail.parser import html_to_text, parse_message


def encode(text):
    return base64.urlsafe_b64encode(text.encode()).decode()


def test_parse_plain_message(raw_message):
    result = parse_message(raw_message())
    assert isinstance(result, Email)
    assert result.id == "msg123"
    assert result.thread_id == "thread-msg123"
    assert result.sender == EmailAddress("Alice", "alice@example.com")
    assert result.subject == "Test Subject"
    assert result.body_plain == "Hello world"
    assert result.body_html is None
    assert result.is_unread is True
    assert result.snippet == "Hello & welcome"
    assert result.date == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_parse_recipients(raw_message):
    result = parse_message(raw_message())
    assert [a.address for a in result.to] == ["bob@example.com", "carol@example.com"]
    assert result.to[1].name == "Carol"
    assert result.cc == []


def test_reference_id_follows_batch_position(raw_message):
    assert parse_message(raw_message(), 0).reference_id == "EMAIL-001"
    assert parse_message(raw_message(), 41).reference_id == "EMAIL-042"


def test_generate_reference_id_is_zero_padded():
    assert [generate_reference_id(i) for i in (0, 9, 99, 998)] == [
        "EMAIL-001", "EMAIL-010", "EMAIL-100", "EMAIL-999",
    ]


def test_parse_multipart_with_attachment(raw_message):
    parts = [
        {
            "mimeType": "multipart/alternative",
            "parts": [
                {"mimeType": "text/plain", "body": {"data": encode("Plain body")}},
                {"mimeType": "text/html", "body": {"data": encode("<p>HTML body</p>")}},
            ],
        },
        {
            "mimeType": "application/pdf",
            "filename": "invoice.pdf",
            "body": {"attachmentId": "att-1", "size": 2048},
        },
    ]
    result = parse_message(raw_message(mime_type="multipart/mixed", parts=parts))
    assert result.body_plain == "Plain body"
    assert result.body_html == "<p>HTML body</p>"
    assert len(result.attachments) == 1
    attachment = result.attachments[0]
    assert (attachment.filename, attachment.mime_type, attachment.size) == (
        "invoice.pdf", "application/pdf", 2048,
    )


def test_html_only_message_gets_plain_text(raw_message):
    result = parse_message(raw_message(body_text="<p>Hi<br>there</p>", mime_type="text/html"))
    assert result.body_html == "<p>Hi<br>there</p>"
    assert result.body_plain == "Hi\nthere"


def test_parse_missing_headers(raw_message):
    raw = raw_message(headers=[], label_ids=[])
    result = parse_message(raw)
    assert result.subject == ""
    assert result.sender.address == ""
    assert result.is_unread is False
    # falls back to internalDate
    assert result.date == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_parse_email_address_forms():
    assert parse_email_address('"Bob Smith" <bob@example.com>') == EmailAddress("Bob Smith", "bob@example.com")
    assert parse_email_address("bob@example.com") == EmailAddress("", "bob@example.com")
    assert parse_email_address("<bob@example.com>") == EmailAddress("", "bob@example.com")


def test_sender_without_space_before_bracket():
    sender = parse_email_address("Alice Smith<alice@example.com>")
    assert sender == EmailAddress("Alice Smith", "alice@example.com")


def test_address_list_with_comma_in_quoted_name():
    addresses = parse_address_list('"Doe, John" <john@example.com>, bob@example.com')
    assert addresses == [
        EmailAddress("Doe, John", "john@example.com"),
        EmailAddress("", "bob@example.com"),
    ]


def test_address_list_empty_header():
    assert parse_address_list("") == []


def test_parse_message_cc_with_quoted_comma(raw_message):
    raw = raw_message(headers=[
        {"name": "From", "value": "Alice Smith<alice@example.com>"},
        {"name": "Cc", "value": '"Doe, John" <john@example.com>, bob@example.com'},
    ])
    result = parse_message(raw)
    assert result.sender.address == "alice@example.com"
    assert [a.address for a in result.cc] == ["john@example.com", "bob@example.com"]


def test_formatted_address():
    assert EmailAddress("Bob", "bob@example.com").formatted == "Bob <bob@example.com>"
    assert EmailAddress("", "bob@example.com").formatted == "bob@example.com"


def test_html_to_text_lists_and_scripts():
    html = "<style>p{}</style><ul><li>One</li><li>Two</li></ul><script>x()</script>"
    text = html_to_text(html)
    assert "• One" in text
    assert "• Two" in text
    assert "x()" not in text
