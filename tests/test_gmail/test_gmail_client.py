"""Tests for the Gmail client."""

import base64
import email
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from email_agent.exceptions import GmailFetchError, GmailModifyError, GmailSendError
from email_agent.gmail.client import GmailClient


@pytest.fixture
def gmail_client():
    mock_service = MagicMock()
    with patch("email_agent.gmail.client.build", return_value=mock_service):
        client = GmailClient(MagicMock(), max_results=50)
    return client, mock_service.users.return_value


def _decode_sent(users):
    body = users.messages.return_value.send.call_args.kwargs["body"]
    raw = base64.urlsafe_b64decode(body["raw"])
    return body, email.message_from_bytes(raw)


def test_list_recent_emails_assigns_reference_tokens(gmail_client, raw_message):
    client, users = gmail_client
    messages = users.messages.return_value
    messages.list.return_value.execute.return_value = {
        "messages": [{"id": "a"}, {"id": "b"}],
    }
    messages.get.return_value.execute.side_effect = [raw_message("a"), raw_message("b")]

    emails = client.list_recent_emails(hours_back=12)

    assert [(e.id, e.reference_id) for e in emails] == [("a", "EMAIL-001"), ("b", "EMAIL-002")]
    kwargs = messages.list.call_args.kwargs
    assert kwargs["q"] == "newer_than:12h"
    assert kwargs["maxResults"] == 50


def test_list_paginates_up_to_max_results(gmail_client):
    client, users = gmail_client
    messages = users.messages.return_value
    messages.list.return_value.execute.side_effect = [
        {"messages": [{"id": "1"}, {"id": "2"}], "nextPageToken": "p2"},
        {"messages": [{"id": "3"}, {"id": "4"}], "nextPageToken": "p3"},
    ]

    ids = client._list_message_ids("is:unread", 3)

    assert ids == ["1", "2", "3"]
    assert messages.list.call_args.kwargs["pageToken"] == "p2"


def test_list_empty_mailbox(gmail_client):
    client, users = gmail_client
    users.messages.return_value.list.return_value.execute.return_value = {}
    assert client.list_recent_emails() == []


def test_list_error_is_wrapped(gmail_client):
    client, users = gmail_client
    users.messages.return_value.list.return_value.execute.side_effect = Exception("API down")
    with pytest.raises(GmailFetchError, match="Failed to list messages"):
        client.list_recent_emails()


def test_get_message_content(gmail_client, raw_message):
    client, users = gmail_client
    users.messages.return_value.get.return_value.execute.return_value = raw_message(
        body_text="Archive EMAIL-003",
    )
    assert client.get_message_content("r1") == "Archive EMAIL-003"


def test_search_replies_query(gmail_client):
    client, users = gmail_client
    messages = users.messages.return_value
    messages.list.return_value.execute.return_value = {"messages": [{"id": "r1"}]}
    after = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)

    assert client.search_replies("Daily Email Summary", after) == ["r1"]

    kwargs = messages.list.call_args.kwargs
    assert kwargs["q"] == (
        f'(in:sent subject:"Re: Daily Email Summary" after:{int(after.timestamp())})'
    )
    assert kwargs["maxResults"] == 10


def test_send_email_is_multipart_alternative(gmail_client):
    client, users = gmail_client
    users.messages.return_value.send.return_value.execute.return_value = {
        "id": "sent-1", "threadId": "t-1",
    }

    sent = client.send_email("me@example.com", "Hello", "<p>Hi <b>there</b></p>")

    assert (sent.id, sent.thread_id) == ("sent-1", "t-1")
    body, msg = _decode_sent(users)
    assert "threadId" not in body
    assert msg["To"] == "me@example.com"
    assert msg["Subject"] == "Hello"
    assert msg.get_content_type() == "multipart/alternative"
    plain, html = msg.get_payload()
    assert plain.get_content_type() == "text/plain"
    assert html.get_content_type() == "text/html"
    assert plain.get_payload(decode=True).decode() == "Hi there"
    assert msg.get_boundary()


def test_each_message_gets_its_own_boundary(gmail_client):
    client, _ = gmail_client
    first = client._create_message("a@example.com", "s", "<p>x</p>")
    second = client._create_message("a@example.com", "s", "<p>x</p>")
    boundary = lambda m: email.message_from_bytes(base64.urlsafe_b64decode(m["raw"])).get_boundary()
    assert boundary(first) != boundary(second)


def test_reply_links_to_original(gmail_client):
    client, users = gmail_client
    messages = users.messages.return_value
    messages.get.return_value.execute.return_value = {
        "id": "orig",
        "payload": {"headers": [{"name": "Message-ID", "value": "<orig@mail.example.com>"}]},
    }
    messages.send.return_value.execute.return_value = {"id": "reply-1", "threadId": "t-9"}

    client.reply_to_email("orig", "t-9", "alice@example.com", "Lunch?", "<p>Yes</p>", "Yes")

    assert messages.get.call_args.kwargs["format"] == "metadata"
    body, msg = _decode_sent(users)
    assert body["threadId"] == "t-9"
    assert msg["Subject"] == "Re: Lunch?"
    assert msg["In-Reply-To"] == "<orig@mail.example.com>"
    assert msg["References"] == "<orig@mail.example.com>"


def test_reply_without_message_id_header(gmail_client):
    client, users = gmail_client
    messages = users.messages.return_value
    messages.get.return_value.execute.return_value = {"id": "orig", "payload": {"headers": []}}
    messages.send.return_value.execute.return_value = {"id": "reply-1"}

    client.reply_to_email("orig", "t-9", "alice@example.com", "Re: Lunch?", "<p>Yes</p>")

    _, msg = _decode_sent(users)
    assert msg["Subject"] == "Re: Lunch?"
    assert msg["In-Reply-To"] is None


def test_send_error_is_wrapped(gmail_client):
    client, users = gmail_client
    users.messages.return_value.send.return_value.execute.side_effect = Exception("quota")
    with pytest.raises(GmailSendError, match="quota"):
        client.send_email("me@example.com", "Hello", "<p>Hi</p>")


@pytest.mark.parametrize("method, body", [
    ("archive_email", {"addLabelIds": [], "removeLabelIds": ["INBOX"]}),
    ("mark_as_read", {"addLabelIds": [], "removeLabelIds": ["UNREAD"]}),
    ("mark_as_unread", {"addLabelIds": ["UNREAD"], "removeLabelIds": []}),
    ("star_email", {"addLabelIds": ["STARRED"], "removeLabelIds": []}),
    ("unstar_email", {"addLabelIds": [], "removeLabelIds": ["STARRED"]}),
])
def test_state_changes(gmail_client, method, body):
    client, users = gmail_client
    getattr(client, method)("m1")
    users.messages.return_value.modify.assert_called_once_with(userId="me", id="m1", body=body)


def test_delete_moves_to_trash(gmail_client):
    client, users = gmail_client
    client.delete_email("m1")
    users.messages.return_value.trash.assert_called_once_with(userId="me", id="m1")


def test_modify_error_is_wrapped(gmail_client):
    client, users = gmail_client
    users.messages.return_value.modify.return_value.execute.side_effect = Exception("404 not found")
    with pytest.raises(GmailModifyError, match="404"):
        client.archive_email("missing")


def test_add_label_reuses_existing_label_case_insensitively(gmail_client):
    client, users = gmail_client
    labels = users.labels.return_value
    labels.list.return_value.execute.return_value = {
        "labels": [{"name": "INBOX", "id": "INBOX"}, {"name": "Receipts", "id": "Label_1"}],
    }

    applied = client.add_label("m1", "receipts")

    assert applied.id == "Label_1"
    labels.create.assert_not_called()
    users.messages.return_value.modify.assert_called_once_with(
        userId="me", id="m1", body={"addLabelIds": ["Label_1"], "removeLabelIds": []},
    )


def test_add_label_creates_missing_label(gmail_client):
    client, users = gmail_client
    labels = users.labels.return_value
    labels.list.return_value.execute.return_value = {"labels": []}
    labels.create.return_value.execute.return_value = {"name": "Travel", "id": "Label_9"}

    client.add_label("m1", "Travel")

    assert labels.create.call_args.kwargs["body"] == {
        "name": "Travel",
        "labelListVisibility": "labelShow",
        "messageListVisibility": "show",
    }
    users.messages.return_value.modify.assert_called_once_with(
        userId="me", id="m1", body={"addLabelIds": ["Label_9"], "removeLabelIds": []},
    )
