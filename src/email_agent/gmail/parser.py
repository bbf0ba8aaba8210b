"""Parse Gmail API message payloads into structured data."""

from __future__ import annotations

import base64
import binascii
import html as html_module
import re
from datetime import datetime, timezone

from bs4 import BeautifulSoup

from email_agent.core.dates import parse_date
from email_agent.gmail import label
from email_agent.gmail.models import (
    AttachmentInfo,
    Email,
    generate_reference_id,
    parse_address_list,
    parse_email_address,
)

_BLOCK_TAGS = ["p", "div", "li", "tr", "h1", "h2", "h3", "h4", "h5", "h6"]


def parse_message(raw_message: dict, index: int = 0) -> Email:
    """Build an :class:`Email` from a Gmail API message (format=full).

    This is a pure parsing function, no network calls. ``index`` is the
    message's 0-based position in its batch and determines its reference
    token.
    """
    payload = raw_message.get("payload", {})
    headers = extract_headers(payload)
    label_ids = raw_message.get("labelIds", [])
    body_plain, body_html = extract_bodies(payload)

    return Email(
        id=raw_message.get("id", ""),
        thread_id=raw_message.get("threadId", ""),
        reference_id=generate_reference_id(index),
        sender=parse_email_address(headers.get("from", "")),
        to=parse_address_list(headers.get("to", "")),
        cc=parse_address_list(headers.get("cc", "")),
        subject=headers.get("subject", ""),
        snippet=html_module.unescape(raw_message.get("snippet", "")),
        body_plain=body_plain,
        body_html=body_html,
        date=_message_date(raw_message, headers),
        labels=list(label_ids),
        attachments=extract_attachments(payload),
        is_unread=label.UNREAD.id in label_ids,
    )


def extract_headers(payload: dict) -> dict[str, str]:
    """Header map keyed by lower-cased header name."""
    return {
        h["name"].lower(): h["value"]
        for h in payload.get("headers", [])
    }


def extract_bodies(payload: dict) -> tuple[str, str | None]:
    """Return ``(plain, html)`` for a message payload.

    Attachment parts are skipped. When a message only has an HTML body the
    plain text is derived from it.
    """
    plain: str | None = None
    html: str | None = None

    for part in _walk_parts(payload):
        if part.get("filename"):
            continue
        mime_type = part.get("mimeType", "")
        if mime_type == "text/plain" and plain is None:
            plain = _decode_body_data(part) or None
        elif mime_type == "text/html" and html is None:
            html = _decode_body_data(part) or None

    if plain is None:
        plain = html_to_text(html) if html else ""
    return plain, html


def extract_attachments(payload: dict) -> list[AttachmentInfo]:
    return [
        AttachmentInfo(
            filename=part["filename"],
            mime_type=part.get("mimeType") or "application/octet-stream",
            size=part.get("body", {}).get("size", 0),
        )
        for part in _walk_parts(payload)
        if part.get("filename") and part.get("body", {}).get("attachmentId")
    ]


def html_to_text(html: str) -> str:
    """Flatten HTML to readable text, keeping line structure."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for li in soup.find_all("li"):
        li.insert(0, "• ")
    for block in soup.find_all(_BLOCK_TAGS):
        block.append("\n")
    text = soup.get_text()
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _walk_parts(payload: dict):
    yield payload
    for part in payload.get("parts", []) or []:
        yield from _walk_parts(part)


def _message_date(raw_message: dict, headers: dict[str, str]) -> datetime:
    fallback = None
    internal = raw_message.get("internalDate")
    if internal:
        try:
            fallback = datetime.fromtimestamp(int(internal) / 1000, tz=timezone.utc)
        except (TypeError, ValueError):
            fallback = None
    if headers.get("date"):
        return parse_date(headers["date"], default=fallback)
    return fallback or parse_date("")


def _decode_body_data(payload: dict) -> str:
    data = payload.get("body", {}).get("data", "")
    if not data:
        return ""
    try:
        return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4)).decode(
            "utf-8", errors="replace"
        )
    except (binascii.Error, ValueError):
        return ""
