"""Data models for the Gmail module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from email.utils import getaddresses, parseaddr

REFERENCE_PREFIX = "EMAIL-"


def generate_reference_id(index: int) -> str:
    """Reference token for the message at 0-based ``index`` in a batch."""
    return f"{REFERENCE_PREFIX}{index + 1:03d}"


@dataclass(frozen=True)
class EmailAddress:
    name: str
    address: str

    @property
    def formatted(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


def parse_email_address(raw: str) -> EmailAddress:
    """Split a ``From`` header like ``"Alice" <alice@example.com>``."""
    name, address = parseaddr(raw or "")
    return EmailAddress(name=name, address=address)


def parse_address_list(header: str) -> list[EmailAddress]:
    """Split a ``To``/``Cc`` header; quoted display names may contain commas."""
    if not header:
        return []
    return [
        EmailAddress(name=name, address=address)
        for name, address in getaddresses([header])
        if address
    ]


@dataclass(frozen=True)
class AttachmentInfo:
    """Attachment metadata only; content is never downloaded."""

    filename: str
    mime_type: str
    size: int


@dataclass(frozen=True)
class Email:
    """A normalized Gmail message, valid only within the batch that fetched it."""

    id: str
    thread_id: str
    reference_id: str
    sender: EmailAddress
    subject: str
    snippet: str
    body_plain: str
    date: datetime
    to: list[EmailAddress] = field(default_factory=list)
    cc: list[EmailAddress] = field(default_factory=list)
    body_html: str | None = None
    labels: list[str] = field(default_factory=list)
    attachments: list[AttachmentInfo] = field(default_factory=list)
    is_unread: bool = False


@dataclass(frozen=True)
class SentMessage:
    """Identifiers Gmail hands back after ``messages.send``."""

    id: str
    thread_id: str | None = None
