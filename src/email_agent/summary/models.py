"""Data models for summaries and their persisted form."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class ActionItem:
    reference_id: str
    priority: Priority
    description: str
    suggested_action: str
    from_email: str = ""
    subject: str = ""


@dataclass
class InformationalItem:
    reference_id: str
    description: str
    from_email: str = ""


@dataclass
class Summary:
    """One generated summary.

    ``email_mappings`` covers every message of the batch, not only those the
    model surfaced, so a reply may reference any of them.
    """

    id: str
    generated_at: datetime
    period_start: datetime
    period_end: datetime
    total_emails: int
    unread_count: int
    executive_summary: str
    action_items: list[ActionItem] = field(default_factory=list)
    informational: list[InformationalItem] = field(default_factory=list)
    email_mappings: dict[str, str] = field(default_factory=dict)


@dataclass
class StoredSummary:
    """The part of a :class:`Summary` needed to process replies later."""

    id: str
    generated_at: str
    email_mappings: dict[str, str]
    thread_id: str | None = None
    message_id: str | None = None

    @classmethod
    def from_summary(
        cls,
        summary: Summary,
        thread_id: str | None = None,
        message_id: str | None = None,
    ) -> StoredSummary:
        return cls(
            id=summary.id,
            generated_at=summary.generated_at.isoformat(),
            email_mappings=dict(summary.email_mappings),
            thread_id=thread_id,
            message_id=message_id,
        )

    @property
    def generated_at_datetime(self) -> datetime:
        return _parse_timestamp(self.generated_at)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "generatedAt": self.generated_at,
            "emailMappings": dict(self.email_mappings),
        }
        if self.thread_id is not None:
            data["threadId"] = self.thread_id
        if self.message_id is not None:
            data["messageId"] = self.message_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoredSummary:
        """Raises KeyError / TypeError / ValueError on a malformed document."""
        mappings = data["emailMappings"]
        if not isinstance(mappings, dict):
            raise TypeError("emailMappings must be an object")
        generated_at = data["generatedAt"]
        if not isinstance(generated_at, str):
            raise TypeError("generatedAt must be a string")
        _parse_timestamp(generated_at)
        return cls(
            id=data["id"],
            generated_at=generated_at,
            email_mappings={str(k): str(v) for k, v in mappings.items()},
            thread_id=data.get("threadId"),
            message_id=data.get("messageId"),
        )


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
