"""Mailbox commands parsed from replies, and their outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class CommandType(str, Enum):
    REPLY = "reply"
    FORWARD = "forward"
    ARCHIVE = "archive"
    DELETE = "delete"
    MARK_READ = "mark_read"
    MARK_UNREAD = "mark_unread"
    STAR = "star"
    UNSTAR = "unstar"
    LABEL = "label"

    @property
    def label(self) -> str:
        """Past-tense verb used in confirmations, e.g. ``Archived``."""
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    CommandType.REPLY: "Replied to",
    CommandType.FORWARD: "Forwarded",
    CommandType.ARCHIVE: "Archived",
    CommandType.DELETE: "Deleted",
    CommandType.MARK_READ: "Marked as read",
    CommandType.MARK_UNREAD: "Marked as unread",
    CommandType.STAR: "Starred",
    CommandType.UNSTAR: "Unstarred",
    CommandType.LABEL: "Labeled",
}


@dataclass(frozen=True)
class BaseCommand:
    """Fields every command carries.

    ``target_ref`` is the ``EMAIL-NNN`` token from the summary;
    ``target_gmail_id`` is filled in by resolution and stays None when the
    token is not in the summary's mapping.
    """

    type: ClassVar[CommandType]

    target_ref: str
    target_gmail_id: str | None = None


@dataclass(frozen=True)
class ReplyCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.REPLY
    content: str = ""


@dataclass(frozen=True)
class ForwardCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.FORWARD
    forward_to: str = ""
    note: str | None = None


@dataclass(frozen=True)
class ArchiveCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.ARCHIVE


@dataclass(frozen=True)
class DeleteCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.DELETE


@dataclass(frozen=True)
class MarkReadCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.MARK_READ


@dataclass(frozen=True)
class MarkUnreadCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.MARK_UNREAD


@dataclass(frozen=True)
class StarCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.STAR


@dataclass(frozen=True)
class UnstarCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.UNSTAR


@dataclass(frozen=True)
class LabelCommand(BaseCommand):
    type: ClassVar[CommandType] = CommandType.LABEL
    label_name: str = ""


Command = Union[
    ReplyCommand,
    ForwardCommand,
    ArchiveCommand,
    DeleteCommand,
    MarkReadCommand,
    MarkUnreadCommand,
    StarCommand,
    UnstarCommand,
    LabelCommand,
]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one attempted command. Never re-executed."""

    command: Command
    success: bool
    error: str | None = None
    details: str | None = None
