"""Reply-driven mailbox commands: parsing, resolution, execution."""

from email_agent.commands.models import (
    ArchiveCommand,
    BaseCommand,
    Command,
    CommandResult,
    CommandType,
    DeleteCommand,
    ForwardCommand,
    LabelCommand,
    MarkReadCommand,
    MarkUnreadCommand,
    ReplyCommand,
    StarCommand,
    UnstarCommand,
)

__all__ = [
    "ArchiveCommand",
    "BaseCommand",
    "Command",
    "CommandResult",
    "CommandType",
    "DeleteCommand",
    "ForwardCommand",
    "LabelCommand",
    "MarkReadCommand",
    "MarkUnreadCommand",
    "ReplyCommand",
    "StarCommand",
    "UnstarCommand",
]
