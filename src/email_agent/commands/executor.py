"""Resolve reference tokens and run commands against the mailbox."""

from __future__ import annotations

import dataclasses
import logging
from html import escape

from email_agent.commands.models import (
    Command,
    CommandResult,
    CommandType,
    ForwardCommand,
    LabelCommand,
    ReplyCommand,
)

logger = logging.getLogger(__name__)

DRY_RUN_DETAILS = "Dry run - no action taken"


def resolve_command(command: Command, mappings: dict[str, str]) -> Command:
    """Attach the Gmail id for ``command.target_ref``.

    A token missing from ``mappings`` is not an error here; the command keeps
    ``target_gmail_id=None`` and fails uniformly at execution.
    """
    return dataclasses.replace(command, target_gmail_id=mappings.get(command.target_ref))


def resolve_commands(commands: list[Command], mappings: dict[str, str]) -> list[Command]:
    return [resolve_command(command, mappings) for command in commands]


def format_reply_html(content: str) -> str:
    return "<p>" + escape(content).replace("\n", "<br/>") + "</p>"


def forward_subject(subject: str) -> str:
    if subject.lower().startswith("fwd:"):
        return subject
    return f"Fwd: {subject}"


class CommandExecutor:
    """Performs exactly one mailbox side effect per command.

    Args:
        gmail: the mailbox gateway (:class:`GmailClient`).
        dry_run: report success without touching the mailbox.
    """

    def __init__(self, gmail, dry_run: bool = False):
        self.gmail = gmail
        self.dry_run = dry_run

    def execute_all(self, commands: list[Command]) -> list[CommandResult]:
        """One result per command, in order. Never raises."""
        return [self.execute(command) for command in commands]

    def execute(self, command: Command) -> CommandResult:
        gmail_id = command.target_gmail_id
        if not gmail_id:
            return CommandResult(
                command=command,
                success=False,
                error=f"Could not resolve {command.target_ref} to a Gmail message ID",
            )

        if self.dry_run:
            logger.info(f"[DRY RUN] Would execute: {command.type.value} on {command.target_ref}")
            return CommandResult(command=command, success=True, details=DRY_RUN_DETAILS)

        try:
            details = self._dispatch(command, gmail_id)
        except Exception as e:
            logger.error(
                f"Failed to execute {command.type.value} on {command.target_ref}: {e}",
                exc_info=True,
            )
            return CommandResult(command=command, success=False, error=str(e) or type(e).__name__)

        logger.info(f"{command.type.label} {command.target_ref}")
        return CommandResult(command=command, success=True, details=details)

    def _dispatch(self, command: Command, gmail_id: str) -> str | None:
        if isinstance(command, ReplyCommand):
            return self._reply(command, gmail_id)
        if isinstance(command, ForwardCommand):
            return self._forward(command, gmail_id)
        if isinstance(command, LabelCommand):
            self.gmail.add_label(gmail_id, command.label_name)
            return f'Added label "{command.label_name}"'

        actions = {
            CommandType.ARCHIVE: self.gmail.archive_email,
            CommandType.DELETE: self.gmail.delete_email,
            CommandType.MARK_READ: self.gmail.mark_as_read,
            CommandType.MARK_UNREAD: self.gmail.mark_as_unread,
            CommandType.STAR: self.gmail.star_email,
            CommandType.UNSTAR: self.gmail.unstar_email,
        }
        actions[command.type](gmail_id)
        return None

    def _reply(self, command: ReplyCommand, gmail_id: str) -> str:
        original = self.gmail.get_email(gmail_id)
        self.gmail.reply_to_email(
            gmail_id,
            original.thread_id,
            original.sender.address,
            original.subject,
            format_reply_html(command.content),
            command.content,
        )
        return f"Replied to {original.sender.address}"

    def _forward(self, command: ForwardCommand, gmail_id: str) -> str:
        if not command.forward_to:
            raise ValueError(f"No recipient given for forwarding {command.target_ref}")

        original = self.gmail.get_email(gmail_id)
        quoted = original.body_html or f"<pre>{escape(original.body_plain)}</pre>"
        body = f"""<p>{escape(command.note or 'Forwarded message:')}</p>
<hr/>
<p><strong>From:</strong> {escape(original.sender.address)}<br/>
<strong>Subject:</strong> {escape(original.subject)}<br/>
<strong>Date:</strong> {original.date.isoformat()}</p>
<div>{quoted}</div>"""
        self.gmail.send_email(command.forward_to, forward_subject(original.subject), body)
        return f"Forwarded to {command.forward_to}"
