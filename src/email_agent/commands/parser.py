"""Turn a free-text reply into structured commands with Claude."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from email_agent.commands.models import (
    ArchiveCommand,
    Command,
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
from email_agent.exceptions import LLMResponseError, UnknownCommandError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a command parser for an email assistant.
Your job is to extract structured commands from natural language user input.

Available commands:
- reply: Reply to an email. Requires target reference and reply content.
- forward: Forward an email. Requires target reference, recipient email, and optional note.
- archive: Archive an email. Requires target reference.
- delete: Delete an email. Requires target reference.
- mark_read: Mark email as read. Requires target reference.
- mark_unread: Mark email as unread. Requires target reference.
- star: Star an email. Requires target reference.
- unstar: Remove star from email. Requires target reference.
- label: Add a label to an email. Requires target reference and label name.

Email references use the format EMAIL-XXX (e.g., EMAIL-001, EMAIL-015).

Parse the user's input and extract all valid commands. If something cannot be parsed as a command, add it to the "unrecognized" array.

Always respond with valid JSON."""

RESPONSE_FORMAT = """Respond with JSON in this exact format:
{
  "commands": [
    {
      "type": "reply",
      "targetRef": "EMAIL-001",
      "content": "The reply message content"
    },
    {
      "type": "forward",
      "targetRef": "EMAIL-002",
      "forwardTo": "recipient@example.com",
      "note": "Optional note to include"
    },
    {
      "type": "archive",
      "targetRef": "EMAIL-003"
    },
    {
      "type": "label",
      "targetRef": "EMAIL-004",
      "labelName": "Important"
    }
  ],
  "unrecognized": [
    "Any text that couldn't be parsed as a command"
  ]
}"""

_SIMPLE_COMMANDS = {
    CommandType.ARCHIVE: ArchiveCommand,
    CommandType.DELETE: DeleteCommand,
    CommandType.MARK_READ: MarkReadCommand,
    CommandType.MARK_UNREAD: MarkUnreadCommand,
    CommandType.STAR: StarCommand,
    CommandType.UNSTAR: UnstarCommand,
}


@dataclass
class ParseResult:
    commands: list[Command] = field(default_factory=list)
    unrecognized: list[str] = field(default_factory=list)


class CommandParser:
    """Extracts mailbox commands from reply text.

    Args:
        llm: anything with ``parse_json(prompt) -> object``.
    """

    def __init__(self, llm):
        self.llm = llm

    def parse_commands(self, user_input: str, summary_context: str | None = None) -> ParseResult:
        """Extract commands from one reply, in the order the model lists them.

        Raises:
            LLMError: the model call failed.
            LLMResponseError: the JSON did not match the contract.
            UnknownCommandError: a command type outside the supported set.
        """
        logger.info("Parsing commands from user input")
        response = self.llm.parse_json(self.build_prompt(user_input, summary_context))

        if not isinstance(response, dict):
            raise LLMResponseError("Command response is not a JSON object")
        raw_commands = response.get("commands")
        if not isinstance(raw_commands, list):
            raise LLMResponseError("Command response field 'commands' is missing or not a list")
        raw_unrecognized = response.get("unrecognized", [])
        if not isinstance(raw_unrecognized, list):
            raise LLMResponseError("Command response field 'unrecognized' is not a list")

        result = ParseResult(
            commands=[transform_command(raw) for raw in raw_commands],
            unrecognized=[str(item) for item in raw_unrecognized],
        )
        logger.info(
            f"Parsed {len(result.commands)} commands, "
            f"{len(result.unrecognized)} unrecognized"
        )
        return result

    def build_prompt(self, user_input: str, summary_context: str | None = None) -> str:
        prompt = f'''{SYSTEM_PROMPT}

User input to parse:
"""
{user_input}
"""
'''
        if summary_context:
            prompt += f"""
Context from the summary email (for reference):
{summary_context}
"""
        return f"{prompt}\n{RESPONSE_FORMAT}"


def transform_command(raw: Any) -> Command:
    """Map one loosely-typed model entry onto its command variant.

    Optional string fields default to ``""`` when missing or null; an
    unknown ``type`` is a contract violation.
    """
    if not isinstance(raw, dict):
        raise LLMResponseError(f"Command entry is not a JSON object: {raw!r}")

    try:
        command_type = CommandType(raw.get("type"))
    except ValueError as e:
        raise UnknownCommandError(f"Unknown command type: {raw.get('type')}") from e

    target_ref = _text(raw, "targetRef")

    if command_type is CommandType.REPLY:
        return ReplyCommand(target_ref=target_ref, content=_text(raw, "content"))
    if command_type is CommandType.FORWARD:
        return ForwardCommand(
            target_ref=target_ref,
            forward_to=_text(raw, "forwardTo"),
            note=_text(raw, "note") or None,
        )
    if command_type is CommandType.LABEL:
        return LabelCommand(target_ref=target_ref, label_name=_text(raw, "labelName"))
    return _SIMPLE_COMMANDS[command_type](target_ref=target_ref)


_QUOTE_HEADER = re.compile(r"^On .* wrote:\s*$")


def strip_quoted_reply(body: str) -> str:
    """Drop the quoted summary from a reply, keeping only what the user typed.

    The quoted summary contains example commands that must not be executed.
    """
    kept = []
    for line in body.splitlines():
        stripped = line.strip()
        if _QUOTE_HEADER.match(stripped) or stripped == "--":
            break
        if stripped.endswith("wrote:") and kept and kept[-1].strip().startswith("On "):
            # attribution line wrapped by the mail client
            kept.pop()
            break
        if stripped.startswith(">"):
            continue
        kept.append(line)
    return "\n".join(kept).strip()


def _text(raw: dict, key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return str(value).strip()
