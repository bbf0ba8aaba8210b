"""Find replies to past summaries and act on the commands they contain."""

from __future__ import annotations

import logging
from datetime import date
from html import escape

from email_agent.commands.executor import CommandExecutor, resolve_commands
from email_agent.commands.models import CommandResult
from email_agent.commands.parser import CommandParser, strip_quoted_reply
from email_agent.core.dates import format_date
from email_agent.exceptions import GmailError, LLMError
from email_agent.summary.render import SUMMARY_SUBJECT
from email_agent.summary.store import SummaryStore

logger = logging.getLogger(__name__)

CONFIRMATION_SUBJECT = "Agent Actions Completed"


class CommandHandler:
    """One command-intake pass over the replies to the latest summary.

    Args:
        gmail: the mailbox gateway (:class:`GmailClient`).
        parser: a :class:`CommandParser`.
        store: the :class:`SummaryStore` holding the reference mapping.
        user_email: recipient of the confirmation.
        dry_run: execute nothing, send no confirmation.
    """

    def __init__(
        self,
        gmail,
        parser: CommandParser,
        store: SummaryStore,
        user_email: str,
        dry_run: bool = False,
    ):
        self.gmail = gmail
        self.parser = parser
        self.store = store
        self.user_email = user_email
        self.dry_run = dry_run
        self.executor = CommandExecutor(gmail, dry_run=dry_run)

    def process_reply_commands(self, today: date | None = None) -> list[CommandResult]:
        """Results across all replies: by reply order, then command order."""
        logger.info("Checking for reply commands")

        stored = self.store.load_latest()
        if stored is None:
            logger.info("No summary found - nothing to process")
            return []

        reply_ids = self.gmail.search_replies(SUMMARY_SUBJECT, stored.generated_at_datetime)
        if not reply_ids:
            logger.info("No reply commands found")
            return []
        logger.info(f"Found {len(reply_ids)} potential reply commands")

        context = self._summary_context(stored.message_id)
        results: list[CommandResult] = []
        for reply_id in reply_ids:
            results.extend(self._process_reply(reply_id, stored.email_mappings, context))

        if results and not self.dry_run:
            self.send_confirmation(results, today or date.today())

        return results

    def _process_reply(
        self,
        reply_id: str,
        mappings: dict[str, str],
        context: str | None,
    ) -> list[CommandResult]:
        try:
            content = strip_quoted_reply(self.gmail.get_message_content(reply_id))
        except GmailError as e:
            logger.error(f"Could not fetch reply {reply_id}: {e}")
            return []
        if not content.strip():
            return []

        try:
            parsed = self.parser.parse_commands(content, context)
        except LLMError as e:
            logger.error(f"Could not parse commands from reply {reply_id}: {e}")
            return []

        if parsed.unrecognized:
            logger.warning(f"Unrecognized commands in reply {reply_id}: {parsed.unrecognized}")

        return self.executor.execute_all(resolve_commands(parsed.commands, mappings))

    def _summary_context(self, message_id: str | None) -> str | None:
        """Text of the summary email itself, to help disambiguate commands."""
        if not message_id:
            return None
        try:
            return self.gmail.get_message_content(message_id) or None
        except GmailError as e:
            logger.warning(f"Could not load summary email {message_id} for context: {e}")
            return None

    def send_confirmation(self, results: list[CommandResult], today: date) -> None:
        self.gmail.send_email(
            self.user_email,
            f"{CONFIRMATION_SUBJECT} - {format_date(today)}",
            render_confirmation_html(results, today),
            render_confirmation_plain(results, today),
        )
        logger.info("Sent confirmation email")


def _describe(result: CommandResult) -> str:
    return f"{result.command.type.label} {result.command.target_ref}"


def render_confirmation_html(results: list[CommandResult], today: date) -> str:
    successful = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    if successful:
        success_items = "".join(f"<li>{escape(_describe(r))}</li>" for r in successful)
    else:
        success_items = "<li>No successful actions</li>"

    failed_section = ""
    if failed:
        failed_items = "".join(
            f"<li>{escape(_describe(r))}: {escape(r.error or 'Unknown error')}</li>"
            for r in failed
        )
        failed_section = f"""
  <h2 style="color: #dc3545;">Failed Actions ({len(failed)})</h2>
  <ul>{failed_items}</ul>
"""

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">

  <h1 style="color: #333;">{CONFIRMATION_SUBJECT}</h1>

  <p style="color: #666;">{format_date(today)}</p>

  <h2 style="color: #28a745;">Completed Actions ({len(successful)})</h2>
  <ul>{success_items}</ul>
{failed_section}
  <p style="font-size: 12px; color: #999; margin-top: 30px;">
    Generated by Email Agent
  </p>

</body>
</html>"""


def render_confirmation_plain(results: list[CommandResult], today: date) -> str:
    successful = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    lines = [CONFIRMATION_SUBJECT.upper(), format_date(today), ""]
    lines.append(f"COMPLETED ACTIONS ({len(successful)})")
    lines += [f"- {_describe(r)}" for r in successful] or ["- No successful actions"]
    if failed:
        lines += ["", f"FAILED ACTIONS ({len(failed)})"]
        lines += [f"- {_describe(r)}: {r.error or 'Unknown error'}" for r in failed]
    return "\n".join(lines)
