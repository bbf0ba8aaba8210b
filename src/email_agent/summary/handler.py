"""Fetch, summarize, send and store: one summary generation pass."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from email_agent.summary.models import Summary
from email_agent.summary.render import render_summary_html, render_summary_plain, summary_subject
from email_agent.summary.store import SummaryStore
from email_agent.summary.summarizer import EmailSummarizer

logger = logging.getLogger(__name__)

DRY_RUN_MESSAGE_ID = "dry-run"


@dataclass
class SummaryRun:
    summary: Summary
    message_id: str
    thread_id: str | None = None


class SummaryHandler:
    """Runs one summary generation pass.

    Args:
        gmail: the mailbox gateway (:class:`GmailClient`).
        summarizer: an :class:`EmailSummarizer`.
        store: where the summary's reference mapping is persisted.
        user_email: recipient of the summary.
        lookback_hours: how far back to fetch.
        max_emails: cap on fetched messages.
        dry_run: render and log only, send and store nothing.
    """

    def __init__(
        self,
        gmail,
        summarizer: EmailSummarizer,
        store: SummaryStore,
        user_email: str,
        lookback_hours: int = 24,
        max_emails: int = 50,
        dry_run: bool = False,
    ):
        self.gmail = gmail
        self.summarizer = summarizer
        self.store = store
        self.user_email = user_email
        self.lookback_hours = lookback_hours
        self.max_emails = max_emails
        self.dry_run = dry_run

    def generate_and_send_summary(self, today: date | None = None) -> SummaryRun | None:
        """Returns None when there was nothing to summarize."""
        today = today or date.today()
        logger.info("Starting summary generation")

        emails = self.gmail.list_recent_emails(self.lookback_hours, self.max_emails)
        logger.info(f"Fetched {len(emails)} emails from the last {self.lookback_hours} hours")
        if not emails:
            logger.info("No emails to summarize")
            return None

        summary = self.summarizer.summarize(emails)
        logger.info(
            f"Generated summary with {len(summary.action_items)} action items, "
            f"{len(summary.informational)} informational"
        )

        if self.dry_run:
            logger.info("Dry run mode - not sending email")
            logger.info("Summary preview:\n%s", render_summary_plain(summary, today))
            return SummaryRun(summary=summary, message_id=DRY_RUN_MESSAGE_ID)

        sent = self.gmail.send_email(
            self.user_email,
            summary_subject(today),
            render_summary_html(summary, today),
            render_summary_plain(summary, today),
        )
        logger.info(f"Sent summary email with ID: {sent.id}")

        self.store.save(summary, thread_id=sent.thread_id, message_id=sent.id, day=today)
        return SummaryRun(summary=summary, message_id=sent.id, thread_id=sent.thread_id)
