"""Turn a batch of emails into a prioritized :class:`Summary` with Claude."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from email_agent.core.dates import now_utc
from email_agent.exceptions import LLMResponseError
from email_agent.gmail.models import Email
from email_agent.summary.models import ActionItem, InformationalItem, Priority, Summary

logger = logging.getLogger(__name__)

BODY_EXCERPT_CHARS = 1000
EMPTY_SUMMARY_TEXT = "No new emails to summarize."

SYSTEM_PROMPT = """You are an intelligent email assistant helping a busy professional manage their inbox efficiently.
Your task is to analyze emails and provide actionable summaries.

Guidelines:
- Be concise but informative
- Prioritize emails requiring immediate action
- Identify key deadlines and meetings
- Group related emails when relevant
- Ignore obvious spam or promotional emails unless specifically relevant
- For action items, provide clear, specific suggested actions

Always respond with valid JSON matching the specified format."""

RESPONSE_FORMAT = """Respond with JSON in this exact format:
{
  "executiveSummary": "A 2-3 sentence overview of the inbox state and most important items",
  "actionItems": [
    {
      "referenceId": "EMAIL-001",
      "priority": "high",
      "description": "Meeting request from John",
      "suggestedAction": "Confirm attendance for tomorrow at 2pm"
    }
  ],
  "informational": [
    {
      "referenceId": "EMAIL-005",
      "description": "Weekly newsletter from Tech News"
    }
  ]
}"""


class EmailSummarizer:
    """Builds the summary prompt, calls Claude, and validates the answer.

    Args:
        llm: anything with ``parse_json(prompt) -> object``, normally
            :class:`email_agent.llm.LLMClient`.
    """

    def __init__(self, llm):
        self.llm = llm

    def summarize(self, emails: list[Email]) -> Summary:
        """Summarize a batch. An empty batch never reaches the model.

        Raises:
            LLMError: the model call failed.
            LLMResponseError: the model's JSON did not match the contract.
        """
        if not emails:
            return self.create_empty_summary()

        logger.info(f"Summarizing {len(emails)} emails")
        response = self.llm.parse_json(self.build_prompt(emails))
        return self.create_summary(emails, response)

    def build_prompt(self, emails: list[Email]) -> str:
        email_list = "\n".join(format_email_for_prompt(email) for email in emails)
        return f"""{SYSTEM_PROMPT}

Analyze these {len(emails)} emails and provide a structured summary.

For each email that requires action, create an action item with:
- referenceId: The email's ID (e.g., EMAIL-001)
- priority: "high" (urgent/deadline), "medium" (important but not urgent), or "low" (can wait)
- description: Brief description of what the email is about
- suggestedAction: Specific action the user should take

For informational emails (newsletters, notifications, etc.), create an informational item with:
- referenceId: The email's ID
- description: Brief description of the content

Emails to analyze:
{email_list}

{RESPONSE_FORMAT}"""

    def create_summary(self, emails: list[Email], response: Any) -> Summary:
        if not isinstance(response, dict):
            raise LLMResponseError("Summary response is not a JSON object")

        by_ref = {email.reference_id: email for email in emails}
        email_mappings = {email.reference_id: email.id for email in emails}

        executive = _require(response, "executiveSummary", str)
        action_items = [
            item for item in (
                _action_item(raw, by_ref)
                for raw in _require(response, "actionItems", list)
            )
            if item is not None
        ]
        informational = [
            item for item in (
                _informational_item(raw, by_ref)
                for raw in _require(response, "informational", list)
            )
            if item is not None
        ]

        now = now_utc()
        return Summary(
            id=str(uuid.uuid4()),
            generated_at=now,
            period_start=min(email.date for email in emails),
            period_end=now,
            total_emails=len(emails),
            unread_count=sum(1 for email in emails if email.is_unread),
            executive_summary=executive,
            action_items=action_items,
            informational=informational,
            email_mappings=email_mappings,
        )

    def create_empty_summary(self) -> Summary:
        now = now_utc()
        return Summary(
            id=str(uuid.uuid4()),
            generated_at=now,
            period_start=now,
            period_end=now,
            total_emails=0,
            unread_count=0,
            executive_summary=EMPTY_SUMMARY_TEXT,
        )


def format_email_for_prompt(email: Email) -> str:
    body = email.body_plain[:BODY_EXCERPT_CHARS]
    if len(email.body_plain) > BODY_EXCERPT_CHARS:
        body += "..."
    lines = [
        "",
        f"[{email.reference_id}]",
        f"From: {email.sender.formatted}",
        f"Subject: {email.subject}",
        f"Date: {email.date.isoformat()}",
        f"Preview: {email.snippet}",
    ]
    if body:
        lines.append(f"Body excerpt:\n{body}")
    lines.append("---")
    return "\n".join(lines)


def _require(data: dict, key: str, kind: type) -> Any:
    value = data.get(key)
    if not isinstance(value, kind):
        raise LLMResponseError(f"Summary response field {key!r} is missing or not a {kind.__name__}")
    return value


def _lookup(raw: Any, by_ref: dict[str, Email], kind: str) -> Email | None:
    if not isinstance(raw, dict):
        raise LLMResponseError(f"Summary {kind} entry is not a JSON object")
    ref = raw.get("referenceId")
    email = by_ref.get(ref) if isinstance(ref, str) else None
    if email is None:
        logger.warning(f"Dropping {kind} for unknown reference {ref!r}")
    return email


def _action_item(raw: Any, by_ref: dict[str, Email]) -> ActionItem | None:
    email = _lookup(raw, by_ref, "action item")
    if email is None:
        return None
    try:
        priority = Priority(raw.get("priority"))
    except ValueError as e:
        raise LLMResponseError(f"Invalid priority {raw.get('priority')!r}") from e
    return ActionItem(
        reference_id=email.reference_id,
        priority=priority,
        description=_require(raw, "description", str),
        suggested_action=_require(raw, "suggestedAction", str),
        from_email=email.sender.address,
        subject=email.subject,
    )


def _informational_item(raw: Any, by_ref: dict[str, Email]) -> InformationalItem | None:
    email = _lookup(raw, by_ref, "informational item")
    if email is None:
        return None
    return InformationalItem(
        reference_id=email.reference_id,
        description=_require(raw, "description", str),
        from_email=email.sender.address,
    )
