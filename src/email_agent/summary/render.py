"""HTML and plain-text bodies for the daily summary email."""

from __future__ import annotations

from datetime import date
from html import escape

from email_agent.core.dates import format_date
from email_agent.summary.models import Priority, Summary

SUMMARY_SUBJECT = "Daily Email Summary"

COMMAND_EXAMPLES = [
    "Reply to EMAIL-001: I'll be available at 2pm tomorrow",
    "Archive EMAIL-003",
    "Forward EMAIL-002 to john@example.com",
    "Star EMAIL-004",
    "Mark EMAIL-005 as read",
]

_PRIORITY_COLORS = {
    Priority.HIGH: "#dc3545",
    Priority.MEDIUM: "#ffc107",
    Priority.LOW: "#28a745",
}

_FONT = "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif"


def summary_subject(today: date) -> str:
    return f"{SUMMARY_SUBJECT} - {format_date(today)}"


def render_summary_html(summary: Summary, today: date) -> str:
    if summary.action_items:
        action_rows = "".join(
            f"""
    <tr>
      <td style="padding: 12px; border-bottom: 1px solid #eee;">
        <strong style="color: {_PRIORITY_COLORS[item.priority]};">[{item.reference_id}]</strong>
        <span style="color: #666; font-size: 12px; margin-left: 8px;">{item.priority.value.upper()}</span>
        <br/>
        <span style="color: #333;">{escape(item.description)}</span>
        <br/>
        <span style="color: #666; font-size: 13px;">From: {escape(item.from_email)}</span>
        <br/>
        <span style="color: #0066cc; font-size: 13px;">&rarr; {escape(item.suggested_action)}</span>
      </td>
    </tr>"""
            for item in summary.action_items
        )
    else:
        action_rows = '<tr><td style="padding: 12px; color: #666;">No action items</td></tr>'

    if summary.informational:
        info_rows = "".join(
            f"""
    <li style="margin-bottom: 8px; color: #666;">
      <strong>[{item.reference_id}]</strong> {escape(item.description)}
      <br/>
      <span style="font-size: 12px;">From: {escape(item.from_email)}</span>
    </li>"""
            for item in summary.informational
        )
    else:
        info_rows = '<li style="color: #666;">No informational emails</li>'

    examples = "".join(f"<li><code>{escape(example)}</code></li>" for example in COMMAND_EXAMPLES)

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: {_FONT}; max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">

  <h1 style="color: #333; border-bottom: 2px solid #0066cc; padding-bottom: 10px;">
    {SUMMARY_SUBJECT}
  </h1>

  <p style="font-size: 14px; color: #666;">
    {format_date(today)} &bull; {summary.total_emails} emails ({summary.unread_count} unread)
  </p>

  <div style="background: #f8f9fa; padding: 15px; border-radius: 8px; margin: 20px 0;">
    <h3 style="margin-top: 0; color: #333;">Executive Summary</h3>
    <p style="margin-bottom: 0; color: #555;">{escape(summary.executive_summary)}</p>
  </div>

  <h2 style="color: #dc3545;">Action Required</h2>
  <table style="width: 100%; border-collapse: collapse;">
    {action_rows}
  </table>

  <h2 style="color: #28a745; margin-top: 30px;">Informational</h2>
  <ul style="padding-left: 20px;">
    {info_rows}
  </ul>

  <div style="background: #e7f3ff; padding: 20px; border-radius: 8px; margin-top: 30px;">
    <h3 style="margin-top: 0; color: #0066cc;">How to Respond</h3>
    <p style="margin-bottom: 10px;">Reply to this email with commands like:</p>
    <ul style="margin: 0; padding-left: 20px;">{examples}</ul>
  </div>

  <p style="font-size: 12px; color: #999; margin-top: 30px; text-align: center;">
    Generated by Email Agent &bull; Summary ID: {summary.id}
  </p>

</body>
</html>"""


def render_summary_plain(summary: Summary, today: date) -> str:
    if summary.action_items:
        action_items = "\n\n".join(
            f"[{item.reference_id}] ({item.priority.value.upper()})\n"
            f"  {item.description}\n"
            f"  From: {item.from_email}\n"
            f"  -> {item.suggested_action}"
            for item in summary.action_items
        )
    else:
        action_items = "No action items"

    if summary.informational:
        informational = "\n".join(
            f"* [{item.reference_id}] {item.description} (from: {item.from_email})"
            for item in summary.informational
        )
    else:
        informational = "No informational emails"

    examples = "\n".join(f"- {example}" for example in COMMAND_EXAMPLES)

    return f"""DAILY EMAIL SUMMARY
{format_date(today)} * {summary.total_emails} emails ({summary.unread_count} unread)

EXECUTIVE SUMMARY
{summary.executive_summary}

ACTION REQUIRED
{action_items}

INFORMATIONAL
{informational}

HOW TO RESPOND
Reply to this email with commands like:
{examples}

---
Generated by Email Agent * Summary ID: {summary.id}"""

