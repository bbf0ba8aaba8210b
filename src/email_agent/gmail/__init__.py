"""Gmail access: OAuth, query building, message parsing and the API client.

Heavy imports are deferred. Use explicit imports:
    from email_agent.gmail.client import GmailClient
    from email_agent.gmail.auth import GmailAuth
"""

# Light imports only (no Google client libraries)
from email_agent.gmail import label, query
from email_agent.gmail.label import Label
from email_agent.gmail.models import (
    AttachmentInfo,
    Email,
    EmailAddress,
    SentMessage,
    generate_reference_id,
    parse_address_list,
    parse_email_address,
)


def __getattr__(name):
    """Lazy imports for classes that pull in the Google API stack."""
    if name == "GmailClient":
        from email_agent.gmail.client import GmailClient
        return GmailClient
    if name == "GmailAuth":
        from email_agent.gmail.auth import GmailAuth
        return GmailAuth
    if name == "parse_message":
        from email_agent.gmail.parser import parse_message
        return parse_message
    raise AttributeError(f"module 'email_agent.gmail' has no attribute {name!r}")


__all__ = [
    "AttachmentInfo",
    "Email",
    "EmailAddress",
    "GmailAuth",
    "GmailClient",
    "Label",
    "SentMessage",
    "generate_reference_id",
    "label",
    "parse_address_list",
    "parse_email_address",
    "parse_message",
    "query",
]
