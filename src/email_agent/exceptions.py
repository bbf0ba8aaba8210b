"""Unified exception hierarchy for email-agent."""


class EmailAgentError(Exception):
    """Base exception for all email-agent errors."""


class ConfigError(EmailAgentError):
    """Missing or malformed configuration. Fatal at process start."""


# Gmail
class GmailError(EmailAgentError):
    """Base exception for Gmail operations."""


class GmailAuthError(GmailError):
    """Gmail authentication or authorization failure."""


class GmailFetchError(GmailError):
    """Failed to list or fetch Gmail messages or labels."""


class GmailSendError(GmailError):
    """Failed to send a message."""


class GmailModifyError(GmailError):
    """Failed to change the state of a message (labels, trash)."""


# LLM
class LLMError(EmailAgentError):
    """The Claude API call itself failed."""


class LLMResponseError(LLMError):
    """Claude answered, but not in the JSON shape we asked for."""


class UnknownCommandError(LLMResponseError):
    """A parsed command carried a type outside the supported set."""


# Storage
class StorageError(EmailAgentError):
    """Failed to read or write a stored summary."""
