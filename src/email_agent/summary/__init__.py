"""Summary generation, rendering and persistence."""

from email_agent.summary.models import (
    ActionItem,
    InformationalItem,
    Priority,
    StoredSummary,
    Summary,
)
from email_agent.summary.store import SummaryStore

__all__ = [
    "ActionItem",
    "InformationalItem",
    "Priority",
    "StoredSummary",
    "Summary",
    "SummaryStore",
]
