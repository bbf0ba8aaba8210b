"""email-agent: daily Gmail summaries written by Claude, driven by email replies."""

__version__ = "0.1.0"
