"""LLM client wrapper (Anthropic Claude)."""

from email_agent.llm.client import DEFAULT_MODEL, LLMClient, extract_json

__all__ = ["DEFAULT_MODEL", "LLMClient", "extract_json"]
