"""LLM client utilities."""

from concierge.shared.llm.client import get_cached_client, call_llm, infer

__all__ = ["get_cached_client", "call_llm", "infer"]
