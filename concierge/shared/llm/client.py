"""
OpenAI client with retry logic.

Provides a cached client instance, a chat wrapper with automatic
retries using tenacity, and the single-prompt ``infer`` adapter that
every inference decision point (tool selection, planning,
classification, narration) depends on.
"""

import logging
import os
from typing import List, Dict, Optional

from openai import OpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from dotenv import load_dotenv

from concierge.shared.config import DEFAULT_CONFIG

load_dotenv()

logger = logging.getLogger(__name__)

# Module-level cache for OpenAI client
_client: Optional[OpenAI] = None


def get_cached_client() -> OpenAI:
    """
    Returns a cached instance of the OpenAI client.

    Uses OPENAI_API_KEY environment variable for authentication.
    The client is created once and reused for all subsequent calls.
    """
    global _client
    if _client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = OpenAI(api_key=api_key, max_retries=0)
    return _client


@retry(
    stop=stop_after_attempt(DEFAULT_CONFIG.max_retries),
    wait=wait_exponential(
        multiplier=1,
        min=DEFAULT_CONFIG.retry_min_wait,
        max=DEFAULT_CONFIG.retry_max_wait,
    ),
    retry=retry_if_exception_type((Exception,)),
    reraise=True,
)
def call_llm(
    messages: List[Dict[str, str]],
    model: str = DEFAULT_CONFIG.model,
    client: Optional[OpenAI] = None,
    timeout: float = DEFAULT_CONFIG.llm_timeout,
) -> str:
    """
    Call the OpenAI Chat Completion API with automatic retries.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        model: Model identifier to use
        client: Optional OpenAI client instance. If not provided, uses cached client.
        timeout: Per-attempt request timeout in seconds

    Returns:
        The assistant's response content as a string.

    Raises:
        Exception: If all retry attempts fail.
    """
    if client is None:
        client = get_cached_client()

    response = client.chat.completions.create(
        model=model,
        messages=messages,
        timeout=timeout,
    )

    content = response.choices[0].message.content
    return (content or "").strip()


def infer(prompt: str) -> str:
    """
    Best-effort inference: given a prompt, return the model's answer.

    Callers must treat the result as untrusted text and parse it
    defensively; any exception propagates to the caller's fallback.

    Args:
        prompt: Complete prompt text

    Returns:
        Raw response text.
    """
    return call_llm([{"role": "user", "content": prompt}])
