"""Consolidation of a turn's tool results into a single reply."""

from concierge.narrator.consolidator import (
    NO_RESULTS_MESSAGE,
    Consolidator,
    LLMSynthesizer,
    Synthesizer,
    check_grounding,
)
from concierge.narrator.formatters import digest_line, render_payload

__all__ = [
    "NO_RESULTS_MESSAGE",
    "Consolidator",
    "LLMSynthesizer",
    "Synthesizer",
    "check_grounding",
    "digest_line",
    "render_payload",
]
