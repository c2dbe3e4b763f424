"""
Consolidator (narrator).

Merges the raw tool results of one turn into a single reply. A lone
result is returned as its rendered payload without any inference call;
several results go to a Synthesizer along with a factual digest. A
synthesized reply is checked against the structured tool results and
rejected in favour of the concatenated payloads when it is empty, quotes
a price no result carries, claims a table is available when no
availability check found one, or names a dish, package or table the
results never mention.
"""

import logging
import re
from datetime import date
from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol, Sequence, Set, Tuple

from concierge.narrator.formatters import digest_line, render_payload
from concierge.prompts.builders import build_consolidation_prompt
from concierge.shared.config import DEFAULT_CONFIG
from concierge.shared.contracts.agent_result import StepOutcome
from concierge.shared.errors import ConsolidationError
from concierge.shared.llm.client import infer as default_infer


logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = (
    "I apologize, but I wasn't able to gather the information you requested. Please try again."
)

_CURRENCY_AMOUNT = re.compile(
    r"(?:[€$£]|\bEUR\b)\s?(\d+(?:[.,]\d{1,2})?)"
    r"|(\d+(?:[.,]\d{1,2})?)\s?(?:€|\bEUR\b|\beuros?\b|\bdollars?\b)",
    re.IGNORECASE,
)
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_AVAILABILITY_CLAIM = re.compile(
    r"\b(?:tables?|seats?|spots?)\b[^.!?]*\b(?:available|free|open)\b"
    r"|\b(?:have|got|found|hold)\s+(?:a|an|the|one|some)?\s*(?:\w+\s+)?tables?\b"
    r"|\bcan (?:seat|accommodate|fit)\b",
    re.IGNORECASE,
)
_NEGATION = re.compile(
    r"\b(?:no|not|unfortunately|sorry|unavailable|cannot|fully booked)\b|n't\b",
    re.IGNORECASE,
)
_CAPITALISED_PHRASE = re.compile(r"\b[A-Z][\w'-]*(?:\s+[A-Z][\w'-]*)+")
# Words that open a sentence or precede a name without being part of it
_LEADING_WORDS = {
    "a", "also", "an", "and", "but", "enjoy", "for", "good", "great", "i", "our",
    "plus", "sure", "the", "try", "we", "yes", "your",
}


class Synthesizer(Protocol):
    def synthesize(
        self,
        message: str,
        digest: List[str],
        history: Optional[Sequence[Dict[str, Any]]],
    ) -> str:
        ...


class LLMSynthesizer:
    """Synthesizer backed by the inference capability."""

    def __init__(
        self,
        infer: Optional[Callable[[str], str]] = None,
        history_limit: int = DEFAULT_CONFIG.narrator_history_window,
        restaurant_name: Optional[str] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self._infer = infer or default_infer
        self._history_limit = history_limit
        self._restaurant_name = restaurant_name
        self._today = today or date.today

    def synthesize(
        self,
        message: str,
        digest: List[str],
        history: Optional[Sequence[Dict[str, Any]]],
    ) -> str:
        prompt = build_consolidation_prompt(
            message,
            digest,
            history,
            self._history_limit,
            restaurant_name=self._restaurant_name,
            today=self._today(),
        )
        return self._infer(prompt)


# ============================================================================
# Grounding
# ============================================================================


def mentioned_amounts(text: str) -> Set[float]:
    """Monetary amounts written in ``text`` (currency symbol or word attached)."""
    amounts = set()
    for match in _CURRENCY_AMOUNT.finditer(text or ""):
        raw = (match.group(1) or match.group(2)).replace(",", ".")
        amounts.add(round(float(raw), 2))
    return amounts


def _walk(value: Any, key: str = "") -> Iterator[Tuple[str, Any]]:
    """Yield every (key, leaf) pair of a nested tool result."""
    if isinstance(value, dict):
        for k, v in value.items():
            yield from _walk(v, str(k))
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _walk(v, key)
    else:
        yield key, value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def known_prices(results: Sequence[StepOutcome]) -> Set[float]:
    """Prices carried by the results: item, table, package and add-on prices."""
    prices = set()
    for outcome in results:
        for key, value in _walk(outcome.tool_result):
            if _is_number(value) and (key == "price" or key.lower().endswith("price")):
                prices.add(round(float(value), 2))
        addons = outcome.tool_result.get("addons")
        if isinstance(addons, dict):
            prices.update(round(float(v), 2) for v in addons.values() if _is_number(v))
    return prices


def has_available_table(results: Sequence[StepOutcome]) -> bool:
    return any(
        outcome.tool_name == "check_availability" and outcome.tool_result.get("available") is True
        for outcome in results
    )


def claims_availability(text: str) -> bool:
    """True if some sentence of ``text`` asserts that a table is free."""
    for sentence in _SENTENCE_SPLIT.split(text or ""):
        if _AVAILABILITY_CLAIM.search(sentence) and not _NEGATION.search(sentence):
            return True
    return False


def _normalise(text: str) -> str:
    return " ".join(text.lower().split())


def mentioned_names(text: str) -> List[str]:
    """Capitalised multi-word names in ``text``, stripped of leading filler words."""
    names = []
    for match in _CAPITALISED_PHRASE.finditer(text or ""):
        words = match.group(0).split()
        while words and words[0].lower() in _LEADING_WORDS:
            words = words[1:]
        if len(words) >= 2:
            names.append(" ".join(words))
    return names


def check_grounding(reply: str, results: Sequence[StepOutcome], original_message: str = "") -> None:
    """
    Reject a narrated reply that says anything the tool results do not.

    Prices must be among the structured price fields of the results,
    availability may only be claimed when a check found a free table,
    and multi-word names must occur in the results or the user's message.

    Raises:
        ConsolidationError: If the reply is empty or ungrounded
    """
    if not reply or not reply.strip():
        raise ConsolidationError("Narrator returned an empty reply")

    invented = sorted(mentioned_amounts(reply) - known_prices(results))
    if invented:
        raise ConsolidationError(f"Reply mentions amounts absent from the results: {invented}")

    if claims_availability(reply) and not has_available_table(results):
        raise ConsolidationError("Reply claims availability no check confirmed")

    known_text = _normalise(
        " ".join(str(v) for o in results for _, v in _walk(o.tool_result) if isinstance(v, str))
        + " "
        + (original_message or "")
    )
    unknown = [name for name in mentioned_names(reply) if _normalise(name) not in known_text]
    if unknown:
        raise ConsolidationError(f"Reply mentions names absent from the results: {unknown}")


# ============================================================================
# Consolidator
# ============================================================================


class Consolidator:
    """Produces one reply from the tool results collected during a turn."""

    def __init__(self, synthesizer: Optional[Synthesizer] = None):
        self._synthesizer = synthesizer or LLMSynthesizer()

    def consolidate(
        self,
        original_message: str,
        results: Sequence[StepOutcome],
        history: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> str:
        """
        Merge a turn's results into one reply.

        Args:
            original_message: The user's message, verbatim
            results: Tool results tagged with agent and sub-task
            history: Conversation history

        Returns:
            The reply text (never empty)
        """
        if not results:
            return NO_RESULTS_MESSAGE
        if len(results) == 1:
            return render_payload(results[0])

        payloads = [render_payload(r) for r in results]
        digest = [digest_line(r) for r in results]
        try:
            reply = self._synthesizer.synthesize(original_message, digest, history)
            check_grounding(reply, results, original_message)
            logger.info(f"[narrator] Consolidated {len(results)} results")
            return reply.strip()
        except ConsolidationError as e:
            logger.warning(f"[narrator] Rejected narration, concatenating payloads: {e}")
        except Exception as e:
            logger.exception(f"[narrator] Narration failed, concatenating payloads: {e}")

        return "\n\n".join(p for p in payloads if p) or NO_RESULTS_MESSAGE
