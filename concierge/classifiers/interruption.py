"""
Interruption classifier.

Decides whether a message sent while the assistant awaits a booking
answer continues that flow or abandons it. Any failure resolves to
"continuation" so an in-progress booking is never lost by accident.
"""

import logging
import re
from typing import Callable, Optional, Protocol

from concierge.prompts.builders import build_interruption_prompt
from concierge.shared.errors import ClassificationError
from concierge.shared.llm.client import infer as default_infer


logger = logging.getLogger(__name__)


class InterruptionClassifier(Protocol):
    def is_interruption(self, message: str) -> bool:
        ...


def parse_yes_no(raw_response: str) -> bool:
    """
    Read a YES/NO answer from the first word of a response.

    Raises:
        ClassificationError: If the first word is neither YES nor NO
    """
    match = re.match(r"\W*([A-Za-z]+)", raw_response or "")
    word = match.group(1).upper() if match else ""
    if word == "YES":
        return True
    if word == "NO":
        return False
    raise ClassificationError(f"Expected YES or NO, got: {(raw_response or '')[:50]!r}")


class LLMInterruptionClassifier:
    """Interruption classifier backed by the inference capability."""

    def __init__(self, infer: Optional[Callable[[str], str]] = None):
        self._infer = infer or default_infer

    def is_interruption(self, message: str) -> bool:
        try:
            result = parse_yes_no(self._infer(build_interruption_prompt(message)))
        except ClassificationError as e:
            logger.warning(f"[classifier=interruption] Unparseable answer, assuming continuation: {e}")
            return False
        except Exception as e:
            logger.exception(f"[classifier=interruption] Classification failed, assuming continuation: {e}")
            return False
        logger.info(f"[classifier=interruption] interruption={result}")
        return result
