"""
Resume classifier.

Decides whether a message asks to return to a previously interrupted
booking. Failures resolve to "not a resume".
"""

import logging
from typing import Callable, Optional, Protocol

from concierge.prompts.builders import build_resume_prompt
from concierge.shared.errors import ClassificationError
from concierge.shared.llm.client import infer as default_infer
from concierge.shared.parsing import ParseError, parse_json_response


logger = logging.getLogger(__name__)


class ResumeClassifier(Protocol):
    def is_resume(self, message: str) -> bool:
        ...


def parse_resume_answer(raw_response: str) -> bool:
    """
    Read ``{"isResume": bool}`` from a response.

    Raises:
        ClassificationError: If the response has no boolean ``isResume``
    """
    try:
        data = parse_json_response(raw_response)
    except ParseError as e:
        raise ClassificationError(str(e))
    if not isinstance(data, dict) or not isinstance(data.get("isResume"), bool):
        raise ClassificationError(f"Missing boolean isResume in: {str(data)[:80]}")
    return data["isResume"]


class LLMResumeClassifier:
    """Resume classifier backed by the inference capability."""

    def __init__(self, infer: Optional[Callable[[str], str]] = None):
        self._infer = infer or default_infer

    def is_resume(self, message: str) -> bool:
        try:
            result = parse_resume_answer(self._infer(build_resume_prompt(message)))
        except ClassificationError as e:
            logger.warning(f"[classifier=resume] Unparseable answer, assuming no resume: {e}")
            return False
        except Exception as e:
            logger.exception(f"[classifier=resume] Classification failed, assuming no resume: {e}")
            return False
        logger.info(f"[classifier=resume] resume={result}")
        return result
