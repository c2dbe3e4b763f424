"""Binary classifiers for booking-flow interruption and resumption."""

from concierge.classifiers.interruption import (
    InterruptionClassifier,
    LLMInterruptionClassifier,
    parse_yes_no,
)
from concierge.classifiers.resume import (
    LLMResumeClassifier,
    ResumeClassifier,
    parse_resume_answer,
)

__all__ = [
    "InterruptionClassifier",
    "LLMInterruptionClassifier",
    "parse_yes_no",
    "LLMResumeClassifier",
    "ResumeClassifier",
    "parse_resume_answer",
]
