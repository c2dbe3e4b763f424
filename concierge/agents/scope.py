"""
Keyword scope analysis.

Used by agents after acting, to spot clauses of the original message
that clearly belong to another capability, and by the planner's
deterministic fallback.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple


# Ordered from most to least specific: ties go to the earlier scope
SCOPE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "menu": ("menu", "food", "dish", "wine", "drink", "eat", "gluten", "vegetarian", "vegan", "price"),
    "celebration": ("birthday", "anniversary", "celebration", "special occasion", "romantic"),
    "info": ("hours", "address", "location", "contact", "phone", "email", "open", "close", "closing", "opening"),
    "availability": ("table", "book", "reserve", "available", "date", "time", "tonight", "tomorrow"),
}

# Sentence ends, plus ", and ..." style joins between independent questions
_CLAUSE_SPLIT = re.compile(r"[.!?]+|,\s*(?:and|also|plus)\s+|\s+and also\s+", re.IGNORECASE)


def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(r"\b" + re.escape(keyword) + r"(?:s|es)?\b", re.IGNORECASE)


_PATTERNS = {
    scope: [_keyword_pattern(k) for k in keywords]
    for scope, keywords in SCOPE_KEYWORDS.items()
}


def split_clauses(message: str) -> List[str]:
    return [c.strip() for c in _CLAUSE_SPLIT.split(message or "") if c and c.strip()]


def matches_scope(text: str, scope: str) -> bool:
    return any(p.search(text or "") for p in _PATTERNS.get(scope, []))


def classify_clause(text: str) -> Optional[str]:
    """Return the scope with the most keyword hits in ``text`` (None if no hits)."""
    best, best_hits = None, 0
    for scope, patterns in _PATTERNS.items():
        hits = sum(1 for p in patterns if p.search(text or ""))
        if hits > best_hits:
            best, best_hits = scope, hits
    return best


def find_residual(
    message: str,
    task: str,
    own_scope: Optional[str],
    targets: Iterable[str],
    claimed: Iterable[str] = (),
) -> Optional[Tuple[str, str]]:
    """
    Find the part of ``message`` that belongs to another capability.

    A clause is ignored when ``task`` already covers it, or when its
    dominant scope is the caller's own or one already handled this turn.
    The first target (in the given order) with remaining clauses wins.

    Args:
        message: The user's full original message
        task: The sub-task this agent handled
        own_scope: Keyword scope of the calling agent, if any
        targets: Agent names the caller may hand off to, in priority order
        claimed: Scopes whose agents already ran this turn

    Returns:
        ``(target_agent, residual_query)`` or None
    """
    task_lower = (task or "").lower()
    skip = set(claimed)
    if own_scope:
        skip.add(own_scope)

    by_scope: Dict[str, List[str]] = {}
    for clause in split_clauses(message):
        if clause.lower() in task_lower:
            continue
        scope = classify_clause(clause)
        if scope is None or scope in skip:
            continue
        by_scope.setdefault(scope, []).append(clause)

    for target in targets:
        if target in by_scope:
            return target, ". ".join(by_scope[target])
    return None
