"""
Routing logic for the turn graph.

Decides whether to execute the next queued step, stop early on a
terminal business event, or move on to consolidation.
"""

import logging
from typing import Literal

from concierge.graph.state import TurnState


logger = logging.getLogger(__name__)


def route_after_planning(
    state: TurnState,
) -> Literal["execute_step", "consolidate"]:
    """
    Route from planning to execution.

    Args:
        state: Current turn state

    Returns:
        "execute_step" when the queue holds work, otherwise "consolidate"
    """
    session_id = state.get("session_id", "unknown")
    _log = f"[session={session_id}] [graph=turn] [router=route_after_planning] "
    queued = len(state.get("queue") or [])

    if queued:
        logger.info(f"{_log}Routing to 'execute_step' | queued={queued}")
        return "execute_step"

    logger.warning(f"{_log}Routing to 'consolidate' | empty plan")
    return "consolidate"


def route_after_step(
    state: TurnState,
) -> Literal["execute_step", "finalize_terminal", "consolidate"]:
    """
    Route after one step has executed.

    Routing logic:
    1. If the step produced a terminal event -> finalize_terminal
    2. If steps remain in the queue -> execute_step
    3. Otherwise -> consolidate

    Args:
        state: Current turn state

    Returns:
        Name of the next node to execute
    """
    session_id = state.get("session_id", "unknown")
    queued = len(state.get("queue") or [])
    executed = len(state.get("executed") or [])
    _log = f"[session={session_id}] [graph=turn] [router=route_after_step] "

    if state.get("terminal_event") is not None:
        logger.info(
            f"{_log}Routing to 'finalize_terminal' | "
            f"event={state['terminal_event'].type}, skipped={queued}"
        )
        return "finalize_terminal"

    if queued:
        logger.info(f"{_log}Routing to 'execute_step' | executed={executed}, queued={queued}")
        return "execute_step"

    logger.info(f"{_log}Routing to 'consolidate' | executed={executed}")
    return "consolidate"
