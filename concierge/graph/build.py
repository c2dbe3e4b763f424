"""
Turn graph construction.

Builds the graph that handles one user message:

    route_turn -> execute_step (loop over the work queue)
               -> finalize_terminal | consolidate -> END

Nodes are bound methods of TurnNodes so the graph can be built over
any agent registry, planner, classifiers and consolidator.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from langgraph.graph import StateGraph, END

from concierge.agents.base import AgentContext
from concierge.agents.registry import RESERVATION_AGENT, AgentRegistry
from concierge.classifiers.interruption import InterruptionClassifier
from concierge.classifiers.resume import ResumeClassifier
from concierge.graph.router import route_after_planning, route_after_step
from concierge.graph.state import TurnMode, TurnState
from concierge.narrator.consolidator import Consolidator
from concierge.planner.planner import Planner
from concierge.shared.config import DEFAULT_CONFIG, OrchestratorConfig
from concierge.shared.contracts.agent_result import AgentResult, ContextData, StepOutcome
from concierge.shared.contracts.execution_plan import ExecutionPlan, PlanStep
from concierge.shared.contracts.session_state import (
    Delegation,
    FlowType,
    InterruptedFlow,
    SessionState,
)
from concierge.shared.contracts.turn_response import TerminalEvent


logger = logging.getLogger(__name__)

RESUME_TASK = "Continue with the booking process"
RESERVATION_CREATED = "reservation_created"
RESERVATION_CREATED_REPLY = "Your reservation has been successfully created!"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _system_message(content: str) -> Dict[str, str]:
    return {"role": "system", "agent": "orchestrator", "content": content}


def reservation_event(tool_result: Dict[str, Any]) -> TerminalEvent:
    """Build the reservation-created event from a create_reservation result."""
    details = tool_result.get("reservationDetails") or {}
    reservation = {
        "reservationId": details.get("reservationId"),
        "restaurant": details.get("restaurant"),
        "date": details.get("date"),
        "time": details.get("time"),
        "partySize": details.get("partySize"),
        "tableType": details.get("tableType"),
        "specialRequests": details.get("specialRequests"),
    }
    customer = {
        "name": details.get("name"),
        "email": details.get("email"),
        "phone": details.get("phone"),
    }
    return TerminalEvent(
        type=RESERVATION_CREATED,
        payload={"reservation": reservation, "customer": customer},
    )


def apply_context_data(session: SessionState, context_data: ContextData) -> None:
    """
    Apply an agent's proposed session mutation to the working copy.

    Args:
        session: Turn's working copy of the session
        context_data: Mutation emitted by the agent
    """
    if context_data.reset_flow:
        session.reset_flow()
        session.interrupted_flow = None
        return

    if context_data.replace_flow_state:
        session.flow_state = dict(context_data.flow_state)
    else:
        session.flow_state.update(context_data.flow_state)
    if context_data.active_flow is not None:
        session.active_flow = context_data.active_flow

    if context_data.is_awaiting_user_response:
        session.is_awaiting_user_response = True
        session.next_agent = context_data.next_agent
        # A live booking question supersedes any older abandoned one
        if session.active_flow == FlowType.BOOKING:
            session.interrupted_flow = None


class TurnNodes:
    """Graph nodes for one turn, bound to their collaborators."""

    def __init__(
        self,
        registry: AgentRegistry,
        planner: Planner,
        interruption_classifier: InterruptionClassifier,
        resume_classifier: ResumeClassifier,
        consolidator: Consolidator,
        config: OrchestratorConfig = DEFAULT_CONFIG,
        now: Callable[[], datetime] = _utc_now,
    ):
        self.registry = registry
        self.planner = planner
        self.interruption_classifier = interruption_classifier
        self.resume_classifier = resume_classifier
        self.consolidator = consolidator
        self.config = config
        self.now = now

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def route_turn(self, state: TurnState) -> Dict[str, Any]:
        """
        Decide how this turn's work queue is built.

        Order of checks:
        1. An interrupted booking exists and the user wants it back -> resume
        2. The previous turn asked a question:
           a. the message changes topic -> snapshot the flow, plan afresh
           b. otherwise -> continuation to the awaiting agent
        3. Otherwise -> plan afresh

        Args:
            state: Current turn state

        Returns:
            State updates with the session, mode and initial queue
        """
        session_id = state.get("session_id", "unknown")
        _log = f"[session={session_id}] [graph=turn] [node=route_turn] "
        session = state["session"]
        message = state["message"]
        history = state.get("history") or []

        logger.info(f"{_log}Entering node | {session.summary()}")

        # Turn-scoped scratchpad starts empty every turn
        session.global_context = {}
        session.delegation_chain = []

        if session.interrupted_flow is not None and self.resume_classifier.is_resume(message):
            restored = dict(session.interrupted_flow.flow_state)
            session.flow_state = restored
            session.active_flow = FlowType.BOOKING
            session.interrupted_flow = None
            session.clear_awaiting()
            session.global_context["bookingContext"] = dict(restored)
            mode = TurnMode.RESUME_DETECTED
            plan = ExecutionPlan.single(RESERVATION_AGENT, RESUME_TASK)

        elif session.is_awaiting_user_response:
            if self.interruption_classifier.is_interruption(message):
                if session.flow_state:
                    session.interrupted_flow = InterruptedFlow(
                        flow_state=dict(session.flow_state),
                        interrupted_at=self.now().isoformat(),
                    )
                session.reset_flow()
                mode = TurnMode.INTERRUPTED
                plan = self.planner.plan(message, history)
            elif session.next_agent in self.registry:
                target = session.next_agent
                session.global_context["bookingContext"] = dict(session.flow_state)
                session.clear_awaiting()
                mode = TurnMode.CONTINUATION
                plan = ExecutionPlan.single(target, message or RESUME_TASK)
            else:
                logger.warning(
                    f"{_log}Awaiting unknown agent {session.next_agent!r}, planning afresh"
                )
                session.clear_awaiting()
                mode = TurnMode.FRESH_PLAN
                plan = self.planner.plan(message, history)

        else:
            mode = TurnMode.FRESH_PLAN
            plan = self.planner.plan(message, history)

        logger.info(f"{_log}Turn routed | mode={mode.value}, plan={plan.agent_names}")
        return {
            "session": session,
            "mode": mode,
            "queue": list(plan.steps),
            "executed": [],
            "messages": [_system_message(f"Turn mode: {mode.value}. Plan: {plan.agent_names}.")],
        }

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute_step(self, state: TurnState) -> Dict[str, Any]:
        """
        Run the agent at the head of the work queue.

        Records the delegation and raw tool result, applies the agent's
        context data, queues its hand-off if that agent has not already
        run or been queued this turn, and detects the reservation event.

        Args:
            state: Current turn state

        Returns:
            State updates with the remaining queue and the step outcome
        """
        session_id = state.get("session_id", "unknown")
        _log = f"[session={session_id}] [graph=turn] [node=execute_step] "
        session = state["session"]
        queue: List[PlanStep] = list(state.get("queue") or [])
        executed: List[str] = list(state.get("executed") or [])

        step = queue.pop(0)
        agent = self.registry.get(step.agent_name)
        if agent is None:
            logger.warning(f"{_log}Skipping unknown agent {step.agent_name!r}")
            return {"queue": queue}

        logger.info(
            f"{_log}Entering node | step={len(executed) + 1}, agent={agent.name}, "
            f"task={step.sub_task_query!r}"
        )

        context = AgentContext(
            original_message=state["message"],
            global_context=session.global_context,
            session_id=session_id,
        )
        result: AgentResult = agent.process(
            step.sub_task_query,
            state.get("history") or [],
            state["restaurant_id"],
            context,
        )
        executed.append(agent.name)

        session.delegation_chain.append(Delegation(agent=agent.name, task=step.sub_task_query))
        session.global_context[agent.name] = result.tool_result
        if result.context_data is not None:
            apply_context_data(session, result.context_data)

        outcome = StepOutcome(
            agent_name=agent.name,
            task=step.sub_task_query,
            tool_name=result.tool_name,
            tool_result=result.tool_result,
        )

        terminal_event: Optional[TerminalEvent] = None
        if (
            result.status == "success"
            and result.tool_name == "create_reservation"
            and result.tool_result.get("reservationDetails")
        ):
            terminal_event = reservation_event(result.tool_result)
            logger.info(f"{_log}Reservation created, ending turn early")

        if result.handoff is not None and terminal_event is None:
            target = result.handoff.agent_name
            queued = {s.agent_name for s in queue}
            if target not in self.registry:
                logger.warning(f"{_log}Ignoring hand-off to unknown agent {target!r}")
            elif target in executed or target in queued:
                logger.info(f"{_log}Hand-off to {target} skipped, already handled this turn")
            else:
                queue.append(
                    PlanStep(
                        ordinal=len(executed) + len(queue) + 1,
                        agent_name=target,
                        sub_task_query=result.handoff.query,
                    )
                )
                logger.info(f"{_log}Hand-off queued | from={agent.name}, to={target}")

        if queue and len(executed) >= self.config.max_steps_per_turn:
            logger.warning(
                f"{_log}Step limit reached ({self.config.max_steps_per_turn}), "
                f"dropping {len(queue)} queued steps"
            )
            queue = []

        logger.info(
            f"{_log}Step finished | agent={agent.name}, status={result.status}, "
            f"tool={result.tool_name}, queued={len(queue)}"
        )
        return {
            "session": session,
            "queue": queue,
            "executed": executed,
            "outcomes": [outcome],
            "terminal_event": terminal_event,
            "messages": [
                _system_message(
                    f"Agent {agent.name} ran {result.tool_name} ({result.status})."
                )
            ],
        }

    # ------------------------------------------------------------------
    # Reply
    # ------------------------------------------------------------------

    def finalize_terminal(self, state: TurnState) -> Dict[str, Any]:
        """Finish a turn that produced a terminal business event."""
        session_id = state.get("session_id", "unknown")
        _log = f"[session={session_id}] [graph=turn] [node=finalize_terminal] "

        event = state["terminal_event"]
        logger.info(f"{_log}Terminal event | type={event.type} -> END")
        return {
            "reply": RESERVATION_CREATED_REPLY,
            "messages": [_system_message(f"Turn ended by event {event.type}.")],
        }

    def consolidate(self, state: TurnState) -> Dict[str, Any]:
        """Merge the collected tool results into one reply."""
        session_id = state.get("session_id", "unknown")
        _log = f"[session={session_id}] [graph=turn] [node=consolidate] "

        outcomes = state.get("outcomes") or []
        logger.info(f"{_log}Entering node | results={len(outcomes)}")
        reply = self.consolidator.consolidate(
            state["message"], outcomes, state.get("history") or []
        )
        logger.info(f"{_log}Reply ready | chars={len(reply)} -> END")
        return {
            "reply": reply,
            "messages": [_system_message(f"Consolidated {len(outcomes)} results.")],
        }


def create_turn_graph(nodes: TurnNodes):
    """
    Create and compile the turn graph.

    The graph structure is:
        Entry -> route_turn -> route_after_planning
          -> "execute_step" -> route_after_step
               -> "execute_step"      (next queued step)
               -> "finalize_terminal" -> END
               -> "consolidate"       -> END
          -> "consolidate" -> END

    Args:
        nodes: Node implementations bound to their collaborators

    Returns:
        Compiled LangGraph application ready for execution.
    """
    graph = StateGraph(TurnState)

    # Add nodes
    graph.add_node("route_turn", nodes.route_turn)
    graph.add_node("execute_step", nodes.execute_step)
    graph.add_node("finalize_terminal", nodes.finalize_terminal)
    graph.add_node("consolidate", nodes.consolidate)

    graph.set_entry_point("route_turn")

    graph.add_conditional_edges(
        "route_turn",
        route_after_planning,
        {
            "execute_step": "execute_step",
            "consolidate": "consolidate",
        },
    )

    graph.add_conditional_edges(
        "execute_step",
        route_after_step,
        {
            "execute_step": "execute_step",
            "finalize_terminal": "finalize_terminal",
            "consolidate": "consolidate",
        },
    )

    graph.add_edge("finalize_terminal", END)
    graph.add_edge("consolidate", END)

    app = graph.compile()

    return app
