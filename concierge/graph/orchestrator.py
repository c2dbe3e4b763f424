"""
Orchestrator entry point.

Owns the session store and the compiled turn graph. Each call to
``handle_message`` runs one turn under the session's lock: it loads a
working copy of the session, runs the graph over it, and commits the
copy back only when the graph finishes. A turn that fails outright
returns a generic apology and leaves the stored session untouched.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from concierge.agents.registry import AgentRegistry
from concierge.agents.selector import LLMToolSelector
from concierge.classifiers.interruption import InterruptionClassifier, LLMInterruptionClassifier
from concierge.classifiers.resume import LLMResumeClassifier, ResumeClassifier
from concierge.graph.build import TurnNodes, create_turn_graph
from concierge.graph.session_store import SessionStore
from concierge.graph.state import TurnState
from concierge.narrator.consolidator import Consolidator, LLMSynthesizer
from concierge.planner.planner import LLMPlanner, Planner
from concierge.services.interfaces import Collaborators
from concierge.services.mock_data import InMemoryVenue
from concierge.shared.config import DEFAULT_CONFIG, OrchestratorConfig
from concierge.shared.contracts.session_state import SessionState
from concierge.shared.contracts.turn_response import TurnResponse
from concierge.shared.llm.client import call_llm
from concierge.shared.logging import log_state_transition


logger = logging.getLogger(__name__)

GENERIC_ERROR_REPLY = (
    "I apologize, but I'm having trouble processing your request right now. Please try again."
)


def _configured_infer(config: OrchestratorConfig) -> Callable[[str], str]:
    def infer(prompt: str) -> str:
        return call_llm(
            [{"role": "user", "content": prompt}],
            model=config.model,
            timeout=config.llm_timeout,
        )

    return infer


class Orchestrator:
    """Runs turns for many concurrent sessions over one agent registry."""

    def __init__(
        self,
        registry: AgentRegistry,
        planner: Planner,
        interruption_classifier: InterruptionClassifier,
        resume_classifier: ResumeClassifier,
        consolidator: Consolidator,
        store: Optional[SessionStore] = None,
        config: OrchestratorConfig = DEFAULT_CONFIG,
    ):
        self.registry = registry
        self.config = config
        self.store = store or SessionStore(
            ttl_seconds=config.session_ttl_seconds,
            max_sessions=config.max_active_sessions,
        )
        self.nodes = TurnNodes(
            registry=registry,
            planner=planner,
            interruption_classifier=interruption_classifier,
            resume_classifier=resume_classifier,
            consolidator=consolidator,
            config=config,
        )
        self.graph = create_turn_graph(self.nodes)

    @classmethod
    def create_default(
        cls,
        services: Optional[Collaborators] = None,
        infer: Optional[Callable[[str], str]] = None,
        config: OrchestratorConfig = DEFAULT_CONFIG,
        store: Optional[SessionStore] = None,
    ) -> "Orchestrator":
        """
        Wire the standard agents and inference adapters.

        Args:
            services: Collaborator bundle (defaults to the in-memory sample venue)
            infer: Inference function shared by every adapter
                (defaults to the OpenAI client with the configured model)
            config: Runtime configuration
            store: Session store (defaults to an in-memory store sized from config)

        Returns:
            Ready-to-use Orchestrator
        """
        services = services or Collaborators.from_single(InMemoryVenue())
        infer = infer or _configured_infer(config)

        registry = AgentRegistry.create_default(
            services,
            LLMToolSelector(infer=infer, history_limit=config.history_window),
        )
        return cls(
            registry=registry,
            planner=LLMPlanner(registry, infer=infer, history_limit=config.history_window),
            interruption_classifier=LLMInterruptionClassifier(infer=infer),
            resume_classifier=LLMResumeClassifier(infer=infer),
            consolidator=Consolidator(
                LLMSynthesizer(infer=infer, history_limit=config.narrator_history_window)
            ),
            store=store,
            config=config,
        )

    def handle_message(
        self,
        session_id: str,
        message: str,
        history: Optional[List[Dict[str, Any]]] = None,
        restaurant_id: Optional[int] = None,
    ) -> TurnResponse:
        """
        Handle one user message for a session.

        Args:
            session_id: Caller-supplied session identifier
            message: The user's message
            history: Recent conversation turns (trimmed to the configured limit)
            restaurant_id: Venue the conversation is about

        Returns:
            TurnResponse with the reply and any terminal business event

        Raises:
            ValueError: If session_id is empty
        """
        if not session_id or not str(session_id).strip():
            raise ValueError("session_id must be a non-empty string")

        _log = f"[session={session_id}] [graph=turn] [orchestrator] "
        message = message or ""
        history = list(history or [])[-self.config.conversation_context_limit:]
        if restaurant_id is None:
            restaurant_id = self.config.default_restaurant_id

        with self.store.session_lock(session_id):
            working = self.store.load(session_id)
            logger.info(
                f"{_log}Turn starting | chars={len(message)}, history={len(history)}, "
                f"restaurant={restaurant_id}"
            )

            initial_state: TurnState = {
                "session_id": session_id,
                "message": message,
                "history": history,
                "restaurant_id": restaurant_id,
                "session": working,
                "mode": None,
                "queue": [],
                "executed": [],
                "outcomes": [],
                "terminal_event": None,
                "reply": None,
                "messages": [],
            }

            try:
                final_state = self.graph.invoke(
                    initial_state, config={"recursion_limit": self.config.recursion_limit}
                )
                reply = final_state.get("reply")
                if not reply:
                    raise RuntimeError("Turn finished without a reply")
            except Exception as e:
                logger.exception(f"{_log}Turn failed, session left unchanged: {e}")
                log_state_transition(
                    "turn_failed", self.store.get(session_id) or working, extra={"error": str(e)}
                )
                return TurnResponse(reply=GENERIC_ERROR_REPLY)

            session: SessionState = final_state["session"]
            self.store.commit(session)

        log_state_transition(
            "turn_committed",
            session,
            extra={
                "mode": final_state["mode"].value if final_state.get("mode") else None,
                "agents": [d.agent for d in session.delegation_chain],
            },
        )
        logger.info(
            f"{_log}Turn complete | mode={final_state['mode'].value if final_state.get('mode') else None}, "
            f"results={len(final_state.get('outcomes') or [])}, "
            f"terminal={final_state['terminal_event'].type if final_state.get('terminal_event') else None}"
        )
        return TurnResponse(reply=reply, terminal_event=final_state.get("terminal_event"))

    def get_session(self, session_id: str) -> Optional[SessionState]:
        """Committed state for a session, if it exists."""
        return self.store.get(session_id)
