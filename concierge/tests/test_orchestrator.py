"""
Tests for the orchestrator turn pipeline.

Runs whole conversations through Orchestrator.handle_message with the
in-memory venue and deterministic stubs for every inference interface
(tool selection, planning, classification, narration). Covers the
booking flow end-to-end, interruption and resumption, multi-intent
plans, hand-offs and turn atomicity.
"""

from datetime import datetime

import pytest

from concierge.agents import AgentRegistry, ToolDecision
from concierge.graph import Orchestrator, SessionStore
from concierge.graph.build import RESUME_TASK
from concierge.graph.orchestrator import GENERIC_ERROR_REPLY
from concierge.narrator import Consolidator, render_payload
from concierge.planner import keyword_fallback_plan
from concierge.services.interfaces import Collaborators
from concierge.services.mock_data import InMemoryVenue
from concierge.shared.config import DEFAULT_CONFIG, get_config
from concierge.shared.contracts.agent_result import StepOutcome
from concierge.shared.contracts.execution_plan import ExecutionPlan, PlanStep
from concierge.shared.contracts.session_state import Delegation, FlowType
from concierge.tools.registry import CLARIFY_TOOL


SESSION = "session-1"
AVAILABILITY_REQUEST = "Check availability for tomorrow at 8pm for 4 people"
TABLE_CHOICE = "standard table"
HOURS_QUESTION = "hello, what are your opening hours?"
RESUME_REQUEST = "let's continue the reservation"
HOURS_AND_MENU_QUESTION = "What time do you close on Saturdays, and are your lamb chops gluten-free?"
CONTACT_REQUEST = "May I have your name, email and phone number?"


# ============================================================================
# Test Fixtures
# ============================================================================


class StubSelector:
    """Per-agent canned tool decisions; records every request."""

    def __init__(self, decisions=None):
        self.decisions = dict(decisions or {})
        self.requests = []

    def select(self, request):
        self.requests.append(request)
        return self.decisions[request.agent_name]

    def last_request(self, agent_name):
        return [r for r in self.requests if r.agent_name == agent_name][-1]


class StubPlanner:
    """Canned plans keyed by message; unknown messages use the keyword plan."""

    def __init__(self, plans=None, error=None):
        self.plans = dict(plans or {})
        self.error = error
        self.calls = []

    def plan(self, message, history=None):
        self.calls.append((message, list(history or [])))
        if self.error is not None:
            raise self.error
        steps = self.plans.get(message)
        if steps is None:
            return keyword_fallback_plan(message)
        return ExecutionPlan(
            steps=[
                PlanStep(ordinal=i, agent_name=agent, sub_task_query=task)
                for i, (agent, task) in enumerate(steps, start=1)
            ]
        )


class StubClassifier:
    """Answers True for the messages it was given; records every call."""

    def __init__(self, positives=()):
        self.positives = set(positives)
        self.calls = []

    def is_interruption(self, message):
        self.calls.append(message)
        return message in self.positives

    def is_resume(self, message):
        self.calls.append(message)
        return message in self.positives


class StubSynthesizer:
    def __init__(self, reply="Here is everything you asked for."):
        self.reply = reply
        self.calls = []

    def synthesize(self, message, digest, history):
        self.calls.append((message, digest, history))
        return self.reply


class Harness:
    """An orchestrator wired to stubs, with handles on each stub."""

    def __init__(self, venue=None, plans=None, interruptions=(), resumes=(), config=DEFAULT_CONFIG):
        self.venue = venue or _make_two_type_venue()
        self.selector = StubSelector(
            {
                "availability": _decision(
                    "check_availability", date="2025-08-09", time="20:00", partySize=4
                ),
                "reservation": _clarify(CONTACT_REQUEST),
                "info": _decision("get_restaurant_info", topic="hours"),
                "menu": _decision("get_menu_items", query="lamb chops"),
                "support": _clarify("Hello! How can I help you today?"),
            }
        )
        self.planner = StubPlanner(plans or _default_plans())
        self.interruption = StubClassifier(interruptions)
        self.resume = StubClassifier(resumes)
        self.synthesizer = StubSynthesizer()
        self.store = SessionStore(ttl_seconds=600, max_sessions=100)
        registry = AgentRegistry.create_default(Collaborators.from_single(self.venue), self.selector)
        self.orchestrator = Orchestrator(
            registry=registry,
            planner=self.planner,
            interruption_classifier=self.interruption,
            resume_classifier=self.resume,
            consolidator=Consolidator(self.synthesizer),
            store=self.store,
            config=config,
        )

    def send(self, message, history=None, session_id=SESSION):
        return self.orchestrator.handle_message(session_id, message, history=history or [])

    def session(self, session_id=SESSION):
        return self.orchestrator.get_session(session_id)


def _make_two_type_venue():
    return InMemoryVenue(
        tables=[
            (1, "A2", "standard", 0.0, 4),
            (1, "B2", "grass", 15.0, 4),
        ]
    )


def _default_plans():
    return {
        AVAILABILITY_REQUEST: [("availability", AVAILABILITY_REQUEST)],
        HOURS_QUESTION: [("info", "what are your opening hours")],
        HOURS_AND_MENU_QUESTION: [
            ("info", "What time do you close on Saturdays"),
            ("menu", "are your lamb chops gluten-free"),
        ],
    }


def _decision(tool, **parameters):
    return ToolDecision(tool_to_call=tool, parameters=parameters)


def _clarify(message):
    return _decision(CLARIFY_TOOL, response_type="clarification", message=message)


def _create_decision():
    return ToolDecision(
        tool_to_call="create_reservation",
        parameters={"name": "Eleni Kosta", "email": "eleni@example.com", "phone": "+30 697 000 0000"},
        booking_updates={"name": "Eleni Kosta", "email": "eleni@example.com", "phone": "+30 697 000 0000"},
    )


def _choose_table(harness):
    harness.send(AVAILABILITY_REQUEST)
    harness.send(TABLE_CHOICE)
    return harness.session()


# ============================================================================
# Booking flow
# ============================================================================


class TestBookingFlow:
    """Availability -> table choice -> interruption -> resume -> booking."""

    def test_availability_opens_booking_flow(self):
        harness = Harness()

        response = harness.send(AVAILABILITY_REQUEST)

        state = harness.session()
        assert harness.planner.calls[0][0] == AVAILABILITY_REQUEST
        assert state.is_awaiting_user_response is True
        assert state.next_agent == "reservation"
        assert state.active_flow == FlowType.BOOKING
        assert state.flow_state["date"] == "2025-08-09"
        assert state.flow_state["time"] == "20:00"
        assert state.flow_state["partySize"] == 4
        assert [t["tableType"] for t in state.flow_state["availableTableTypes"]] == ["standard", "grass"]
        assert response.reply.startswith("Good news! We have tables available for 4 people")
        assert "Which table type would you prefer?" in response.reply
        assert response.terminal_event is None

    def test_resume_classifier_not_consulted_without_interrupted_flow(self):
        harness = Harness()
        harness.send(AVAILABILITY_REQUEST)
        harness.send(TABLE_CHOICE)
        assert harness.resume.calls == []

    def test_continuation_routes_to_awaiting_agent(self):
        harness = Harness()
        harness.send(AVAILABILITY_REQUEST)
        flow_before = harness.session().flow_state

        response = harness.send(TABLE_CHOICE)

        state = harness.session()
        request = harness.selector.last_request("reservation")
        assert len(harness.planner.calls) == 1
        assert harness.interruption.calls == [TABLE_CHOICE]
        assert state.delegation_chain == [Delegation(agent="reservation", task=TABLE_CHOICE)]
        assert request.booking_context == flow_before
        assert request.task == TABLE_CHOICE
        assert request.global_context == {}
        assert response.reply == CONTACT_REQUEST
        assert state.is_awaiting_user_response is True
        assert state.next_agent == "reservation"
        assert state.flow_state["selectedTableType"] == "standard"

    def test_interruption_snapshots_flow(self):
        harness = Harness(interruptions={HOURS_QUESTION})
        flow_before = _choose_table(harness).flow_state

        response = harness.send(HOURS_QUESTION)

        state = harness.session()
        assert state.interrupted_flow is not None
        assert state.interrupted_flow.flow_state == flow_before
        datetime.fromisoformat(state.interrupted_flow.interrupted_at)
        assert state.flow_state == {}
        assert state.active_flow == FlowType.NONE
        assert state.next_agent is None
        assert state.is_awaiting_user_response is False
        assert state.delegation_chain == [Delegation(agent="info", task="what are your opening hours")]
        assert "Opening hours:" in response.reply
        assert "table" not in response.reply.lower()

    def test_resume_restores_snapshot(self):
        harness = Harness(interruptions={HOURS_QUESTION}, resumes={RESUME_REQUEST})
        flow_before = _choose_table(harness).flow_state
        harness.send(HOURS_QUESTION)

        response = harness.send(RESUME_REQUEST)

        state = harness.session()
        request = harness.selector.last_request("reservation")
        assert request.task == RESUME_TASK
        assert request.booking_context == flow_before
        assert state.flow_state == flow_before
        assert state.interrupted_flow is None
        assert state.active_flow == FlowType.BOOKING
        assert state.is_awaiting_user_response is True
        assert state.next_agent == "reservation"
        assert response.reply == CONTACT_REQUEST
        assert len(harness.planner.calls) == 2

    def test_reservation_created_ends_turn_with_event(self):
        harness = Harness(interruptions={HOURS_QUESTION}, resumes={RESUME_REQUEST})
        _choose_table(harness)
        harness.send(HOURS_QUESTION)
        harness.send(RESUME_REQUEST)
        harness.selector.decisions["reservation"] = _create_decision()

        response = harness.send("Eleni Kosta, eleni@example.com, +30 697 000 0000")

        event = response.terminal_event
        assert response.reply == "Your reservation has been successfully created!"
        assert event.type == "reservation_created"
        assert event.payload["reservation"]["tableType"] == "standard"
        assert event.payload["reservation"]["date"] == "2025-08-09"
        assert event.payload["reservation"]["partySize"] == 4
        assert event.payload["reservation"]["reservationId"] == 1001
        assert event.payload["customer"] == {
            "name": "Eleni Kosta",
            "email": "eleni@example.com",
            "phone": "+30 697 000 0000",
        }

        state = harness.session()
        assert state.active_flow == FlowType.NONE
        assert state.flow_state == {}
        assert state.is_awaiting_user_response is False
        assert len(harness.venue.list_reservations(1)) == 1

    def test_new_availability_drops_stale_interrupted_flow(self):
        message = "Is there a table for 2 on Friday at 7pm?"
        harness = Harness(
            interruptions={HOURS_QUESTION},
            plans=dict(_default_plans(), **{message: [("availability", message)]}),
        )
        _choose_table(harness)
        harness.send(HOURS_QUESTION)
        harness.selector.decisions["availability"] = _decision(
            "check_availability", date="2025-08-15", time="19:00", partySize=2
        )

        harness.send(message)

        state = harness.session()
        assert harness.resume.calls == [message]
        assert state.interrupted_flow is None
        assert state.flow_state["date"] == "2025-08-15"
        assert "selectedTableType" not in state.flow_state

    def test_ambiguous_message_while_awaiting_stays_in_flow(self):
        harness = Harness()
        harness.send(AVAILABILITY_REQUEST)

        harness.send("hmm")

        state = harness.session()
        assert state.delegation_chain == [Delegation(agent="reservation", task="hmm")]
        assert state.is_awaiting_user_response is True
        assert state.interrupted_flow is None


# ============================================================================
# Multi-intent plans and hand-offs
# ============================================================================


class TestMultiIntent:
    """Several agents in one turn, merged into one reply."""

    def test_two_step_plan_is_narrated(self):
        harness = Harness()
        harness.synthesizer.reply = (
            "We close at 00:30 on Saturdays. The Grilled Lamb Chops (€24.00) are not gluten-free."
        )

        response = harness.send(HOURS_AND_MENU_QUESTION)

        state = harness.session()
        assert [d.agent for d in state.delegation_chain] == ["info", "menu"]
        assert response.reply == harness.synthesizer.reply
        message, digest, _ = harness.synthesizer.calls[0]
        assert message == HOURS_AND_MENU_QUESTION
        assert digest[0].startswith("[info]")
        assert "00:30" in digest[0]
        assert digest[1].startswith("[menu]")
        assert "Gluten-free: no." in digest[1]

    def test_ungrounded_narration_falls_back(self):
        harness = Harness()
        harness.synthesizer.reply = "Lamb chops are €18 and gluten-free!"

        response = harness.send(HOURS_AND_MENU_QUESTION)

        assert "€18" not in response.reply
        assert "00:30" in response.reply
        assert "Grilled Lamb Chops (€24.00)" in response.reply

    def test_agent_handoff_is_queued(self):
        message = "Book a table for 2 tomorrow at 8pm. Also, what vegan dishes do you have?"
        harness = Harness(plans={message: [("availability", "Book a table for 2 tomorrow at 8pm")]})
        harness.selector.decisions["availability"] = _decision(
            "check_availability", date="2025-08-09", time="20:00", partySize=2
        )
        harness.selector.decisions["menu"] = _decision("get_menu_items", query="vegan", is_vegan=True)
        harness.synthesizer.reply = "We have tables available, and several vegan dishes."

        response = harness.send(message)

        state = harness.session()
        assert state.delegation_chain == [
            Delegation(agent="availability", task="Book a table for 2 tomorrow at 8pm"),
            Delegation(agent="menu", task="Also, what vegan dishes do you have"),
        ]
        assert response.reply == "We have tables available, and several vegan dishes."
        assert state.is_awaiting_user_response is True
        assert state.next_agent == "reservation"

    def test_handoff_to_already_planned_agent_is_not_duplicated(self):
        harness = Harness()
        harness.send(HOURS_AND_MENU_QUESTION)
        assert [d.agent for d in harness.session().delegation_chain] == ["info", "menu"]
        assert len(harness.selector.requests) == 2

    def test_later_steps_see_earlier_results(self):
        harness = Harness()
        harness.send(HOURS_AND_MENU_QUESTION)
        menu_request = harness.selector.last_request("menu")
        assert menu_request.global_context["info"]["restaurant"]["name"] == "Lofaki Restaurant"

    def test_step_limit_drops_remaining_work(self):
        harness = Harness(config=get_config(max_steps_per_turn=1))

        response = harness.send(HOURS_AND_MENU_QUESTION)

        assert [d.agent for d in harness.session().delegation_chain] == ["info"]
        assert harness.synthesizer.calls == []
        assert "Opening hours:" in response.reply


# ============================================================================
# Turn contract
# ============================================================================


class TestTurnContract:
    """Entry-point validation, atomic commits and history handling."""

    @pytest.mark.parametrize("session_id", ["", "   ", None])
    def test_session_id_required(self, session_id):
        harness = Harness()
        with pytest.raises(ValueError):
            harness.orchestrator.handle_message(session_id, "hello")

    def test_failed_turn_leaves_session_unchanged(self):
        harness = Harness(interruptions={HOURS_QUESTION})
        before = _choose_table(harness)
        harness.planner.error = RuntimeError("planner backend exploded")

        response = harness.send(HOURS_QUESTION)

        after = harness.session()
        assert response.reply == GENERIC_ERROR_REPLY
        assert response.terminal_event is None
        assert after.flow_state == before.flow_state
        assert after.is_awaiting_user_response is True
        assert after.interrupted_flow is None
        assert after.delegation_chain == before.delegation_chain

    def test_failed_first_turn_leaves_no_session_lock(self):
        harness = Harness()
        harness.planner.error = RuntimeError("planner backend exploded")

        response = harness.send("hello", session_id="first-contact")

        assert response.reply == GENERIC_ERROR_REPLY
        assert harness.orchestrator.get_session("first-contact") is None
        assert harness.store.tracked_locks() == 0

    def test_sessions_do_not_share_state(self):
        harness = Harness()
        harness.send(AVAILABILITY_REQUEST, session_id="alice")
        harness.send("hello", session_id="bob")

        assert harness.session("alice").is_awaiting_user_response is True
        assert harness.session("bob").is_awaiting_user_response is False
        assert harness.session("bob").delegation_chain == [Delegation(agent="support", task="hello")]

    def test_history_trimmed_to_context_limit(self):
        harness = Harness(config=get_config(conversation_context_limit=2))
        history = [{"sender": "user", "text": f"message {i}"} for i in range(5)]

        harness.send("hello", history=history)

        _, planner_history = harness.planner.calls[0]
        assert planner_history == history[-2:]

    def test_single_result_reply_is_payload(self):
        harness = Harness()

        response = harness.send(AVAILABILITY_REQUEST)

        outcome = StepOutcome(
            agent_name="availability",
            task=AVAILABILITY_REQUEST,
            tool_name="check_availability",
            tool_result=harness.session().global_context["availability"],
        )
        assert response.reply == render_payload(outcome)
        assert harness.synthesizer.calls == []
