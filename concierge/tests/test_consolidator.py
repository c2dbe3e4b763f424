"""
Tests for the consolidator (narrator) and the payload formatters.

Covers single-result passthrough, the grounding guard against invented
prices, unconfirmed availability and unknown names, and the concatenation
fallback when narration fails.
"""

import pytest

from concierge.narrator import (
    NO_RESULTS_MESSAGE,
    Consolidator,
    LLMSynthesizer,
    check_grounding,
    digest_line,
    render_payload,
)
from concierge.narrator.consolidator import known_prices, mentioned_amounts
from concierge.shared.contracts.agent_result import StepOutcome
from concierge.shared.errors import ConsolidationError


# ============================================================================
# Test Fixtures
# ============================================================================


class StubSynthesizer:
    """Returns a canned reply (or raises) and records what it was given."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def synthesize(self, message, digest, history):
        self.calls.append((message, digest, history))
        if self.error is not None:
            raise self.error
        return self.reply


def _make_hours_outcome():
    return StepOutcome(
        agent_name="info",
        task="What time do you close on Saturdays?",
        tool_name="get_restaurant_info",
        tool_result={
            "success": True,
            "topic": "hours",
            "restaurant": {
                "name": "Lofaki Restaurant",
                "hours": [{"day_of_week": "Saturday", "open_time": "12:00", "close_time": "00:30"}],
            },
        },
    )


def _make_menu_outcome():
    return StepOutcome(
        agent_name="menu",
        task="are your lamb chops gluten-free?",
        tool_name="get_menu_items",
        tool_result={
            "success": True,
            "items": [
                {
                    "name": "Grilled Lamb Chops",
                    "description": "Prime lamb chops with rosemary and garlic",
                    "price": 24.0,
                    "category": "Main",
                    "is_gluten_free": False,
                }
            ],
            "searchQuery": "lamb chops",
            "filtersApplied": {},
            "foundItems": True,
        },
    )


def _make_availability_outcome():
    return StepOutcome(
        agent_name="availability",
        task="table for 4 tomorrow at 8pm",
        tool_name="check_availability",
        tool_result={
            "success": True,
            "available": True,
            "availableTableTypes": [
                {"tableType": "standard", "price": 0.0, "capacity": 4},
                {"tableType": "grass", "price": 15.0, "capacity": 4},
            ],
            "hasMultipleTableTypes": True,
            "date": "2025-08-09",
            "time": "20:00",
            "partySize": 4,
        },
    )


def _make_no_tables_outcome():
    return StepOutcome(
        agent_name="availability",
        task="table for 4 on 2025-08-08 at 8pm",
        tool_name="check_availability",
        tool_result={
            "success": True,
            "available": False,
            "message": "No tables available for 4 people on 2025-08-08 at 20:00",
            "date": "2025-08-08",
            "time": "20:00",
            "partySize": 4,
        },
    )


def _make_celebration_outcome():
    return StepOutcome(
        agent_name="celebration",
        task="it's my wife's birthday",
        tool_name="get_celebration_packages",
        tool_result={
            "success": True,
            "packages": [
                {
                    "name": "Birthday Celebration",
                    "description": "Cake, candles and a glass of prosecco",
                    "price": 120.0,
                    "occasion_tags": ["birthday"],
                    "budget_range": "standard",
                }
            ],
            "addons": {"cake": 25, "flowers": 15, "champagne": 35, "decorations": 20},
            "occasionTags": ["birthday"],
            "budgetRange": None,
        },
    )


# ============================================================================
# Formatters
# ============================================================================


class TestRenderPayload:
    """Deterministic rendering of raw tool results."""

    def test_availability_lists_options(self):
        text = render_payload(_make_availability_outcome())
        assert text.startswith("Good news! We have tables available for 4 people on 2025-08-09 at 20:00.")
        assert "standard (no extra charge, seats up to 4)" in text
        assert "grass (€15.00 table charge, seats up to 4)" in text
        assert text.endswith("Which table type would you prefer?")

    def test_menu_reports_dietary_flags(self):
        text = render_payload(_make_menu_outcome())
        assert "Grilled Lamb Chops (€24.00)" in text
        assert "Gluten-free: no." in text

    def test_hours(self):
        text = render_payload(_make_hours_outcome())
        assert "- Saturday: 12:00 - 00:30" in text

    def test_failure_uses_message_then_error(self):
        with_message = StepOutcome(
            agent_name="availability", task="t", tool_name="check_availability",
            tool_result={"success": False, "error": "Invalid parameters", "message": "Which date?"},
        )
        without_message = StepOutcome(
            agent_name="reservation", task="t", tool_name="create_reservation",
            tool_result={"success": False, "error": "No grass table available"},
        )
        assert render_payload(with_message) == "Which date?"
        assert render_payload(without_message) == (
            "I'm sorry, I couldn't complete that request. No grass table available"
        )

    def test_clarify_returns_message_verbatim(self):
        outcome = StepOutcome(
            agent_name="support", task="hi", tool_name="clarify_and_respond",
            tool_result={"success": True, "message": "Hello! How can I help?", "responseType": "greeting"},
        )
        assert render_payload(outcome) == "Hello! How can I help?"

    def test_digest_line_tags_agent_and_task(self):
        line = digest_line(_make_hours_outcome())
        assert line.startswith("[info] Task: What time do you close on Saturdays?\n")


# ============================================================================
# Grounding
# ============================================================================


class TestGrounding:
    """The guard accepts only prices, availability and names the results carry."""

    def test_mentioned_amounts(self):
        assert mentioned_amounts("Lamb chops cost €24.00 and wine 8 euros") == {24.0, 8.0}
        assert mentioned_amounts("We close at 00:30 on Saturday") == set()

    def test_known_prices_come_from_price_fields(self):
        outcomes = [_make_menu_outcome(), _make_availability_outcome(), _make_no_tables_outcome()]
        assert known_prices(outcomes) == {24.0, 0.0, 15.0}

    def test_known_prices_include_packages_and_addons(self):
        assert known_prices([_make_celebration_outcome()]) == {120.0, 25.0, 15.0, 35.0, 20.0}

    def test_grounded_reply_accepted(self):
        check_grounding("The lamb chops are €24 and not gluten-free.", [_make_menu_outcome()])

    def test_grounded_narration_accepted(self):
        reply = (
            "Good news, we have a grass table available for 4 people. "
            "The Grilled Lamb Chops are €24.00 and the grass table costs €15."
        )
        check_grounding(reply, [_make_availability_outcome(), _make_menu_outcome()])

    @pytest.mark.parametrize("reply", ["", "   ", "The lamb chops are €19.50."])
    def test_ungrounded_reply_rejected(self, reply):
        with pytest.raises(ConsolidationError):
            check_grounding(reply, [_make_menu_outcome()])

    @pytest.mark.parametrize("reply", ["The lamb chops are just €20.", "A table for €4 is fine."])
    def test_numbers_from_dates_times_and_party_size_are_not_prices(self, reply):
        with pytest.raises(ConsolidationError):
            check_grounding(reply, [_make_no_tables_outcome(), _make_menu_outcome()])

    @pytest.mark.parametrize(
        "reply",
        [
            "Yes, we have a table available for 4 tomorrow at 20:00!",
            "Great news, we have a table for you.",
            "We can seat your party of 4 at 20:00.",
        ],
    )
    def test_availability_claim_without_free_table_rejected(self, reply):
        with pytest.raises(ConsolidationError):
            check_grounding(reply, [_make_no_tables_outcome(), _make_menu_outcome()])

    def test_no_availability_statement_accepted(self):
        reply = "Unfortunately there are no tables available for 4 at 20:00."
        check_grounding(reply, [_make_no_tables_outcome(), _make_menu_outcome()])

    @pytest.mark.parametrize(
        "reply",
        [
            "Try our Beef Wellington tonight.",
            "The Sunset Proposal Package is perfect for you.",
            "We have a Rooftop Terrace table for 4 people.",
        ],
    )
    def test_invented_names_rejected(self, reply):
        outcomes = [_make_availability_outcome(), _make_menu_outcome(), _make_celebration_outcome()]
        with pytest.raises(ConsolidationError):
            check_grounding(reply, outcomes)

    def test_names_from_results_and_message_accepted(self):
        outcomes = [_make_menu_outcome(), _make_celebration_outcome()]
        reply = "We don't serve Beef Wellington, but our Birthday Celebration package and the Grilled Lamb Chops are lovely."
        check_grounding(reply, outcomes, "Do you have Beef Wellington?")


# ============================================================================
# Consolidator
# ============================================================================


class TestConsolidator:
    """Tests for Consolidator.consolidate."""

    def test_no_results(self):
        assert Consolidator(StubSynthesizer("unused")).consolidate("hi", []) == NO_RESULTS_MESSAGE

    @pytest.mark.parametrize(
        "outcome",
        [_make_hours_outcome(), _make_menu_outcome(), _make_availability_outcome()],
    )
    def test_single_result_passthrough(self, outcome):
        synthesizer = StubSynthesizer("should not be used")
        reply = Consolidator(synthesizer).consolidate("question", [outcome])
        assert reply == render_payload(outcome)
        assert synthesizer.calls == []

    def test_multiple_results_are_narrated(self):
        narrated = "We close at 00:30 on Saturdays. The Grilled Lamb Chops (€24) are not gluten-free."
        synthesizer = StubSynthesizer(narrated)
        message = "What time do you close on Saturdays, and are your lamb chops gluten-free?"
        history = [{"sender": "user", "text": "hi"}]

        reply = Consolidator(synthesizer).consolidate(
            message, [_make_hours_outcome(), _make_menu_outcome()], history
        )

        assert reply == narrated
        called_message, digest, called_history = synthesizer.calls[0]
        assert called_message == message
        assert len(digest) == 2
        assert digest[0].startswith("[info]")
        assert called_history == history

    def test_invented_price_falls_back_to_payloads(self):
        outcomes = [_make_hours_outcome(), _make_menu_outcome()]
        synthesizer = StubSynthesizer("Lamb chops are €30 and we close at midnight.")

        reply = Consolidator(synthesizer).consolidate("question", outcomes)

        assert "€30" not in reply
        assert reply == "\n\n".join(render_payload(o) for o in outcomes)

    @pytest.mark.parametrize(
        "narrated, forbidden",
        [
            ("the Grilled Lamb Chops are just €20 and we have a table for you!", "€20"),
            ("Yes, we have a table available for 4 tomorrow at 20:00!", "Yes, we have a table"),
        ],
    )
    def test_time_or_party_size_does_not_ground_a_claim(self, narrated, forbidden):
        outcomes = [_make_no_tables_outcome(), _make_menu_outcome()]

        reply = Consolidator(StubSynthesizer(narrated)).consolidate("table for 4 at 8pm? lamb chops?", outcomes)

        assert forbidden not in reply
        assert reply == "\n\n".join(render_payload(o) for o in outcomes)

    @pytest.mark.parametrize("synthesizer", [
        StubSynthesizer(error=TimeoutError("slow")),
        StubSynthesizer(reply=""),
    ])
    def test_narration_failure_falls_back_to_payloads(self, synthesizer):
        outcomes = [_make_availability_outcome(), _make_menu_outcome()]

        reply = Consolidator(synthesizer).consolidate("question", outcomes)

        assert reply == "\n\n".join(render_payload(o) for o in outcomes)
        assert reply


class TestLLMSynthesizer:
    """The prompt carries the message, the digest and recent history."""

    def test_prompt_contents(self):
        prompts = []
        synthesizer = LLMSynthesizer(infer=lambda p: prompts.append(p) or "reply", history_limit=1)

        result = synthesizer.synthesize(
            "What time do you close on Saturdays?",
            [digest_line(_make_hours_outcome())],
            [{"sender": "user", "text": "old"}, {"sender": "assistant", "text": "recent"}],
        )

        assert result == "reply"
        prompt = prompts[0]
        assert "What time do you close on Saturdays?" in prompt
        assert "Saturday: 12:00 - 00:30" in prompt
        assert "recent" in prompt
        assert "user: old" not in prompt
