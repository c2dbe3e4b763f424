"""
Unit tests for the tool registry and parameter validation.

Tests the static tool catalog, ``validate`` error codes for every kind
of violation, and the tool executors against the in-memory venue.
"""

import pytest

from concierge.services.interfaces import Collaborators
from concierge.services.mock_data import InMemoryVenue
from concierge.tools.executors import (
    check_availability,
    create_reservation,
    get_celebration_packages,
    get_menu_items,
    get_restaurant_info,
)
from concierge.tools.registry import (
    CLARIFY_TOOL,
    TOOL_DEFINITIONS,
    ValidationErrorCode,
    get_available_tools,
    get_tool_definition,
    validate,
)


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_valid_args():
    """A fully valid argument set for every tool."""
    return {
        "check_availability": {"date": "2025-08-08", "time": "20:00", "partySize": 4},
        "get_menu_items": {"query": "lamb chops", "is_gluten_free": True, "category": "Main"},
        "get_restaurant_info": {"topic": "hours"},
        "create_reservation": {
            "name": "Maria Papadopoulou",
            "email": "maria@example.com",
            "phone": "+30 691 234 5678",
            "date": "2025-08-08",
            "time": "20:00",
            "partySize": 4,
            "tableType": "standard",
            "specialRequests": "Window seat",
        },
        "get_celebration_packages": {"occasion_tags": ["birthday"], "budget_range": "standard"},
        CLARIFY_TOOL: {"response_type": "greeting", "message": "Hello!"},
    }


def _make_services():
    return Collaborators.from_single(InMemoryVenue())


# ============================================================================
# Catalog
# ============================================================================


class TestCatalog:
    """Tests for the static tool catalog."""

    def test_six_tools_registered(self):
        assert set(get_available_tools()) == {
            "check_availability",
            "get_menu_items",
            "get_restaurant_info",
            "create_reservation",
            "get_celebration_packages",
            "clarify_and_respond",
        }

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            TOOL_DEFINITIONS["new_tool"] = TOOL_DEFINITIONS[CLARIFY_TOOL]

    def test_required_parameters(self):
        assert get_tool_definition("check_availability").required_parameters == [
            "date",
            "time",
            "partySize",
        ]
        assert get_tool_definition("get_celebration_packages").required_parameters == []

    def test_unknown_definition_is_none(self):
        assert get_tool_definition("book_flight") is None

    def test_prompt_schema_lists_enums_and_bounds(self):
        schema = get_tool_definition("check_availability").to_prompt_schema()
        party = schema["parameters"]["properties"]["partySize"]
        assert party["minimum"] == 1
        assert party["maximum"] == 20
        assert schema["parameters"]["required"] == ["date", "time", "partySize"]

        info = get_tool_definition("get_restaurant_info").to_prompt_schema()
        assert info["parameters"]["properties"]["topic"]["enum"] == [
            "hours",
            "address",
            "description",
            "general",
        ]


# ============================================================================
# Validation
# ============================================================================


class TestValidate:
    """Tests for validate() across every tool and violation kind."""

    @pytest.mark.parametrize("tool_name", list(_make_valid_args().keys()))
    def test_valid_args_pass(self, tool_name):
        result = validate(tool_name, _make_valid_args()[tool_name])
        assert result.ok is True
        assert result.errors == []

    def test_unknown_tool(self):
        result = validate("book_flight", {})
        assert result.ok is False
        assert result.codes == [ValidationErrorCode.UNKNOWN_TOOL]
        assert result.messages == ["Unknown tool: book_flight"]

    @pytest.mark.parametrize(
        "tool_name",
        [name for name, d in TOOL_DEFINITIONS.items() if d.required_parameters],
    )
    def test_each_missing_required_parameter(self, tool_name):
        for param in TOOL_DEFINITIONS[tool_name].required_parameters:
            args = dict(_make_valid_args()[tool_name])
            del args[param]
            result = validate(tool_name, args)
            assert result.ok is False
            assert ValidationErrorCode.MISSING_REQUIRED_PARAMETER in result.codes
            assert f"Missing required parameter: {param}" in result.messages

    def test_none_counts_as_missing(self):
        args = dict(_make_valid_args()["check_availability"], date=None)
        result = validate("check_availability", args)
        assert result.codes == [ValidationErrorCode.MISSING_REQUIRED_PARAMETER]

    @pytest.mark.parametrize("tool_name", list(_make_valid_args().keys()))
    def test_unknown_parameter(self, tool_name):
        args = dict(_make_valid_args()[tool_name], colour="blue")
        result = validate(tool_name, args)
        assert result.ok is False
        assert result.codes == [ValidationErrorCode.UNKNOWN_PARAMETER]
        assert result.messages == ["Unknown parameter: colour"]

    @pytest.mark.parametrize(
        "tool_name, param, value",
        [
            ("check_availability", "partySize", "4"),
            ("check_availability", "date", 20250808),
            ("get_menu_items", "is_vegan", "yes"),
            ("create_reservation", "partySize", 4.5),
            ("get_celebration_packages", "occasion_tags", "birthday"),
            (CLARIFY_TOOL, "message", ["hi"]),
        ],
    )
    def test_type_mismatch(self, tool_name, param, value):
        args = dict(_make_valid_args()[tool_name])
        args[param] = value
        result = validate(tool_name, args)
        assert result.ok is False
        assert ValidationErrorCode.TYPE_MISMATCH in result.codes

    def test_boolean_is_not_an_integer(self):
        args = dict(_make_valid_args()["check_availability"], partySize=True)
        result = validate("check_availability", args)
        assert result.codes == [ValidationErrorCode.TYPE_MISMATCH]
        assert result.messages == ["Parameter partySize must be an integer"]

    @pytest.mark.parametrize(
        "tool_name, param, value",
        [
            ("get_restaurant_info", "topic", "parking"),
            ("get_menu_items", "category", "Pizza"),
            ("get_celebration_packages", "budget_range", "cheap"),
            ("get_celebration_packages", "occasion_tags", ["wedding"]),
            (CLARIFY_TOOL, "response_type", "chitchat"),
        ],
    )
    def test_enum_violation(self, tool_name, param, value):
        args = dict(_make_valid_args()[tool_name])
        args[param] = value
        result = validate(tool_name, args)
        assert result.codes == [ValidationErrorCode.ENUM_VIOLATION]

    @pytest.mark.parametrize("party_size, message", [
        (0, "Parameter partySize must be at least 1"),
        (21, "Parameter partySize must be at most 20"),
    ])
    def test_range_violation(self, party_size, message):
        for tool_name in ("check_availability", "create_reservation"):
            args = dict(_make_valid_args()[tool_name], partySize=party_size)
            result = validate(tool_name, args)
            assert result.codes == [ValidationErrorCode.RANGE_VIOLATION]
            assert result.messages == [message]

    def test_collects_every_violation(self):
        result = validate(
            "check_availability",
            {"time": 2000, "partySize": 50, "extra": 1},
        )
        assert set(result.codes) == {
            ValidationErrorCode.MISSING_REQUIRED_PARAMETER,
            ValidationErrorCode.TYPE_MISMATCH,
            ValidationErrorCode.RANGE_VIOLATION,
            ValidationErrorCode.UNKNOWN_PARAMETER,
        }
        assert len(result.errors) == 4


# ============================================================================
# Executors
# ============================================================================


class TestExecutors:
    """Tests for the tool executors against the in-memory venue."""

    def test_availability_lists_table_types(self):
        result = check_availability(
            {"date": "2025-08-08", "time": "20:00", "partySize": 4}, 1, _make_services()
        )
        assert result["success"] is True
        assert result["available"] is True
        assert [t["tableType"] for t in result["availableTableTypes"]] == [
            "standard",
            "grass",
            "anniversary",
        ]
        assert result["hasMultipleTableTypes"] is True

    def test_availability_over_capacity(self):
        result = check_availability(
            {"date": "2025-08-08", "time": "20:00", "partySize": 12}, 1, _make_services()
        )
        assert result["available"] is False
        assert result["reason"] == "exceeds_capacity"
        assert "up to 8 people" in result["message"]

    def test_availability_after_tables_are_booked(self):
        venue = InMemoryVenue(tables=[(1, "A1", "standard", 0.0, 2)])
        services = Collaborators.from_single(venue)
        params = {"date": "2025-08-08", "time": "20:00", "partySize": 2}
        create_reservation(
            dict(params, name="A", email="a@x.com", phone="1", tableType="standard"), 1, services
        )

        result = check_availability(params, 1, services)
        assert result["available"] is False
        assert result["message"] == "No tables available for 2 people on 2025-08-08 at 20:00"

    def test_menu_gluten_free_lamb_chops(self):
        result = get_menu_items({"query": "lamb chops"}, 1, _make_services())
        assert [i["name"] for i in result["items"]] == ["Grilled Lamb Chops"]
        assert result["items"][0]["is_gluten_free"] is False
        assert result["foundItems"] is True

    def test_menu_filters_without_search_terms(self):
        result = get_menu_items({"query": "vegan dishes", "is_vegan": True}, 1, _make_services())
        assert result["items"]
        assert all(item["is_vegan"] for item in result["items"])
        assert result["filtersApplied"] == {"is_vegan": True}

    def test_info_hours(self):
        result = get_restaurant_info({"topic": "hours"}, 1, _make_services())
        hours = {h["day_of_week"]: h["close_time"] for h in result["restaurant"]["hours"]}
        assert hours["Saturday"] == "00:30"
        assert hours["Monday"] == "23:30"
        assert "address" not in result["restaurant"]

    def test_info_unknown_restaurant(self):
        result = get_restaurant_info({"topic": "general"}, 99, _make_services())
        assert result == {"success": False, "error": "Restaurant not found"}

    def test_create_reservation_returns_details(self):
        args = _make_valid_args()["create_reservation"]
        result = create_reservation(args, 1, _make_services())
        details = result["reservationDetails"]
        assert details["reservationId"] == 1001
        assert details["restaurant"] == "Lofaki Restaurant"
        assert details["name"] == "Maria Papadopoulou"
        assert details["specialRequests"] == "Window seat"

    def test_celebration_packages_filtered_by_tag(self):
        result = get_celebration_packages({"occasion_tags": ["proposal"]}, 1, _make_services())
        assert [p["name"] for p in result["packages"]] == ["Proposal Evening"]
        assert result["addons"]["cake"] == 25.00
