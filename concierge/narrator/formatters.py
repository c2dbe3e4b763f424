"""
Deterministic rendering of raw tool results.

``render_payload`` is the textual payload of a step: a user-facing
sentence built only from fields present in the tool result. It is the
reply when one agent ran, the fallback when narration fails, and the
factual digest line shown to the narrator.
"""

import json
from typing import Any, Dict, List

from concierge.shared.contracts.agent_result import StepOutcome


MAX_LISTED_ITEMS = 8


def format_price(value: Any) -> str:
    try:
        return f"€{float(value):.2f}"
    except (TypeError, ValueError):
        return str(value)


def _table_option(option: Dict[str, Any]) -> str:
    price = option.get("price")
    charge = "no extra charge" if price in (0, 0.0, None) else f"{format_price(price)} table charge"
    capacity = option.get("capacity")
    seats = f", seats up to {capacity}" if capacity else ""
    return f"{option.get('tableType')} ({charge}{seats})"


def _render_availability(result: Dict[str, Any]) -> str:
    if not result.get("available"):
        return result.get("message") or (
            f"No tables available for {result.get('partySize')} people "
            f"on {result.get('date')} at {result.get('time')}"
        )

    options = result.get("availableTableTypes") or []
    slot = f"{result.get('partySize')} people on {result.get('date')} at {result.get('time')}"
    if len(options) == 1:
        return (
            f"Good news! We have a {_table_option(options[0])} table available for {slot}. "
            f"Would you like me to book it?"
        )
    listed = ", ".join(_table_option(o) for o in options)
    return (
        f"Good news! We have tables available for {slot}. "
        f"Table types: {listed}. Which table type would you prefer?"
    )


def _dietary(item: Dict[str, Any]) -> str:
    flags = [
        ("Gluten-free", item.get("is_gluten_free")),
        ("Vegan", item.get("is_vegan")),
        ("Vegetarian", item.get("is_vegetarian")),
    ]
    return " ".join(f"{label}: {'yes' if value else 'no'}." for label, value in flags if value is not None)


def _render_menu(result: Dict[str, Any]) -> str:
    items: List[Dict[str, Any]] = result.get("items") or []
    if not items:
        query = result.get("searchQuery")
        return f'I couldn\'t find any menu items matching "{query}".' if query else (
            "I couldn't find any matching menu items."
        )

    lines = ["Here is what I found on our menu:"]
    for item in items[:MAX_LISTED_ITEMS]:
        description = f": {item['description']}" if item.get("description") else ""
        dietary = _dietary(item)
        lines.append(
            f"- {item.get('name')} ({format_price(item.get('price'))}){description}."
            + (f" {dietary}" if dietary else "")
        )
    if len(items) > MAX_LISTED_ITEMS:
        lines.append(f"...and {len(items) - MAX_LISTED_ITEMS} more items.")
    return "\n".join(lines)


def _render_info(result: Dict[str, Any]) -> str:
    info = result.get("restaurant") or {}
    lines = [info.get("name") or "Restaurant information"]

    hours = info.get("hours")
    if hours:
        lines.append("Opening hours:")
        lines.extend(
            f"- {h.get('day_of_week')}: {h.get('open_time')} - {h.get('close_time')}" for h in hours
        )
    address = info.get("address")
    if address:
        where = ", ".join(p for p in (address.get("area"), address.get("location")) if p)
        lines.append(f"Address: {address.get('full')}" + (f" ({where})" if where else ""))
    if info.get("description"):
        lines.append(info["description"])
    if info.get("cuisine"):
        lines.append(f"Cuisine: {info['cuisine']}")
    if info.get("phone"):
        lines.append(f"Phone: {info['phone']}")
    if info.get("email"):
        lines.append(f"Email: {info['email']}")
    return "\n".join(lines)


def _render_reservation(result: Dict[str, Any]) -> str:
    d = result.get("reservationDetails") or {}
    return (
        f"Your reservation has been successfully created! Reservation #{d.get('reservationId')} "
        f"for {d.get('name')}: {d.get('partySize')} people on {d.get('date')} at {d.get('time')}, "
        f"{d.get('tableType')} table."
    )


def _render_celebrations(result: Dict[str, Any]) -> str:
    packages = result.get("packages") or []
    if not packages:
        lines = ["I couldn't find a celebration package matching your request."]
    else:
        lines = ["Here are our celebration packages:"]
        lines.extend(
            f"- {p.get('name')} ({format_price(p.get('price'))}): {p.get('description')}"
            for p in packages
        )
    addons = result.get("addons") or {}
    if addons:
        lines.append(
            "Add-ons: " + ", ".join(f"{name} {format_price(price)}" for name, price in addons.items())
        )
    return "\n".join(lines)


_RENDERERS = {
    "check_availability": _render_availability,
    "get_menu_items": _render_menu,
    "get_restaurant_info": _render_info,
    "create_reservation": _render_reservation,
    "get_celebration_packages": _render_celebrations,
}


def render_payload(outcome: StepOutcome) -> str:
    """
    Render a step's raw tool result as user-facing text.

    Args:
        outcome: The step's tool name and raw result

    Returns:
        Text built only from fields present in the result
    """
    result = outcome.tool_result or {}

    if not result.get("success"):
        if result.get("message"):
            return result["message"]
        return f"I'm sorry, I couldn't complete that request. {result.get('error') or 'Please try again.'}"

    if outcome.tool_name == "clarify_and_respond":
        return result.get("message", "")

    renderer = _RENDERERS.get(outcome.tool_name)
    if renderer is None:
        return json.dumps(result, default=str)
    return renderer(result)


def digest_line(outcome: StepOutcome) -> str:
    """One factual digest entry: producing agent, its sub-task and the rendered result."""
    return f"[{outcome.agent_name}] Task: {outcome.task}\n{render_payload(outcome)}"
