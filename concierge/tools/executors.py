"""
Tool executors.

Each executor runs one validated tool call against the collaborator
services and returns its raw structured result. No natural-language
generation happens here; results are plain dicts that later steps,
the session state and the narrator read from.

Collaborator exceptions propagate; the calling agent converts them
into failure results.
"""

import logging
import re
from typing import Any, Callable, Dict

from concierge.services.interfaces import Collaborators
from concierge.services.mock_data import CELEBRATION_ADDONS


logger = logging.getLogger(__name__)

ToolExecutor = Callable[[Dict[str, Any], int, Collaborators], Dict[str, Any]]

# Words that carry no search signal in a menu query
_MENU_STOPWORDS = {
    "the", "and", "are", "any", "you", "your", "have", "what", "which", "with",
    "menu", "food", "dish", "dishes", "options", "option", "items", "item",
    "free", "gluten", "vegan", "vegetarian", "serve", "offer", "there", "some",
    "can", "get", "show", "list", "all", "for", "how", "much", "price", "prices",
    "cost", "does", "is", "it", "do",
}


def check_availability(params: Dict[str, Any], restaurant_id: int, services: Collaborators) -> Dict[str, Any]:
    date, time, party_size = params["date"], params["time"], params["partySize"]

    max_capacity = services.availability.get_max_capacity(restaurant_id)
    if party_size > max_capacity:
        return {
            "success": True,
            "available": False,
            "message": (
                f"Sorry, we can only accommodate up to {max_capacity} people. "
                f"For larger groups, please contact the restaurant directly."
            ),
            "date": date,
            "time": time,
            "partySize": party_size,
            "reason": "exceeds_capacity",
        }

    table_types = services.availability.get_available_table_types(restaurant_id, date, time, party_size)
    if table_types:
        return {
            "success": True,
            "available": True,
            "availableTableTypes": table_types,
            "hasMultipleTableTypes": len(table_types) > 1,
            "date": date,
            "time": time,
            "partySize": party_size,
        }

    return {
        "success": True,
        "available": False,
        "message": f"No tables available for {party_size} people on {date} at {time}",
        "date": date,
        "time": time,
        "partySize": party_size,
    }


def _search_terms(query: str):
    words = re.findall(r"[a-zA-Z]+", (query or "").lower())
    return [w for w in words if len(w) > 2 and w not in _MENU_STOPWORDS]


def get_menu_items(params: Dict[str, Any], restaurant_id: int, services: Collaborators) -> Dict[str, Any]:
    items = services.menu.get_menu_items(restaurant_id)
    filters = {
        key: params[key]
        for key in ("is_gluten_free", "is_vegan", "is_vegetarian", "category")
        if params.get(key) is not None
    }

    for flag in ("is_gluten_free", "is_vegan", "is_vegetarian"):
        if filters.get(flag):
            items = [item for item in items if item.get(flag)]
    if "category" in filters:
        items = [item for item in items if item.get("category") == filters["category"]]

    terms = _search_terms(params.get("query", ""))
    if terms:
        texts = [f"{item.get('name', '')} {item.get('description', '')}".lower() for item in items]
        # Items matching every term win over partial matches
        matched = [item for item, text in zip(items, texts) if all(t in text for t in terms)]
        if not matched:
            matched = [item for item, text in zip(items, texts) if any(t in text for t in terms)]
        # A query made only of category words still shows the filtered list
        if matched or not filters:
            items = matched

    return {
        "success": True,
        "items": items,
        "searchQuery": params.get("query", ""),
        "filtersApplied": filters,
        "foundItems": len(items) > 0,
    }


def get_restaurant_info(params: Dict[str, Any], restaurant_id: int, services: Collaborators) -> Dict[str, Any]:
    restaurant = services.info.get_restaurant(restaurant_id)
    if not restaurant:
        return {"success": False, "error": "Restaurant not found"}

    topic = params["topic"]
    result: Dict[str, Any] = {
        "success": True,
        "topic": topic,
        "restaurant": {"name": restaurant["name"]},
    }
    info = result["restaurant"]

    if topic in ("hours", "general"):
        info["hours"] = services.info.get_hours(restaurant_id)
    if topic in ("address", "general"):
        info["address"] = {
            "full": restaurant.get("address"),
            "area": restaurant.get("area"),
            "location": restaurant.get("island"),
        }
    if topic in ("description", "general"):
        info["description"] = restaurant.get("description")
        info["cuisine"] = restaurant.get("cuisine")
    if topic == "general":
        info["phone"] = restaurant.get("phone")
        info["email"] = restaurant.get("email")

    return result


def create_reservation(params: Dict[str, Any], restaurant_id: int, services: Collaborators) -> Dict[str, Any]:
    details = {
        "name": params["name"],
        "email": params["email"],
        "phone": params["phone"],
        "date": params["date"],
        "time": params["time"],
        "partySize": params["partySize"],
        "tableType": params["tableType"],
        "specialRequests": params.get("specialRequests") or "",
    }
    created = services.reservations.create_reservation(restaurant_id, details)
    logger.info(
        f"Reservation created | reservation_id={created.get('reservationId')}, "
        f"restaurant_id={restaurant_id}, party={details['partySize']}"
    )
    return {
        "success": True,
        "reservationDetails": {
            "reservationId": created.get("reservationId"),
            "restaurant": created.get("restaurant"),
            **details,
        },
    }


def get_celebration_packages(params: Dict[str, Any], restaurant_id: int, services: Collaborators) -> Dict[str, Any]:
    packages = services.celebrations.get_packages(restaurant_id)
    tags = set(params.get("occasion_tags") or [])
    budget = params.get("budget_range")

    if tags:
        packages = [p for p in packages if tags & set(p.get("occasion_tags", []))]
    if budget:
        packages = [p for p in packages if p.get("budget_range") == budget]

    return {
        "success": True,
        "packages": packages,
        "addons": dict(CELEBRATION_ADDONS),
        "occasionTags": sorted(tags),
        "budgetRange": budget,
    }


def clarify_and_respond(params: Dict[str, Any], restaurant_id: int, services: Collaborators) -> Dict[str, Any]:
    return {
        "success": True,
        "message": params["message"],
        "responseType": params.get("response_type") or "clarification",
    }


TOOL_EXECUTORS: Dict[str, ToolExecutor] = {
    "check_availability": check_availability,
    "get_menu_items": get_menu_items,
    "get_restaurant_info": get_restaurant_info,
    "create_reservation": create_reservation,
    "get_celebration_packages": get_celebration_packages,
    "clarify_and_respond": clarify_and_respond,
}
