"""
In-memory venue used as the default collaborator set.

Implements every collaborator interface over hardcoded sample data
(one restaurant with its tables, opening hours, menu and celebration
packages) so the pipeline runs end-to-end without a database.
"""

import copy
import itertools
import threading
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from concierge.shared.errors import CollaboratorError, NoCapacityError


# Restaurant records keyed by id
_RESTAURANTS = {
    1: {
        "id": 1,
        "name": "Lofaki Restaurant",
        "address": "Agios Nektarios, 85300 Kos",
        "area": "Kos Harbor",
        "island": "Kos",
        "email": "info@lofaki.gr",
        "phone": "+30-22420-12345",
        "description": (
            "Authentic Greek cuisine with fresh seafood and traditional recipes passed "
            "down through generations. Located in the beautiful Kos Harbor with stunning sea views."
        ),
        "cuisine": "Greek & Modern Cuisine",
        "min_reservation_gap_hours": 3,
    },
}

# (restaurant_id, table_name, table_type, price, capacity)
_TABLES = [
    (1, "A1", "standard", 0.00, 2),
    (1, "A2", "standard", 0.00, 4),
    (1, "A3", "standard", 0.00, 6),
    (1, "A4", "standard", 0.00, 8),
    (1, "B1", "grass", 15.00, 2),
    (1, "B2", "grass", 15.00, 4),
    (1, "B3", "grass", 15.00, 6),
    (1, "C1", "anniversary", 80.00, 8),
]

_WEEK = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

_HOURS = {
    1: [
        {"day_of_week": day, "open_time": "12:00", "close_time": "00:30" if day in ("Friday", "Saturday") else "23:30"}
        for day in _WEEK
    ],
}

# (name, description, price, category, vegetarian, vegan, gluten_free)
_MENU = {
    1: [
        ("Grilled Haloumi from Kos", "Local halloumi cheese with berry jam", 9.00, "Appetizer", True, False, False),
        ("Handmade Tzatziki", "Fresh yogurt, cucumber, garlic, olive oil", 7.00, "Appetizer", True, False, False),
        ("Avocado Hummus", "Creamy avocado and chickpea hummus with tahini", 7.00, "Appetizer", True, True, True),
        ("Dolmades", "Vine leaves stuffed with rice, herbs and pine nuts", 8.50, "Appetizer", True, True, True),
        ("Grilled Octopus", "Tender octopus with olive oil, lemon and capers", 14.00, "Appetizer", False, False, False),
        ("Sea Bass Fillet", "Fresh sea bass grilled or oven-baked", 19.00, "Seafood", False, False, False),
        ("Grilled Shrimps", "Grilled shrimps with ouzo, dill, tzatziki, pita bread", 19.00, "Seafood", False, False, False),
        ("Seafood Risotto", "Arborio rice with mixed seafood and saffron", 22.00, "Seafood", False, False, False),
        ("Homemade Moussaka", "Traditional Greek moussaka with eggplant and meat sauce", 14.00, "Main", False, False, False),
        ("Lamb Kleftiko", "Slow-cooked lamb with herbs and vegetables", 18.00, "Main", False, False, False),
        ("Grilled Lamb Chops", "Prime lamb chops with rosemary and garlic", 24.00, "Main", False, False, False),
        ("Stuffed Tomatoes", "Tomatoes stuffed with rice, herbs and pine nuts", 11.00, "Main", True, True, True),
        ("Gemista", "Stuffed peppers and tomatoes with rice and herbs", 10.50, "Main", True, True, True),
        ("Greek Village Salad", "Tomatoes, cucumber, onion, feta, olives, olive oil", 9.50, "Salad", True, False, False),
        ("Quinoa Salad", "Quinoa with vegetables, herbs and lemon dressing", 11.00, "Salad", True, True, True),
        ("Lofaki Sunset", "Pistachio creme brulee with sweet red wine", 8.50, "Dessert", True, False, False),
        ("Greek Yogurt with Honey", "Thick Greek yogurt with local honey and walnuts", 6.50, "Dessert", True, False, False),
        ("Assyrtiko White Wine", "Crisp Assyrtiko from Santorini - Glass", 8.00, "Wine", True, True, True),
        ("Agiorgitiko Red Wine", "Smooth red wine from Nemea - Glass", 7.50, "Wine", True, True, True),
        ("Fresh Lemonade", "House-made lemonade with mint", 4.50, "Drink", True, True, True),
    ],
}

_PACKAGES = {
    1: [
        {
            "name": "Sunset Anniversary",
            "description": "Anniversary table by the sea, rose petals and a bottle of Assyrtiko",
            "price": 120.00,
            "occasion_tags": ["anniversary", "romantic"],
            "budget_range": "premium",
        },
        {
            "name": "Birthday Table",
            "description": "Decorated table with a personalised cake",
            "price": 45.00,
            "occasion_tags": ["birthday", "celebration"],
            "budget_range": "standard",
        },
        {
            "name": "Proposal Evening",
            "description": "Private corner, flowers, champagne and a photographer",
            "price": 250.00,
            "occasion_tags": ["proposal", "romantic", "special_occasion"],
            "budget_range": "luxury",
        },
        {
            "name": "Simple Celebration",
            "description": "Dessert platter and a candle for the table",
            "price": 20.00,
            "occasion_tags": ["celebration", "birthday", "special_occasion"],
            "budget_range": "budget",
        },
    ],
}

# Add-on prices offered with any celebration package
CELEBRATION_ADDONS = {
    "cake": 25.00,
    "flowers": 15.00,
    "champagne": 35.00,
    "decorations": 20.00,
}


def _parse_slot(date: str, time: str) -> datetime:
    try:
        return datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
    except ValueError as e:
        raise CollaboratorError(f"Invalid date or time: {date} {time}") from e


class InMemoryVenue:
    """
    Thread-safe in-memory implementation of every collaborator interface.

    Availability is computed per table: a table is free for a slot when
    it seats the party and has no reservation within the restaurant's
    minimum reservation gap.
    """

    def __init__(
        self,
        restaurants: Optional[Dict[int, Dict[str, Any]]] = None,
        tables: Optional[List[tuple]] = None,
        hours: Optional[Dict[int, List[Dict[str, Any]]]] = None,
        menu: Optional[Dict[int, List[tuple]]] = None,
        packages: Optional[Dict[int, List[Dict[str, Any]]]] = None,
    ):
        self._restaurants = copy.deepcopy(restaurants if restaurants is not None else _RESTAURANTS)
        self._tables = [
            {
                "restaurant_id": rid,
                "table_name": name,
                "table_type": ttype,
                "table_price": price,
                "capacity": capacity,
            }
            for rid, name, ttype, price, capacity in (tables if tables is not None else _TABLES)
        ]
        self._hours = copy.deepcopy(hours if hours is not None else _HOURS)
        self._menu = {
            rid: [
                {
                    "name": name,
                    "description": description,
                    "price": price,
                    "category": category,
                    "is_vegetarian": vegetarian,
                    "is_vegan": vegan,
                    "is_gluten_free": gluten_free,
                }
                for name, description, price, category, vegetarian, vegan, gluten_free in items
            ]
            for rid, items in (menu if menu is not None else _MENU).items()
        }
        self._packages = copy.deepcopy(packages if packages is not None else _PACKAGES)
        self._reservations: List[Dict[str, Any]] = []
        self._ids = itertools.count(1001)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def _free_tables(self, restaurant_id: int, date: str, time: str, party_size: int) -> List[Dict[str, Any]]:
        slot = _parse_slot(date, time)
        gap_hours = self._restaurants.get(restaurant_id, {}).get("min_reservation_gap_hours", 2)
        gap = timedelta(hours=gap_hours)

        taken = {
            r["table_name"]
            for r in self._reservations
            if r["restaurant_id"] == restaurant_id
            and abs(_parse_slot(r["date"], r["time"]) - slot) < gap
        }
        return [
            t
            for t in self._tables
            if t["restaurant_id"] == restaurant_id
            and t["capacity"] >= party_size
            and t["table_name"] not in taken
        ]

    def get_available_table_types(
        self, restaurant_id: int, date: str, time: str, party_size: int
    ) -> List[Dict[str, Any]]:
        with self._lock:
            free = self._free_tables(restaurant_id, date, time, party_size)

        # Smallest fitting table per type
        best: Dict[str, Dict[str, Any]] = {}
        for table in sorted(free, key=lambda t: t["capacity"]):
            best.setdefault(table["table_type"], table)

        return [
            {"tableType": t["table_type"], "price": t["table_price"], "capacity": t["capacity"]}
            for t in sorted(best.values(), key=lambda t: (t["table_price"], t["table_type"]))
        ]

    def get_max_capacity(self, restaurant_id: int) -> int:
        capacities = [t["capacity"] for t in self._tables if t["restaurant_id"] == restaurant_id]
        return max(capacities) if capacities else 0

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    def create_reservation(self, restaurant_id: int, details: Dict[str, Any]) -> Dict[str, Any]:
        restaurant = self._restaurants.get(restaurant_id)
        if restaurant is None:
            raise CollaboratorError("Restaurant not found")

        with self._lock:
            candidates = [
                t
                for t in self._free_tables(
                    restaurant_id, details["date"], details["time"], details["partySize"]
                )
                if t["table_type"] == str(details["tableType"]).lower()
            ]
            if not candidates:
                raise NoCapacityError(
                    f"No {details['tableType']} table available for {details['partySize']} people "
                    f"on {details['date']} at {details['time']}"
                )
            table = min(candidates, key=lambda t: t["capacity"])
            reservation = {
                "reservationId": next(self._ids),
                "restaurant_id": restaurant_id,
                "table_name": table["table_name"],
                **details,
            }
            self._reservations.append(reservation)

        return {
            "reservationId": reservation["reservationId"],
            "restaurant": restaurant["name"],
            "table": table["table_name"],
        }

    def list_reservations(self, restaurant_id: int) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(r) for r in self._reservations if r["restaurant_id"] == restaurant_id]

    # ------------------------------------------------------------------
    # Read-only lookups
    # ------------------------------------------------------------------

    def get_menu_items(self, restaurant_id: int) -> List[Dict[str, Any]]:
        return [dict(item) for item in self._menu.get(restaurant_id, [])]

    def get_restaurant(self, restaurant_id: int) -> Optional[Dict[str, Any]]:
        restaurant = self._restaurants.get(restaurant_id)
        return dict(restaurant) if restaurant else None

    def get_hours(self, restaurant_id: int) -> List[Dict[str, Any]]:
        return [dict(h) for h in self._hours.get(restaurant_id, [])]

    def get_packages(self, restaurant_id: int) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._packages.get(restaurant_id, []))
