"""
Collaborator interfaces.

The dispatch core never talks to a database directly. It depends on
these narrow read/write interfaces, keyed by restaurant id; a concrete
data layer (or the in-memory venue in ``mock_data``) implements them.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol


class AvailabilityService(Protocol):
    def get_available_table_types(
        self, restaurant_id: int, date: str, time: str, party_size: int
    ) -> List[Dict[str, Any]]:
        """Return ``[{tableType, price, capacity}]`` bookable for the slot."""
        ...

    def get_max_capacity(self, restaurant_id: int) -> int:
        ...


class ReservationService(Protocol):
    def create_reservation(self, restaurant_id: int, details: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a booking and return ``{reservationId, ...}``.

        Raises NoCapacityError when no table can seat the party.
        """
        ...


class MenuService(Protocol):
    def get_menu_items(self, restaurant_id: int) -> List[Dict[str, Any]]:
        ...


class InfoService(Protocol):
    def get_restaurant(self, restaurant_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_hours(self, restaurant_id: int) -> List[Dict[str, Any]]:
        ...


class CelebrationService(Protocol):
    def get_packages(self, restaurant_id: int) -> List[Dict[str, Any]]:
        ...


@dataclass
class Collaborators:
    """Bundle of collaborator services handed to tool executors."""

    availability: AvailabilityService
    reservations: ReservationService
    menu: MenuService
    info: InfoService
    celebrations: CelebrationService

    @classmethod
    def from_single(cls, service: Any) -> "Collaborators":
        """Use one object implementing every interface (e.g. ``InMemoryVenue``)."""
        return cls(
            availability=service,
            reservations=service,
            menu=service,
            info=service,
            celebrations=service,
        )

