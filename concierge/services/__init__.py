"""
External collaborator interfaces and the in-memory venue.
"""

from concierge.services.interfaces import (
    AvailabilityService,
    CelebrationService,
    Collaborators,
    InfoService,
    MenuService,
    ReservationService,
)
from concierge.services.mock_data import CELEBRATION_ADDONS, InMemoryVenue

__all__ = [
    "AvailabilityService",
    "CelebrationService",
    "Collaborators",
    "InfoService",
    "MenuService",
    "ReservationService",
    "CELEBRATION_ADDONS",
    "InMemoryVenue",
]
