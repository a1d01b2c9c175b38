"""
Pydantic models for TravelTrack.
"""

from core.models.budget import Budget, BudgetCategory, BudgetFields, BudgetItem
from core.models.common import Document, ImageRef, Money
from core.models.destination import Destination, DestinationFields, QuickRating, Review
from core.models.itinerary import Activity, Itinerary, ItineraryDay, ItineraryFields
from core.models.packing_list import PackingItem, PackingList, PackingListFields
from core.models.trip import Collaborator, Trip, TripFields
from core.models.user import User

__all__ = [
    "Activity",
    "Budget",
    "BudgetCategory",
    "BudgetFields",
    "BudgetItem",
    "Collaborator",
    "Destination",
    "DestinationFields",
    "Document",
    "ImageRef",
    "Itinerary",
    "ItineraryDay",
    "ItineraryFields",
    "Money",
    "PackingItem",
    "PackingList",
    "PackingListFields",
    "QuickRating",
    "Review",
    "Trip",
    "TripFields",
    "User",
]
