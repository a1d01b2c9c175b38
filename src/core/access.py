"""
Trip access guard.

Every trip-scoped operation funnels through ``can_access``: reads and
sub-resource writes (budgets, itineraries, packing lists) are open to the
owner and to any collaborator, while changing, deleting or sharing the trip
itself is reserved to the owner. Collaborator roles are recorded on the trip
but are not consulted here.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Protocol

from core.errors import ForbiddenError


class Operation(str, Enum):
    READ = "read"
    WRITE_SUB_RESOURCE = "write-sub-resource"
    WRITE_TRIP = "write-trip"
    DELETE_TRIP = "delete-trip"
    MANAGE_COLLABORATORS = "manage-collaborators"


_SHARED_OPERATIONS = frozenset({Operation.READ, Operation.WRITE_SUB_RESOURCE})


class _TripLike(Protocol):
    user: str
    collaborators: Any


def _collaborator_id(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        return str(entry.get("user", ""))
    return str(entry.user)


def can_access(
    owner_id: str,
    collaborators: Iterable[Any],
    user_id: str,
    operation: Operation = Operation.READ,
) -> bool:
    """Pure access decision for a trip.

    ``collaborators`` may hold user ids, collaborator dicts or collaborator
    models; only the user reference is looked at.
    """
    if not user_id:
        return False
    if owner_id == user_id:
        return True
    if operation not in _SHARED_OPERATIONS:
        return False
    return any(_collaborator_id(entry) == user_id for entry in collaborators)


def authorize_trip(trip: _TripLike, user_id: str, operation: Operation) -> None:
    if not can_access(trip.user, trip.collaborators, user_id, operation):
        raise ForbiddenError(f"Not authorized to {operation.value} this trip")


def require_admin(role: str | None) -> None:
    if role != "admin":
        raise ForbiddenError("Admin access required")
