"""Itinerary endpoints, nested under a trip."""

from typing import Any

from core.http import ApiRequest, Router, api_response
from core.services.registry import get_itinerary_service

router = Router()

_ITINERARY = "/trips/{tripId}/itineraries/{itineraryId}"


@router.route("GET", "/trips/{tripId}/itineraries")
def list_itineraries(request: ApiRequest) -> dict[str, Any]:
    itineraries = get_itinerary_service().list_for_trip(request.path("tripId"), request.user_id)
    return api_response(data=itineraries, count=len(itineraries))


@router.route("POST", "/trips/{tripId}/itineraries")
def create_itinerary(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().create(request.path("tripId"), request.user_id, request.body)
    return api_response(201, message="Itinerary created successfully", data=itinerary)


@router.route("GET", "/trips/{tripId}/itineraries/stats")
def itinerary_stats(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_itinerary_service().get_stats(request.path("tripId"), request.user_id))


@router.route("GET", _ITINERARY)
def get_itinerary(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().get(request.path("itineraryId"), request.user_id, request.path("tripId"))
    return api_response(data=itinerary)


@router.route("PUT", _ITINERARY)
def update_itinerary(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().update(
        request.path("itineraryId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(message="Itinerary updated successfully", data=itinerary)


@router.route("DELETE", _ITINERARY)
def delete_itinerary(request: ApiRequest) -> dict[str, Any]:
    get_itinerary_service().delete(request.path("itineraryId"), request.user_id, request.path("tripId"))
    return api_response(message="Itinerary deleted successfully")


# --- Days ---


@router.route("POST", f"{_ITINERARY}/days")
def add_day(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().add_day(
        request.path("itineraryId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(201, message="Day added successfully", data=itinerary)


@router.route("PUT", f"{_ITINERARY}/days/{{dayId}}")
def update_day(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().update_day(
        request.path("itineraryId"), request.path("dayId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(message="Day updated successfully", data=itinerary)


@router.route("DELETE", f"{_ITINERARY}/days/{{dayId}}")
def delete_day(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().delete_day(
        request.path("itineraryId"), request.path("dayId"), request.user_id, request.path("tripId")
    )
    return api_response(message="Day deleted successfully", data=itinerary)


# --- Activities ---


@router.route("POST", f"{_ITINERARY}/days/{{dayId}}/activities")
def add_activity(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().add_activity(
        request.path("itineraryId"), request.path("dayId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(201, message="Activity added successfully", data=itinerary)


@router.route("PUT", f"{_ITINERARY}/days/{{dayId}}/activities/reorder")
def reorder_activities(request: ApiRequest) -> dict[str, Any]:
    body = request.body if isinstance(request.body, dict) else {}
    itinerary = get_itinerary_service().reorder_activities(
        request.path("itineraryId"),
        request.path("dayId"),
        request.user_id,
        body.get("activity_ids"),
        request.path("tripId"),
    )
    return api_response(message="Activities reordered successfully", data=itinerary)


@router.route("PUT", f"{_ITINERARY}/activities/{{activityId}}")
def update_activity(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().update_activity(
        request.path("itineraryId"), request.path("activityId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(message="Activity updated successfully", data=itinerary)


@router.route("DELETE", f"{_ITINERARY}/activities/{{activityId}}")
def delete_activity(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().delete_activity(
        request.path("itineraryId"), request.path("activityId"), request.user_id, request.path("tripId")
    )
    return api_response(message="Activity deleted successfully", data=itinerary)


@router.route("PATCH", f"{_ITINERARY}/activities/{{activityId}}/toggle")
def toggle_activity(request: ApiRequest) -> dict[str, Any]:
    itinerary = get_itinerary_service().toggle_activity(
        request.path("itineraryId"), request.path("activityId"), request.user_id, request.path("tripId")
    )
    return api_response(message="Activity status updated", data=itinerary)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
