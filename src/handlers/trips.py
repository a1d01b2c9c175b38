"""Trip endpoints: CRUD, stats and collaborator management."""

from typing import Any

from core.http import ApiRequest, Router, api_response, page_response
from core.services.registry import get_trip_service

router = Router()


@router.route("GET", "/trips")
def list_trips(request: ApiRequest) -> dict[str, Any]:
    return page_response(get_trip_service().list_trips(request.user_id, request.query))


@router.route("POST", "/trips")
def create_trip(request: ApiRequest) -> dict[str, Any]:
    trip = get_trip_service().create_trip(request.user_id, request.body)
    return api_response(201, message="Trip created successfully", data=trip)


@router.route("GET", "/trips/stats")
def trip_stats(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_trip_service().get_trip_stats(request.user_id))


@router.route("GET", "/trips/{tripId}")
def get_trip(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_trip_service().get_trip(request.path("tripId"), request.user_id))


@router.route("PUT", "/trips/{tripId}")
def update_trip(request: ApiRequest) -> dict[str, Any]:
    trip = get_trip_service().update_trip(request.path("tripId"), request.user_id, request.body)
    return api_response(message="Trip updated successfully", data=trip)


@router.route("DELETE", "/trips/{tripId}")
def delete_trip(request: ApiRequest) -> dict[str, Any]:
    removed = get_trip_service().delete_trip(request.path("tripId"), request.user_id)
    return api_response(message="Trip deleted successfully", data={"removed": removed})


@router.route("GET", "/trips/{tripId}/collaborators")
def list_collaborators(request: ApiRequest) -> dict[str, Any]:
    collaborators = get_trip_service().list_collaborators(request.path("tripId"), request.user_id)
    return api_response(data=collaborators, count=len(collaborators))


@router.route("POST", "/trips/{tripId}/collaborators")
def add_collaborator(request: ApiRequest) -> dict[str, Any]:
    trip = get_trip_service().add_collaborator(request.path("tripId"), request.user_id, request.body)
    return api_response(201, message="Collaborator added successfully", data=trip)


@router.route("PUT", "/trips/{tripId}/collaborators/{userId}")
def update_collaborator(request: ApiRequest) -> dict[str, Any]:
    trip = get_trip_service().update_collaborator_role(
        request.path("tripId"), request.user_id, request.path("userId"), request.body
    )
    return api_response(message="Collaborator role updated successfully", data=trip)


@router.route("DELETE", "/trips/{tripId}/collaborators/{userId}")
def remove_collaborator(request: ApiRequest) -> dict[str, Any]:
    trip = get_trip_service().remove_collaborator(request.path("tripId"), request.user_id, request.path("userId"))
    return api_response(message="Collaborator removed successfully", data=trip)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
