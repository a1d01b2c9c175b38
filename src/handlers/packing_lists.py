"""Packing list endpoints, nested under a trip."""

from typing import Any

from core.http import ApiRequest, Router, api_response
from core.services.registry import get_packing_list_service

router = Router()

_LIST = "/trips/{tripId}/packing-lists/{listId}"


@router.route("GET", "/trips/{tripId}/packing-lists")
def list_packing_lists(request: ApiRequest) -> dict[str, Any]:
    lists = get_packing_list_service().list_for_trip(request.path("tripId"), request.user_id)
    return api_response(data=lists, count=len(lists))


@router.route("POST", "/trips/{tripId}/packing-lists")
def create_packing_list(request: ApiRequest) -> dict[str, Any]:
    packing_list = get_packing_list_service().create(request.path("tripId"), request.user_id, request.body)
    return api_response(201, message="Packing list created successfully", data=packing_list)


@router.route("POST", "/trips/{tripId}/packing-lists/generate")
def generate_packing_list(request: ApiRequest) -> dict[str, Any]:
    body = request.body if isinstance(request.body, dict) else {}
    packing_list = get_packing_list_service().generate_from_template(
        request.path("tripId"), request.user_id, body.get("template")
    )
    return api_response(201, message="Packing list generated successfully", data=packing_list)


@router.route("GET", "/trips/{tripId}/packing-lists/stats")
def packing_stats(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_packing_list_service().get_stats(request.path("tripId"), request.user_id))


@router.route("GET", _LIST)
def get_packing_list(request: ApiRequest) -> dict[str, Any]:
    packing_list = get_packing_list_service().get(request.path("listId"), request.user_id, request.path("tripId"))
    return api_response(data=packing_list)


@router.route("PUT", _LIST)
def update_packing_list(request: ApiRequest) -> dict[str, Any]:
    packing_list = get_packing_list_service().update(
        request.path("listId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(message="Packing list updated successfully", data=packing_list)


@router.route("DELETE", _LIST)
def delete_packing_list(request: ApiRequest) -> dict[str, Any]:
    get_packing_list_service().delete(request.path("listId"), request.user_id, request.path("tripId"))
    return api_response(message="Packing list deleted successfully")


@router.route("POST", f"{_LIST}/items")
def add_item(request: ApiRequest) -> dict[str, Any]:
    packing_list = get_packing_list_service().add_item(
        request.path("listId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(201, message="Item added successfully", data=packing_list)


@router.route("PUT", f"{_LIST}/items/{{itemId}}")
def update_item(request: ApiRequest) -> dict[str, Any]:
    packing_list = get_packing_list_service().update_item(
        request.path("listId"), request.path("itemId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(message="Item updated successfully", data=packing_list)


@router.route("DELETE", f"{_LIST}/items/{{itemId}}")
def delete_item(request: ApiRequest) -> dict[str, Any]:
    packing_list = get_packing_list_service().delete_item(
        request.path("listId"), request.path("itemId"), request.user_id, request.path("tripId")
    )
    return api_response(message="Item deleted successfully", data=packing_list)


@router.route("PATCH", f"{_LIST}/items/{{itemId}}/toggle-packed")
def toggle_packed(request: ApiRequest) -> dict[str, Any]:
    packing_list = get_packing_list_service().toggle_packed(
        request.path("listId"), request.path("itemId"), request.user_id, request.path("tripId")
    )
    return api_response(message="Packed status updated", data=packing_list)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
