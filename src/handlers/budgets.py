"""Budget endpoints, nested under a trip."""

from typing import Any

from core.http import ApiRequest, Router, api_response
from core.services.registry import get_budget_service

router = Router()

_BUDGET = "/trips/{tripId}/budgets/{budgetId}"


@router.route("GET", "/trips/{tripId}/budgets")
def list_budgets(request: ApiRequest) -> dict[str, Any]:
    budgets = get_budget_service().list_for_trip(request.path("tripId"), request.user_id)
    return api_response(data=budgets, count=len(budgets))


@router.route("POST", "/trips/{tripId}/budgets")
def create_budget(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().create(request.path("tripId"), request.user_id, request.body)
    return api_response(201, message="Budget created successfully", data=budget)


@router.route("GET", "/trips/{tripId}/budgets/stats")
def budget_stats(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_budget_service().get_stats(request.path("tripId"), request.user_id))


@router.route("GET", _BUDGET)
def get_budget(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().get(request.path("budgetId"), request.user_id, request.path("tripId"))
    return api_response(data=budget)


@router.route("PUT", _BUDGET)
def update_budget(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().update(
        request.path("budgetId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(message="Budget updated successfully", data=budget)


@router.route("DELETE", _BUDGET)
def delete_budget(request: ApiRequest) -> dict[str, Any]:
    get_budget_service().delete(request.path("budgetId"), request.user_id, request.path("tripId"))
    return api_response(message="Budget deleted successfully")


@router.route("POST", f"{_BUDGET}/items")
def add_item(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().add_item(
        request.path("budgetId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(201, message="Item added successfully", data=budget)


@router.route("POST", f"{_BUDGET}/income")
def add_income(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().add_income(
        request.path("budgetId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(201, message="Income added successfully", data=budget)


@router.route("PUT", f"{_BUDGET}/items/{{itemId}}")
def update_item(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().update_item(
        request.path("budgetId"), request.path("itemId"), request.user_id, request.body, request.path("tripId")
    )
    return api_response(message="Item updated successfully", data=budget)


@router.route("DELETE", f"{_BUDGET}/items/{{itemId}}")
def delete_item(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().delete_item(
        request.path("budgetId"), request.path("itemId"), request.user_id, request.path("tripId")
    )
    return api_response(message="Item deleted successfully", data=budget)


@router.route("PATCH", f"{_BUDGET}/items/{{itemId}}/toggle-paid")
def toggle_paid(request: ApiRequest) -> dict[str, Any]:
    budget = get_budget_service().toggle_paid(
        request.path("budgetId"), request.path("itemId"), request.user_id, request.path("tripId")
    )
    return api_response(message="Payment status updated", data=budget)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
