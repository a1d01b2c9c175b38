"""Destination catalog, review and rating endpoints."""

from typing import Any

from core.http import ApiRequest, Router, api_response, page_response
from core.services.registry import get_destination_service

router = Router()

_DESTINATION = "/destinations/{destinationId}"


def _split_uploads(body: Any) -> tuple[dict[str, Any], list[Any]]:
    """Separate base64 ``uploads`` from the rest of a JSON body."""
    if not isinstance(body, dict):
        return {}, []
    fields = {k: v for k, v in body.items() if k != "uploads"}
    uploads = body.get("uploads") or []
    return fields, uploads if isinstance(uploads, list) else [uploads]


# --- Catalog ---


@router.route("GET", "/destinations")
def list_destinations(request: ApiRequest) -> dict[str, Any]:
    return page_response(get_destination_service().list_destinations(request.query))


@router.route("GET", "/destinations/search")
def search_destinations(request: ApiRequest) -> dict[str, Any]:
    return page_response(get_destination_service().search(request.query))


@router.route("GET", "/destinations/featured")
def featured_destinations(request: ApiRequest) -> dict[str, Any]:
    destinations = get_destination_service().featured()
    return api_response(data=destinations, count=len(destinations))


@router.route("GET", "/destinations/popular")
def popular_destinations(request: ApiRequest) -> dict[str, Any]:
    destinations = get_destination_service().popular()
    return api_response(data=destinations, count=len(destinations))


@router.route("GET", "/destinations/categories")
def destination_categories(request: ApiRequest) -> dict[str, Any]:
    categories = get_destination_service().categories()
    return api_response(data=categories, count=len(categories))


@router.route("GET", "/destinations/countries")
def destination_countries(request: ApiRequest) -> dict[str, Any]:
    countries = get_destination_service().countries()
    return api_response(data=countries, count=len(countries))


@router.route("GET", "/destinations/category/{category}")
def destinations_by_category(request: ApiRequest) -> dict[str, Any]:
    return page_response(get_destination_service().by_category(request.path("category"), request.query))


@router.route("GET", "/destinations/country/{country}")
def destinations_by_country(request: ApiRequest) -> dict[str, Any]:
    return page_response(get_destination_service().by_country(request.path("country"), request.query))


@router.route("POST", "/destinations", auth=True)
def create_destination(request: ApiRequest) -> dict[str, Any]:
    fields, uploads = _split_uploads(request.body)
    destination = get_destination_service().create(fields, uploads)
    return api_response(201, message="Destination created successfully", data=destination)


@router.route("GET", _DESTINATION)
def get_destination(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_destination_service().get(request.path("destinationId")))


@router.route("PUT", _DESTINATION, auth=True)
def update_destination(request: ApiRequest) -> dict[str, Any]:
    fields, uploads = _split_uploads(request.body)
    destination = get_destination_service().update(
        request.path("destinationId"), fields, uploads[0] if uploads else None
    )
    return api_response(message="Destination updated successfully", data=destination)


@router.route("DELETE", _DESTINATION, auth=True)
def delete_destination(request: ApiRequest) -> dict[str, Any]:
    get_destination_service().delete(request.path("destinationId"))
    return api_response(message="Destination deleted successfully")


@router.route("POST", f"{_DESTINATION}/images", auth=True)
def upload_images(request: ApiRequest) -> dict[str, Any]:
    _, uploads = _split_uploads(request.body)
    destination = get_destination_service().upload_images(request.path("destinationId"), uploads)
    return api_response(message="Images uploaded successfully", data=destination)


@router.route("POST", f"{_DESTINATION}/visit")
def record_visit(request: ApiRequest) -> dict[str, Any]:
    views = get_destination_service().increment_visit(request.path("destinationId"))
    return api_response(data={"views": views})


# --- Reviews & ratings ---


@router.route("GET", f"{_DESTINATION}/reviews")
def list_reviews(request: ApiRequest) -> dict[str, Any]:
    return page_response(get_destination_service().list_reviews(request.path("destinationId"), request.query))


@router.route("POST", f"{_DESTINATION}/reviews")
def add_review(request: ApiRequest) -> dict[str, Any]:
    fields, uploads = _split_uploads(request.body)
    destination = get_destination_service().add_review(
        request.path("destinationId"), request.user_id, fields, uploads
    )
    return api_response(201, message="Review added successfully", data=destination)


@router.route("PUT", f"{_DESTINATION}/reviews/{{reviewId}}")
def update_review(request: ApiRequest) -> dict[str, Any]:
    destination = get_destination_service().update_review(
        request.path("destinationId"), request.path("reviewId"), request.user_id, request.body
    )
    return api_response(message="Review updated successfully", data=destination)


@router.route("DELETE", f"{_DESTINATION}/reviews/{{reviewId}}")
def delete_review(request: ApiRequest) -> dict[str, Any]:
    destination = get_destination_service().delete_review(
        request.path("destinationId"), request.path("reviewId"), request.user_id
    )
    return api_response(message="Review deleted successfully", data=destination)


@router.route("POST", f"{_DESTINATION}/reviews/{{reviewId}}/helpful")
def toggle_helpful(request: ApiRequest) -> dict[str, Any]:
    destination = get_destination_service().toggle_review_helpful(
        request.path("destinationId"), request.path("reviewId"), request.user_id
    )
    return api_response(message="Review helpful status updated", data=destination)


@router.route("POST", f"{_DESTINATION}/rating")
def add_rating(request: ApiRequest) -> dict[str, Any]:
    destination = get_destination_service().add_rating(request.path("destinationId"), request.user_id, request.body)
    return api_response(201, message="Rating added successfully", data=destination)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
