"""Weather endpoints backed by OpenWeatherMap."""

from typing import Any

from core.http import ApiRequest, Router, api_response
from core.services.registry import get_weather_service

router = Router()


@router.route("GET", "/weather/current")
def current_weather(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_weather_service().current(request.query))


@router.route("GET", "/weather/forecast")
def forecast(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_weather_service().forecast(request.query))


@router.route("GET", "/weather/alerts")
def alerts(request: ApiRequest) -> dict[str, Any]:
    weather_alerts = get_weather_service().alerts(request.query)
    return api_response(data=weather_alerts, count=len(weather_alerts))


@router.route("GET", "/weather/recommendations")
def recommendations(request: ApiRequest) -> dict[str, Any]:
    return api_response(data=get_weather_service().recommendations(request.query))


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    return router.dispatch(event, context)
