"""
Weather lookups through OpenWeatherMap and the reshaping of its payloads
into our own models, plus simple travel recommendations.

The provider call is a single attempt: a 404 from the provider surfaces as
``NotFoundError("Location not found")``, anything else as ``UpstreamError``.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import requests

from core.config import Config
from core.errors import ErrorCode, NotFoundError, UpstreamError, ValidationError
from core.models.weather import (
    CurrentWeather,
    Forecast,
    ForecastDay,
    HourlyForecast,
    Recommendations,
    WeatherAlert,
    WeatherLocation,
    WeatherQuery,
)
from core.validation import parse_payload

logger = logging.getLogger(__name__)

DEFAULT_FORECAST_DAYS = 7
MAX_FORECAST_DAYS = 16


class WeatherProvider(ABC):
    @abstractmethod
    def current(self, query: WeatherQuery) -> dict[str, Any]: ...

    @abstractmethod
    def forecast(self, query: WeatherQuery) -> dict[str, Any]: ...

    @abstractmethod
    def alerts(self, lat: float, lon: float) -> dict[str, Any]: ...


def _location_params(query: WeatherQuery) -> dict[str, Any]:
    if query.has_coordinates:
        return {"lat": query.lat, "lon": query.lon}
    place = f"{query.city},{query.country}" if query.country else str(query.city)
    return {"q": place}


class OpenWeatherProvider(WeatherProvider):
    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        self._api_key = config.weather_api_key
        self._base_url = config.weather_api_url.rstrip("/")
        self._timeout = config.weather_timeout_seconds
        self._session = session or requests.Session()

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise UpstreamError("OPENWEATHER_API_KEY not configured", code=ErrorCode.WEATHER_UNAVAILABLE)
        try:
            response = self._session.get(
                f"{self._base_url}/{endpoint}",
                params={**params, "appid": self._api_key, "units": "metric"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Weather request failed: {e}", code=ErrorCode.WEATHER_UNAVAILABLE) from e

        if response.status_code == 404:
            raise NotFoundError("Location not found")
        if not response.ok:
            raise UpstreamError(
                f"Weather provider returned {response.status_code}", code=ErrorCode.WEATHER_UNAVAILABLE
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Weather provider sent invalid JSON: {e}", code=ErrorCode.WEATHER_UNAVAILABLE) from e

    def current(self, query: WeatherQuery) -> dict[str, Any]:
        return self._get("weather", _location_params(query))

    def forecast(self, query: WeatherQuery) -> dict[str, Any]:
        return self._get("forecast", _location_params(query))

    def alerts(self, lat: float, lon: float) -> dict[str, Any]:
        return self._get("onecall", {"lat": lat, "lon": lon, "exclude": "current,minutely,hourly,daily"})


# --- Reshaping ---


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _condition(entry: dict[str, Any]) -> dict[str, Any]:
    conditions = entry.get("weather") or [{}]
    return conditions[0]


def shape_current(raw: dict[str, Any]) -> CurrentWeather:
    main = raw.get("main", {})
    wind = raw.get("wind", {})
    sys = raw.get("sys", {})
    coord = raw.get("coord", {})
    condition = _condition(raw)
    visibility = raw.get("visibility")
    return CurrentWeather(
        location=WeatherLocation(
            name=raw.get("name", ""),
            country=sys.get("country", ""),
            lat=coord.get("lat"),
            lon=coord.get("lon"),
        ),
        temperature=main.get("temp", 0),
        feels_like=main.get("feels_like", 0),
        humidity=main.get("humidity", 0),
        pressure=main.get("pressure", 0),
        description=condition.get("description", ""),
        icon=condition.get("icon", ""),
        wind_speed=wind.get("speed", 0),
        wind_direction=wind.get("deg"),
        visibility=visibility / 1000 if visibility is not None else None,
        sunrise=_timestamp(sys.get("sunrise")),
        sunset=_timestamp(sys.get("sunset")),
    )


def shape_forecast(raw: dict[str, Any], days: int = DEFAULT_FORECAST_DAYS) -> Forecast:
    """Group the 3-hourly entries by calendar day (UTC) and keep the first ``days`` days."""
    city = raw.get("city", {})
    coord = city.get("coord", {})
    grouped: dict[str, list[dict[str, Any]]] = {}
    for entry in raw.get("list", []):
        moment = _timestamp(entry.get("dt", 0))
        grouped.setdefault(moment.date().isoformat(), []).append(entry)  # type: ignore[union-attr]

    forecast_days = []
    for date, entries in list(grouped.items())[:days]:
        first = entries[0]
        first_condition = _condition(first)
        hourly = [
            HourlyForecast(
                time=_timestamp(e.get("dt", 0)).strftime("%H:%M"),  # type: ignore[union-attr]
                temperature=e.get("main", {}).get("temp", 0),
                description=_condition(e).get("description", ""),
                icon=_condition(e).get("icon", ""),
                pop=round(e.get("pop", 0) * 100),
            )
            for e in entries
        ]
        forecast_days.append(
            ForecastDay(
                date=date,
                temp_min=min(e.get("main", {}).get("temp_min", 0) for e in entries),
                temp_max=max(e.get("main", {}).get("temp_max", 0) for e in entries),
                humidity=first.get("main", {}).get("humidity", 0),
                pressure=first.get("main", {}).get("pressure", 0),
                description=first_condition.get("description", ""),
                icon=first_condition.get("icon", ""),
                wind_speed=first.get("wind", {}).get("speed", 0),
                pop=max(h.pop for h in hourly),
                hourly=hourly,
            )
        )

    return Forecast(
        location=WeatherLocation(
            name=city.get("name", ""),
            country=city.get("country", ""),
            lat=coord.get("lat"),
            lon=coord.get("lon"),
        ),
        days=forecast_days,
    )


def shape_alerts(raw: dict[str, Any]) -> list[WeatherAlert]:
    return [
        WeatherAlert(
            event=alert.get("event", ""),
            description=alert.get("description", ""),
            start=_timestamp(alert.get("start")),
            end=_timestamp(alert.get("end")),
            severity=(alert.get("tags") or ["Unknown"])[0],
        )
        for alert in raw.get("alerts") or []
    ]


def recommend(weather: CurrentWeather, activities: list[str] | None = None) -> Recommendations:
    temp = weather.temperature
    description = weather.description.lower()
    recs = Recommendations(general=[f"{round(temp)}°C, {weather.description}".strip(", ")])

    if temp < 10:
        recs.clothing.append("Wear warm clothing, jacket, and gloves")
        recs.activities.append("Indoor activities recommended")
        if temp < 0:
            recs.precautions.append("Be careful of ice and slippery conditions")
    elif temp > 25:
        recs.clothing.append("Wear light, breathable clothing")
        recs.activities.append("Stay hydrated and avoid strenuous outdoor activities during peak hours")
        recs.precautions.append("Use sunscreen and stay in shade when possible")
    else:
        recs.clothing.append("Comfortable clothing suitable for moderate temperatures")
        recs.activities.append("Good weather for outdoor activities")

    if "rain" in description:
        recs.clothing.append("Bring umbrella or rain jacket")
        recs.activities.append("Indoor activities or waterproof gear needed")
        recs.precautions.append("Be careful of wet and slippery surfaces")
    elif "snow" in description:
        recs.clothing.append("Wear warm, waterproof clothing and boots")
        recs.activities.append("Winter sports activities available")
        recs.precautions.append("Be careful of icy conditions and reduced visibility")
    elif "cloud" in description:
        recs.activities.append("Good for outdoor activities with moderate sun exposure")
    elif "clear" in description or "sunny" in description:
        recs.activities.append("Excellent weather for outdoor activities")
        recs.precautions.append("Use sunscreen and stay hydrated")

    if weather.wind_speed > 20:
        recs.precautions.append("High winds - secure loose objects and be careful of flying debris")
        recs.activities.append("Avoid outdoor activities that require stability")

    if weather.humidity > 80:
        recs.clothing.append("Wear moisture-wicking clothing")
        recs.precautions.append("High humidity - stay hydrated and take breaks")

    wet = "rain" in description or "snow" in description
    for activity in activities or []:
        name = activity.strip().lower()
        if "hiking" in name or "walking" in name:
            if temp < 10 or temp > 30:
                recs.activities.append("Consider indoor alternatives or adjust timing")
            if wet:
                recs.activities.append("Hiking not recommended due to weather conditions")
        elif "beach" in name or "swimming" in name:
            if temp < 20:
                recs.activities.append("Beach activities not recommended due to cold weather")
            if "rain" in description or "storm" in description:
                recs.activities.append("Avoid beach activities due to weather conditions")
        elif "cycling" in name or "biking" in name:
            if weather.wind_speed > 15:
                recs.activities.append("Cycling may be difficult due to strong winds")
            if wet:
                recs.activities.append("Cycling not recommended due to weather conditions")

    return recs


# --- Service ---


def _days_param(raw: Any) -> int:
    if raw in (None, ""):
        return DEFAULT_FORECAST_DAYS
    try:
        days = int(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError("days must be an integer") from e
    if not 1 <= days <= MAX_FORECAST_DAYS:
        raise ValidationError(f"days must be between 1 and {MAX_FORECAST_DAYS}")
    return days


class WeatherService:
    def __init__(self, provider: WeatherProvider) -> None:
        self._provider = provider

    def current(self, params: dict[str, Any] | None) -> CurrentWeather:
        query = parse_payload(WeatherQuery, params or {})
        return shape_current(self._provider.current(query))

    def forecast(self, params: dict[str, Any] | None) -> Forecast:
        params = params or {}
        days = _days_param(params.get("days"))
        query = parse_payload(WeatherQuery, {k: v for k, v in params.items() if k != "days"})
        return shape_forecast(self._provider.forecast(query), days)

    def alerts(self, params: dict[str, Any] | None) -> list[WeatherAlert]:
        query = parse_payload(WeatherQuery, params or {})
        if not query.has_coordinates:
            raise ValidationError("Please provide coordinates (lat, lon) for weather alerts")
        return shape_alerts(self._provider.alerts(query.lat, query.lon))  # type: ignore[arg-type]

    def recommendations(self, params: dict[str, Any] | None) -> dict[str, Any]:
        params = params or {}
        raw_activities = params.get("activities") or ""
        activities = [a for a in str(raw_activities).split(",") if a.strip()]
        query = parse_payload(WeatherQuery, {k: v for k, v in params.items() if k != "activities"})
        weather = shape_current(self._provider.current(query))
        return {"weather": weather, "recommendations": recommend(weather, activities)}
