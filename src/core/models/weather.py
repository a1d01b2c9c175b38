from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class WeatherQuery(BaseModel):
    lat: float | None = Field(default=None, ge=-90, le=90)
    lon: float | None = Field(default=None, ge=-180, le=180)
    city: str | None = None
    country: str | None = None

    @model_validator(mode="after")
    def coordinates_or_city(self) -> "WeatherQuery":
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must be provided together")
        if self.lat is None and not self.city:
            raise ValueError("Either coordinates (lat, lon) or city name is required")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


class WeatherLocation(BaseModel):
    name: str = ""
    country: str = ""
    lat: float | None = None
    lon: float | None = None


class CurrentWeather(BaseModel):
    location: WeatherLocation
    temperature: float
    feels_like: float
    humidity: int
    pressure: int
    description: str
    icon: str
    wind_speed: float
    wind_direction: int | None = None
    visibility: float | None = None  # km
    sunrise: datetime | None = None
    sunset: datetime | None = None


class HourlyForecast(BaseModel):
    time: str
    temperature: float
    description: str
    icon: str
    pop: int  # percent


class ForecastDay(BaseModel):
    date: str
    temp_min: float
    temp_max: float
    humidity: int
    pressure: int
    description: str
    icon: str
    wind_speed: float
    pop: int  # percent
    hourly: list[HourlyForecast] = []


class Forecast(BaseModel):
    location: WeatherLocation
    days: list[ForecastDay]


class WeatherAlert(BaseModel):
    event: str
    description: str
    start: datetime | None = None
    end: datetime | None = None
    severity: str = "Unknown"


class Recommendations(BaseModel):
    general: list[str] = []
    activities: list[str] = []
    clothing: list[str] = []
    precautions: list[str] = []
