from os import environ

import boto3
from pydantic import BaseModel, ConfigDict

_cached_jwt_secret: str | None = None


def _resolve_jwt_secret() -> str:
    """Fetch the token signing secret from Secrets Manager at runtime, with caching."""
    global _cached_jwt_secret
    if _cached_jwt_secret is not None:
        return _cached_jwt_secret

    # Local dev: use env var directly
    direct = environ.get("JWT_SECRET", "")
    if direct:
        _cached_jwt_secret = direct
        return direct

    # Deployed: fetch from Secrets Manager by ARN
    arn = environ.get("JWT_SECRET_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager")
    _cached_jwt_secret = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_jwt_secret


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    dynamodb_endpoint: str | None = None
    users_table: str
    trips_table: str
    destinations_table: str
    budgets_table: str
    itineraries_table: str
    packing_lists_table: str
    images_bucket: str
    images_base_url: str
    email_from: str
    frontend_url: str
    weather_api_key: str = ""
    weather_api_url: str
    weather_timeout_seconds: float = 10.0
    jwt_secret: str = ""
    jwt_expire_minutes: int = 60 * 24 * 7
    code_ttl_minutes: int = 10
    environment: str
    log_level: str = "INFO"


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config. For testing only."""
    global _cached_config, _cached_jwt_secret
    _cached_config = None
    _cached_jwt_secret = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    images_bucket = environ.get("IMAGES_BUCKET", "traveltrack-images")
    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT"),
        users_table=environ.get("USERS_TABLE", "TravelTrackUsers"),
        trips_table=environ.get("TRIPS_TABLE", "TravelTrackTrips"),
        destinations_table=environ.get("DESTINATIONS_TABLE", "TravelTrackDestinations"),
        budgets_table=environ.get("BUDGETS_TABLE", "TravelTrackBudgets"),
        itineraries_table=environ.get("ITINERARIES_TABLE", "TravelTrackItineraries"),
        packing_lists_table=environ.get("PACKING_LISTS_TABLE", "TravelTrackPackingLists"),
        images_bucket=images_bucket,
        images_base_url=environ.get("IMAGES_BASE_URL", f"https://{images_bucket}.s3.amazonaws.com"),
        email_from=environ.get("EMAIL_FROM", "no-reply@traveltrack.local"),
        frontend_url=environ.get("FRONTEND_URL", "http://localhost:5173"),
        weather_api_key=environ.get("OPENWEATHER_API_KEY", ""),
        weather_api_url=environ.get("OPENWEATHER_API_URL", "https://api.openweathermap.org/data/2.5"),
        weather_timeout_seconds=float(environ.get("WEATHER_TIMEOUT_SECONDS", "10")),
        jwt_secret=_resolve_jwt_secret(),
        jwt_expire_minutes=int(environ.get("JWT_EXPIRE_MINUTES", str(60 * 24 * 7))),
        code_ttl_minutes=int(environ.get("CODE_TTL_MINUTES", "10")),
        environment=environ.get("ENVIRONMENT", "local"),
        log_level=environ.get("LOG_LEVEL", "INFO"),
    )
    return _cached_config
