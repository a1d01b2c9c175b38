"""Lazy-built service graph, one instance per warm Lambda container."""

from functools import lru_cache

from core.clients import get_dynamo_client, get_s3_client, get_ses_client
from core.config import get_config
from core.db.dynamo import DynamoDocumentStore
from core.db.repository import Repository
from core.db.store import Collection, DocumentStore
from core.models.budget import Budget
from core.models.destination import Destination
from core.models.itinerary import Itinerary
from core.models.packing_list import PackingList
from core.models.trip import Trip
from core.models.user import User
from core.services.accounts import AccountService
from core.services.budgets import BudgetService
from core.services.destinations import DestinationService
from core.services.images import S3ImageStore
from core.services.itineraries import ItineraryService
from core.services.notifications import SesNotificationSender
from core.services.packing_lists import PackingListService
from core.services.trips import TripService
from core.services.weather import OpenWeatherProvider, WeatherService


@lru_cache(maxsize=1)
def get_store() -> DocumentStore:
    return DynamoDocumentStore(get_config(), get_dynamo_client())


def get_user_repository() -> Repository[User]:
    return Repository(get_store(), Collection.USERS, User)


def _repositories() -> dict[str, Repository]:
    store = get_store()
    return {
        "trips": Repository(store, Collection.TRIPS, Trip),
        "budgets": Repository(store, Collection.BUDGETS, Budget),
        "itineraries": Repository(store, Collection.ITINERARIES, Itinerary),
        "packing_lists": Repository(store, Collection.PACKING_LISTS, PackingList),
        "destinations": Repository(store, Collection.DESTINATIONS, Destination),
    }


@lru_cache(maxsize=1)
def get_trip_service() -> TripService:
    repos = _repositories()
    return TripService(
        trips=repos["trips"],
        destinations=repos["destinations"],
        users=get_user_repository(),
        budgets=repos["budgets"],
        itineraries=repos["itineraries"],
        packing_lists=repos["packing_lists"],
        notifier=SesNotificationSender(get_config(), get_ses_client()),
        frontend_url=get_config().frontend_url,
    )


@lru_cache(maxsize=1)
def get_budget_service() -> BudgetService:
    repos = _repositories()
    return BudgetService(repos["budgets"], repos["trips"])


@lru_cache(maxsize=1)
def get_itinerary_service() -> ItineraryService:
    repos = _repositories()
    return ItineraryService(repos["itineraries"], repos["trips"])


@lru_cache(maxsize=1)
def get_packing_list_service() -> PackingListService:
    repos = _repositories()
    return PackingListService(repos["packing_lists"], repos["trips"])


@lru_cache(maxsize=1)
def get_destination_service() -> DestinationService:
    return DestinationService(_repositories()["destinations"], S3ImageStore(get_config(), get_s3_client()))


@lru_cache(maxsize=1)
def get_account_service() -> AccountService:
    from core.auth import get_auth_provider

    config = get_config()
    repos = _repositories()
    return AccountService(
        users=get_user_repository(),
        trips=repos["trips"],
        budgets=repos["budgets"],
        itineraries=repos["itineraries"],
        packing_lists=repos["packing_lists"],
        auth=get_auth_provider(),
        notifier=SesNotificationSender(config, get_ses_client()),
        images=S3ImageStore(config, get_s3_client()),
        code_ttl_minutes=config.code_ttl_minutes,
    )


@lru_cache(maxsize=1)
def get_weather_service() -> WeatherService:
    return WeatherService(OpenWeatherProvider(get_config()))
