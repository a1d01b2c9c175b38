from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from core.models import Budget, Destination, Itinerary, PackingList, Review, Trip, User
from core.models.common import Document, percentage
from core.models.destination import QuickRating
from core.models.trip import trip_duration
from core.models.weather import WeatherQuery

START = datetime(2030, 6, 1, 9, 0, tzinfo=timezone.utc)

VALID_TRIP = dict(
    title="Alps road trip",
    destination="dest-1",
    start_date=START,
    end_date=START + timedelta(days=3),
    user="user-1",
)

VALID_BUDGET = dict(
    title="Main budget",
    total_budget={"amount": 1000, "currency": "EUR"},
    trip="trip-1",
)


# --- percentage ---


def test_percentage_rounds_half_up():
    assert percentage(1, 8) == 13
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67


def test_percentage_of_nothing_is_zero():
    assert percentage(0, 0) == 0
    assert percentage(5, 0) == 0


# --- Trip ---


def test_trip_valid():
    trip = Trip(**VALID_TRIP)
    trip.before_save()
    assert trip.duration == 3


def test_trip_end_equal_to_start_rejected():
    with pytest.raises(ValidationError, match="end_date must be after start_date"):
        Trip(**{**VALID_TRIP, "end_date": START})


def test_trip_end_before_start_rejected():
    with pytest.raises(ValidationError):
        Trip(**{**VALID_TRIP, "end_date": START - timedelta(days=1)})


def test_trip_one_millisecond_is_enough():
    trip = Trip(**{**VALID_TRIP, "end_date": START + timedelta(milliseconds=1)})
    trip.before_save()
    assert trip.duration == 1


def test_trip_duration_rounds_up():
    assert trip_duration(START, START + timedelta(days=2, hours=1)) == 3
    assert trip_duration(START, START + timedelta(days=2)) == 2


def test_trip_title_too_short():
    with pytest.raises(ValidationError):
        Trip(**{**VALID_TRIP, "title": "ab"})


def test_trip_naive_dates_are_utc():
    trip = Trip(**{**VALID_TRIP, "start_date": "2030-06-01T09:00:00", "end_date": "2030-06-02T09:00:00"})
    assert trip.start_date == START


def test_trip_budget_figures():
    trip = Trip(**{**VALID_TRIP, "budget": {"total": 400, "spent": 100}})
    assert trip.budget_remaining == 300
    assert trip.budget_percentage == 25


def test_trip_budget_percentage_with_zero_total():
    assert Trip(**VALID_TRIP).budget_percentage == 0


def test_trip_progress_by_status():
    assert Trip(**VALID_TRIP).progress == 0
    assert Trip(**{**VALID_TRIP, "status": "Completed"}).progress == 100
    assert Trip(**{**VALID_TRIP, "status": "Cancelled"}).progress == 0


def test_trip_to_record_leaves_out_computed_fields():
    record = Trip(**VALID_TRIP).to_record()
    assert "progress" not in record
    assert "budget_remaining" not in record
    assert Trip.model_validate(record).title == "Alps road trip"


def test_document_defaults():
    doc = Document()
    assert len(doc.id) == 32
    assert doc.version == 0


# --- Budget ---


def test_budget_totals_from_items():
    budget = Budget(
        **VALID_BUDGET,
        items=[
            {"title": "Hotel", "category": "Accommodation", "amount": 300},
            {"title": "Dinner", "category": "Food", "amount": 50},
            {"title": "Refund", "category": "Other", "type": "Income", "amount": 80},
        ],
        categories=[{"name": "Food", "budget": 200}, {"name": "Shopping", "budget": 100}],
    )
    budget.before_save()
    assert budget.total_expenses.amount == 350
    assert budget.total_income.amount == 80
    assert budget.total_expenses.currency == "EUR"
    assert budget.remaining_budget == 650
    assert budget.net_amount == -270
    assert budget.budget_utilization == 35
    assert [c.spent for c in budget.categories] == [50, 0]


def test_budget_with_no_items():
    budget = Budget(**{**VALID_BUDGET, "total_budget": {"amount": 0}})
    budget.before_save()
    assert budget.total_expenses.amount == 0
    assert budget.budget_utilization == 0
    assert budget.payment_progress == 0


def test_budget_payment_progress():
    budget = Budget(
        **VALID_BUDGET,
        items=[
            {"title": "Flight", "category": "Transportation", "amount": 200, "is_paid": True},
            {"title": "Taxi", "category": "Transportation", "amount": 20},
            {"title": "Museum", "category": "Activities", "amount": 15},
        ],
    )
    assert budget.paid_items == 1
    assert budget.payment_progress == 33


def test_budget_item_rejects_negative_amount():
    with pytest.raises(ValidationError):
        Budget(**VALID_BUDGET, items=[{"title": "Oops", "category": "Food", "amount": -1}])


def test_budget_item_rejects_unknown_category():
    with pytest.raises(ValidationError):
        Budget(**VALID_BUDGET, items=[{"title": "Oops", "category": "Gambling", "amount": 1}])


# --- Packing list ---


def test_packing_list_totals():
    packing = PackingList(
        title="Hiking kit",
        trip="trip-1",
        items=[
            {"name": "Boots", "weight": 900, "quantity": 1, "estimated_cost": {"amount": 120}},
            {"name": "Socks", "weight": 50, "quantity": 4, "estimated_cost": {"amount": 5}, "is_packed": True},
        ],
    )
    packing.before_save()
    assert packing.total_weight == 1100
    assert packing.total_estimated_cost.amount == 140
    assert packing.packing_progress == 50


def test_packing_list_with_no_items():
    packing = PackingList(title="Empty list", trip="trip-1")
    packing.before_save()
    assert packing.total_weight == 0
    assert packing.total_items == 0
    assert packing.packing_progress == 0


def test_packing_item_quantity_must_be_positive():
    with pytest.raises(ValidationError):
        PackingList(title="Bad list", trip="trip-1", items=[{"name": "Hat", "quantity": 0}])


# --- Itinerary ---


def test_itinerary_before_save_sorts_days_and_sums_costs():
    itinerary = Itinerary(
        title="Rome in three days",
        trip="trip-1",
        days=[
            {"day_number": 2, "activities": [{"title": "Vatican", "cost": {"amount": 30}}]},
            {"day_number": 1, "activities": [{"title": "Colosseum", "cost": {"amount": 20}, "is_completed": True}]},
        ],
    )
    itinerary.before_save()
    assert [d.day_number for d in itinerary.days] == [1, 2]
    assert itinerary.total_cost.amount == 50
    assert itinerary.total_duration == 2
    assert itinerary.total_activities == 2
    assert itinerary.completion_percentage == 50


def test_itinerary_duplicate_day_numbers_rejected():
    with pytest.raises(ValidationError, match="Duplicate day number 1"):
        Itinerary(title="Broken plan", trip="trip-1", days=[{"day_number": 1}, {"day_number": 1}])


def test_itinerary_with_no_activities():
    itinerary = Itinerary(title="Empty plan", trip="trip-1")
    itinerary.before_save()
    assert itinerary.completion_percentage == 0
    assert itinerary.total_cost.amount == 0


def test_activity_end_before_start_rejected():
    with pytest.raises(ValidationError):
        Itinerary(
            title="Backwards",
            trip="trip-1",
            days=[
                {
                    "day_number": 1,
                    "activities": [
                        {"title": "Time travel", "start_time": START, "end_time": START - timedelta(hours=1)}
                    ],
                }
            ],
        )


# --- Destination ---

VALID_DESTINATION = dict(
    name="Kyoto",
    country="Japan",
    city="Kyoto",
    description="Temples and gardens.",
    categories=["Culture"],
)


def test_destination_rating_from_reviews_only():
    destination = Destination(
        **VALID_DESTINATION,
        reviews=[
            Review(user="u1", rating=5, comment="Wonderful"),
            Review(user="u2", rating=4, comment="Great"),
        ],
        ratings=[QuickRating(user="u3", rating=1)],
    )
    destination.before_save()
    assert destination.rating.average == 4.5
    assert destination.rating.count == 2
    assert destination.quick_rating.average == 1
    assert destination.quick_rating.count == 1


def test_destination_rating_without_reviews_is_zero():
    destination = Destination(**VALID_DESTINATION)
    destination.before_save()
    assert destination.rating.average == 0
    assert destination.rating.count == 0


def test_destination_needs_a_category():
    with pytest.raises(ValidationError):
        Destination(**{**VALID_DESTINATION, "categories": []})


def test_destination_full_location():
    assert Destination(**VALID_DESTINATION).full_location == "Kyoto, Japan"


def test_review_rating_bounds():
    with pytest.raises(ValidationError):
        Review(user="u1", rating=6, comment="Too good")


# --- User ---


def test_user_email_is_normalized():
    user = User(first_name="Ada", last_name="Lovelace", email="Ada@Example.COM", password_hash="x")
    assert user.email == "ada@example.com"
    assert user.full_name == "Ada Lovelace"


def test_user_public_view_hides_secrets():
    user = User(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password_hash="hash",
        email_verification_code="123456",
        reset_password_token="token",
    )
    public = user.to_public()
    assert "password_hash" not in public
    assert "email_verification_code" not in public
    assert "reset_password_token" not in public
    assert public["full_name"] == "Ada Lovelace"


# --- Weather query ---


def test_weather_query_needs_coordinates_or_city():
    assert WeatherQuery(city="Paris").has_coordinates is False
    assert WeatherQuery(lat=48.8, lon=2.3).has_coordinates is True
    with pytest.raises(ValidationError):
        WeatherQuery()
    with pytest.raises(ValidationError):
        WeatherQuery(lat=48.8)
