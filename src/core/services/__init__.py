"""
Business services for TravelTrack.

- accounts.py: registration, login, verification, password reset, profiles, admin
- trips.py: trip lifecycle, listing, stats and collaborators
- budgets.py / itineraries.py / packing_lists.py: trip-scoped records and their items
- destinations.py: destination catalog, images, reviews and quick ratings
- weather.py: OpenWeatherMap lookups and recommendations
- notifications.py / images.py: SES email and S3 image storage
- registry.py: lazily built, per-container service instances
"""

__all__: list[str] = []
