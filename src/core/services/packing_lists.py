from typing import Any

from core.models.common import percentage
from core.models.packing_list import PackingItem, PackingList, PackingListFields
from core.services import scoped
from core.services.scoped import TripScopedService

# (name, category, is_essential)
TEMPLATES: dict[str, list[tuple[str, str, bool]]] = {
    "beach": [
        ("Swimwear", "Clothing", True),
        ("Sunscreen", "Toiletries", True),
        ("Sunglasses", "Accessories", False),
        ("Beach towel", "Accessories", False),
        ("Flip flops", "Clothing", False),
        ("Hat", "Clothing", False),
    ],
    "mountain": [
        ("Hiking boots", "Clothing", True),
        ("Warm jacket", "Clothing", True),
        ("Backpack", "Accessories", True),
        ("Water bottle", "Accessories", False),
        ("First aid kit", "Medication", True),
        ("Headlamp", "Electronics", False),
    ],
    "city": [
        ("Comfortable shoes", "Clothing", True),
        ("Phone charger", "Electronics", True),
        ("Camera", "Electronics", False),
        ("Day bag", "Accessories", False),
        ("City map", "Documents", False),
        ("Umbrella", "Accessories", False),
    ],
    "business": [
        ("Business suit", "Clothing", True),
        ("Laptop", "Electronics", True),
        ("Business cards", "Documents", True),
        ("Dress shoes", "Clothing", False),
        ("Tie", "Accessories", False),
        ("Presentation materials", "Documents", False),
    ],
}
DEFAULT_TEMPLATE = "city"


class PackingListService(TripScopedService[PackingList]):
    noun = "Packing list"
    fields_model = PackingListFields

    def add_item(self, list_id: str, user_id: str, payload: Any, trip_id: str | None = None) -> PackingList:
        return self._mutate(list_id, user_id, lambda p: scoped.add_item(p.items, PackingItem, payload), trip_id)

    def update_item(
        self, list_id: str, item_id: str, user_id: str, payload: Any, trip_id: str | None = None
    ) -> PackingList:
        return self._mutate(list_id, user_id, lambda p: scoped.update_item(p.items, item_id, payload), trip_id)

    def delete_item(self, list_id: str, item_id: str, user_id: str, trip_id: str | None = None) -> PackingList:
        return self._mutate(list_id, user_id, lambda p: scoped.remove_item(p.items, item_id), trip_id)

    def toggle_packed(self, list_id: str, item_id: str, user_id: str, trip_id: str | None = None) -> PackingList:
        return self._mutate(
            list_id, user_id, lambda p: scoped.toggle_flag(p.items, item_id, "is_packed"), trip_id
        )

    def generate_from_template(self, trip_id: str, user_id: str, template: str | None) -> PackingList:
        key = (template or "").lower()
        if key not in TEMPLATES:
            key = DEFAULT_TEMPLATE
        items = [
            {"name": name, "category": category, "is_essential": essential}
            for name, category, essential in TEMPLATES[key]
        ]
        payload = {
            "title": f"{key.capitalize()} Packing List",
            "description": f"Generated from the {key} template",
            "items": items,
            "categories": sorted({category for _, category, _ in TEMPLATES[key]}),
            "template_category": key,
        }
        return self.create(trip_id, user_id, payload)

    def get_stats(self, trip_id: str, user_id: str) -> dict[str, Any]:
        lists = self.list_for_trip(trip_id, user_id)
        total_items = sum(p.total_items for p in lists)
        packed_items = sum(p.packed_items for p in lists)
        return {
            "total_lists": len(lists),
            "total_items": total_items,
            "packed_items": packed_items,
            "essential_items": sum(p.essential_items for p in lists),
            "total_weight": sum(p.total_weight for p in lists),
            "total_estimated_cost": sum(p.total_estimated_cost.amount for p in lists),
            "packing_progress": percentage(packed_items, total_items),
        }
