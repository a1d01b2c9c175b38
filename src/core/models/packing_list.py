from typing import Literal

from pydantic import BaseModel, Field, computed_field

from core.models.common import Document, Money, new_id, percentage

PackingCategory = Literal[
    "Clothing",
    "Electronics",
    "Toiletries",
    "Documents",
    "Accessories",
    "Medication",
    "Food",
    "Other",
]


class PackingItem(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    category: PackingCategory = "Other"
    quantity: int = Field(default=1, ge=1)
    is_packed: bool = False
    is_essential: bool = False
    notes: str = Field(default="", max_length=500)
    weight: float = Field(default=0, ge=0)  # grams, per unit
    estimated_cost: Money = Field(default_factory=Money)


class PackingListFields(BaseModel):
    """Client-editable packing list attributes."""

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(default="", max_length=500)
    items: list[PackingItem] = []
    categories: list[PackingCategory] = []
    is_template: bool = False
    template_category: str | None = None
    is_public: bool = False
    tags: list[str] = []


class PackingList(Document, PackingListFields):
    trip: str
    total_weight: float = 0
    total_estimated_cost: Money = Field(default_factory=Money)

    def before_save(self) -> None:
        self.total_weight = sum(item.weight * item.quantity for item in self.items)
        currency = self.items[0].estimated_cost.currency if self.items else self.total_estimated_cost.currency
        self.total_estimated_cost = Money(
            amount=sum(item.estimated_cost.amount * item.quantity for item in self.items),
            currency=currency,
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_items(self) -> int:
        return len(self.items)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def packed_items(self) -> int:
        return sum(1 for item in self.items if item.is_packed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def essential_items(self) -> int:
        return sum(1 for item in self.items if item.is_essential)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def packing_progress(self) -> int:
        return percentage(self.packed_items, self.total_items)
