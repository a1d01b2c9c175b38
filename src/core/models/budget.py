from collections import defaultdict
from typing import Literal

from pydantic import BaseModel, Field, computed_field

from core.models.common import Currency, Document, ImageRef, Money, UtcDateTime, new_id, percentage, utcnow

BudgetCategoryName = Literal[
    "Accommodation",
    "Transportation",
    "Food",
    "Activities",
    "Shopping",
    "Entertainment",
    "Health",
    "Insurance",
    "Other",
]
ItemType = Literal["Income", "Expense"]
PaymentMethod = Literal["Cash", "Credit Card", "Debit Card", "Bank Transfer", "Digital Wallet", "Other"]
RecurringFrequency = Literal["Daily", "Weekly", "Monthly", "Yearly"]


class BudgetItem(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    category: BudgetCategoryName
    type: ItemType = "Expense"
    amount: float = Field(..., ge=0)
    currency: Currency = "USD"
    date: UtcDateTime = Field(default_factory=utcnow)
    is_recurring: bool = False
    recurring_frequency: RecurringFrequency | None = None
    is_paid: bool = False
    payment_method: PaymentMethod = "Cash"
    receipt: ImageRef | None = None
    notes: str = Field(default="", max_length=1000)
    tags: list[str] = []


class BudgetCategory(BaseModel):
    name: BudgetCategoryName
    color: str = "#3B82F6"
    icon: str = ""
    budget: float = Field(default=0, ge=0)
    spent: float = Field(default=0, ge=0)


class BudgetAlerts(BaseModel):
    low_budget: bool = True
    over_budget: bool = True
    threshold: int = Field(default=80, ge=0, le=100)


class BudgetFields(BaseModel):
    """Client-editable budget attributes."""

    title: str = Field(..., min_length=3, max_length=100)
    description: str = Field(default="", max_length=500)
    total_budget: Money
    items: list[BudgetItem] = []
    categories: list[BudgetCategory] = []
    is_active: bool = True
    start_date: UtcDateTime | None = None
    end_date: UtcDateTime | None = None
    alerts: BudgetAlerts = Field(default_factory=BudgetAlerts)


class Budget(Document, BudgetFields):
    trip: str
    total_income: Money = Field(default_factory=Money)
    total_expenses: Money = Field(default_factory=Money)

    def before_save(self) -> None:
        currency = self.total_budget.currency
        income = sum(item.amount for item in self.items if item.type == "Income")
        expenses = sum(item.amount for item in self.items if item.type == "Expense")
        self.total_income = Money(amount=income, currency=currency)
        self.total_expenses = Money(amount=expenses, currency=currency)

        spent: dict[str, float] = defaultdict(float)
        for item in self.items:
            if item.type == "Expense":
                spent[item.category] += item.amount
        for category in self.categories:
            category.spent = spent.get(category.name, 0.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_budget(self) -> float:
        return self.total_budget.amount - self.total_expenses.amount

    @computed_field  # type: ignore[prop-decorator]
    @property
    def budget_utilization(self) -> int:
        return percentage(self.total_expenses.amount, self.total_budget.amount)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def net_amount(self) -> float:
        return self.total_income.amount - self.total_expenses.amount

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_items(self) -> int:
        return len(self.items)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def paid_items(self) -> int:
        return sum(1 for item in self.items if item.is_paid)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def payment_progress(self) -> int:
        return percentage(self.paid_items, self.total_items)
