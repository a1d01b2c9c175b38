from collections import defaultdict
from typing import Any

from core.models.budget import Budget, BudgetFields, BudgetItem
from core.models.common import percentage
from core.services import scoped
from core.services.scoped import TripScopedService


class BudgetService(TripScopedService[Budget]):
    noun = "Budget"
    fields_model = BudgetFields

    def add_item(self, budget_id: str, user_id: str, payload: Any, trip_id: str | None = None) -> Budget:
        return self._mutate(budget_id, user_id, lambda b: scoped.add_item(b.items, BudgetItem, payload), trip_id)

    def add_income(self, budget_id: str, user_id: str, payload: Any, trip_id: str | None = None) -> Budget:
        """Income is recorded as an ``Income`` item so it flows into the same totals."""
        data = dict(payload) if isinstance(payload, dict) else {}
        data.setdefault("category", "Other")
        data["type"] = "Income"
        return self.add_item(budget_id, user_id, data, trip_id)

    def update_item(
        self, budget_id: str, item_id: str, user_id: str, payload: Any, trip_id: str | None = None
    ) -> Budget:
        return self._mutate(budget_id, user_id, lambda b: scoped.update_item(b.items, item_id, payload), trip_id)

    def delete_item(self, budget_id: str, item_id: str, user_id: str, trip_id: str | None = None) -> Budget:
        return self._mutate(budget_id, user_id, lambda b: scoped.remove_item(b.items, item_id), trip_id)

    def toggle_paid(self, budget_id: str, item_id: str, user_id: str, trip_id: str | None = None) -> Budget:
        return self._mutate(
            budget_id, user_id, lambda b: scoped.toggle_flag(b.items, item_id, "is_paid"), trip_id
        )

    def get_stats(self, trip_id: str, user_id: str) -> dict[str, Any]:
        budgets = self.list_for_trip(trip_id, user_id)
        total_budget = sum(b.total_budget.amount for b in budgets)
        total_expenses = sum(b.total_expenses.amount for b in budgets)
        total_income = sum(b.total_income.amount for b in budgets)
        total_items = sum(b.total_items for b in budgets)
        paid_items = sum(b.paid_items for b in budgets)

        categories: dict[str, dict[str, float]] = defaultdict(lambda: {"budget": 0.0, "spent": 0.0})
        for budget in budgets:
            for category in budget.categories:
                categories[category.name]["budget"] += category.budget
                categories[category.name]["spent"] += category.spent

        return {
            "total_budgets": len(budgets),
            "total_budget": total_budget,
            "total_expenses": total_expenses,
            "total_income": total_income,
            "remaining_budget": total_budget - total_expenses + total_income,
            "budget_utilization": percentage(total_expenses, total_budget),
            "total_items": total_items,
            "paid_items": paid_items,
            "payment_progress": percentage(paid_items, total_items),
            "category_breakdown": dict(categories),
        }
