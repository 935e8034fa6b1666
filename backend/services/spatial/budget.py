"""Equipment budget aggregation over a layout."""

import csv
import io
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from schemas import Equipment, Layout

CURRENCY_SYMBOLS = {"USD": "$", "CNY": "¥", "EUR": "€"}


@dataclass
class BudgetItem:
    equipment_name: str
    category: str
    quantity: int
    unit_price: float
    total_price: float
    zone_id: str
    zone_name: str
    equipment_id: Optional[str] = None

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass
class BudgetSummary:
    total_cost: float = 0.0
    currency: str = "USD"
    cost_by_category: Dict[str, float] = field(default_factory=dict)
    cost_by_zone: Dict[str, float] = field(default_factory=dict)
    items: List[BudgetItem] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        return {
            "total_cost": self.total_cost,
            "currency": self.currency,
            "cost_by_category": dict(self.cost_by_category),
            "cost_by_zone": dict(self.cost_by_zone),
            "item_count": self.item_count,
            "items": [item.to_dict() for item in self.items],
        }


def budget_items(layout: Layout) -> List[BudgetItem]:
    """One line per structured equipment entry; legacy string entries are skipped."""
    items = []
    for zone in layout.zones:
        for equip in zone.equipment or []:
            if not isinstance(equip, Equipment):
                continue
            items.append(BudgetItem(
                equipment_name=equip.name,
                category=equip.category,
                quantity=equip.quantity,
                unit_price=equip.unit_price,
                total_price=equip.total_price,
                zone_id=zone.id,
                zone_name=zone.name,
                equipment_id=equip.equipment_id,
            ))
    return items


def budget_summary(layout: Layout, currency: str = "USD") -> BudgetSummary:
    """Total cost plus sums by equipment category and by zone id."""
    summary = BudgetSummary(currency=currency, items=budget_items(layout))
    for item in summary.items:
        summary.total_cost += item.total_price
        summary.cost_by_category[item.category] = (
            summary.cost_by_category.get(item.category, 0.0) + item.total_price
        )
        summary.cost_by_zone[item.zone_id] = (
            summary.cost_by_zone.get(item.zone_id, 0.0) + item.total_price
        )
    return summary


def format_currency(amount: float, currency: str = "USD") -> str:
    return f"{CURRENCY_SYMBOLS.get(currency, '')}{amount:,.0f}"


def budget_to_csv(summary: BudgetSummary) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["Equipment", "Category", "Zone", "Quantity", "Unit Price", "Total Price"])
    for item in summary.items:
        writer.writerow([
            item.equipment_name, item.category, item.zone_name, item.quantity,
            f"{item.unit_price:.2f}", f"{item.total_price:.2f}",
        ])
    writer.writerow([])
    writer.writerow(["Total", "", "", "", "", f"{summary.total_cost:.2f}"])
    return buf.getvalue()
