import pytest

from conftest import make_layout, make_zone
from schemas import Equipment, Zone
from services.spatial.budget import budget_items, budget_summary, budget_to_csv, format_currency


def test_budget_totals(lab_layout):
    summary = budget_summary(lab_layout)
    assert summary.total_cost == 250
    assert summary.cost_by_category == {"safety": 200, "furniture": 50}
    assert summary.cost_by_zone == {"z-wet-lab": 200, "z-office": 50}
    assert sum(summary.cost_by_category.values()) == summary.total_cost
    assert sum(summary.cost_by_zone.values()) == summary.total_cost
    assert summary.item_count == 2


def test_string_equipment_contributes_nothing():
    layout = make_layout(make_zone("Store", 0, 0, 2, 2, equipment=["shelf", "cart"]))
    summary = budget_summary(layout)
    assert summary.total_cost == 0
    assert summary.items == []


def test_equipment_defaults_and_legacy_price_key():
    zone = Zone.model_validate({
        "name": "Lab",
        "position": {"x": 0, "y": 0},
        "size": {"width": 2, "height": 2},
        "equipment": [{"name": "Centrifuge", "price": 100, "quantity": 2}, {"name": "Pipette", "unitPrice": 5}],
    })
    first, second = zone.equipment
    assert first.unit_price == 100
    assert first.category == "utilities"
    assert second.quantity == 1
    assert second.total_price == 5


def test_items_carry_zone():
    layout = make_layout(make_zone("Bench", 0, 0, 2, 2, equipment=[
        Equipment(name="Scope", category="optics", unit_price=300, quantity=1, equipment_id="eq-1"),
    ]))
    item = budget_items(layout)[0]
    assert (item.zone_id, item.zone_name, item.equipment_id) == ("z-bench", "Bench", "eq-1")


@pytest.mark.parametrize(
    "amount, currency, expected",
    [(1234.4, "USD", "$1,234"), (250, "EUR", "€250"), (99, "CNY", "¥99")],
)
def test_format_currency(amount, currency, expected):
    assert format_currency(amount, currency) == expected


def test_csv_export(lab_layout):
    text = budget_to_csv(budget_summary(lab_layout))
    lines = text.strip().splitlines()
    assert lines[0] == '"Equipment","Category","Zone","Quantity","Unit Price","Total Price"'
    assert lines[1] == '"Fume Hood","safety","Wet Lab","2","100.00","200.00"'
    assert lines[-1] == '"Total","","","","","250.00"'
