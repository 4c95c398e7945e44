from decimal import Decimal

from frontend.receipts import apply_rate


def _line(order_price, transit_cost, qty=1):
    return {
        "order_unit_price": order_price,
        "unit_price": order_price,
        "transit_cost": transit_cost,
        "floor_price": None,
        "quantity_received": qty,
    }


def test_rate_uses_each_line_transit_cost():
    lines = [_line(10.0, 100.0), _line(2.0, 250.0, qty=4)]

    apply_rate(lines, None, Decimal("4500"))

    assert [ln["floor_price"] for ln in lines] == [45100.0, 9250.0]
    assert [ln["unit_price"] for ln in lines] == [45100.0, 9250.0]


def test_clearing_rate_removes_floor():
    lines = [_line(10.0, 100.0)]
    apply_rate(lines, None, Decimal("4500"))

    apply_rate(lines, Decimal("4500"), None)

    assert lines[0]["floor_price"] is None
    assert lines[0]["unit_price"] == 10.0
