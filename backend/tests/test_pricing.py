from decimal import Decimal

from backend.services.pricing import (
    PricedLine,
    clamp_price,
    floor_price,
    reprice_on_rate_change,
    restate_price,
    transit_share,
)


def test_floor_without_rate_is_order_price_plus_share():
    assert floor_price("1000", None, "250") == Decimal("1250.00")


def test_floor_with_exchange_rate():
    # 12.50 EUR × 4800 + 300 MGA de transport
    assert floor_price("12.50", "4800", "300") == Decimal("60300.00")


def test_missing_price_gives_no_floor():
    assert floor_price(None, "4800", "300") is None
    assert restate_price("") is None


def test_non_positive_rate_is_ignored():
    assert restate_price("10", "0") == Decimal("10.00")
    assert restate_price("10", "-2") == Decimal("10.00")


def test_transit_share_split_per_item_line():
    assert transit_share("675000", 4) == Decimal("168750.00")
    assert transit_share("100", 3) == Decimal("33.33")


def test_transit_share_missing_inputs_is_zero():
    assert transit_share(None, 4) == Decimal("0.00")
    assert transit_share("1000", 0) == Decimal("0.00")


def test_clamp_raises_price_below_floor():
    price, adjusted = clamp_price("900", Decimal("1250.00"))
    assert price == Decimal("1250.00")
    assert adjusted is True


def test_clamp_keeps_price_above_floor():
    price, adjusted = clamp_price("1500", Decimal("1250.00"))
    assert price == Decimal("1500.00")
    assert adjusted is False


def test_clamp_without_floor_keeps_entered_price():
    assert clamp_price("12", None) == (Decimal("12.00"), False)
    assert clamp_price(None, None) == (None, False)


def test_clamp_missing_entry_uses_floor():
    assert clamp_price(None, "50") == (Decimal("50.00"), True)


def test_rate_change_moves_lines_at_floor():
    lines = [
        PricedLine(order_unit_price=Decimal("10"), unit_price=Decimal("40100.00"), quantity=2),
    ]
    out = reprice_on_rate_change(lines, "4000", "4500", "100")

    assert out[0].unit_price == Decimal("45100.00")
    assert out[0].adjusted is False
    assert out[0].total_price == Decimal("90200.00")


def test_rate_change_keeps_manual_price_above_new_floor():
    lines = [PricedLine(order_unit_price=Decimal("10"), unit_price=Decimal("50000.00"), quantity=1)]
    out = reprice_on_rate_change(lines, "4000", "4500", "100")

    assert out[0].unit_price == Decimal("50000.00")
    assert out[0].adjusted is False


def test_rate_change_raises_manual_price_below_new_floor():
    lines = [PricedLine(order_unit_price=Decimal("10"), unit_price=Decimal("42000.00"), quantity=1)]
    out = reprice_on_rate_change(lines, "4000", "4500", "100")

    assert out[0].unit_price == Decimal("45100.00")
    assert out[0].adjusted is True


def test_rate_cleared_drops_floor_and_restores_order_price():
    lines = [PricedLine(order_unit_price=Decimal("10"), unit_price=Decimal("45100.00"), quantity=1)]
    out = reprice_on_rate_change(lines, "4500", None, "100")

    # prix en devise étrangère : la quote-part MGA n'est pas ajoutée
    assert out[0].unit_price == Decimal("10.00")
    assert out[0].adjusted is False


def test_first_rate_moves_order_price_to_floor():
    lines = [PricedLine(order_unit_price=Decimal("10"), unit_price=Decimal("10.00"), quantity=3)]
    out = reprice_on_rate_change(lines, None, "4500", "100")

    assert out[0].unit_price == Decimal("45100.00")
    assert out[0].total_price == Decimal("135300.00")
