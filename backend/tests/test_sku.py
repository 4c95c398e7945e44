from datetime import date

import pytest

from backend.app.db.models.models_v1 import Product
from backend.services.sku import generate_sku, parse_sku, sku_prefix, validate_sku

DAY = date(2025, 3, 7)


def test_prefix_uses_first_three_letters():
    assert sku_prefix("riz parfumé", DAY) == "RIZ-250307"


def test_prefix_rejects_short_names():
    with pytest.raises(ValueError):
        sku_prefix("ab", DAY)


def test_first_sku_of_the_day(db_session):
    assert generate_sku(db_session, "Riz parfumé", DAY) == "RIZ-250307-00001"


def test_sku_sequence_increments(db_session):
    db_session.add_all(
        [
            Product(sku="RIZ-250307-00001", name="Riz 1"),
            Product(sku="RIZ-250307-00002", name="Riz 2"),
            Product(sku="HUI-250307-00009", name="Huile"),
        ]
    )
    db_session.commit()

    assert generate_sku(db_session, "Riz rouge", DAY) == "RIZ-250307-00003"


def test_validate_and_parse():
    assert validate_sku("RIZ-250307-00003")
    assert not validate_sku("riz-250307-3")

    parsed = parse_sku("RIZ-250307-00003")
    assert parsed == {"product_letters": "RIZ", "date": "250307", "sequence": 3}

    with pytest.raises(ValueError):
        parse_sku("RIZ250307")
