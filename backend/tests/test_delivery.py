from datetime import date

from backend.app.db.models.core_types import DeliveryState
from backend.services.delivery import compute_progress


def test_no_expected_date_gives_no_progress():
    assert compute_progress(date(2025, 1, 1), None) is None


def test_progress_midway():
    p = compute_progress(date(2025, 1, 1), date(2025, 1, 21), today=date(2025, 1, 11))

    assert p.total_days == 20
    assert p.days_elapsed == 10
    assert p.days_remaining == 10
    assert p.percentage == 50.0
    assert p.status == DeliveryState.normal
    assert p.label == "10 jours restants"
    assert p.short_label == "10j"


def test_warning_within_three_days():
    p = compute_progress(date(2025, 1, 1), date(2025, 1, 21), today=date(2025, 1, 18))

    assert p.status == DeliveryState.warning
    assert p.label == "3 jours restants"


def test_due_today():
    p = compute_progress(date(2025, 1, 1), date(2025, 1, 21), today=date(2025, 1, 21))

    assert p.percentage == 100.0
    assert p.status == DeliveryState.warning
    assert p.short_label == "Aujourd'hui"


def test_overdue_is_capped_at_100():
    p = compute_progress(date(2025, 1, 1), date(2025, 1, 21), today=date(2025, 1, 22))

    assert p.percentage == 100.0
    assert p.status == DeliveryState.overdue
    assert p.label == "1 jour en retard"
    assert p.short_label == "1j en retard"
    assert p.title == "Date de livraison dépassée"


def test_order_date_in_future_is_zero_percent():
    p = compute_progress(date(2025, 2, 1), date(2025, 2, 11), today=date(2025, 1, 25))

    assert p.percentage == 0.0
    assert p.status == DeliveryState.normal


def test_expected_before_order_date():
    p = compute_progress(date(2025, 1, 10), date(2025, 1, 5), today=date(2025, 1, 12))

    assert p.total_days == -5
    assert p.percentage == 100.0
    assert p.status == DeliveryState.overdue
