import pytest

from campaignflow.analytics.rates import conversion_rate, display_rate, response_rate


def test_response_rate_zero_denominators() -> None:
    assert response_rate(0, 0) == 0.0
    assert response_rate(5, 0) == 0.0
    assert response_rate(0, 1000) == 0.0


def test_conversion_rate_without_replies_is_zero() -> None:
    for appointments in (0, 3, 250):
        assert conversion_rate(appointments, 0) == 0.0


def test_rates_keep_full_precision() -> None:
    assert response_rate(1, 3) == pytest.approx(33.3333333)
    assert conversion_rate(3, 20) == pytest.approx(15.0)
    assert display_rate(response_rate(1, 3)) == 33.3
