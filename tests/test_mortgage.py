import pytest

from zipreach.domain import mortgage
from zipreach.domain.mortgage import (
    MAX_PRICE_ITERATIONS,
    calculate_full_monthly_payment,
    calculate_max_home_price,
    calculate_monthly_payment,
    get_effective_max_price,
)
from conftest import make_inputs


# ----------------------------
# calculate_monthly_payment
# ----------------------------

def test_standard_30_year_payment():
    # $200k at 6.5% for 30 years is about $1,264/month
    assert calculate_monthly_payment(200_000, 6.5, 30) == pytest.approx(1264.14, abs=0.5)


def test_standard_15_year_payment():
    assert calculate_monthly_payment(200_000, 6.5, 15) == pytest.approx(1742.21, abs=0.5)


def test_15_year_costs_more_monthly_but_less_in_total():
    monthly15 = calculate_monthly_payment(200_000, 6.5, 15)
    monthly30 = calculate_monthly_payment(200_000, 6.5, 30)
    assert monthly15 > monthly30
    assert monthly15 * 15 * 12 < monthly30 * 30 * 12


@pytest.mark.parametrize("principal", [0, -50_000])
def test_non_positive_principal_pays_nothing(principal):
    assert calculate_monthly_payment(principal, 6.5, 30) == 0


def test_zero_rate_is_straight_line():
    assert calculate_monthly_payment(120_000, 0, 30) == pytest.approx(333.33, abs=0.01)


def test_negative_rate_is_straight_line():
    assert calculate_monthly_payment(120_000, -1, 15) == pytest.approx(120_000 / 180)


def test_very_low_rate_is_close_to_straight_line():
    payment = calculate_monthly_payment(200_000, 0.5, 30)
    assert 0 < payment < 200_000 / 360 * 1.5


# ----------------------------
# calculate_full_monthly_payment
# ----------------------------

def test_full_payment_components_sum_to_total():
    result = calculate_full_monthly_payment(300_000, make_inputs(hoa_monthly=200))

    assert result.principal > 0
    assert result.tax == pytest.approx(300_000 * 0.011 / 12)
    assert result.insurance == pytest.approx(125)
    assert result.pmi == 0
    assert result.hoa == 200
    assert result.total == pytest.approx(
        result.principal + result.tax + result.insurance + result.pmi + result.hoa
    )


def test_pmi_below_twenty_percent_down():
    result = calculate_full_monthly_payment(300_000, make_inputs(down_payment_pct=10))
    # 270,000 * 0.007 / 12
    assert result.pmi == pytest.approx(157.5)


def test_pmi_drops_exactly_at_twenty_percent():
    at19 = calculate_full_monthly_payment(300_000, make_inputs(down_payment_pct=19))
    at20 = calculate_full_monthly_payment(300_000, make_inputs(down_payment_pct=20))
    assert at19.pmi > 0
    assert at20.pmi == 0


def test_higher_down_payment_lowers_principal_payment():
    low = calculate_full_monthly_payment(300_000, make_inputs(down_payment_pct=5))
    high = calculate_full_monthly_payment(300_000, make_inputs(down_payment_pct=40))
    assert high.principal < low.principal


def test_property_tax_scales_with_price():
    cheap = calculate_full_monthly_payment(100_000, make_inputs())
    expensive = calculate_full_monthly_payment(500_000, make_inputs())
    assert expensive.tax == pytest.approx(cheap.tax * 5)


# ----------------------------
# calculate_max_home_price
# ----------------------------

def test_max_price_reasonable_for_median_income():
    # $75k income at 28% is $1,750/month for housing
    price = calculate_max_home_price(make_inputs(annual_income=75_000))
    assert 200_000 < price < 400_000
    assert isinstance(price, int)


def test_max_price_lands_on_front_end_dti():
    inputs = make_inputs(annual_income=75_000, monthly_debts=250)
    price = calculate_max_home_price(inputs)
    total = calculate_full_monthly_payment(price, inputs).total
    dti = (total + inputs.monthly_debts) / (75_000 / 12)
    assert dti == pytest.approx(0.28, abs=1e-3)


@pytest.mark.parametrize("income", [None, 0, -10_000])
def test_max_price_zero_without_income(income):
    assert calculate_max_home_price(make_inputs(annual_income=income)) == 0


def test_max_price_zero_when_debts_eat_the_budget():
    # $50k at 28% is ~$1,167/month; $1,500 of debts leaves nothing
    assert calculate_max_home_price(make_inputs(annual_income=50_000, monthly_debts=1500)) == 0


def test_max_price_monotonic_in_income_dti_and_down_payment():
    assert calculate_max_home_price(make_inputs(annual_income=150_000)) > calculate_max_home_price(
        make_inputs(annual_income=50_000)
    )
    assert calculate_max_home_price(make_inputs(front_dti_pct=35)) > calculate_max_home_price(
        make_inputs(front_dti_pct=25)
    )
    assert calculate_max_home_price(make_inputs(down_payment_pct=30)) > calculate_max_home_price(
        make_inputs(down_payment_pct=5)
    )


def test_max_price_non_increasing_in_debts():
    prices = [calculate_max_home_price(make_inputs(monthly_debts=d)) for d in (0, 200, 500, 1000)]
    assert prices == sorted(prices, reverse=True)


def test_max_price_ignores_monthly_spending():
    plain = calculate_max_home_price(make_inputs())
    spender = calculate_max_home_price(make_inputs(monthly_spending=3000, include_spending=True))
    assert plain == spender


def test_max_price_solver_runs_fixed_iterations(monkeypatch):
    calls = []
    real = mortgage.calculate_full_monthly_payment

    def counting(price, inputs):
        calls.append(price)
        return real(price, inputs)

    monkeypatch.setattr(mortgage, "calculate_full_monthly_payment", counting)
    mortgage.calculate_max_home_price(make_inputs())

    assert len(calls) == MAX_PRICE_ITERATIONS
    assert all(0 <= p <= 75_000 * 10 for p in calls)


# ----------------------------
# get_effective_max_price
# ----------------------------

def test_effective_price_defaults_to_calculated():
    inputs = make_inputs()
    assert get_effective_max_price(inputs) == calculate_max_home_price(inputs)


def test_effective_price_uses_manual_override():
    inputs = make_inputs(use_manual_max_price=True, manual_max_price=500_000)
    assert get_effective_max_price(inputs) == 500_000


@pytest.mark.parametrize("manual", [None, 0])
def test_effective_price_ignores_empty_manual(manual):
    inputs = make_inputs(use_manual_max_price=True, manual_max_price=manual)
    assert get_effective_max_price(inputs) == calculate_max_home_price(inputs)


def test_effective_price_none_without_income():
    assert get_effective_max_price(make_inputs(annual_income=None)) is None


def test_manual_override_applies_without_income():
    inputs = make_inputs(annual_income=None, use_manual_max_price=True, manual_max_price=325_000)
    assert get_effective_max_price(inputs) == 325_000
