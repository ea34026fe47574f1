"""Shared planning snapshots for the test suite."""
import pytest

from retireplan.core.inputs import Goal, PlanningInputs
from retireplan.core.loans import Loan


@pytest.fixture
def golden_inputs():
    """Age 36 -> 60 -> 90, 70k income, 42k expenses, nothing saved yet."""
    return PlanningInputs(
        current_age=36,
        retirement_age=60,
        life_expectancy=90,
        inflation_rate=0.03,
        pre_retirement_return=0.06,
        post_retirement_return=0.035,
        monthly_primary_income=70_000,
        monthly_basic_expense=42_000,
        contribution_rate=0.05,
        as_of_year=2025,
    )


@pytest.fixture
def funded_inputs(golden_inputs):
    """Same household with 10M already invested at 40: wealth lasts to 90."""
    return golden_inputs.replace(current_age=40, current_assets=10_000_000)


@pytest.fixture
def household_inputs():
    """Full household: two incomes, loans, goals and existing cover."""
    return PlanningInputs(
        current_age=36,
        retirement_age=60,
        life_expectancy=90,
        inflation_rate=0.03,
        pre_retirement_return=0.06,
        post_retirement_return=0.035,
        monthly_primary_income=60_000,
        monthly_secondary_income=10_000,
        monthly_basic_expense=30_000,
        monthly_health_expense=4_000,
        monthly_lifestyle_expense=8_000,
        current_assets=500_000,
        current_debt=100_000,
        current_monthly_savings=5_000,
        contribution_rate=0.05,
        loans=[
            Loan("mortgage", 2_000_000, 0.055, 25),
            Loan("car", 400_000, 0.06, 5),
        ],
        goals=[
            Goal("g1", "Emergency fund", 120_000, 2025, 10),
            Goal("g2", "Travel", 80_000, 2026, 3),
        ],
        first_year_shock=-0.2,
        pre_retirement_volatility=0.10,
        post_retirement_volatility=0.05,
        trial_count=500,
        as_of_year=2025,
    )
