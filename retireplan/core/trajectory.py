# retireplan/core/trajectory.py
"""
Deterministic year-by-year wealth path from current age to life expectancy.

Before retirement wealth compounds at the pre-retirement return and receives
the yearly savings. From the retirement age on it compounds at the
post-retirement return and the inflation-indexed expense is withdrawn.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

import pandas as pd

from .inputs import PlanningInputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrajectoryPoint:
    age: int
    wealth: float                        # end-of-year, clamped at 0
    withdrawal: Optional[float] = None   # only set in decumulation years

    @property
    def retired(self) -> bool:
        return self.withdrawal is not None


def retirement_withdrawal(inputs: PlanningInputs, age: int) -> float:
    """Expense drawn in the year the person is `age` (age >= retirement_age)."""
    return inputs.annual_expense_at_retirement * (1.0 + inputs.inflation_rate) ** (age - inputs.retirement_age)


def compute_trajectory(inputs: PlanningInputs) -> List[TrajectoryPoint]:
    wealth = inputs.net_current_assets
    savings = inputs.annual_savings
    points: List[TrajectoryPoint] = []

    for y in range(inputs.life_expectancy - inputs.current_age + 1):
        age = inputs.current_age + y
        if age < inputs.retirement_age:
            wealth = wealth * (1.0 + inputs.pre_retirement_return) + savings
            points.append(TrajectoryPoint(age=age, wealth=max(wealth, 0.0)))
        else:
            need = retirement_withdrawal(inputs, age)
            wealth = wealth * (1.0 + inputs.post_retirement_return) - need
            points.append(TrajectoryPoint(age=age, wealth=max(wealth, 0.0), withdrawal=need))

    logger.debug("trajectory: %d points, final wealth %.2f",
                 len(points), points[-1].wealth if points else 0.0)
    return points


def depletion_age(points: List[TrajectoryPoint]) -> Optional[int]:
    """First retirement age at which wealth is exhausted, None if it lasts."""
    for p in points:
        if p.retired and p.wealth <= 0:
            return p.age
    return None


def trajectory_frame(points: List[TrajectoryPoint]) -> pd.DataFrame:
    """Chart/CSV-ready table: age, wealth, withdrawal (NaN before retirement), phase."""
    df = pd.DataFrame({
        "age": [p.age for p in points],
        "wealth": [p.wealth for p in points],
        "withdrawal": [p.withdrawal if p.withdrawal is not None else float("nan") for p in points],
    })
    df["phase"] = ["decumulation" if p.retired else "accumulation" for p in points]
    return df
