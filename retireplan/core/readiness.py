# retireplan/core/readiness.py
"""
Retirement readiness.

target corpus    - value at retirement of the inflation-adjusted annual
                   expense stream over the retirement horizon
projected corpus - net assets and future savings grown to retirement, less
                   goals that fall due before (or at) retirement
readiness ratio  - projected / target (>= 1 means fully funded)
"""

from dataclasses import dataclass
import logging

from .inputs import PlanningInputs
from .tvm import (
    future_value,
    future_value_of_series,
    present_value_of_annuity,
    required_level_contribution,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadinessResult:
    target_corpus: float
    projected_corpus: float
    readiness_ratio: float
    required_monthly_savings: float
    goal_spending: float = 0.0  # inflated goal cost deducted from the projection

    @property
    def shortfall(self) -> float:
        return max(self.target_corpus - self.projected_corpus, 0.0)

    @property
    def funded_fraction(self) -> float:
        """Readiness capped at 100% for display."""
        return min(self.readiness_ratio, 1.0)

    @property
    def is_ready(self) -> bool:
        return self.readiness_ratio >= 1.0


def goal_spending_before_retirement(inputs: PlanningInputs) -> float:
    """Inflated cost of every goal due on or before the retirement year."""
    now = inputs.year_now
    horizon = now + inputs.years_to_retire
    return sum(
        g.target_amount * (1.0 + inputs.inflation_rate) ** (g.target_year - now)
        for g in inputs.goals
        if g.target_year <= horizon
    )


def compute_readiness(inputs: PlanningInputs) -> ReadinessResult:
    n_acc = inputs.years_to_retire
    n_ret = inputs.years_in_retirement
    pre = inputs.pre_retirement_return

    target = present_value_of_annuity(
        inputs.annual_expense_at_retirement, inputs.post_retirement_return, n_ret
    )

    net_assets = inputs.net_current_assets
    goals_cost = goal_spending_before_retirement(inputs)
    projected = (
        future_value(net_assets, pre, n_acc)
        + future_value_of_series(inputs.annual_savings, pre, n_acc)
        - goals_cost
    )
    projected = max(projected, 0.0)

    # nothing to fund -> no shortfall is definable, count as fully funded
    ratio = projected / target if target > 0 else 1.0

    if n_acc > 0:
        required_annual = required_level_contribution(target, net_assets, pre, n_acc)
    else:
        # no saving years left; any gap shows up in `shortfall` instead
        required_annual = 0.0

    logger.debug("readiness: target=%.2f projected=%.2f ratio=%.4f", target, projected, ratio)
    return ReadinessResult(
        target_corpus=target,
        projected_corpus=projected,
        readiness_ratio=ratio,
        required_monthly_savings=required_annual / 12.0,
        goal_spending=goals_cost,
    )
