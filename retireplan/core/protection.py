# retireplan/core/protection.py
"""
Protection gap (life and critical-illness cover).

Rule-of-thumb heuristics, not actuarial pricing. A household whose monthly
spending is above `children_expense_threshold` is assumed to have dependent
children, which lengthens the income-replacement horizon and adds an
education reserve.
"""

from dataclasses import dataclass
import logging

from .inputs import PlanningInputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProtectionAssumptions:
    children_expense_threshold: float = 40_000
    replacement_years_with_children: int = 20
    replacement_years_without_children: int = 10
    min_replacement_years: int = 5
    max_replacement_years: int = 25
    education_reserve: float = 1_000_000
    ci_income_multiple: float = 3.0

    def __post_init__(self):
        if self.min_replacement_years > self.max_replacement_years:
            raise ValueError("min_replacement_years must be <= max_replacement_years")

    @classmethod
    def from_dict(cls, data: dict) -> "ProtectionAssumptions":
        return cls(**data)


DEFAULT_PROTECTION = ProtectionAssumptions()


@dataclass(frozen=True)
class ProtectionGap:
    recommended_life_cover: float
    recommended_ci_cover: float
    replacement_years: int = 0
    education_reserve: float = 0.0
    children_assumed: bool = False


def children_assumed(monthly_expense: float,
                     assumptions: ProtectionAssumptions = DEFAULT_PROTECTION) -> bool:
    return monthly_expense > assumptions.children_expense_threshold


def compute_protection_gap(inputs: PlanningInputs,
                           assumptions: ProtectionAssumptions = DEFAULT_PROTECTION) -> ProtectionGap:
    kids = children_assumed(inputs.monthly_expense, assumptions)
    years = (assumptions.replacement_years_with_children if kids
             else assumptions.replacement_years_without_children)
    years = min(max(years, assumptions.min_replacement_years), assumptions.max_replacement_years)
    education = assumptions.education_reserve if kids else 0.0

    income = inputs.annual_income
    loan_principal = sum(loan.principal for loan in inputs.loans)

    life_need = (income * years + loan_principal + education
                 - inputs.net_current_assets - inputs.existing_life_cover)
    ci_need = income * assumptions.ci_income_multiple - inputs.existing_ci_cover

    gap = ProtectionGap(
        recommended_life_cover=max(life_need, 0.0),
        recommended_ci_cover=max(ci_need, 0.0),
        replacement_years=years,
        education_reserve=education,
        children_assumed=kids,
    )
    logger.debug("protection gap: life=%.2f ci=%.2f (children=%s)",
                 gap.recommended_life_cover, gap.recommended_ci_cover, kids)
    return gap
