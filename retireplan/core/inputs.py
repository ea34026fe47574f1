# retireplan/core/inputs.py
"""
Planning inputs: one immutable snapshot of everything the projections need.

The engine trusts these values. Hosts (config loader, CLI) call
`PlanningInputs.validate()` before handing a snapshot to the engine.
"""

from dataclasses import dataclass, fields, replace
import datetime
import math
from typing import Optional, Tuple

from .loans import Loan, debt_service_ratio
from .tvm import future_value


class InvalidInputError(ValueError):
    """A planning input violates its type, sign or ordering contract."""


@dataclass(frozen=True)
class Goal:
    """A one-off spending goal in today's money, due in `target_year`."""

    goal_id: str
    label: str
    target_amount: float
    target_year: int
    priority: int = 5  # ordering hint only; higher = more important

    def to_dict(self) -> dict:
        return {
            "goal_id": self.goal_id,
            "label": self.label,
            "target_amount": self.target_amount,
            "target_year": self.target_year,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        return cls(
            goal_id=str(data["goal_id"]),
            label=data.get("label", ""),
            target_amount=float(data.get("target_amount", 0.0)),
            target_year=int(data["target_year"]),
            priority=int(data.get("priority", 5)),
        )


@dataclass(frozen=True)
class PlanningInputs:
    # Demographics
    current_age: int
    retirement_age: int
    life_expectancy: int

    # Economic assumptions (decimals)
    inflation_rate: float = 0.03
    pre_retirement_return: float = 0.06
    post_retirement_return: float = 0.035

    # Monthly cash flow
    monthly_primary_income: float = 0.0
    monthly_secondary_income: float = 0.0
    monthly_basic_expense: float = 0.0
    monthly_health_expense: float = 0.0
    monthly_lifestyle_expense: float = 0.0

    # Balance sheet
    current_assets: float = 0.0
    current_debt: float = 0.0
    current_monthly_savings: float = 0.0
    contribution_rate: float = 0.0  # fraction of annual income to the retirement account

    loans: Tuple[Loan, ...] = ()
    goals: Tuple[Goal, ...] = ()

    # Insurance already held
    existing_life_cover: float = 0.0
    existing_ci_cover: float = 0.0

    # Scenario controls
    first_year_shock: float = 0.0
    pre_retirement_volatility: float = 0.0
    post_retirement_volatility: float = 0.0
    trial_count: int = 500

    as_of_year: Optional[int] = None  # None = this calendar year

    def __post_init__(self):
        # accept lists from callers / YAML but store hashable tuples
        object.__setattr__(self, "loans", tuple(self.loans))
        object.__setattr__(self, "goals", tuple(self.goals))

    # ---------- derived quantities ----------

    @property
    def annual_income(self) -> float:
        return (self.monthly_primary_income + self.monthly_secondary_income) * 12

    @property
    def monthly_income(self) -> float:
        return self.monthly_primary_income + self.monthly_secondary_income

    @property
    def monthly_expense(self) -> float:
        return self.monthly_basic_expense + self.monthly_health_expense + self.monthly_lifestyle_expense

    @property
    def expense_to_income_ratio(self) -> float:
        """Monthly expenses over monthly income (0 when there is no income)."""
        if self.monthly_income <= 0:
            return 0.0
        return self.monthly_expense / self.monthly_income

    @property
    def debt_service_ratio(self) -> float:
        return debt_service_ratio(self.loans, self.monthly_income)

    @property
    def annual_expense_today(self) -> float:
        return self.monthly_expense * 12

    @property
    def net_current_assets(self) -> float:
        return max(self.current_assets - self.current_debt, 0.0)

    @property
    def annual_savings(self) -> float:
        """Own savings plus the employer/employee contribution proxy."""
        return self.current_monthly_savings * 12 + self.annual_income * self.contribution_rate

    @property
    def years_to_retire(self) -> int:
        return max(self.retirement_age - self.current_age, 0)

    @property
    def years_in_retirement(self) -> int:
        return max(self.life_expectancy - self.retirement_age, 0)

    @property
    def annual_expense_at_retirement(self) -> float:
        return future_value(self.annual_expense_today, self.inflation_rate, self.years_to_retire)

    @property
    def year_now(self) -> int:
        if self.as_of_year is not None:
            return self.as_of_year
        return datetime.date.today().year

    # ---------- copying / conversion ----------

    def replace(self, **changes) -> "PlanningInputs":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("loans", "goals"):
                value = [item.to_dict() for item in value]
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "PlanningInputs":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidInputError(f"Unknown planning fields: {', '.join(sorted(unknown))}")
        kwargs = dict(data)
        kwargs["loans"] = tuple(Loan.from_dict(d) for d in data.get("loans") or [])
        kwargs["goals"] = tuple(Goal.from_dict(d) for d in data.get("goals") or [])
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise InvalidInputError(str(e)) from e

    # ---------- host-side validation ----------

    def validate(self) -> "PlanningInputs":
        """Raise InvalidInputError on the first broken contract; return self."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                if not math.isfinite(value):
                    raise InvalidInputError(f"{f.name} must be a finite number, got {value!r}")

        if self.current_age < 0:
            raise InvalidInputError("current_age must be >= 0")
        if not (self.current_age <= self.retirement_age <= self.life_expectancy):
            raise InvalidInputError(
                "ages must satisfy current_age <= retirement_age <= life_expectancy "
                f"(got {self.current_age}, {self.retirement_age}, {self.life_expectancy})"
            )

        non_negative = (
            "monthly_primary_income", "monthly_secondary_income",
            "monthly_basic_expense", "monthly_health_expense", "monthly_lifestyle_expense",
            "current_assets", "current_debt", "current_monthly_savings", "contribution_rate",
            "existing_life_cover", "existing_ci_cover",
            "pre_retirement_volatility", "post_retirement_volatility",
        )
        for name in non_negative:
            if getattr(self, name) < 0:
                raise InvalidInputError(f"{name} must be >= 0")

        for rate_name in ("inflation_rate", "pre_retirement_return", "post_retirement_return", "first_year_shock"):
            if getattr(self, rate_name) < -1:
                raise InvalidInputError(f"{rate_name} must be >= -1")

        for loan in self.loans:
            if loan.principal < 0 or loan.term_years < 0:
                raise InvalidInputError(f"loan {loan.label!r} has a negative principal or term")
            if loan.principal > 0 and loan.term_years == 0:
                raise InvalidInputError(f"loan {loan.label!r} needs a term to amortize")

        seen = set()
        for goal in self.goals:
            if goal.goal_id in seen:
                raise InvalidInputError(f"duplicate goal id {goal.goal_id!r}")
            seen.add(goal.goal_id)
            if goal.target_amount < 0:
                raise InvalidInputError(f"goal {goal.label!r} has a negative target")

        if self.trial_count < 0:
            raise InvalidInputError("trial_count must be >= 0")
        return self
