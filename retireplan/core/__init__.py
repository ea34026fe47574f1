"""
Projection core.

Pure functions of a PlanningInputs snapshot:
- compute_readiness: target / projected corpus, readiness ratio, required savings
- compute_protection_gap: recommended life and critical-illness cover
- compute_trajectory: deterministic year-by-year wealth path
- run_monte_carlo: probability that wealth lasts through retirement

ProjectionEngine wraps them with memoization and stale-result discarding.
"""

from .inputs import PlanningInputs, Goal, InvalidInputError
from .loans import (
    Loan,
    monthly_payment,
    total_monthly_payment,
    amortization_schedule,
    debt_service_ratio,
    needs_refinance,
    DSR_WARNING_THRESHOLD,
)
from .tvm import (
    future_value,
    future_value_of_series,
    present_value_of_annuity,
    required_level_contribution,
)
from .goals import GoalBook
from .readiness import ReadinessResult, compute_readiness
from .protection import ProtectionAssumptions, ProtectionGap, DEFAULT_PROTECTION, compute_protection_gap
from .trajectory import TrajectoryPoint, compute_trajectory, trajectory_frame, depletion_age
from .monte_carlo import MonteCarloResult, run_monte_carlo
from .engine import ProjectionEngine, ProjectionResult

__all__ = [
    # Inputs
    "PlanningInputs",
    "Goal",
    "InvalidInputError",
    "GoalBook",
    # Time value / loans
    "future_value",
    "future_value_of_series",
    "present_value_of_annuity",
    "required_level_contribution",
    "Loan",
    "monthly_payment",
    "total_monthly_payment",
    "amortization_schedule",
    "debt_service_ratio",
    "needs_refinance",
    "DSR_WARNING_THRESHOLD",
    # Projections
    "ReadinessResult",
    "compute_readiness",
    "ProtectionAssumptions",
    "ProtectionGap",
    "DEFAULT_PROTECTION",
    "compute_protection_gap",
    "TrajectoryPoint",
    "compute_trajectory",
    "trajectory_frame",
    "depletion_age",
    "MonteCarloResult",
    "run_monte_carlo",
    # Engine
    "ProjectionEngine",
    "ProjectionResult",
]
