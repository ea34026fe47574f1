# retireplan/core/engine.py
"""
Projection engine: the single entry point a host (CLI, UI) talks to.

Module-level functions are the pure projections. ProjectionEngine adds two
things a recompute-on-change host needs:

- memoization keyed by only the fields each projection reads, so e.g.
  renaming a goal never reruns the Monte Carlo simulation
- stale-result discarding: `submit()` runs a projection in the background and
  only publishes it as `latest` if no newer snapshot was submitted meanwhile
"""

from __future__ import annotations
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple

from .inputs import PlanningInputs
from .loans import total_monthly_payment
from .monte_carlo import MonteCarloResult, run_monte_carlo
from .protection import DEFAULT_PROTECTION, ProtectionAssumptions, ProtectionGap, compute_protection_gap
from .readiness import ReadinessResult, compute_readiness
from .trajectory import TrajectoryPoint, compute_trajectory

logger = logging.getLogger(__name__)

__all__ = [
    "compute_readiness",
    "compute_protection_gap",
    "compute_trajectory",
    "run_monte_carlo",
    "ProjectionResult",
    "ProjectionEngine",
]

# ---------- fields each projection consumes ----------

_CASHFLOW_FIELDS = (
    "current_age", "retirement_age", "life_expectancy",
    "inflation_rate", "pre_retirement_return", "post_retirement_return",
    "current_assets", "current_debt", "current_monthly_savings", "contribution_rate",
)


def _cashflow_key(inputs: PlanningInputs) -> tuple:
    # incomes/expenses enter only through their totals
    return tuple(getattr(inputs, f) for f in _CASHFLOW_FIELDS) + (
        inputs.annual_income, inputs.monthly_expense,
    )


def readiness_key(inputs: PlanningInputs) -> tuple:
    goals = tuple((g.target_amount, g.target_year) for g in inputs.goals)
    return _cashflow_key(inputs) + (goals, inputs.year_now)


def trajectory_key(inputs: PlanningInputs) -> tuple:
    return _cashflow_key(inputs)


def monte_carlo_key(inputs: PlanningInputs) -> tuple:
    return _cashflow_key(inputs) + (
        inputs.first_year_shock,
        inputs.pre_retirement_volatility,
        inputs.post_retirement_volatility,
        inputs.trial_count,
    )


def protection_key(inputs: PlanningInputs) -> tuple:
    return (
        inputs.annual_income, inputs.monthly_expense, inputs.net_current_assets,
        tuple(loan.principal for loan in inputs.loans),
        inputs.existing_life_cover, inputs.existing_ci_cover,
    )


def loans_key(inputs: PlanningInputs) -> tuple:
    return inputs.loans


# ---------- result bundle ----------

@dataclass(frozen=True)
class ProjectionResult:
    readiness: ReadinessResult
    protection: ProtectionGap
    trajectory: List[TrajectoryPoint]
    monte_carlo: MonteCarloResult
    # one (label, monthly payment) entry per loan, in input order; labels may repeat
    loan_payments: Tuple[Tuple[str, float], ...] = ()

    @property
    def total_loan_payment(self) -> float:
        return sum(pmt for _, pmt in self.loan_payments)


class ProjectionEngine:
    def __init__(self,
                 protection: ProtectionAssumptions = DEFAULT_PROTECTION,
                 seed: Optional[int] = None,
                 workers: int = 1,
                 cache_size: int = 32):
        self.protection_assumptions = protection
        self.seed = seed
        self.workers = workers
        self.cache_size = cache_size

        self._caches: Dict[str, OrderedDict] = {}
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[ProjectionResult] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self.computations: Dict[str, int] = {}  # cache misses per projection

    # ---------- memoization ----------

    def _memo(self, name: str, key: tuple, compute: Callable):
        with self._lock:
            cache = self._caches.setdefault(name, OrderedDict())
            if key in cache:
                cache.move_to_end(key)
                return cache[key]

        value = compute()

        with self._lock:
            self.computations[name] = self.computations.get(name, 0) + 1
            cache[key] = value
            while len(cache) > self.cache_size:
                cache.popitem(last=False)
        return value

    def clear_cache(self):
        with self._lock:
            self._caches.clear()

    # ---------- projections ----------

    def readiness(self, inputs: PlanningInputs) -> ReadinessResult:
        return self._memo("readiness", readiness_key(inputs), lambda: compute_readiness(inputs))

    def protection_gap(self, inputs: PlanningInputs) -> ProtectionGap:
        return self._memo("protection", protection_key(inputs),
                          lambda: compute_protection_gap(inputs, self.protection_assumptions))

    def trajectory(self, inputs: PlanningInputs) -> List[TrajectoryPoint]:
        return self._memo("trajectory", trajectory_key(inputs), lambda: compute_trajectory(inputs))

    def monte_carlo(self, inputs: PlanningInputs) -> MonteCarloResult:
        return self._memo("monte_carlo", monte_carlo_key(inputs),
                          lambda: run_monte_carlo(inputs, seed=self.seed, workers=self.workers))

    def loan_payments(self, inputs: PlanningInputs) -> Tuple[Tuple[str, float], ...]:
        def compute():
            payments = tuple((loan.label, loan.monthly_payment) for loan in inputs.loans)
            logger.debug("loan payments: total %.2f/month", total_monthly_payment(inputs.loans))
            return payments
        return self._memo("loans", loans_key(inputs), compute)

    def project(self, inputs: PlanningInputs) -> ProjectionResult:
        """Compute every projection for one snapshot (synchronously)."""
        return ProjectionResult(
            readiness=self.readiness(inputs),
            protection=self.protection_gap(inputs),
            trajectory=self.trajectory(inputs),
            monte_carlo=self.monte_carlo(inputs),
            loan_payments=self.loan_payments(inputs),
        )

    # ---------- recompute-on-change ----------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest(self) -> Optional[ProjectionResult]:
        """Most recent result whose snapshot had not been superseded."""
        return self._latest

    def _publish(self, generation: int, result: ProjectionResult) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.debug("discarding stale projection (generation %d < %d)", generation, self._generation)
                return False
            self._latest = result
            return True

    def update(self, inputs: PlanningInputs) -> ProjectionResult:
        """New snapshot: recompute now and publish."""
        with self._lock:
            self._generation += 1
            gen = self._generation
        result = self.project(inputs)
        self._publish(gen, result)
        return result

    def submit(self, inputs: PlanningInputs) -> Tuple[int, Future]:
        """
        New snapshot computed in the background. Returns (generation, future).
        The future always yields its own result; `latest` only takes it if no
        newer snapshot arrived while it ran.
        """
        with self._lock:
            self._generation += 1
            gen = self._generation
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="projection")
        logger.info("projection generation %d submitted", gen)

        def job():
            result = self.project(inputs)
            self._publish(gen, result)
            return result

        return gen, self._executor.submit(job)

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
