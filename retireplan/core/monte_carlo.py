# retireplan/core/monte_carlo.py
"""
Monte Carlo estimate of the probability that retirement wealth lasts.

Each trial replays the deterministic trajectory with random annual returns:
- accumulation years draw from Normal(pre_retirement_return, pre_retirement_volatility)
- decumulation years draw from Normal(post_retirement_return, post_retirement_volatility)
- the very first year, if still accumulating, also takes a one-off market
  shock: wealth *= (1 + first_year_shock) after growth and contribution

A trial fails the first time decumulation wealth reaches <= 0 and is not
evaluated any further. success_probability = surviving trials / trials.

Trials are vectorized over a numpy array per year. With workers > 1 the
trials are split into chunks with independent child seeds, run in a process
pool, and the per-chunk counts are summed.

The random source is injectable (numpy Generator or seed) so runs are
reproducible.
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
import logging
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .inputs import PlanningInputs
from .trajectory import retirement_withdrawal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonteCarloResult:
    success_probability: float
    trial_count: int
    successes: int
    failure_ages: pd.Series = field(default_factory=lambda: pd.Series(dtype="int64"), compare=False)

    @property
    def ruin_probability(self) -> float:
        if self.trial_count <= 0:
            return 0.0
        return 1.0 - self.success_probability


def standard_normal(rng: np.random.Generator, size: int) -> np.ndarray:
    """
    Basic (trigonometric) Box-Muller transform of two uniforms drawn from
    (0, 1]: sqrt(-2 ln u1) * cos(2 pi u2). One normal per pair of uniforms.
    Not the Marsaglia polar method; switching would change the random stream.
    """
    # Generator.random is [0, 1); flip it so log() never sees 0
    u1 = 1.0 - rng.random(size)
    u2 = 1.0 - rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def sample_returns(rng: np.random.Generator, mean: float, stdev: float, size: int) -> np.ndarray:
    return mean + stdev * standard_normal(rng, size)


def simulate_trials(inputs: PlanningInputs, n_trials: int,
                    rng: np.random.Generator) -> Tuple[int, np.ndarray]:
    """
    Run `n_trials` trials. Returns (successes, failure ages of failed trials).

    Every trial draws a return every year, including failed ones, so the same
    generator state gives comparable paths across input changes.
    """
    wealth = np.full(n_trials, inputs.net_current_assets, dtype=float)
    alive = np.ones(n_trials, dtype=bool)
    failed_at = np.full(n_trials, -1, dtype=np.int64)
    savings = inputs.annual_savings

    for y in range(inputs.life_expectancy - inputs.current_age + 1):
        age = inputs.current_age + y
        if age < inputs.retirement_age:
            r = sample_returns(rng, inputs.pre_retirement_return, inputs.pre_retirement_volatility, n_trials)
            wealth = wealth * (1.0 + r) + savings
            if y == 0:
                wealth *= 1.0 + inputs.first_year_shock
        else:
            r = sample_returns(rng, inputs.post_retirement_return, inputs.post_retirement_volatility, n_trials)
            wealth = wealth * (1.0 + r) - retirement_withdrawal(inputs, age)
            newly_failed = alive & (wealth <= 0.0)
            failed_at[newly_failed] = age
            alive &= ~newly_failed
            wealth[~alive] = 0.0

    return int(alive.sum()), failed_at[~alive]


def _run_chunk(args) -> Tuple[int, np.ndarray]:
    inputs, n_trials, seed_seq = args
    return simulate_trials(inputs, n_trials, np.random.default_rng(seed_seq))


def _split(n: int, parts: int) -> List[int]:
    base, extra = divmod(n, parts)
    return [base + (1 if i < extra else 0) for i in range(parts)]


def run_monte_carlo(inputs: PlanningInputs,
                    rng: Optional[np.random.Generator] = None,
                    seed: Optional[int] = None,
                    workers: int = 1) -> MonteCarloResult:
    n = int(inputs.trial_count)
    if n <= 0:
        return MonteCarloResult(success_probability=0.0, trial_count=0, successes=0)

    workers = max(1, min(int(workers), n))
    if workers == 1:
        if rng is None:
            rng = np.random.default_rng(seed)
        successes, fail_ages = simulate_trials(inputs, n, rng)
    else:
        if rng is not None:
            root = np.random.SeedSequence(int(rng.integers(0, 2**63 - 1)))
        else:
            root = np.random.SeedSequence(seed)
        chunks = [(inputs, size, child)
                  for size, child in zip(_split(n, workers), root.spawn(workers))]
        with ProcessPoolExecutor(max_workers=workers) as pool:
            parts = list(pool.map(_run_chunk, chunks))
        successes = sum(s for s, _ in parts)
        fail_ages = np.concatenate([a for _, a in parts])

    failure_ages = pd.Series(fail_ages, dtype="int64").value_counts().sort_index()
    failure_ages.index.name = "age"
    failure_ages.name = "failures"

    prob = successes / n
    logger.info("monte carlo: %d trials, %d workers, success %.1f%%", n, workers, prob * 100)
    return MonteCarloResult(
        success_probability=prob,
        trial_count=n,
        successes=successes,
        failure_ages=failure_ages,
    )
