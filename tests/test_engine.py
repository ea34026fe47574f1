"""
Tests for the projection engine (memoization and stale-result handling).
"""
import pytest
from retireplan.core.engine import (
    ProjectionEngine,
    ProjectionResult,
    compute_protection_gap,
    compute_readiness,
    compute_trajectory,
    run_monte_carlo,
)
from retireplan.core.goals import GoalBook
from retireplan.core.loans import Loan, total_monthly_payment
from retireplan.core.protection import ProtectionAssumptions


@pytest.fixture
def engine():
    with ProjectionEngine(seed=42) as eng:
        yield eng


@pytest.mark.unit
class TestProject:
    """Tests for the combined projection."""

    def test_all_parts_present(self, engine, household_inputs):
        result = engine.project(household_inputs)
        assert isinstance(result, ProjectionResult)
        assert result.readiness == compute_readiness(household_inputs)
        assert result.protection == compute_protection_gap(household_inputs)
        assert result.trajectory == compute_trajectory(household_inputs)
        assert result.monte_carlo == run_monte_carlo(household_inputs, seed=42)
        assert [label for label, _ in result.loan_payments] == ["mortgage", "car"]
        assert result.total_loan_payment == pytest.approx(12_281.749846 + 7_733.120612, abs=1e-3)

    def test_loans_sharing_a_label_all_counted(self, engine, golden_inputs):
        """Unlabelled loans all default to "loan"; none may be dropped."""
        loans = (
            Loan.from_dict({"principal": 2_000_000, "annual_rate": 0.055, "term_years": 25}),
            Loan.from_dict({"principal": 400_000, "annual_rate": 0.06, "term_years": 5}),
        )
        result = engine.project(golden_inputs.replace(loans=loans))
        assert len(result.loan_payments) == 2
        assert [label for label, _ in result.loan_payments] == ["loan", "loan"]
        assert result.total_loan_payment == pytest.approx(total_monthly_payment(loans))
        assert result.total_loan_payment == pytest.approx(20_014.870458, abs=1e-3)

    def test_protection_assumptions_used(self, household_inputs):
        with ProjectionEngine(protection=ProtectionAssumptions(education_reserve=0)) as eng:
            assert eng.protection_gap(household_inputs).education_reserve == 0


@pytest.mark.unit
class TestMemoization:
    """Only projections whose inputs changed are recomputed."""

    def test_repeat_is_cached(self, engine, household_inputs):
        engine.project(household_inputs)
        engine.project(household_inputs)
        assert engine.computations == {
            "readiness": 1, "protection": 1, "trajectory": 1, "monte_carlo": 1, "loans": 1,
        }

    def test_goal_label_change_reruns_nothing(self, engine, household_inputs):
        engine.project(household_inputs)
        book = GoalBook(household_inputs.goals).update("g2", label="Japan trip")
        engine.project(household_inputs.replace(goals=book.goals))
        assert engine.computations["readiness"] == 1
        assert engine.computations["monte_carlo"] == 1

    def test_goal_amount_change_reruns_readiness_only(self, engine, household_inputs):
        engine.project(household_inputs)
        book = GoalBook(household_inputs.goals).update("g2", target_amount=200_000)
        engine.project(household_inputs.replace(goals=book.goals))
        assert engine.computations["readiness"] == 2
        assert engine.computations["monte_carlo"] == 1
        assert engine.computations["trajectory"] == 1

    def test_volatility_change_reruns_monte_carlo_only(self, engine, household_inputs):
        engine.project(household_inputs)
        engine.project(household_inputs.replace(pre_retirement_volatility=0.2))
        assert engine.computations["monte_carlo"] == 2
        assert engine.computations["readiness"] == 1
        assert engine.computations["protection"] == 1

    def test_expense_change_reruns_projections(self, engine, household_inputs):
        engine.project(household_inputs)
        engine.project(household_inputs.replace(monthly_health_expense=6_000))
        assert engine.computations["readiness"] == 2
        assert engine.computations["trajectory"] == 2
        assert engine.computations["monte_carlo"] == 2
        assert engine.computations["loans"] == 1

    def test_cache_bounded(self, household_inputs):
        with ProjectionEngine(seed=1, cache_size=2) as eng:
            for age in (30, 31, 32):
                eng.readiness(household_inputs.replace(current_age=age))
            eng.readiness(household_inputs.replace(current_age=30))
            assert eng.computations["readiness"] == 4

    def test_clear_cache(self, engine, household_inputs):
        engine.readiness(household_inputs)
        engine.clear_cache()
        engine.readiness(household_inputs)
        assert engine.computations["readiness"] == 2


@pytest.mark.unit
class TestRecomputeOnChange:
    """Tests for generations and stale-result discarding."""

    def test_update_publishes(self, engine, household_inputs):
        assert engine.latest is None
        result = engine.update(household_inputs)
        assert engine.latest is result
        assert engine.generation == 1

    def test_stale_result_not_published(self, engine, household_inputs, golden_inputs):
        old_gen = engine.generation + 1
        stale = engine.update(household_inputs)
        fresh = engine.update(golden_inputs)
        assert engine._publish(old_gen, stale) is False
        assert engine.latest is fresh

    def test_submit_keeps_newest(self, engine, household_inputs, golden_inputs):
        gen_a, fut_a = engine.submit(household_inputs)
        gen_b, fut_b = engine.submit(golden_inputs)
        assert gen_b == gen_a + 1
        result_a = fut_a.result(timeout=60)
        result_b = fut_b.result(timeout=60)
        assert result_a.readiness == compute_readiness(household_inputs)
        assert engine.latest is result_b
