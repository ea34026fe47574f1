"""
Tests for YAML plan configuration.
"""
import pytest
import yaml
from retireplan.core import config
from retireplan.core.config import ConfigError, clamp_trials, deep_merge, load_config, load_plan
from retireplan.core.inputs import InvalidInputError


@pytest.fixture
def write_yaml(tmp_path):
    def _write(data, name="plan.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path
    return _write


@pytest.mark.unit
class TestDefaults:
    """Tests for the packaged default plan."""

    def test_defaults_file_exists(self):
        assert config.DEFAULTS_PATH.exists()

    def test_default_plan(self):
        cfg = load_config(as_of_year=2025)
        p = cfg.inputs
        assert (p.current_age, p.retirement_age, p.life_expectancy) == (36, 60, 90)
        assert p.monthly_expense == 42_000
        assert p.annual_income == 840_000
        assert [loan.label for loan in p.loans] == ["mortgage", "car"]
        assert p.trial_count == 500
        assert p.first_year_shock == pytest.approx(-0.2)

    def test_default_goals_resolved_relative_to_year(self):
        p = load_config(as_of_year=2025).inputs
        assert [(g.goal_id, g.target_year) for g in p.goals] == [("g1", 2025), ("g2", 2026)]
        assert p.as_of_year == 2025

    def test_default_protection_and_mc(self):
        cfg = load_config()
        assert cfg.protection.children_expense_threshold == 40_000
        assert cfg.seed is None
        assert cfg.workers == 1
        assert cfg.trial_bounds == (100, 3000)

    def test_load_plan_tuple(self):
        inputs, protection = load_plan()
        assert inputs.retirement_age == 60
        assert protection.education_reserve == 1_000_000


@pytest.mark.unit
class TestUserFile:
    """Tests for merging a user file over the defaults."""

    def test_partial_override(self, write_yaml):
        path = write_yaml({"plan": {"retirement_age": 65}, "monte_carlo": {"seed": 7}})
        cfg = load_config(path)
        assert cfg.inputs.retirement_age == 65
        assert cfg.inputs.current_age == 36
        assert cfg.seed == 7

    def test_goals_list_replaced(self, write_yaml):
        path = write_yaml({"plan": {"goals": [{"label": "Car", "target_amount": 500_000, "target_year": 2030}]}})
        goals = load_config(path).inputs.goals
        assert len(goals) == 1
        assert goals[0].target_year == 2030
        assert len(goals[0].goal_id) == 36  # generated

    def test_goal_without_year(self, write_yaml):
        path = write_yaml({"plan": {"goals": [{"label": "Car", "target_amount": 1}]}})
        with pytest.raises(ConfigError, match="target_year"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("plan: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_unknown_section(self, write_yaml):
        with pytest.raises(ConfigError, match="unknown sections"):
            load_config(write_yaml({"taxes": {}}))

    def test_unknown_plan_field(self, write_yaml):
        with pytest.raises(InvalidInputError, match="salary"):
            load_config(write_yaml({"plan": {"salary": 1}}))

    def test_bad_protection(self, write_yaml):
        with pytest.raises(ConfigError, match="protection"):
            load_config(write_yaml({"protection": {"min_replacement_years": 30}}))

    def test_invalid_ages(self, write_yaml):
        with pytest.raises(InvalidInputError):
            load_config(write_yaml({"plan": {"retirement_age": 30}}))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).inputs.current_age == 36


@pytest.mark.unit
class TestTrialBounds:
    """Tests for clamping the Monte Carlo trial count."""

    @pytest.mark.parametrize("requested,expected", [(50, 100), (100, 100), (1500, 1500), (10_000, 3000)])
    def test_clamp_trials(self, requested, expected):
        assert clamp_trials(requested) == expected

    def test_load_clamps(self):
        assert load_config(overrides={"plan": {"trial_count": 10}}).inputs.trial_count == 100
        assert load_config(overrides={"plan": {"trial_count": 99_999}}).inputs.trial_count == 3000

    def test_custom_bounds(self):
        cfg = load_config(overrides={"plan": {"trial_count": 5000},
                                     "monte_carlo": {"min_trials": 10, "max_trials": 8000}})
        assert cfg.inputs.trial_count == 5000

    def test_inverted_bounds(self):
        with pytest.raises(ConfigError):
            load_config(overrides={"monte_carlo": {"min_trials": 500, "max_trials": 100}})


@pytest.mark.unit
class TestDeepMerge:
    """Tests for the recursive merge helper."""

    def test_nested(self):
        base = {"a": {"x": 1, "y": 2}, "b": [1, 2]}
        out = deep_merge(base, {"a": {"y": 3}, "b": [9]})
        assert out == {"a": {"x": 1, "y": 3}, "b": [9]}
        assert base == {"a": {"x": 1, "y": 2}, "b": [1, 2]}
