#!/usr/bin/env python3
"""
retireplan command line.

Usage:
  retireplan
  retireplan --config myplan.yaml --trials 2000 --seed 7
  retireplan --age 40 --retire-age 62 --inflation-pct 2.5 --export-csv wealth.csv
"""

import argparse
import logging
import sys
from typing import List, Optional

from .core.config import ConfigError, load_config
from .core.engine import ProjectionEngine
from .core.goals import GoalBook
from .core.inputs import InvalidInputError
from .core.loans import DSR_WARNING_THRESHOLD, needs_refinance
from .core.trajectory import depletion_age, trajectory_frame

logger = logging.getLogger("retireplan")


def fmt_money(x):
    return f"{x:,.0f}"


def fmt_pct(x):
    return f"{x * 100:.0f}%"


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None):
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        prog="retireplan",
        description="Retirement readiness, protection gap and Monte Carlo success estimate",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  retireplan --config plan.yaml
  retireplan --age 40 --retire-age 62 --life 88 --trials 3000 --seed 1
  retireplan --inflation-pct 2.5 --pre-return-pct 7 --export-csv wealth.csv
        """,
    )
    parser.add_argument("--config", type=str, default=None, help="YAML plan file (overrides the defaults)")
    parser.add_argument("--age", type=int, default=None, help="Current age")
    parser.add_argument("--retire-age", type=int, default=None, help="Retirement age")
    parser.add_argument("--life", type=int, default=None, help="Life expectancy")
    parser.add_argument("--inflation-pct", type=float, default=None, help="Inflation, percent per year")
    parser.add_argument("--pre-return-pct", type=float, default=None, help="Return before retirement, percent")
    parser.add_argument("--post-return-pct", type=float, default=None, help="Return after retirement, percent")
    parser.add_argument("--trials", type=int, default=None, help="Monte Carlo trials (clamped to 100-3000)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible Monte Carlo")
    parser.add_argument("--workers", type=int, default=None, help="Processes for Monte Carlo trials")
    parser.add_argument("--export-csv", type=str, default=None, help="Write the wealth trajectory to CSV")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", type=str, default=None, help="Also append log records to this file")
    return parser.parse_args(argv)


def overrides_from_args(args) -> dict:
    """CLI flags -> config overrides. Percent flags become decimals here."""
    plan = {}
    if args.age is not None:
        plan["current_age"] = args.age
    if args.retire_age is not None:
        plan["retirement_age"] = args.retire_age
    if args.life is not None:
        plan["life_expectancy"] = args.life
    if args.inflation_pct is not None:
        plan["inflation_rate"] = args.inflation_pct / 100.0
    if args.pre_return_pct is not None:
        plan["pre_retirement_return"] = args.pre_return_pct / 100.0
    if args.post_return_pct is not None:
        plan["post_retirement_return"] = args.post_return_pct / 100.0
    if args.trials is not None:
        plan["trial_count"] = args.trials

    mc = {}
    if args.seed is not None:
        mc["seed"] = args.seed
    if args.workers is not None:
        mc["workers"] = args.workers

    out = {}
    if plan:
        out["plan"] = plan
    if mc:
        out["monte_carlo"] = mc
    return out


def render_report(inputs, result) -> str:
    r = result.readiness
    p = result.protection
    mc = result.monte_carlo
    lines = [
        f"Age {inputs.current_age} -> retire {inputs.retirement_age} -> plan to {inputs.life_expectancy}",
        f"  years to retire: {inputs.years_to_retire}, years in retirement: {inputs.years_in_retirement}",
        f"  expenses / income:        {fmt_pct(inputs.expense_to_income_ratio)}",
        "",
        "Readiness",
        f"  target corpus:            {fmt_money(r.target_corpus)}",
        f"  projected corpus:         {fmt_money(r.projected_corpus)}",
        f"  readiness:                {fmt_pct(r.funded_fraction)} ({r.readiness_ratio:.2f}x)",
        f"  shortfall:                {fmt_money(r.shortfall)}",
        f"  required saving / month:  {fmt_money(r.required_monthly_savings)}",
        "",
        "Loans (monthly)",
    ]
    for label, pmt in result.loan_payments:
        lines.append(f"  {label:<24}  {fmt_money(pmt)}")
    lines.append(f"  {'total':<24}  {fmt_money(result.total_loan_payment)}")
    dsr = inputs.debt_service_ratio
    lines.append(f"  debt service ratio:       {fmt_pct(dsr)}")
    if needs_refinance(dsr):
        lines.append(f"  ! installments above {fmt_pct(DSR_WARNING_THRESHOLD)} of income: consider refinancing or a longer term")

    lines += [
        "",
        "Protection",
        f"  additional life cover:    {fmt_money(p.recommended_life_cover)}"
        f" ({p.replacement_years}y income{', children assumed' if p.children_assumed else ''})",
        f"  additional CI cover:      {fmt_money(p.recommended_ci_cover)}",
    ]

    plan = GoalBook(inputs.goals).plan_by_year()
    if len(plan):
        lines += ["", "Goals by year"]
        for row in plan.itertuples(index=False):
            lines.append(f"  {int(row.year)}  {fmt_money(row.amount)}")

    runs_out = depletion_age(result.trajectory)
    saving_years = [pt for pt in result.trajectory if not pt.retired]
    at_retirement = saving_years[-1].wealth if saving_years else inputs.net_current_assets
    lines += [
        "",
        "Wealth",
        f"  at retirement:            {fmt_money(at_retirement)}",
        f"  runs out at age:          {runs_out if runs_out is not None else 'never'}",
        "",
        f"Monte Carlo ({mc.trial_count} trials)",
        f"  probability money lasts:  {fmt_pct(mc.success_probability)}",
    ]
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        cfg = load_config(args.config, overrides_from_args(args))
    except (ConfigError, InvalidInputError) as e:
        print(f"retireplan: {e}", file=sys.stderr)
        return 2

    with ProjectionEngine(protection=cfg.protection, seed=cfg.seed, workers=cfg.workers) as engine:
        result = engine.update(cfg.inputs)

    print(render_report(cfg.inputs, result))

    if args.export_csv:
        trajectory_frame(result.trajectory).to_csv(args.export_csv, index=False)
        logger.info("trajectory written to %s", args.export_csv)
    return 0


if __name__ == "__main__":
    sys.exit(main())
