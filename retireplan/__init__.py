"""retireplan - retirement readiness, protection gap and Monte Carlo projections."""

__version__ = "0.1.0"
