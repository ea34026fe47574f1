# retireplan/core/loans.py
"""Fixed-payment loan amortization (mortgage, car loan, ...)."""

from dataclasses import dataclass
from typing import Iterable
import numpy as np
import pandas as pd


def monthly_payment(principal: float, annual_rate: float, years: float) -> float:
    """Level monthly installment that fully amortizes `principal` over `years`."""
    r = annual_rate / 12.0
    n = years * 12
    if r == 0:
        return principal / n
    return principal * r / (1.0 - (1.0 + r) ** (-n))


@dataclass(frozen=True)
class Loan:
    """A fully amortizing loan. Rates are annual decimals."""

    label: str
    principal: float
    annual_rate: float
    term_years: int

    @property
    def monthly_payment(self) -> float:
        if self.principal <= 0 or self.term_years <= 0:
            return 0.0
        return monthly_payment(self.principal, self.annual_rate, self.term_years)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "principal": self.principal,
            "annual_rate": self.annual_rate,
            "term_years": self.term_years,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Loan":
        return cls(
            label=data.get("label", "loan"),
            principal=float(data.get("principal", 0.0)),
            annual_rate=float(data.get("annual_rate", 0.0)),
            term_years=int(data.get("term_years", 0)),
        )


def total_monthly_payment(loans: Iterable[Loan]) -> float:
    """Combined monthly installment across all loans."""
    return sum(loan.monthly_payment for loan in loans)


# above this share of monthly income in installments, refinance or extend terms
DSR_WARNING_THRESHOLD = 0.40


def debt_service_ratio(loans: Iterable[Loan], monthly_income: float) -> float:
    """Combined installments over monthly income; 0 with no income."""
    if monthly_income <= 0:
        return 0.0
    return total_monthly_payment(loans) / monthly_income


def needs_refinance(ratio: float, threshold: float = DSR_WARNING_THRESHOLD) -> bool:
    return ratio > threshold


def amortization_schedule(loan: Loan) -> pd.DataFrame:
    """
    Month-by-month schedule: payment, interest, principal repaid and the
    remaining balance. Empty frame for a loan with nothing to repay.
    """
    cols = ["month", "payment", "interest", "principal", "balance"]
    n = int(loan.term_years * 12)
    if loan.principal <= 0 or n <= 0:
        return pd.DataFrame(columns=cols)

    r = loan.annual_rate / 12.0
    pmt = loan.monthly_payment
    balance = float(loan.principal)
    rows = []
    for m in range(1, n + 1):
        interest = balance * r
        repaid = pmt - interest
        # last installment absorbs floating-point residue
        if m == n:
            repaid = balance
        balance = max(balance - repaid, 0.0)
        rows.append((m, pmt, interest, repaid, balance))

    df = pd.DataFrame(rows, columns=cols)
    df["month"] = df["month"].astype(np.int64)
    return df
