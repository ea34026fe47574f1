# retireplan/core/goals.py
"""
Goal collection owned by the host.

GoalBook is immutable: add / update / remove return a new book and leave the
old one untouched, so a snapshot handed to the engine never changes under it.
"""

from __future__ import annotations
import uuid
import datetime
from dataclasses import replace
from typing import Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from .inputs import Goal


def new_goal_id() -> str:
    return str(uuid.uuid4())


class GoalBook:
    def __init__(self, goals: Iterable[Goal] = ()):
        self._goals: Tuple[Goal, ...] = tuple(goals)

    def __iter__(self) -> Iterator[Goal]:
        return iter(self._goals)

    def __len__(self) -> int:
        return len(self._goals)

    def __contains__(self, goal_id: object) -> bool:
        return any(g.goal_id == goal_id for g in self._goals)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, GoalBook) and self._goals == other._goals

    def __repr__(self) -> str:
        return f"GoalBook({list(self._goals)!r})"

    @property
    def goals(self) -> Tuple[Goal, ...]:
        """Snapshot for PlanningInputs.goals."""
        return self._goals

    def get(self, goal_id: str) -> Optional[Goal]:
        for g in self._goals:
            if g.goal_id == goal_id:
                return g
        return None

    def add(self, label: str = "New goal", target_amount: float = 50_000,
            target_year: Optional[int] = None, priority: int = 5) -> GoalBook:
        """Append a goal under a freshly generated id (defaults: due next year)."""
        if target_year is None:
            target_year = datetime.date.today().year + 1
        goal = Goal(
            goal_id=new_goal_id(),
            label=label,
            target_amount=target_amount,
            target_year=target_year,
            priority=priority,
        )
        return GoalBook(self._goals + (goal,))

    def update(self, goal_id: str, /, **patch) -> GoalBook:
        """Merge `patch` into the goal with this id. The id itself is fixed."""
        if goal_id not in self:
            raise KeyError(goal_id)
        if "goal_id" in patch:
            raise ValueError("goal_id cannot be changed")
        return GoalBook(replace(g, **patch) if g.goal_id == goal_id else g for g in self._goals)

    def remove(self, goal_id: str) -> GoalBook:
        if goal_id not in self:
            raise KeyError(goal_id)
        return GoalBook(g for g in self._goals if g.goal_id != goal_id)

    def by_priority(self) -> List[Goal]:
        """Most important first; ties keep insertion order."""
        return sorted(self._goals, key=lambda g: -g.priority)

    def plan_by_year(self) -> pd.DataFrame:
        """Total target amount due per calendar year (today's money)."""
        if not self._goals:
            return pd.DataFrame({"year": pd.Series(dtype="int64"), "amount": pd.Series(dtype="float64")})
        df = pd.DataFrame([g.to_dict() for g in self.by_priority()])
        plan = df.groupby("target_year", as_index=False)["target_amount"].sum()
        plan = plan.rename(columns={"target_year": "year", "target_amount": "amount"})
        return plan.sort_values("year").reset_index(drop=True)
