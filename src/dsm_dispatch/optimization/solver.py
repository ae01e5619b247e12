"""
Solver Adapter
==============

Thin wrapper around a Pyomo MILP solver. The rest of the package only
sees a `SolveStatus` and, when optimal, variable values loaded into the
model; solver internals never leak out.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

import pyomo.environ as pyo
from pyomo.opt import SolverFactory, TerminationCondition

logger = logging.getLogger(__name__)


class SolveStatus(Enum):
    """Termination status of a solve attempt."""
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    TIME_LIMIT = "time_limit"
    ERROR = "error"


_TERMINATION_MAP = {
    TerminationCondition.optimal: SolveStatus.OPTIMAL,
    TerminationCondition.globallyOptimal: SolveStatus.OPTIMAL,
    TerminationCondition.locallyOptimal: SolveStatus.OPTIMAL,
    TerminationCondition.infeasible: SolveStatus.INFEASIBLE,
    # costs are non-negative, so the objective is bounded below
    TerminationCondition.infeasibleOrUnbounded: SolveStatus.INFEASIBLE,
    TerminationCondition.unbounded: SolveStatus.UNBOUNDED,
    TerminationCondition.maxTimeLimit: SolveStatus.TIME_LIMIT,
}

# Relative MIP gap option name per solver family
_GAP_OPTION = {
    "highs": "mip_rel_gap",
    "glpk": "mipgap",
    "cbc": "ratioGap",
}

DEFAULT_SOLVERS = ("appsi_highs", "highs", "glpk", "cbc")


@dataclass(frozen=True)
class SolveOutcome:
    """Result of a single solve attempt."""
    status: SolveStatus
    solver_name: str
    solve_time_sec: float
    objective_value: Optional[float] = None
    message: str = ""

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.OPTIMAL


def find_solver(preferred: Optional[str] = None) -> Tuple[str, Any]:
    """
    Return the first available solver as ``(name, solver)``.

    Raises:
        RuntimeError: if none of the candidate solvers is installed.
    """
    candidates = [preferred] if preferred else []
    candidates += [name for name in DEFAULT_SOLVERS if name != preferred]

    for solver_name in candidates:
        try:
            solver = SolverFactory(solver_name)
            if solver is not None and solver.available(exception_flag=False):
                return solver_name, solver
        except Exception:
            continue

    raise RuntimeError(
        "No MILP solver found. Install one of:\n"
        "  - pip install highspy\n"
        "  - conda install -c conda-forge glpk\n"
        "  - conda install -c conda-forge coincbc"
    )


def solver_available(preferred: Optional[str] = None) -> bool:
    try:
        find_solver(preferred)
    except RuntimeError:
        return False
    return True


class SolverAdapter:
    """
    Runs a Pyomo model through a MILP solver and reports a `SolveStatus`.

    Values are loaded into the model only when the status is OPTIMAL, so a
    time-limited or failed solve never leaves a partial assignment behind.
    """

    def __init__(
        self,
        solver_name: str = "appsi_highs",
        time_limit_sec: float = 60.0,
        mip_gap: float = 1e-4,
    ):
        """
        Args:
            solver_name: Preferred Pyomo solver name; others are tried if missing
            time_limit_sec: Maximum solve time
            mip_gap: Acceptable relative optimality gap
        """
        self.time_limit_sec = time_limit_sec
        self.mip_gap = mip_gap
        self.solver_name, self._solver = find_solver(solver_name)
        logger.info("Using solver: %s", self.solver_name)

        family = _solver_family(self.solver_name)
        if family in _GAP_OPTION and hasattr(self._solver, "options"):
            self._solver.options[_GAP_OPTION[family]] = mip_gap

    def solve(self, m: pyo.ConcreteModel) -> SolveOutcome:
        start_time = time.time()
        try:
            result = self._solver.solve(
                m, tee=False, load_solutions=False, timelimit=self.time_limit_sec
            )
        except Exception as e:
            solve_time = time.time() - start_time
            logger.warning("Solver %s failed: %s", self.solver_name, e)
            return SolveOutcome(
                status=SolveStatus.ERROR,
                solver_name=self.solver_name,
                solve_time_sec=solve_time,
                message=f"Error: {e}",
            )
        solve_time = time.time() - start_time

        condition = result.solver.termination_condition
        status = _TERMINATION_MAP.get(condition, SolveStatus.ERROR)
        if status is not SolveStatus.OPTIMAL:
            logger.warning("Solve finished with status %s (%s)", status.value, condition)
            return SolveOutcome(
                status=status,
                solver_name=self.solver_name,
                solve_time_sec=solve_time,
                message=str(condition),
            )

        m.solutions.load_from(result)
        return SolveOutcome(
            status=status,
            solver_name=self.solver_name,
            solve_time_sec=solve_time,
            objective_value=pyo.value(m.objective),
            message=str(condition),
        )


def _solver_family(solver_name: str) -> str:
    for family in _GAP_OPTION:
        if family in solver_name:
            return family
    return solver_name
