"""
Parameter Sweeps
================

Runs a list of scenario overrides against a base ParameterSet and
collects one summary row per scenario. A non-optimal scenario yields a
NaN-tagged row and never stops the remaining scenarios.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from ..optimization.dispatch_milp import DispatchOptimizer
from ..optimization.results import DispatchResults
from ..resources.parameters import ParameterSet
from .overrides import OverrideLike, parse_override

logger = logging.getLogger(__name__)

SWEEP_COLUMNS = [
    "simulation",
    "status",
    "solve_time_sec",
    "objective_value",
    "total_co2",
    "total_technology_cost",
    "cost_conventional",
    "cost_wind",
    "cost_solar",
]


def _summary_row(index: int, results: DispatchResults) -> Dict[str, Any]:
    return {
        "simulation": index,
        "status": results.status.value,
        "solve_time_sec": results.solve_time_sec,
        "objective_value": results.objective_value,
        "total_co2": results.total_co2,
        "total_technology_cost": results.total_technology_cost,
        "cost_conventional": results.technology_cost("conventional"),
        "cost_wind": results.technology_cost("wind"),
        "cost_solar": results.technology_cost("solar"),
    }


def _run_scenario(optimizer: DispatchOptimizer, index: int, params: ParameterSet) -> Dict[str, Any]:
    results = optimizer.solve(params)
    if not results.solved:
        logger.warning("Scenario %d did not solve optimally: %s", index, results.status.value)
    return _summary_row(index, results)


def _solve_task(task: Tuple[int, ParameterSet, Dict[str, Any]]) -> Dict[str, Any]:
    # Worker processes build their own optimizer and model
    index, params, solver_config = task
    return _run_scenario(DispatchOptimizer(**solver_config), index, params)


def build_scenarios(base: ParameterSet, overrides: Sequence[OverrideLike]) -> List[ParameterSet]:
    """
    Validate every override and derive its ParameterSet.

    All overrides are checked before anything is solved.
    """
    parsed = [parse_override(o) for o in overrides]
    return [o.apply(base) for o in parsed]


def run_sweep(
    base: ParameterSet,
    overrides: Sequence[OverrideLike],
    optimizer: Optional[DispatchOptimizer] = None,
    workers: int = 1,
) -> pd.DataFrame:
    """
    Solve every scenario and tabulate the results.

    Args:
        base: Default scenario the overrides are applied to
        overrides: One override mapping (or ScenarioOverride) per scenario
        optimizer: Supplies solver settings; a default one is used if omitted
        workers: Number of worker processes; 1 solves in-process

    Returns:
        DataFrame with one row per scenario (columns: SWEEP_COLUMNS)
    """
    scenarios = build_scenarios(base, overrides)
    optimizer = optimizer or DispatchOptimizer()
    solver_config = {
        "solver_name": optimizer.solver_name,
        "time_limit_sec": optimizer.time_limit_sec,
        "mip_gap": optimizer.mip_gap,
    }
    tasks = [(i, params, solver_config) for i, params in enumerate(scenarios, start=1)]
    logger.info("Running %d scenarios with %d worker(s)", len(tasks), workers)

    if workers > 1 and len(tasks) > 1:
        with mp.Pool(processes=min(workers, len(tasks))) as pool:
            rows = pool.map(_solve_task, tasks)
    else:
        rows = [_run_scenario(optimizer, index, params) for index, params, _ in tasks]

    frame = pd.DataFrame(rows, columns=SWEEP_COLUMNS)
    n_failed = int((frame["status"] != "optimal").sum())
    if n_failed:
        logger.warning("%d of %d scenarios were not optimal", n_failed, len(frame))
    return frame


def rank_scenarios(frame: pd.DataFrame, by: str = "total_co2") -> pd.DataFrame:
    """Sort sweep rows by a metric, NaN-tagged scenarios last."""
    if by not in frame.columns:
        raise KeyError(f"Unknown sweep column: {by}")
    return frame.sort_values(by, na_position="last").reset_index(drop=True)
