"""
Optimization Module
===================

MILP-based dispatch optimization using Pyomo:
- DSM shifting, unit commitment, renewables and battery in one model
- Solver-agnostic adapter with typed termination status
- NaN-tagged results for non-optimal solves
"""

from .dispatch_milp import DispatchOptimizer, build_model, model_statistics
from .results import DispatchResults, extract_results
from .solver import SolveOutcome, SolverAdapter, SolveStatus
from .windows import delay_window

__all__ = [
    "DispatchOptimizer",
    "build_model",
    "model_statistics",
    "DispatchResults",
    "extract_results",
    "SolveOutcome",
    "SolverAdapter",
    "SolveStatus",
    "delay_window",
]
