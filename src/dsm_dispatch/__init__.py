"""
Micro-grid DSM Dispatch
=======================

Least-cost hourly dispatch planning for a micro-grid with:
- Demand-side management (load shifting inside a delay window)
- A dispatchable conventional generator with unit commitment
- Wind and solar generation driven by weather availability
- Battery storage with charge/discharge efficiencies

Architecture:
- resources/: Scenario parameters and renewable availability
- optimization/: MILP formulation, solver adapter, result extraction
- scenarios/: Typed overrides and batch parameter sweeps
"""

from .optimization import DispatchOptimizer, DispatchResults, SolveStatus, build_model
from .resources import ParameterSet, default_parameters
from .scenarios import ScenarioOverride, apply_overrides, run_sweep

__version__ = "1.0.0"

__all__ = [
    "DispatchOptimizer",
    "DispatchResults",
    "SolveStatus",
    "build_model",
    "ParameterSet",
    "default_parameters",
    "ScenarioOverride",
    "apply_overrides",
    "run_sweep",
]
