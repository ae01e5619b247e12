"""
Scenario Tooling
================

Non-destructive scenario overrides and batch sweeps over them.
"""

from .overrides import ScenarioOverride, apply_overrides
from .sweep import rank_scenarios, run_sweep

__all__ = ["ScenarioOverride", "apply_overrides", "rank_scenarios", "run_sweep"]
