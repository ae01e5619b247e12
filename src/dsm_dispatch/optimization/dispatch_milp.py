"""
MILP Dispatch Model
===================

Mixed-Integer Linear Programming model for hour-by-hour micro-grid
dispatch with demand-side management (DSM).

Objective: Minimize operating cost
- Conventional generation cost (hourly $/MWh)
- Start-up and shut-down costs (unit-commitment variant)

Constraints:
- DSM linking: every upward shift is recovered inside the delay window
- DSM capacity: upward, downward and combined per-hour limits
- Unit commitment: start-up ramp cap and on/off transition logic
- Wind and solar bounded by capacity x availability
- Battery SOC recursion with charge/discharge efficiencies
- Power balance at micro-grid level (no curtailment, no shedding)
"""

import logging
from typing import Dict, Optional

import pyomo.environ as pyo

from ..resources.parameters import ParameterSet
from .results import DispatchResults, extract_results
from .solver import SolverAdapter
from .windows import delay_window, shift_pairs

logger = logging.getLogger(__name__)


def build_model(params: ParameterSet) -> pyo.ConcreteModel:
    """
    Build the dispatch MILP for a scenario.

    Pure function of ``params``: identical inputs give an identical
    formulation. Hours are indexed 1..T, battery SOC points 0..T.

    Args:
        params: Validated scenario parameters

    Returns:
        Pyomo ConcreteModel; variable groups are the components
        ``dsm_up``, ``dsm_down``, ``conv_gen``, ``gen_online``,
        ``gen_start``, ``gen_stop``, ``wind_gen``, ``solar_gen``,
        ``bess_charge``, ``bess_discharge`` and ``bess_soc``.
    """
    T = params.horizon_hours
    L = params.delay_hours
    if params.window_covers_horizon:
        logger.warning(
            "Delay window L=%d covers the whole horizon T=%d; DSM windows are clipped", L, T
        )

    m = pyo.ConcreteModel("MicrogridDSMDispatch")

    def window(t):
        return delay_window(t, L, T)

    # =====================
    # SETS
    # =====================
    m.T = pyo.Set(initialize=params.hours, ordered=True)              # Hours 1..T
    m.T_soc = pyo.Set(initialize=range(0, T + 1), ordered=True)       # SOC points 0..T
    m.SHIFTS = pyo.Set(dimen=2, initialize=shift_pairs(L, T), ordered=True)  # (origin, recovery)

    # =====================
    # PARAMETERS
    # =====================
    m.demand = pyo.Param(m.T, initialize=lambda m, t: params.demand_mw[t - 1])
    m.ev_demand = pyo.Param(m.T, initialize=lambda m, t: params.ev_demand_mw[t - 1])
    m.gen_cost = pyo.Param(m.T, initialize=lambda m, t: params.generation_cost[t - 1])
    m.wind_avail = pyo.Param(m.T, initialize=lambda m, t: params.wind_avail[t - 1])
    m.solar_avail = pyo.Param(m.T, initialize=lambda m, t: params.solar_avail[t - 1])

    # DSM
    m.dsm_up_cap = pyo.Param(initialize=params.dsm_up_capacity_mw)
    m.dsm_down_cap = pyo.Param(initialize=params.dsm_down_capacity_mw)

    # Generation
    m.conv_cap = pyo.Param(initialize=params.conv_capacity_mw)
    m.wind_cap = pyo.Param(initialize=params.wind_capacity_mw)
    m.solar_cap = pyo.Param(initialize=params.solar_capacity_mw)
    m.startup_ramp = pyo.Param(initialize=params.gen_startup_ramp)
    m.start_cost = pyo.Param(initialize=params.gen_start_cost)
    m.stop_cost = pyo.Param(initialize=params.gen_shutdown_cost)

    # BESS
    m.bess_emax = pyo.Param(initialize=params.bess_energy_mwh)
    m.bess_eff_c = pyo.Param(initialize=params.bess_eff_charge)
    m.bess_eff_d = pyo.Param(initialize=params.bess_eff_discharge)

    # =====================
    # VARIABLES
    # =====================

    # DSM: dsm_down[t, tt] is load shifted from hour t and recovered in hour tt
    m.dsm_up = pyo.Var(m.T, within=pyo.NonNegativeReals, bounds=(0, params.dsm_up_capacity_mw))
    m.dsm_down = pyo.Var(m.SHIFTS, within=pyo.NonNegativeReals)

    # Conventional generator
    m.conv_gen = pyo.Var(m.T, within=pyo.NonNegativeReals, bounds=(0, params.conv_capacity_mw))
    if params.unit_commitment:
        m.gen_online = pyo.Var(m.T, within=pyo.Binary)  # 1 if running
        m.gen_start = pyo.Var(m.T, within=pyo.Binary)   # 1 if starting this hour
        m.gen_stop = pyo.Var(m.T, within=pyo.Binary)    # 1 if shutting down this hour

    # Renewables, bounded by capacity x availability
    m.wind_gen = pyo.Var(
        m.T,
        within=pyo.NonNegativeReals,
        bounds=lambda m, t: (0, params.wind_capacity_mw * params.wind_avail[t - 1]),
    )
    m.solar_gen = pyo.Var(
        m.T,
        within=pyo.NonNegativeReals,
        bounds=lambda m, t: (0, params.solar_capacity_mw * params.solar_avail[t - 1]),
    )

    # BESS
    m.bess_charge = pyo.Var(m.T, within=pyo.NonNegativeReals, bounds=(0, params.bess_charge_mw))
    m.bess_discharge = pyo.Var(m.T, within=pyo.NonNegativeReals, bounds=(0, params.bess_discharge_mw))
    m.bess_soc = pyo.Var(m.T_soc, within=pyo.NonNegativeReals, bounds=(0, params.bess_energy_mwh))

    # =====================
    # EXPRESSIONS
    # =====================

    # Load recovered in hour t from shifts originating anywhere in its window
    def dsm_down_total_rule(m, t):
        return sum(m.dsm_down[k, t] for k in window(t))

    m.dsm_down_total = pyo.Expression(m.T, rule=dsm_down_total_rule)

    def net_demand_rule(m, t):
        return m.demand[t] + m.ev_demand[t] + m.dsm_up[t] - m.dsm_down_total[t]

    m.net_demand = pyo.Expression(m.T, rule=net_demand_rule)

    # =====================
    # CONSTRAINTS
    # =====================

    # 1. DSM LINKING
    def dsm_link_rule(m, t):
        return m.dsm_up[t] == sum(m.dsm_down[t, tt] for tt in window(t))

    m.dsm_link = pyo.Constraint(m.T, rule=dsm_link_rule)

    # 2. DSM CAPACITY (upward limit is the dsm_up bound)
    def dsm_down_cap_rule(m, tt):
        return m.dsm_down_total[tt] <= m.dsm_down_cap

    def dsm_combined_cap_rule(m, tt):
        return m.dsm_up[tt] + m.dsm_down_total[tt] <= max(
            params.dsm_up_capacity_mw, params.dsm_down_capacity_mw
        )

    m.dsm_down_cap_con = pyo.Constraint(m.T, rule=dsm_down_cap_rule)
    m.dsm_combined_cap_con = pyo.Constraint(m.T, rule=dsm_combined_cap_rule)

    # 3. UNIT COMMITMENT
    if params.unit_commitment:
        def gen_capacity_rule(m, t):
            # Full capacity when running, startup_ramp fraction in a start-up hour
            return m.conv_gen[t] <= (
                m.conv_cap * m.gen_online[t]
                - (m.conv_cap - m.startup_ramp * m.conv_cap) * m.gen_start[t]
            )

        m.gen_capacity = pyo.Constraint(m.T, rule=gen_capacity_rule)

        # Running in hour 1 counts as a start-up
        first = m.T.first()
        m.gen_start_initial = pyo.Constraint(expr=m.gen_start[first] == m.gen_online[first])
        # No prior state to shut down from
        m.gen_stop[first].fix(0)

        def gen_start_rule(m, t):
            if t == first:
                return pyo.Constraint.Skip
            return m.gen_start[t] >= m.gen_online[t] - m.gen_online[t - 1]

        def gen_stop_rule(m, t):
            if t == first:
                return pyo.Constraint.Skip
            return m.gen_stop[t] >= m.gen_online[t - 1] - m.gen_online[t]

        m.gen_start_logic = pyo.Constraint(m.T, rule=gen_start_rule)
        m.gen_stop_logic = pyo.Constraint(m.T, rule=gen_stop_rule)

    # 4. SOC DYNAMICS
    m.bess_soc_initial = pyo.Constraint(expr=m.bess_soc[0] == m.bess_emax / 2)

    def soc_dynamics_rule(m, t):
        return m.bess_soc[t] == (
            m.bess_soc[t - 1]
            + m.bess_eff_c * m.bess_charge[t]
            - m.bess_discharge[t] / m.bess_eff_d
        )

    m.soc_dynamics = pyo.Constraint(m.T, rule=soc_dynamics_rule)

    # 5. POWER BALANCE
    def power_balance_rule(m, t):
        supply = m.conv_gen[t] + m.wind_gen[t] + m.solar_gen[t] + m.bess_discharge[t]
        return supply == m.net_demand[t] + m.bess_charge[t]

    m.power_balance = pyo.Constraint(m.T, rule=power_balance_rule)

    # =====================
    # OBJECTIVE FUNCTION
    # =====================
    def objective_rule(m):
        costs = sum(m.gen_cost[t] * m.conv_gen[t] for t in m.T)
        if params.unit_commitment:
            costs += sum(
                m.start_cost * m.gen_start[t] + m.stop_cost * m.gen_stop[t] for t in m.T
            )
        return costs

    m.objective = pyo.Objective(rule=objective_rule, sense=pyo.minimize)

    stats = model_statistics(m)
    logger.info(
        "Built dispatch model: T=%d, L=%d, %d variables (%d binary), %d constraints",
        T, L, stats["variables"], stats["binary_variables"], stats["constraints"],
    )
    return m


def model_statistics(m: pyo.ConcreteModel) -> Dict[str, int]:
    """Counts of variables and constraints in a built model."""
    variables = list(m.component_data_objects(pyo.Var, descend_into=True))
    constraints = list(m.component_data_objects(pyo.Constraint, active=True, descend_into=True))
    return {
        "variables": len(variables),
        "binary_variables": sum(1 for v in variables if v.is_binary()),
        "constraints": len(constraints),
        "equality_constraints": sum(1 for c in constraints if c.equality),
    }


class DispatchOptimizer:
    """
    Build, solve and extract a dispatch plan for one scenario.

    Uses Pyomo for model formulation and HiGHS (or another available MILP
    solver) for solving. Each `solve` call builds a fresh model, so one
    optimizer can be reused across scenarios sequentially.

    Instances are not thread-safe: `model` always holds the most recently
    built model and the solver adapter keeps per-solve state. Concurrent
    sweeps use one optimizer per worker.
    """

    def __init__(
        self,
        solver_name: str = "appsi_highs",
        time_limit_sec: float = 60.0,
        mip_gap: float = 1e-4,
    ):
        """
        Initialize optimizer.

        Args:
            solver_name: Pyomo solver name (appsi_highs recommended)
            time_limit_sec: Maximum solve time
            mip_gap: Acceptable optimality gap
        """
        self.solver_name = solver_name
        self.time_limit_sec = time_limit_sec
        self.mip_gap = mip_gap
        self.model: Optional[pyo.ConcreteModel] = None
        self._adapter: Optional[SolverAdapter] = None

    @property
    def adapter(self) -> SolverAdapter:
        if self._adapter is None:
            self._adapter = SolverAdapter(
                solver_name=self.solver_name,
                time_limit_sec=self.time_limit_sec,
                mip_gap=self.mip_gap,
            )
        return self._adapter

    def build_model(self, params: ParameterSet) -> pyo.ConcreteModel:
        self.model = build_model(params)
        return self.model

    def solve(self, params: ParameterSet) -> DispatchResults:
        """
        Build and solve the dispatch model.

        Args:
            params: Scenario parameters

        Returns:
            DispatchResults; NaN-filled when the solve is not optimal
        """
        m = self.build_model(params)
        outcome = self.adapter.solve(m)
        return extract_results(m, params, outcome)
