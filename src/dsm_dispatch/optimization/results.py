"""
Dispatch Results
================

Plain numeric view of a solved dispatch model:
- Hourly vectors for every decision-variable family
- Net demand and recovered-load totals
- Cost breakdown, per-technology energy and emissions

Non-optimal solves produce NaN-filled results instead of raising, so
batch sweeps can continue past infeasible scenarios.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import pyomo.environ as pyo

from ..resources.parameters import ParameterSet
from .solver import SolveOutcome, SolveStatus
from .windows import shift_pairs

TECHNOLOGIES = ("conventional", "wind", "solar")


@dataclass
class DispatchResults:
    """
    Complete dispatch results for one scenario.

    Hourly arrays have length T (element ``t - 1`` is hour ``t``);
    ``bess_soc`` has length T + 1 and starts at the initial state;
    ``dsm_down`` is a T x T matrix ``[origin, recovery]``, zero outside
    the delay window. Unit-commitment arrays are None when the scenario
    does not model commitment.
    """
    # Solution status
    status: SolveStatus
    solver_name: str
    solve_time_sec: float
    objective_value: float
    message: str

    # Time parameters
    horizon_hours: int
    delay_hours: int

    # Inputs echoed for reporting
    demand_mw: np.ndarray
    ev_demand_mw: np.ndarray

    # DSM
    dsm_up: np.ndarray
    dsm_down: np.ndarray
    dsm_down_total: np.ndarray
    net_demand: np.ndarray

    # Generation
    conv_gen: np.ndarray
    wind_gen: np.ndarray
    solar_gen: np.ndarray

    # BESS
    bess_charge: np.ndarray
    bess_discharge: np.ndarray
    bess_soc: np.ndarray

    # Unit commitment
    gen_online: Optional[np.ndarray] = None
    gen_start: Optional[np.ndarray] = None
    gen_stop: Optional[np.ndarray] = None

    # Economics
    generation_cost: float = math.nan
    commitment_cost: float = math.nan
    energy_mwh: Dict[str, float] = field(default_factory=dict)
    emissions_t: Dict[str, float] = field(default_factory=dict)
    fixed_cost: Dict[str, float] = field(default_factory=dict)
    variable_cost: Dict[str, float] = field(default_factory=dict)

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.OPTIMAL

    @property
    def hours(self) -> np.ndarray:
        return np.arange(1, self.horizon_hours + 1)

    @property
    def total_cost(self) -> float:
        """Operating cost: generation plus start-up/shut-down (equals the objective)."""
        return self.generation_cost + self.commitment_cost

    @property
    def total_co2(self) -> float:
        if not self.emissions_t:
            return math.nan
        return sum(self.emissions_t.values())

    def technology_cost(self, technology: str) -> float:
        """Fixed plus variable cost of one technology (NaN without cost data)."""
        if technology not in self.fixed_cost:
            return math.nan
        return self.fixed_cost[technology] + self.variable_cost[technology]

    @property
    def total_technology_cost(self) -> float:
        if not self.fixed_cost:
            return math.nan
        return sum(self.technology_cost(tech) for tech in TECHNOLOGIES)

    def calculate_aggregates(self, params: ParameterSet) -> None:
        """Derive cost, energy and emission totals from the hourly vectors."""
        T = self.horizon_hours
        cost = np.asarray(params.generation_cost, dtype=float)
        self.generation_cost = float(np.sum(cost * self.conv_gen))
        if self.gen_start is not None:
            self.commitment_cost = float(
                params.gen_start_cost * np.sum(self.gen_start)
                + params.gen_shutdown_cost * np.sum(self.gen_stop)
            )
        else:
            self.commitment_cost = 0.0

        self.energy_mwh = {
            "conventional": float(np.sum(self.conv_gen)),
            "wind": float(np.sum(self.wind_gen)),
            "solar": float(np.sum(self.solar_gen)),
        }

        if params.emissions is not None:
            self.emissions_t = {
                tech: self.energy_mwh[tech] * getattr(params.emissions, tech)
                for tech in TECHNOLOGIES
            }

        if params.costs is not None:
            capacity = {
                "conventional": params.conv_capacity_mw,
                "wind": params.wind_capacity_mw,
                "solar": params.solar_capacity_mw,
            }
            for tech in TECHNOLOGIES:
                coeffs = getattr(params.costs, tech)
                # Fixed costs scale with installed capacity, maintenance per hour
                self.fixed_cost[tech] = capacity[tech] * (coeffs.initial + coeffs.maintenance * T)
                self.variable_cost[tech] = self.energy_mwh[tech] * coeffs.production

    def get_timeseries(self) -> pd.DataFrame:
        """Hourly dispatch table indexed by hour (SOC is end-of-hour)."""
        data = {
            "demand_mw": self.demand_mw,
            "ev_demand_mw": self.ev_demand_mw,
            "dsm_up_mw": self.dsm_up,
            "dsm_down_mw": self.dsm_down_total,
            "net_demand_mw": self.net_demand,
            "conv_gen_mw": self.conv_gen,
            "wind_gen_mw": self.wind_gen,
            "solar_gen_mw": self.solar_gen,
            "bess_charge_mw": self.bess_charge,
            "bess_discharge_mw": self.bess_discharge,
            "bess_soc_mwh": self.bess_soc[1:],
        }
        if self.gen_online is not None:
            data["gen_online"] = self.gen_online
            data["gen_start"] = self.gen_start
            data["gen_stop"] = self.gen_stop
        return pd.DataFrame(data, index=pd.Index(self.hours, name="hour"))

    def summary(self) -> Dict[str, Any]:
        """Scalar metrics for display and sweep tables."""
        return {
            "status": self.status.value,
            "solver": self.solver_name,
            "solve_time_sec": self.solve_time_sec,
            "objective_value": self.objective_value,
            "generation_cost": self.generation_cost,
            "commitment_cost": self.commitment_cost,
            "total_cost": self.total_cost,
            "energy_mwh": dict(self.energy_mwh),
            "emissions_t": dict(self.emissions_t),
            "total_co2": self.total_co2,
            "technology_cost": {tech: self.technology_cost(tech) for tech in TECHNOLOGIES},
            "total_technology_cost": self.total_technology_cost,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert complete results to dictionary."""
        out = self.summary()
        out["horizon_hours"] = self.horizon_hours
        out["delay_hours"] = self.delay_hours
        out["timeseries"] = self.get_timeseries().reset_index().to_dict(orient="list")
        out["bess_initial_soc_mwh"] = float(self.bess_soc[0])
        return out


def _value(var_data) -> float:
    # A value the solver never assigned stays visible as NaN
    return var_data.value if var_data.value is not None else math.nan


def _values(var, index) -> np.ndarray:
    return np.array([_value(var[i]) for i in index], dtype=float)


def _nan_results(params: ParameterSet, outcome: SolveOutcome) -> DispatchResults:
    T = params.horizon_hours

    def hourly():
        return np.full(T, np.nan)

    commitment = hourly if params.unit_commitment else (lambda: None)
    return DispatchResults(
        status=outcome.status,
        solver_name=outcome.solver_name,
        solve_time_sec=outcome.solve_time_sec,
        objective_value=math.nan,
        message=outcome.message,
        horizon_hours=T,
        delay_hours=params.delay_hours,
        demand_mw=np.asarray(params.demand_mw, dtype=float),
        ev_demand_mw=np.asarray(params.ev_demand_mw, dtype=float),
        dsm_up=hourly(),
        dsm_down=np.full((T, T), np.nan),
        dsm_down_total=hourly(),
        net_demand=hourly(),
        conv_gen=hourly(),
        wind_gen=hourly(),
        solar_gen=hourly(),
        bess_charge=hourly(),
        bess_discharge=hourly(),
        bess_soc=np.full(T + 1, np.nan),
        gen_online=commitment(),
        gen_start=commitment(),
        gen_stop=commitment(),
    )


def extract_results(
    m: pyo.ConcreteModel, params: ParameterSet, outcome: SolveOutcome
) -> DispatchResults:
    """
    Read solved variable values back into numpy arrays.

    The model is only read when ``outcome`` is OPTIMAL; any other status
    yields NaN-tagged results carrying the status.
    """
    if not outcome.solved:
        return _nan_results(params, outcome)

    T = params.horizon_hours
    hours = list(params.hours)

    dsm_down = np.zeros((T, T))
    for t, tt in shift_pairs(params.delay_hours, T):
        dsm_down[t - 1, tt - 1] = _value(m.dsm_down[t, tt])

    dsm_up = _values(m.dsm_up, hours)
    dsm_down_total = dsm_down.sum(axis=0)
    demand = np.asarray(params.demand_mw, dtype=float)
    ev_demand = np.asarray(params.ev_demand_mw, dtype=float)

    results = DispatchResults(
        status=outcome.status,
        solver_name=outcome.solver_name,
        solve_time_sec=outcome.solve_time_sec,
        objective_value=float(outcome.objective_value),
        message=outcome.message,
        horizon_hours=T,
        delay_hours=params.delay_hours,
        demand_mw=demand,
        ev_demand_mw=ev_demand,
        dsm_up=dsm_up,
        dsm_down=dsm_down,
        dsm_down_total=dsm_down_total,
        net_demand=demand + ev_demand + dsm_up - dsm_down_total,
        conv_gen=_values(m.conv_gen, hours),
        wind_gen=_values(m.wind_gen, hours),
        solar_gen=_values(m.solar_gen, hours),
        bess_charge=_values(m.bess_charge, hours),
        bess_discharge=_values(m.bess_discharge, hours),
        bess_soc=_values(m.bess_soc, range(0, T + 1)),
    )

    if params.unit_commitment:
        results.gen_online = np.round(_values(m.gen_online, hours))
        results.gen_start = np.round(_values(m.gen_start, hours))
        results.gen_stop = np.round(_values(m.gen_stop, hours))

    results.calculate_aggregates(params)
    return results
