# tests/conftest.py

import pytest

from dsm_dispatch.optimization import DispatchOptimizer
from dsm_dispatch.optimization.solver import solver_available
from dsm_dispatch.resources import default_parameters
from dsm_dispatch.resources.parameters import REFERENCE_DEMAND_MW, ParameterSet, reference_generation_cost


@pytest.fixture(scope="session")
def optimizer():
    if not solver_available():
        pytest.skip("no MILP solver installed")
    return DispatchOptimizer(mip_gap=1e-6)


@pytest.fixture(scope="session")
def default_run(optimizer):
    """Default scenario solved once: (params, model, results)."""
    params = default_parameters()
    results = optimizer.solve(params)
    return params, optimizer.model, results


@pytest.fixture
def dsm_only_params():
    """24-hour DSM scenario: conventional generation only, no storage, no commitment costs."""
    return ParameterSet(
        horizon_hours=24,
        delay_hours=3,
        dsm_up_capacity_mw=10.0,
        dsm_down_capacity_mw=10.0,
        demand_mw=REFERENCE_DEMAND_MW,
        ev_demand_mw=[0.0] * 24,
        generation_cost=reference_generation_cost(24),
        conv_capacity_mw=200.0,
        wind_capacity_mw=0.0,
        wind_avail=[0.0] * 24,
        solar_capacity_mw=0.0,
        solar_avail=[0.0] * 24,
        bess_energy_mwh=0.0,
        bess_charge_mw=0.0,
        bess_discharge_mw=0.0,
        bess_eff_charge=1.0,
        bess_eff_discharge=1.0,
        unit_commitment=True,
        gen_start_cost=0.0,
        gen_shutdown_cost=0.0,
        gen_startup_ramp=1.0,
    )
