# tests/test_dispatch_constraints.py

"""Feasibility checks on the solved default scenario."""

import numpy as np
import pyomo.environ as pyo
import pytest

from dsm_dispatch.optimization import SolveStatus, delay_window

TOL = 1e-3


@pytest.fixture(scope="module")
def solved(default_run):
    params, model, results = default_run
    assert results.status is SolveStatus.OPTIMAL
    return params, model, results


class TestPowerBalance:

    def test_supply_meets_net_demand(self, solved):
        _, _, r = solved
        supply = r.conv_gen + r.wind_gen + r.solar_gen + r.bess_discharge
        np.testing.assert_allclose(supply, r.net_demand + r.bess_charge, atol=TOL)

    def test_net_demand_matches_model_expression(self, solved):
        params, m, r = solved
        expected = [pyo.value(m.net_demand[t]) for t in params.hours]
        np.testing.assert_allclose(r.net_demand, expected, atol=TOL)

    def test_net_demand_definition(self, solved):
        _, _, r = solved
        np.testing.assert_allclose(
            r.net_demand, r.demand_mw + r.ev_demand_mw + r.dsm_up - r.dsm_down_total, atol=TOL
        )


class TestDSM:

    def test_every_shift_recovered(self, solved):
        _, _, r = solved
        np.testing.assert_allclose(r.dsm_up, r.dsm_down.sum(axis=1), atol=TOL)

    def test_shifted_energy_conserved(self, solved):
        _, _, r = solved
        assert r.dsm_up.sum() == pytest.approx(r.dsm_down_total.sum(), abs=TOL)

    def test_capacities(self, solved):
        params, _, r = solved
        combined = max(params.dsm_up_capacity_mw, params.dsm_down_capacity_mw)
        assert np.all(r.dsm_up <= params.dsm_up_capacity_mw + TOL)
        assert np.all(r.dsm_down_total <= params.dsm_down_capacity_mw + TOL)
        assert np.all(r.dsm_up + r.dsm_down_total <= combined + TOL)
        assert np.all(r.dsm_down >= -TOL)

    def test_nothing_outside_window(self, solved):
        params, _, r = solved
        T, L = params.horizon_hours, params.delay_hours
        for t in params.hours:
            window = delay_window(t, L, T)
            for tt in params.hours:
                if tt not in window:
                    assert r.dsm_down[t - 1, tt - 1] == 0.0


class TestGeneration:

    def test_renewables_within_availability(self, solved):
        params, _, r = solved
        wind_cap = params.wind_capacity_mw * np.asarray(params.wind_avail)
        solar_cap = params.solar_capacity_mw * np.asarray(params.solar_avail)
        assert np.all(r.wind_gen <= wind_cap + TOL)
        assert np.all(r.solar_gen <= solar_cap + TOL)
        assert np.all(r.wind_gen >= -TOL)
        assert np.all(r.solar_gen >= -TOL)

    def test_conventional_capacity_with_startup_ramp(self, solved):
        params, _, r = solved
        cap = params.conv_capacity_mw
        limit = cap * r.gen_online - (cap - params.gen_startup_ramp * cap) * r.gen_start
        assert np.all(r.conv_gen <= limit + TOL)
        assert np.all(r.conv_gen >= -TOL)

    def test_commitment_is_binary(self, solved):
        _, _, r = solved
        for arr in (r.gen_online, r.gen_start, r.gen_stop):
            assert set(np.unique(arr)) <= {0.0, 1.0}

    def test_startup_logic(self, solved):
        _, _, r = solved
        assert r.gen_start[0] == r.gen_online[0]
        assert np.all(r.gen_start[1:] >= r.gen_online[1:] - r.gen_online[:-1])
        assert np.all(r.gen_stop[1:] >= r.gen_online[:-1] - r.gen_online[1:])


class TestBattery:

    def test_initial_soc_half_full(self, solved):
        params, _, r = solved
        assert r.bess_soc[0] == pytest.approx(params.bess_energy_mwh / 2, abs=TOL)

    def test_soc_dynamics(self, solved):
        params, _, r = solved
        expected = (
            r.bess_soc[:-1]
            + params.bess_eff_charge * r.bess_charge
            - r.bess_discharge / params.bess_eff_discharge
        )
        np.testing.assert_allclose(r.bess_soc[1:], expected, atol=TOL)

    def test_bounds(self, solved):
        params, _, r = solved
        assert np.all(r.bess_soc >= -TOL)
        assert np.all(r.bess_soc <= params.bess_energy_mwh + TOL)
        assert np.all(r.bess_charge <= params.bess_charge_mw + TOL)
        assert np.all(r.bess_discharge <= params.bess_discharge_mw + TOL)


class TestObjective:

    def test_non_negative(self, solved):
        _, _, r = solved
        assert r.objective_value >= -TOL

    def test_equals_operating_cost(self, solved):
        _, m, r = solved
        assert r.total_cost == pytest.approx(r.objective_value, rel=1e-6, abs=TOL)
        assert pyo.value(m.objective) == pytest.approx(r.objective_value)

    def test_extensions_reported(self, solved):
        _, _, r = solved
        assert r.total_co2 > 0.0
        assert r.total_technology_cost > 0.0
        assert set(r.emissions_t) == {"conventional", "wind", "solar"}
