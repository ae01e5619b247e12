# tests/test_parameters.py

import pytest
from pydantic import ValidationError

from dsm_dispatch.resources.availability import wind_profile
from dsm_dispatch.resources.parameters import (
    EmissionFactors,
    ParameterSet,
    WeatherInputs,
    default_parameters,
)


def base_fields(T=4, **changes):
    fields = dict(
        horizon_hours=T,
        delay_hours=1,
        dsm_up_capacity_mw=5.0,
        dsm_down_capacity_mw=5.0,
        demand_mw=[50.0] * T,
        ev_demand_mw=[0.0] * T,
        generation_cost=[20.0] * T,
        conv_capacity_mw=100.0,
        wind_capacity_mw=10.0,
        wind_avail=[0.5] * T,
        solar_capacity_mw=10.0,
        solar_avail=[0.2] * T,
        bess_energy_mwh=8.0,
        bess_charge_mw=2.0,
        bess_discharge_mw=2.0,
        bess_eff_charge=0.9,
        bess_eff_discharge=0.9,
    )
    fields.update(changes)
    return fields


class TestDefaultParameters:

    def test_reference_scenario(self):
        params = default_parameters()
        assert params.horizon_hours == 24
        assert params.delay_hours == 3
        assert len(params.demand_mw) == 24
        assert params.generation_cost[0] == 10.0
        assert params.generation_cost[8] == 50.0
        assert params.generation_cost[20] == 10.0

    def test_extensions_populated(self):
        params = default_parameters()
        assert params.emissions is not None
        assert params.costs is not None

    def test_availability_in_unit_interval(self):
        params = default_parameters()
        assert all(0.0 <= a <= 1.0 for a in params.wind_avail)
        assert all(0.0 <= a <= 1.0 for a in params.solar_avail)


class TestValidation:

    def test_valid_minimal(self):
        params = ParameterSet(**base_fields())
        assert list(params.hours) == [1, 2, 3, 4]
        assert params.unit_commitment is True

    def test_profile_length_mismatch(self):
        with pytest.raises(ValidationError) as e:
            ParameterSet(**base_fields(demand_mw=[50.0] * 3))
        assert "demand_mw" in str(e.value)

    def test_negative_delay(self):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(delay_hours=-1))

    def test_zero_horizon(self):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(T=0))

    def test_negative_capacity(self):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(wind_capacity_mw=-1.0))

    @pytest.mark.parametrize("eta", [0.0, 1.2, -0.5])
    def test_efficiency_outside_unit_interval(self, eta):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(bess_eff_charge=eta))

    def test_startup_ramp_outside_unit_interval(self):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(gen_startup_ramp=1.5))

    def test_availability_above_one(self):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(wind_avail=[0.5, 0.5, 1.2, 0.5]))

    def test_negative_generation_cost(self):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(generation_cost=[20.0, -5.0, 20.0, 20.0]))

    def test_delay_longer_than_horizon_is_accepted(self):
        params = ParameterSet(**base_fields(delay_hours=10))
        assert params.window_covers_horizon

    def test_zero_capacities_are_accepted(self):
        params = ParameterSet(**base_fields(wind_capacity_mw=0.0, bess_energy_mwh=0.0))
        assert params.wind_capacity_mw == 0.0

    def test_frozen(self):
        params = ParameterSet(**base_fields())
        with pytest.raises(ValidationError):
            params.horizon_hours = 5

    def test_profiles_are_immutable_sequences(self):
        params = ParameterSet(**base_fields())
        assert isinstance(params.demand_mw, tuple)


class TestExtensions:

    def test_partial_emissions_rejected(self):
        with pytest.raises(ValidationError):
            EmissionFactors(conventional=0.9)

    def test_partial_emissions_in_parameter_set_rejected(self):
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(emissions={"conventional": 0.9, "wind": 0.0}))

    def test_partial_costs_rejected(self):
        costs = {"conventional": {"initial": 1.0, "maintenance": 1.0, "production": 1.0}}
        with pytest.raises(ValidationError):
            ParameterSet(**base_fields(costs=costs))

    def test_complete_emissions_from_mapping(self):
        params = ParameterSet(
            **base_fields(emissions={"conventional": 0.9, "wind": 0.0, "solar": 0.0})
        )
        assert params.emissions.conventional == 0.9


class TestWithUpdates:

    def test_returns_new_instance(self):
        base = default_parameters()
        updated = base.with_updates(gen_start_cost=800.0)
        assert updated.gen_start_cost == 800.0
        assert base.gen_start_cost == 500.0
        assert updated is not base

    def test_revalidates(self):
        base = default_parameters()
        with pytest.raises(ValidationError):
            base.with_updates(demand_mw=[1.0, 2.0])

    def test_keeps_extensions(self):
        base = default_parameters()
        updated = base.with_updates(delay_hours=2)
        assert updated.emissions == base.emissions
        assert updated.costs == base.costs


class TestWeatherInputs:

    def test_from_weather_derives_availability(self):
        weather = WeatherInputs(
            wind_speed_m_s=[2.0, 7.5, 15.0, 30.0],
            irradiance_w_m2=[0.0, 400.0, 900.0, 100.0],
            solar_degradation=0.9,
        )
        fields = base_fields()
        del fields["wind_avail"], fields["solar_avail"]
        params = ParameterSet.from_weather(weather, **fields)

        assert list(params.wind_avail) == pytest.approx(wind_profile([2.0, 7.5, 15.0, 30.0], 3.0, 12.0, 25.0))
        assert list(params.wind_avail) == pytest.approx([0.0, 0.5, 1.0, 0.0])
        assert list(params.solar_avail) == pytest.approx([0.0, 0.36, 0.81, 0.09])

    def test_invalid_power_curve(self):
        with pytest.raises(ValidationError):
            WeatherInputs(
                wind_speed_m_s=[5.0],
                irradiance_w_m2=[0.0],
                wind_cut_in=12.0,
                wind_rated=3.0,
            )

    def test_length_mismatch(self):
        with pytest.raises(ValidationError):
            WeatherInputs(wind_speed_m_s=[5.0, 6.0], irradiance_w_m2=[0.0])

    def test_weather_horizon_must_match(self):
        weather = WeatherInputs(wind_speed_m_s=[5.0] * 3, irradiance_w_m2=[0.0] * 3)
        fields = base_fields()
        del fields["wind_avail"], fields["solar_avail"]
        with pytest.raises(ValidationError):
            ParameterSet.from_weather(weather, **fields)
