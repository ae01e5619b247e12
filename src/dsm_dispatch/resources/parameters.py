"""
Scenario Parameters
===================

Immutable, validated snapshot of every input the dispatch model needs:
- Horizon and DSM delay window
- Hourly demand, EV demand and generation cost profiles
- Conventional / wind / solar / battery ratings
- Unit-commitment costs
- Optional extensions: emission factors and technology cost coefficients
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, confloat, model_validator

from .availability import generate_synthetic_weather, solar_profile, wind_profile

Fraction = confloat(ge=0, le=1)
NonNegative = confloat(ge=0)

PROFILE_FIELDS = ("demand_mw", "ev_demand_mw", "generation_cost", "wind_avail", "solar_avail")


class EmissionFactors(BaseModel):
    """CO2 intensity per technology (t/MWh). All three are required together."""

    model_config = ConfigDict(frozen=True)

    conventional: NonNegative = Field(..., description="Conventional generator CO2 factor (t/MWh).")
    wind: NonNegative = Field(..., description="Wind CO2 factor (t/MWh).")
    solar: NonNegative = Field(..., description="Solar CO2 factor (t/MWh).")


class TechnologyCost(BaseModel):
    model_config = ConfigDict(frozen=True)

    initial: NonNegative = Field(..., description="Initial cost per installed MW.")
    maintenance: NonNegative = Field(..., description="Maintenance cost per installed MW per hour.")
    production: NonNegative = Field(..., description="Production cost per MWh generated.")


class TechnologyCosts(BaseModel):
    """Fixed and variable cost coefficients. All three technologies are required together."""

    model_config = ConfigDict(frozen=True)

    conventional: TechnologyCost
    wind: TechnologyCost
    solar: TechnologyCost


class WeatherInputs(BaseModel):
    """Raw hourly weather, converted to availability factors on demand."""

    model_config = ConfigDict(frozen=True)

    wind_speed_m_s: Tuple[NonNegative, ...] = Field(..., description="Hub-height wind speed per hour.")
    wind_cut_in: NonNegative = Field(3.0, description="Turbine cut-in speed (m/s).")
    wind_rated: NonNegative = Field(12.0, description="Turbine rated speed (m/s).")
    wind_cut_out: NonNegative = Field(25.0, description="Turbine cut-out speed (m/s).")
    irradiance_w_m2: Tuple[NonNegative, ...] = Field(..., description="Plane-of-array irradiance per hour.")
    solar_degradation: Fraction = Field(1.0, description="PV output derating (0-1).")

    @model_validator(mode="after")
    def _check_curve(self) -> "WeatherInputs":
        if not (self.wind_cut_in < self.wind_rated <= self.wind_cut_out):
            raise ValueError("wind power curve requires cut_in < rated <= cut_out")
        if len(self.wind_speed_m_s) != len(self.irradiance_w_m2):
            raise ValueError("wind_speed_m_s and irradiance_w_m2 must have the same length")
        return self

    @property
    def horizon_hours(self) -> int:
        return len(self.wind_speed_m_s)

    def wind_avail(self) -> List[float]:
        return wind_profile(
            self.wind_speed_m_s, self.wind_cut_in, self.wind_rated, self.wind_cut_out
        ).tolist()

    def solar_avail(self) -> List[float]:
        return solar_profile(self.irradiance_w_m2, self.solar_degradation).tolist()


class ParameterSet(BaseModel):
    """
    Complete input record for one dispatch scenario.

    Profiles are stored 0-based (element ``t - 1`` is hour ``t``). Instances
    are frozen; use `with_updates` to derive a modified, re-validated copy.
    """

    model_config = ConfigDict(frozen=True)

    # Time
    horizon_hours: int = Field(..., ge=1, description="Planning horizon T (hours).")
    delay_hours: int = Field(..., ge=0, description="DSM delay window L (hours).")

    # Demand-side management
    dsm_up_capacity_mw: NonNegative = Field(..., description="Upward shift capacity Cup (MW).")
    dsm_down_capacity_mw: NonNegative = Field(..., description="Downward shift capacity Cdo (MW).")

    # Hourly profiles
    demand_mw: Tuple[NonNegative, ...] = Field(..., description="Baseline demand per hour (MW).")
    ev_demand_mw: Tuple[NonNegative, ...] = Field(..., description="EV charging demand per hour (MW).")
    generation_cost: Tuple[NonNegative, ...] = Field(..., description="Conventional energy cost per hour ($/MWh).")

    # Generation
    conv_capacity_mw: NonNegative = Field(..., description="Conventional generator capacity (MW).")
    wind_capacity_mw: NonNegative = Field(..., description="Installed wind capacity (MW).")
    wind_avail: Tuple[Fraction, ...] = Field(..., description="Wind availability factor per hour.")
    solar_capacity_mw: NonNegative = Field(..., description="Installed solar capacity (MW).")
    solar_avail: Tuple[Fraction, ...] = Field(..., description="Solar availability factor per hour.")

    # Battery
    bess_energy_mwh: NonNegative = Field(..., description="Battery energy capacity E_max (MWh).")
    bess_charge_mw: NonNegative = Field(..., description="Maximum charging power (MW).")
    bess_discharge_mw: NonNegative = Field(..., description="Maximum discharging power (MW).")
    bess_eff_charge: confloat(gt=0, le=1) = Field(..., description="Charging efficiency.")
    bess_eff_discharge: confloat(gt=0, le=1) = Field(..., description="Discharging efficiency.")

    # Unit commitment
    unit_commitment: bool = Field(True, description="Model on/off state and start/stop transitions.")
    gen_start_cost: NonNegative = Field(0.0, description="Cost per start-up ($).")
    gen_shutdown_cost: NonNegative = Field(0.0, description="Cost per shut-down ($).")
    gen_startup_ramp: Fraction = Field(1.0, description="Output cap in a start-up hour (fraction of capacity).")

    # Optional extensions
    emissions: Optional[EmissionFactors] = None
    costs: Optional[TechnologyCosts] = None

    @model_validator(mode="after")
    def _profile_lengths(self) -> "ParameterSet":
        bad = [
            f"{name} has {len(getattr(self, name))} values"
            for name in PROFILE_FIELDS
            if len(getattr(self, name)) != self.horizon_hours
        ]
        if bad:
            raise ValueError(
                f"hourly profiles must have horizon_hours={self.horizon_hours} values: "
                + ", ".join(bad)
            )
        return self

    @classmethod
    def from_weather(cls, weather: WeatherInputs, **fields: Any) -> "ParameterSet":
        """Build a ParameterSet whose availability profiles come from raw weather."""
        return cls(
            wind_avail=weather.wind_avail(),
            solar_avail=weather.solar_avail(),
            **fields,
        )

    @property
    def hours(self) -> range:
        """Hour indices 1..T."""
        return range(1, self.horizon_hours + 1)

    @property
    def window_covers_horizon(self) -> bool:
        return self.delay_hours >= self.horizon_hours

    def with_updates(self, **changes: Any) -> "ParameterSet":
        """Return a new, re-validated ParameterSet with the given fields replaced."""
        data: Dict[str, Any] = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)


REFERENCE_DEMAND_MW = [
    100, 100, 100, 100, 120, 120, 120, 100, 100, 100, 80, 80,
    80, 80, 100, 100, 120, 120, 120, 100, 100, 100, 100, 100,
]

REFERENCE_EV_DEMAND_MW = [
    4, 3, 2, 2, 1, 1, 1, 1, 0, 0, 0, 0,
    0, 0, 0, 0, 2, 4, 6, 8, 8, 7, 6, 5,
]


def reference_generation_cost(horizon_hours: int = 24) -> List[float]:
    """10 $/MWh off-peak (hours 1-8 and 21-24), 50 $/MWh otherwise."""
    return [10.0 if (t <= 8 or t >= 21) else 50.0 for t in range(1, horizon_hours + 1)]


def default_parameters() -> ParameterSet:
    """Reference 24-hour micro-grid scenario with every extension populated."""
    synthetic = generate_synthetic_weather(24)
    weather = WeatherInputs(
        wind_speed_m_s=synthetic.wind_speed_m_s.tolist(),
        wind_cut_in=3.0,
        wind_rated=12.0,
        wind_cut_out=25.0,
        irradiance_w_m2=synthetic.irradiance_w_m2.tolist(),
        solar_degradation=0.95,
    )

    return ParameterSet.from_weather(
        weather,
        horizon_hours=24,
        delay_hours=3,
        dsm_up_capacity_mw=10.0,
        dsm_down_capacity_mw=10.0,
        demand_mw=REFERENCE_DEMAND_MW,
        ev_demand_mw=REFERENCE_EV_DEMAND_MW,
        generation_cost=reference_generation_cost(24),
        conv_capacity_mw=200.0,
        wind_capacity_mw=50.0,
        solar_capacity_mw=40.0,
        bess_energy_mwh=40.0,
        bess_charge_mw=10.0,
        bess_discharge_mw=10.0,
        bess_eff_charge=0.95,
        bess_eff_discharge=0.95,
        unit_commitment=True,
        gen_start_cost=500.0,
        gen_shutdown_cost=200.0,
        gen_startup_ramp=0.6,
        emissions=EmissionFactors(conventional=0.85, wind=0.012, solar=0.041),
        costs=TechnologyCosts(
            conventional=TechnologyCost(initial=500.0, maintenance=2.0, production=5.0),
            wind=TechnologyCost(initial=1200.0, maintenance=1.5, production=1.0),
            solar=TechnologyCost(initial=900.0, maintenance=1.0, production=0.5),
        ),
    )
