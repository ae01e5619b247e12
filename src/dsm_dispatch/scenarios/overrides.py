"""
Scenario Overrides
==================

A closed, typed set of partial changes applied to a base ParameterSet.
Every key has a declared type and a single, explicit effect; unknown
keys are rejected. Applying an override always returns a new validated
ParameterSet and never touches the base.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, confloat

from ..resources.parameters import ParameterSet

NonNegative = confloat(ge=0)

# Keys that replace a scalar field one-for-one
_DIRECT_FIELDS = {
    "delay_hours": "delay_hours",
    "dsm_up_capacity_mw": "dsm_up_capacity_mw",
    "dsm_down_capacity_mw": "dsm_down_capacity_mw",
    "conv_capacity_mw": "conv_capacity_mw",
    "wind_capacity_mw": "wind_capacity_mw",
    "solar_capacity_mw": "solar_capacity_mw",
    "bess_energy_mwh": "bess_energy_mwh",
    "bess_charge_mw": "bess_charge_mw",
    "bess_discharge_mw": "bess_discharge_mw",
    "startup_cost": "gen_start_cost",
    "shutdown_cost": "gen_shutdown_cost",
    "startup_ramp": "gen_startup_ramp",
    "unit_commitment": "unit_commitment",
}

# Keys that multiply an hourly profile
_PROFILE_SCALES = {
    "demand_scale": "demand_mw",
    "ev_demand_scale": "ev_demand_mw",
    "generation_cost_scale": "generation_cost",
}

# Keys that replace one emission factor
_EMISSION_FIELDS = {
    "co2_conventional": "conventional",
    "co2_wind": "wind",
    "co2_solar": "solar",
}


class ScenarioOverride(BaseModel):
    """Sparse set of named changes to a scenario."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Profile scaling
    demand_scale: Optional[PositiveFloat] = Field(None, description="Multiply baseline demand.")
    ev_demand_scale: Optional[NonNegative] = Field(None, description="Multiply EV demand.")
    generation_cost_scale: Optional[NonNegative] = Field(None, description="Multiply hourly generation cost.")

    # DSM
    delay_hours: Optional[int] = Field(None, ge=0, description="DSM delay window (hours).")
    dsm_up_capacity_mw: Optional[NonNegative] = None
    dsm_down_capacity_mw: Optional[NonNegative] = None

    # Capacities
    conv_capacity_mw: Optional[NonNegative] = None
    wind_capacity_mw: Optional[NonNegative] = None
    solar_capacity_mw: Optional[NonNegative] = None
    bess_energy_mwh: Optional[NonNegative] = None
    bess_charge_mw: Optional[NonNegative] = None
    bess_discharge_mw: Optional[NonNegative] = None

    # Unit commitment
    startup_cost: Optional[NonNegative] = Field(None, description="Cost per start-up ($).")
    shutdown_cost: Optional[NonNegative] = Field(None, description="Cost per shut-down ($).")
    startup_ramp: Optional[confloat(ge=0, le=1)] = Field(None, description="Start-up hour output fraction.")
    unit_commitment: Optional[bool] = None

    # Emissions (require the emissions extension on the base scenario)
    co2_conventional: Optional[NonNegative] = Field(None, description="Conventional CO2 factor (t/MWh).")
    co2_wind: Optional[NonNegative] = None
    co2_solar: Optional[NonNegative] = None

    def changes(self) -> Dict[str, Any]:
        """Keys that were actually set."""
        return self.model_dump(exclude_none=True)

    def apply(self, base: ParameterSet) -> ParameterSet:
        """
        Return a new ParameterSet with these overrides applied.

        Raises:
            ValueError: if an emission factor is overridden on a scenario
                without the emissions extension.
        """
        changes = self.changes()
        updates: Dict[str, Any] = {}

        for key, value in changes.items():
            if key in _DIRECT_FIELDS:
                updates[_DIRECT_FIELDS[key]] = value
            elif key in _PROFILE_SCALES:
                name = _PROFILE_SCALES[key]
                updates[name] = [x * value for x in getattr(base, name)]

        emission_changes = {
            _EMISSION_FIELDS[key]: value for key, value in changes.items() if key in _EMISSION_FIELDS
        }
        if emission_changes:
            if base.emissions is None:
                raise ValueError(
                    "Cannot override "
                    + ", ".join(sorted(k for k in changes if k in _EMISSION_FIELDS))
                    + ": scenario has no emission factors"
                )
            updates["emissions"] = base.emissions.model_copy(update=emission_changes)

        if not updates:
            return base
        return base.with_updates(**updates)


OverrideLike = Union[ScenarioOverride, Mapping[str, Any]]


def parse_override(override: OverrideLike) -> ScenarioOverride:
    if isinstance(override, ScenarioOverride):
        return override
    return ScenarioOverride.model_validate(dict(override))


def apply_overrides(base: ParameterSet, override: OverrideLike) -> ParameterSet:
    """
    Apply a mapping such as ``{"demand_scale": 1.2}`` to ``base``.

    Raises:
        pydantic.ValidationError: for unknown keys or ill-typed values.
    """
    return parse_override(override).apply(base)
