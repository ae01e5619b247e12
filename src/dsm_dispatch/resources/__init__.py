"""
Resource Inputs
===============

Scenario definitions for the dispatch model:
- ParameterSet: validated, immutable scenario record
- Extensions: emission factors and technology cost coefficients
- Availability: wind power curve and solar irradiance conversion
"""

from .availability import solar_availability, wind_availability
from .parameters import (
    EmissionFactors,
    ParameterSet,
    TechnologyCost,
    TechnologyCosts,
    WeatherInputs,
    default_parameters,
)

__all__ = [
    "solar_availability",
    "wind_availability",
    "EmissionFactors",
    "ParameterSet",
    "TechnologyCost",
    "TechnologyCosts",
    "WeatherInputs",
    "default_parameters",
]
