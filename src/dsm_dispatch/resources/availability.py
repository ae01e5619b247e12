"""
Renewable Availability
======================

Maps raw weather inputs to per-hour capacity factors:
- Wind: piecewise-linear power curve (cut-in / rated / cut-out)
- Solar: irradiance relative to STC (1000 W/m2) with panel degradation
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

STC_IRRADIANCE_W_M2 = 1000.0


def wind_availability(speed: float, cut_in: float, rated: float, cut_out: float) -> float:
    """
    Capacity factor of a wind turbine at a given hub-height wind speed.

    Returns 0 below cut-in and at/above cut-out, a linear ramp between
    cut-in and rated, and 1 between rated and cut-out.
    """
    if speed < cut_in or speed >= cut_out:
        return 0.0
    if speed < rated:
        return (speed - cut_in) / (rated - cut_in)
    return 1.0


def solar_availability(irradiance: float, degradation: float) -> float:
    """Capacity factor of a PV array; negative irradiance is not clamped."""
    return min(irradiance / STC_IRRADIANCE_W_M2 * degradation, 1.0)


def wind_profile(
    speeds: Sequence[float], cut_in: float, rated: float, cut_out: float
) -> np.ndarray:
    """Vectorised `wind_availability` over an hourly wind speed series."""
    v = np.asarray(speeds, dtype=float)
    ramp = (v - cut_in) / (rated - cut_in)
    out = np.where(v < rated, ramp, 1.0)
    out = np.where((v < cut_in) | (v >= cut_out), 0.0, out)
    return out


def solar_profile(irradiance: Sequence[float], degradation: float) -> np.ndarray:
    """Vectorised `solar_availability` over an hourly irradiance series."""
    g = np.asarray(irradiance, dtype=float)
    return np.minimum(g / STC_IRRADIANCE_W_M2 * degradation, 1.0)


@dataclass(frozen=True)
class SyntheticWeather:
    wind_speed_m_s: np.ndarray
    irradiance_w_m2: np.ndarray


def generate_synthetic_weather(
    horizon_hours: int = 24,
    mean_wind_m_s: float = 8.0,
    peak_irradiance_w_m2: float = 900.0,
) -> SyntheticWeather:
    """
    Deterministic hourly weather for a single day-type.

    Notes:
    - Wind: mean speed with a diurnal swing (stronger overnight).
    - Solar: sine-shaped bell between sunrise ~6 and sunset ~18.
    - No randomness, so scenarios built from it are reproducible.
    """
    t = np.arange(horizon_hours, dtype=float)
    hours = t % 24.0

    # hour 1 of the horizon is 00:00-01:00, use the interval midpoint
    mid = hours + 0.5
    wind = mean_wind_m_s * (1.0 + 0.35 * np.cos(2 * math.pi * mid / 24.0))
    wind = np.maximum(wind, 0.0)

    solar_angle = math.pi * (mid - 6.0) / 12.0
    diurnal = np.maximum(0.0, np.sin(solar_angle)) ** 1.5
    irradiance = peak_irradiance_w_m2 * diurnal

    return SyntheticWeather(wind_speed_m_s=wind, irradiance_w_m2=irradiance)
