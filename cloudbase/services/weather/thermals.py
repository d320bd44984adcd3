"""Thermal lift model.

Walks a rising parcel from the surface up through the pressure levels of
one forecast hour. At each level the parcel's dew-point temperature drops
along the dry adiabat (``thermal_lapse_rate`` per km); lift stops at
cloudbase (ambient air saturated) or at top of lift (parcel no warmer than
ambient dew point). Below those, the updraft strength is

    w = C * sqrt((1.1 ** (Tdp - Adp) - 1) / (1.1 ** (At - Adp) - 1))

reduced near the ground over ``thermal_ramp_distance`` and by the glider
sink rate. Thermals only start once the surface is warmer than the
ambient air by the trigger difference; after the first trigger of a day
the (smaller) ongoing difference applies.

Altitudes are feet, temperatures Celsius, velocities m/s.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from cloudbase.contracts.forecast import LiftParameters
from cloudbase.services.units import feet_to_meters, round_to_one_decimal

logger = logging.getLogger(__name__)

SURFACE_BUFFER_FT = 200.0
DEFAULT_TOP_OF_LIFT_FT = 18000.0


@dataclass
class LevelConditions:
    """Ambient conditions at one pressure level."""

    pressure_hpa: int
    altitude: float
    temperature: float
    dewpoint: float


@dataclass
class ThermalState:
    """Parcel state carried from one level to the next."""

    thermal_dp_temp: float
    prior_altitude: float
    prior_ambient_dp_temp: float = 0.0
    trigger_reached: bool = False
    top_of_lift_altitude: float = 0.0
    top_of_lift_temp: float = 0.0
    cloudbase_altitude: float = 0.0


@dataclass
class LiftProfile:
    """Result of walking one hour's levels."""

    velocities: dict[int, float] = field(default_factory=dict)
    thermal_dp_temp: float = 0.0
    trigger_reached: bool = False
    cloudbase_altitude: float = 0.0
    top_of_lift_altitude: float = 0.0
    top_of_lift_temp: float = 0.0


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def updraft_velocity(constant: float, thermal_excess: float, ambient_spread: float) -> float:
    """Raw updraft strength before ramp and sink adjustments."""
    denominator = 1.1 ** ambient_spread - 1
    if denominator <= 0:
        return 0.0
    return constant * math.sqrt(max(1.1 ** thermal_excess - 1, 0.0) / denominator)


def thermal_step(
    level: LevelConditions,
    state: ThermalState,
    *,
    surface_altitude: float,
    surface_temp: float,
    params: LiftParameters,
) -> float:
    """Advance ``state`` through ``level`` and return the level's velocity."""
    if level.altitude < surface_altitude + SURFACE_BUFFER_FT:
        return 0.0

    prior_altitude = max(state.prior_altitude, surface_altitude)
    if state.top_of_lift_altitude >= surface_altitude:
        return 0.0

    trigger_diff = params.initial_trigger_temp_diff
    if state.trigger_reached:
        trigger_diff = params.ongoing_trigger_temp_diff
    if surface_temp < level.temperature + trigger_diff:
        state.top_of_lift_altitude = prior_altitude
        return 0.0

    state.trigger_reached = True
    altitude_change = level.altitude - prior_altitude
    altitude_change_km = (feet_to_meters(level.altitude) - feet_to_meters(prior_altitude)) / 1000

    prior_thermal_dp = state.thermal_dp_temp
    thermal_dp = prior_thermal_dp - params.thermal_lapse_rate * altitude_change_km
    state.thermal_dp_temp = thermal_dp

    thermal_excess = max(thermal_dp - level.dewpoint, 0.0)
    ambient_spread = max(level.temperature - level.dewpoint, 0.0)
    ambient_dp_drop = max(state.prior_ambient_dp_temp - level.dewpoint, 0.0)
    prior_dp_over_ambient = max(state.prior_ambient_dp_temp - level.temperature, 0.0)
    prior_dp_over_thermal = max(state.prior_ambient_dp_temp - thermal_dp, 0.0)
    prior_thermal_excess = max(prior_thermal_dp - state.prior_ambient_dp_temp, 0.0)

    if level.temperature <= level.dewpoint:
        if ambient_dp_drop == 0:
            state.cloudbase_altitude = prior_altitude
        else:
            state.cloudbase_altitude = prior_altitude + altitude_change * _ratio(
                prior_dp_over_ambient, prior_dp_over_thermal
            )

    if thermal_dp <= level.dewpoint:
        if prior_thermal_excess == 0 or prior_dp_over_thermal == 0:
            state.top_of_lift_altitude = prior_altitude
        else:
            ratio = _ratio(prior_dp_over_ambient, prior_dp_over_thermal)
            state.top_of_lift_altitude = prior_altitude + altitude_change * ratio
        state.top_of_lift_temp = level.temperature

    if 0 < state.cloudbase_altitude < state.top_of_lift_altitude:
        state.top_of_lift_altitude = state.cloudbase_altitude

    if state.cloudbase_altitude != 0 or state.top_of_lift_altitude != 0:
        return 0.0

    velocity = updraft_velocity(params.thermal_velocity_constant, thermal_excess, ambient_spread)

    ramp_top = surface_altitude + params.thermal_ramp_distance
    if ramp_top > prior_altitude:
        ramp_portion = _ratio(min(level.altitude, ramp_top) - prior_altitude, altitude_change)
        velocity *= 1 - params.thermal_ramp_start_pct / 100 * ramp_portion

    velocity = max(velocity - params.thermal_glider_sink_rate, 0.0)
    if velocity <= 0:
        # Lift too weak to climb in: usable lift ends at the bottom of this layer.
        state.top_of_lift_altitude = prior_altitude
        state.top_of_lift_temp = level.temperature

    return round_to_one_decimal(velocity)


def compute_lift_profile(
    levels: list[LevelConditions],
    *,
    surface_altitude: float,
    surface_temp: float,
    trigger_reached: bool,
    params: LiftParameters | None,
) -> LiftProfile:
    """Walk ``levels`` (lowest first) for one forecast hour."""
    profile = LiftProfile(thermal_dp_temp=surface_temp, trigger_reached=trigger_reached)
    if params is None:
        logger.warning("Lift parameters not loaded; thermal velocities set to zero")
        profile.velocities = {level.pressure_hpa: 0.0 for level in levels}
        return profile

    state = ThermalState(
        thermal_dp_temp=surface_temp,
        prior_altitude=surface_altitude,
        trigger_reached=trigger_reached,
    )
    for level in levels:
        profile.velocities[level.pressure_hpa] = thermal_step(
            level,
            state,
            surface_altitude=surface_altitude,
            surface_temp=surface_temp,
            params=params,
        )
        state.prior_altitude = level.altitude
        state.prior_ambient_dp_temp = level.dewpoint

    profile.thermal_dp_temp = state.thermal_dp_temp
    profile.trigger_reached = state.trigger_reached
    profile.cloudbase_altitude = state.cloudbase_altitude
    profile.top_of_lift_altitude = state.top_of_lift_altitude
    profile.top_of_lift_temp = state.top_of_lift_temp
    return profile
