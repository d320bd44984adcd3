"""Tests for the thermal lift model."""

from __future__ import annotations

from cloudbase.contracts.forecast import LiftParameters
from cloudbase.services.weather.thermals import (
    LevelConditions,
    ThermalState,
    compute_lift_profile,
    thermal_step,
    updraft_velocity,
)

PARAMS = LiftParameters(
    thermal_lapse_rate=9.8,
    thermal_velocity_constant=2.0,
    initial_trigger_temp_diff=3.0,
    ongoing_trigger_temp_diff=1.0,
    thermal_ramp_distance=0.0,
    thermal_ramp_start_pct=0.0,
    cloudbase_lapse_rates_diff=0.0,
    thermal_glider_sink_rate=0.0,
)

SURFACE_FT = 5000.0


def _level(hpa: int, altitude: float, temperature: float, dewpoint: float) -> LevelConditions:
    return LevelConditions(pressure_hpa=hpa, altitude=altitude, temperature=temperature, dewpoint=dewpoint)


class TestUpdraftVelocity:
    def test_formula(self):
        # 2 * sqrt((1.1**27.011 - 1) / (1.1**20 - 1))
        assert abs(updraft_velocity(2.0, 27.011, 20.0) - 2.9098) < 0.001

    def test_saturated_air_has_no_updraft(self):
        assert updraft_velocity(2.0, 5.0, 0.0) == 0.0


class TestThermalStep:
    def test_below_surface_buffer_is_skipped(self):
        state = ThermalState(thermal_dp_temp=30.0, prior_altitude=SURFACE_FT)
        velocity = thermal_step(
            _level(900, SURFACE_FT + 100, 20.0, 0.0),
            state,
            surface_altitude=SURFACE_FT,
            surface_temp=30.0,
            params=PARAMS,
        )
        assert velocity == 0.0
        assert not state.trigger_reached
        assert state.top_of_lift_altitude == 0.0

    def test_not_triggered_caps_lift_at_surface(self):
        state = ThermalState(thermal_dp_temp=22.0, prior_altitude=SURFACE_FT)
        velocity = thermal_step(
            _level(900, 6000.0, 20.0, 0.0),
            state,
            surface_altitude=SURFACE_FT,
            surface_temp=22.0,
            params=PARAMS,
        )
        assert velocity == 0.0
        assert not state.trigger_reached
        assert state.top_of_lift_altitude == SURFACE_FT

    def test_triggered_level_velocity(self):
        state = ThermalState(thermal_dp_temp=30.0, prior_altitude=SURFACE_FT)
        velocity = thermal_step(
            _level(900, 6000.0, 20.0, 0.0),
            state,
            surface_altitude=SURFACE_FT,
            surface_temp=30.0,
            params=PARAMS,
        )
        assert velocity == 2.9
        assert state.trigger_reached
        assert abs(state.thermal_dp_temp - 27.011) < 1e-6

    def test_sink_rate_floors_velocity_and_ends_lift(self):
        params = PARAMS.model_copy(update={"thermal_glider_sink_rate": 5.0})
        state = ThermalState(thermal_dp_temp=30.0, prior_altitude=SURFACE_FT)
        velocity = thermal_step(
            _level(900, 6000.0, 20.0, 0.0),
            state,
            surface_altitude=SURFACE_FT,
            surface_temp=30.0,
            params=params,
        )
        assert velocity == 0.0
        assert state.top_of_lift_altitude == SURFACE_FT
        assert state.top_of_lift_temp == 20.0

    def test_ramp_reduces_velocity_near_surface(self):
        params = PARAMS.model_copy(update={"thermal_ramp_distance": 2000.0, "thermal_ramp_start_pct": 50.0})
        state = ThermalState(thermal_dp_temp=30.0, prior_altitude=SURFACE_FT)
        velocity = thermal_step(
            _level(900, 6000.0, 20.0, 0.0),
            state,
            surface_altitude=SURFACE_FT,
            surface_temp=30.0,
            params=params,
        )
        # whole layer inside the ramp: 2.9098 * (1 - 0.5)
        assert velocity == 1.5


class TestLiftProfile:
    def test_cloudbase_at_saturated_level(self):
        profile = compute_lift_profile(
            [_level(900, 6000.0, 20.0, 0.0), _level(850, 8000.0, 5.0, 5.0)],
            surface_altitude=SURFACE_FT,
            surface_temp=30.0,
            trigger_reached=False,
            params=PARAMS,
        )
        assert profile.velocities == {900: 2.9, 850: 0.0}
        assert profile.cloudbase_altitude == 6000.0
        assert profile.trigger_reached

    def test_ongoing_trigger_difference_applies_after_first_trigger(self):
        levels = [_level(900, 6000.0, 20.0, 0.0)]
        fresh = compute_lift_profile(
            levels, surface_altitude=SURFACE_FT, surface_temp=22.0, trigger_reached=False, params=PARAMS
        )
        ongoing = compute_lift_profile(
            levels, surface_altitude=SURFACE_FT, surface_temp=22.0, trigger_reached=True, params=PARAMS
        )
        assert fresh.velocities[900] == 0.0
        assert ongoing.velocities[900] == 1.9

    def test_missing_parameters_give_zero_lift(self):
        profile = compute_lift_profile(
            [_level(900, 6000.0, 20.0, 0.0)],
            surface_altitude=SURFACE_FT,
            surface_temp=30.0,
            trigger_reached=False,
            params=None,
        )
        assert profile.velocities == {900: 0.0}
        assert profile.top_of_lift_altitude == 0.0
